"""Archives files and directories and publishes them to a remote git repository."""
__version__ = "0.1.0"
