import argparse

from repobackup.globals import Globals


def get_arguments(argv=None):
	"""
	Parses the command-line arguments of repobackup.

	Without a mode flag the interactive menu is started.

	Returns:
		dict: Parsed arguments with the keys "daemon", "backup_now",
			"install_service", "config_file" and "verbose".
	"""
	parser = argparse.ArgumentParser(description="Archives files and directories and pushes them to a git repository.")
	mode = parser.add_mutually_exclusive_group()
	mode.add_argument("--daemon", action="store_true", help="Run the scheduler loop (used by the systemd service).")
	mode.add_argument("--backup", action="store_true", help="Run one backup now and exit.")
	mode.add_argument("--install-service", action="store_true", help="Install the systemd service and timer (requires root).")
	parser.add_argument("--config", type=str, help="Path to the configuration YAML file")
	parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
	args = parser.parse_args(argv)

	# Check if user provided a configuration file
	config_file = args.config if args.config is not None else Globals.DEFAULT_CONFIG_FILE

	return {
		"daemon" : args.daemon,
		"backup_now" : args.backup,
		"install_service" : args.install_service,
		"config_file" : config_file,
		"verbose" : args.verbose}
