class BackupError(Exception):
    """Base class for every failure of a backup run."""


class ConfigError(BackupError):
    """Invalid or unreadable configuration values."""


class PreconditionError(BackupError):
    """A run was requested before the configuration allows it."""


class BackupInProgressError(PreconditionError):
    """Another process holds the run lock."""


class ExecutionError(BackupError):
    """
    An external command kept failing until its attempts were exhausted.

    Attributes:
        command (list[str]): The argument vector that was executed.
        attempts (int): Number of attempts made.
        stderr (str): Captured stderr of the last attempt, or the spawn error.
    """

    def __init__(self, command, attempts, stderr):
        self.command = list(command)
        self.attempts = attempts
        self.stderr = stderr
        super().__init__(f"Command failed after {attempts} attempt(s): {stderr}")
