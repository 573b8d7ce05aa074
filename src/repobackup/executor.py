import logging
import os
import re
import subprocess
import time

from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_fixed

from repobackup.exceptions import ExecutionError
from repobackup.globals import Globals
from repobackup.log import logger

_CREDENTIALS = re.compile(r"(://[^:/@\s]+:)[^@\s]+@")


def describe_command(command) -> str:
    """Render an argument vector for logging, with URL credentials masked."""
    return _CREDENTIALS.sub(r"\1***@", " ".join(str(part) for part in command))


def is_pull_command(command) -> bool:
    """
    True if the argument vector is a `git pull`.

    A failed pull is not an error for this tool: pulling from an empty remote
    or having nothing new to merge are the usual reasons for a non-zero exit.
    """
    if not command or os.path.basename(str(command[0])) != "git":
        return False

    args = iter(str(part) for part in command[1:])
    for arg in args:
        if arg in ("-C", "-c"):
            next(args, None)
        elif not arg.startswith("-"):
            return arg == "pull"
    return False


class _AttemptFailed(Exception):
    """One failed invocation; carries its stderr (or spawn error) for the final report."""

    def __init__(self, stderr):
        self.stderr = stderr
        super().__init__(stderr)


def _run_once(command, cwd, description):
    try:
        # Output is decoded leniently: tar prints file names in whatever encoding they have
        result = subprocess.run(command, cwd=cwd, capture_output=True, text=True, errors="replace")
    except OSError as e:
        raise _AttemptFailed(str(e))

    if result.returncode != 0 and not is_pull_command(command):
        logger.debug(f"'{description}' exited with status {result.returncode}")
        raise _AttemptFailed(result.stderr)

    if result.stdout:
        logger.info(f"Output: {result.stdout.strip()}")
    return result.stdout


def execute_command(command, max_attempts=Globals.DEFAULT_ATTEMPTS, cwd=None, sleep=time.sleep) -> str:
    """
    Run an external command, retrying with a fixed delay until it succeeds.

    Parameters:
        command (list[str]): Argument vector, never passed through a shell.
        max_attempts (int): Upper bound of invocations, at least 1.
        cwd (Path | str | None): Working directory of the process.
        sleep (callable): Used by the retry policy to wait between attempts.

    Returns:
        str: The captured stdout of the successful attempt.

    Raises:
        ExecutionError: If every attempt failed. Carries the last stderr
        (or spawn error) verbatim.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be positive, got {max_attempts}")

    command = [str(part) for part in command]
    description = describe_command(command)
    logger.info(f"Executing: {description}")

    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(Globals.RETRY_DELAY),
        retry=retry_if_exception_type(_AttemptFailed),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep,
        reraise=True,
    )
    try:
        stdout = retrying(_run_once, command, cwd, description)
    except _AttemptFailed as e:
        logger.error(f"All attempts exhausted for '{description}': {e.stderr}")
        raise ExecutionError(command, max_attempts, e.stderr)

    logger.debug(f"Command succeeded: {description}")
    return stdout
