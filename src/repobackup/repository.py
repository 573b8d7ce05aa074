from pathlib import Path

from repobackup.config import RepositoryEndpoint
from repobackup.exceptions import ExecutionError
from repobackup.executor import execute_command
from repobackup.globals import Globals
from repobackup.log import logger


def git(repo_dir: Path, *args) -> list[str]:
    return ["git", "-C", str(repo_dir), *[str(arg) for arg in args]]


def init_repository(repo_dir: Path, endpoint: RepositoryEndpoint, execute=execute_command):
    """
    Initialize the staging repository: identity, transfer tuning and remote.

    Every step is retried; the first one to exhaust its attempts aborts.
    """
    commands = [
        git(repo_dir, "init"),
        git(repo_dir, "config", "user.name", endpoint.username),
        git(repo_dir, "config", "user.email", f"{endpoint.username}@backup.local"),
    ]
    commands += [git(repo_dir, "config", key, value) for key, value in Globals.GIT_TUNING]
    commands.append(git(repo_dir, "remote", "add", "origin", endpoint.connection_url()))

    for command in commands:
        execute(command, Globals.DEFAULT_ATTEMPTS)


def resolve_branch(repo_dir: Path, execute=execute_command) -> str:
    """
    Pick the remote branch to publish to: "main" if the remote has it, else "master".

    A failing probe is not an error, it only means "main" is not available.
    """
    try:
        heads = execute(git(repo_dir, "ls-remote", "--heads", "origin", "main"), Globals.PROBE_ATTEMPTS)
    except ExecutionError as e:
        logger.debug(f"Branch probe failed, falling back to master: {e.stderr}")
        return "master"
    return "main" if heads and heads.strip() else "master"


def sync_with_remote(repo_dir: Path, branch: str, execute=execute_command):
    """
    Bring the staging repository up to date with the remote branch.

    Fetching may fail when the remote is still empty; the branch is then
    created locally. The pull is tolerated by the executor.
    """
    try:
        execute(git(repo_dir, "fetch", "origin", branch), 1)
    except ExecutionError as e:
        logger.debug(f"Nothing fetched for branch {branch}: {e.stderr}")

    try:
        execute(git(repo_dir, "checkout", branch), 1)
    except ExecutionError:
        logger.debug(f"Branch {branch} does not exist yet, creating it.")
        execute(git(repo_dir, "checkout", "-b", branch), Globals.DEFAULT_ATTEMPTS)

    execute(git(repo_dir, "pull", "origin", branch, "--no-edit"), Globals.DEFAULT_ATTEMPTS)


def publish(repo_dir: Path, branch: str, message: str, execute=execute_command):
    """
    Commit everything in the staging repository and push it.

    Pulls once more right before pushing to narrow the window for a rejected
    push. Only the push reaches the remote.
    """
    commands = [
        git(repo_dir, "add", "."),
        git(repo_dir, "commit", "-m", message),
        git(repo_dir, "pull", "origin", branch, "--no-edit"),
        git(repo_dir, "push", "origin", branch),
    ]
    for command in commands:
        execute(command, Globals.DEFAULT_ATTEMPTS)
