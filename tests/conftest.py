from pathlib import Path

import pytest

from repobackup.config import Config, RepositoryEndpoint
from repobackup.exceptions import ExecutionError


class FakeExecutor:
    """
    Stands in for execute_command: records every call, creates the archive a
    tar command would create and fails the commands matched by `fail`.
    """

    def __init__(self, fail=None, heads="1a2b3c\trefs/heads/main\n", archive_size=128):
        self.calls = []
        self.fail = fail or (lambda command: False)
        self.heads = heads
        self.archive_size = archive_size

    def __call__(self, command, max_attempts=3, cwd=None):
        command = [str(part) for part in command]
        self.calls.append((command, max_attempts))
        if self.fail(command):
            raise ExecutionError(command, max_attempts, "simulated failure")
        if command[0] == "tar":
            Path(command[2]).write_bytes(b"x" * self.archive_size)
        if "ls-remote" in command:
            return self.heads
        return ""

    def commands(self):
        return [command for command, _ in self.calls]

    def git_subcommands(self):
        return [command[3] for command in self.commands() if command[0] == "git"]


@pytest.fixture
def sources(tmp_path):
    notes = tmp_path / "notes.txt"
    notes.write_text("remember the milk")
    data = tmp_path / "data"
    data.mkdir()
    (data / "a.csv").write_text("1,2,3")
    return notes, data


@pytest.fixture
def config(sources):
    notes, data = sources
    return Config(
        repository=RepositoryEndpoint(host="git.example.com", path="alex/backup", username="alex", password="p@ss word"),
        backup_paths=[str(notes), str(data)],
        backup_name="web-01",
    )
