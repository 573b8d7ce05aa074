from pathlib import Path

import pytest

from repobackup.archive import archive_name, archive_target, assemble_copy_cmd, assemble_tar_cmd, write_ignore_file
from repobackup.exceptions import ExecutionError
from repobackup.globals import Globals

from conftest import FakeExecutor


def direct_tar(command):
    return command[0] == "tar" and "repobackup_holding_" not in command[4]


def test_archive_names(sources):
    notes, data = sources
    assert archive_name(1, notes) == "file_1_notes.txt.tar.gz"
    assert archive_name(2, data) == "dir_2_data.tar.gz"
    assert archive_name(3, Path("/")) == "dir_3_unknown.tar.gz"


def test_tar_command_for_file_and_directory(sources, tmp_path):
    notes, data = sources
    out = tmp_path / "out.tar.gz"

    assert assemble_tar_cmd(notes, out) == ["tar", "-czf", str(out), "-C", str(notes.parent), "notes.txt"]
    assert assemble_tar_cmd(data, out) == ["tar", "-czf", str(out), "-C", str(data), "."]


def test_copy_command_mirrors_directories_with_rsync(sources, tmp_path):
    notes, data = sources
    holding = tmp_path / "holding"

    assert assemble_copy_cmd(notes, holding)[0] == "cp"
    assert assemble_copy_cmd(data, holding)[-2:] == [str(data) + "/", str(holding) + "/"]


def test_direct_archive_records_size(sources, tmp_path):
    _, data = sources
    execute = FakeExecutor(archive_size=300)

    entry = archive_target(2, data, tmp_path, execute)

    assert entry.name == "dir_2_data.tar.gz"
    assert entry.size == 300
    assert len(execute.calls) == 1


def test_fallback_copies_then_archives_and_removes_holding_area(sources, tmp_path):
    _, data = sources
    execute = FakeExecutor(fail=direct_tar, archive_size=512)

    entry = archive_target(1, data, tmp_path, execute)

    commands = execute.commands()
    assert [command[0] for command in commands] == ["tar", "rsync", "tar"]
    holding = Path(commands[1][-1])
    assert commands[2][4] == str(holding)
    assert not holding.exists()
    assert entry.size == 512
    assert (tmp_path / "dir_1_data.tar.gz").exists()


def test_fallback_failure_propagates_and_removes_holding_area(sources, tmp_path):
    notes, _ = sources
    execute = FakeExecutor(fail=lambda command: command[0] in ("tar", "cp"))

    with pytest.raises(ExecutionError):
        archive_target(1, notes, tmp_path, execute)

    holding = Path(execute.commands()[1][-1])
    assert not holding.exists()


def test_ignore_file_is_never_overwritten(tmp_path):
    assert write_ignore_file(tmp_path) is True
    ignore = tmp_path / Globals.IGNORE_FILE
    first = ignore.read_text()
    assert "*.pem" in first

    assert write_ignore_file(tmp_path) is False
    assert ignore.read_text() == first

    ignore.write_text("*.bak\n")
    assert write_ignore_file(tmp_path) is False
    assert ignore.read_text() == "*.bak\n"
