import os
import shutil
import tempfile

from pathlib import Path

from repobackup.exceptions import ExecutionError
from repobackup.executor import execute_command
from repobackup.globals import Globals
from repobackup.log import logger
from repobackup.manifest import ArchiveEntry


def archive_name(index: int, source: Path) -> str:
	"""
	Deterministic archive name for the target at 1-based position `index`.

	Files become `file_<index>_<name>.tar.gz`, everything else
	`dir_<index>_<name>.tar.gz`. The filesystem root has no base name and
	is called "unknown".
	"""
	prefix = "file" if source.is_file() else "dir"
	base = source.name or "unknown"
	return f"{prefix}_{index}_{base}{Globals.ARCHIVE_ENDING}"


def assemble_tar_cmd(source: Path, archive_path: Path) -> list[str]:
	"""
	Assemble the tar command archiving `source` into `archive_path`.

	A file is stored under its own name, a directory by its contents (the
	directory itself is not part of the archive).
	"""
	if source.is_file():
		return ["tar", "-czf", str(archive_path), "-C", str(source.parent), source.name]
	return ["tar", "-czf", str(archive_path), "-C", str(source), "."]


def assemble_copy_cmd(source: Path, holding_dir: Path) -> list[str]:
	if source.is_file():
		return ["cp", str(source), str(holding_dir) + "/"]
	# Trailing slashes: copy the directory's contents, not the directory itself
	return ["rsync", "-a", "--timeout=300", str(source) + "/", str(holding_dir) + "/"]


def _archive_via_holding_area(index, source, archive_path, execute):
	"""
	Copy the source into a private holding directory, then archive the copy.

	Tolerates sources that change while tar reads them (log files, databases).
	The holding directory is removed on every exit path.
	"""
	holding_dir = Path(tempfile.mkdtemp(prefix=f"repobackup_holding_{index}_"))
	logger.debug(f"Holding area for \"{source}\": {holding_dir}")
	try:
		execute(assemble_copy_cmd(source, holding_dir), Globals.DEFAULT_ATTEMPTS)
		execute(["tar", "-czf", str(archive_path), "-C", str(holding_dir), "."], Globals.DEFAULT_ATTEMPTS)
	finally:
		shutil.rmtree(holding_dir, ignore_errors=True)


def archive_target(index: int, source, output_dir: Path, execute=execute_command) -> ArchiveEntry:
	"""
	Create the compressed archive of one backup target.

	Parameters:
		index (int): 1-based position of the target in the configured set.
		source (Path | str): File or directory to archive.
		output_dir (Path): Directory receiving the archive.
		execute (callable): Command executor, `execute(command, max_attempts)`.

	Returns:
		ArchiveEntry: Name and byte size of the created archive.

	Raises:
		ExecutionError: If both the direct and the fallback strategy fail.
	"""
	source = Path(source)
	name = archive_name(index, source)
	archive_path = output_dir / name

	logger.info(f"Archiving {source} -> {name}")
	try:
		execute(assemble_tar_cmd(source, archive_path), Globals.DEFAULT_ATTEMPTS)
		fallback = False
	except ExecutionError as e:
		logger.warning(f"Direct archiving of \"{source}\" failed: {e.stderr}. Retrying from a copy.")
		_archive_via_holding_area(index, source, archive_path, execute)
		fallback = True

	try:
		size = os.path.getsize(archive_path)
	except OSError as e:
		logger.warning(f"Cannot determine size of archive \"{name}\": {e}")
		size = None

	logger.info(f"Archive created{' (fallback)' if fallback else ''}: {name} ({size} bytes)")
	return ArchiveEntry(name=name, size=size)


def write_ignore_file(staging_root: Path) -> bool:
	"""
	Write the default ignore list into the repository root unless one exists.

	An ignore file already present (e.g. pulled from the remote) is left
	untouched.

	Returns:
		bool: True if the file was written.
	"""
	ignore_path = Path(staging_root) / Globals.IGNORE_FILE
	if ignore_path.exists():
		logger.debug(f"Keeping existing {Globals.IGNORE_FILE}")
		return False

	ignore_path.write_text(Globals.DEFAULT_IGNORE_PATTERNS, encoding="utf-8")
	logger.info(f"Created {Globals.IGNORE_FILE}")
	return True
