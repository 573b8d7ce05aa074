import os
import shutil
import tempfile

from contextlib import contextmanager
from pathlib import Path

from repobackup.archive import archive_target, write_ignore_file
from repobackup.clock import reference_now, run_stamp
from repobackup.exceptions import PreconditionError
from repobackup.executor import execute_command
from repobackup.locks import run_lock
from repobackup.log import logger
from repobackup.manifest import RunManifest, format_megabytes
from repobackup.repository import init_repository, publish, resolve_branch, sync_with_remote


def check_preconditions(config):
	"""
	Refuse to start a run that cannot succeed.

	Raises:
		PreconditionError: If there is nothing to back up, the repository
		settings are incomplete or a configured path disappeared.
	"""
	if not config.backup_paths:
		raise PreconditionError("No paths to back up. Add files or directories first.")

	missing = config.repository.missing_fields()
	if missing:
		raise PreconditionError(f"Repository settings incomplete: missing {', '.join(missing)}")

	vanished = [path for path in config.backup_paths if not os.path.exists(path)]
	if vanished:
		raise PreconditionError(f"Backup paths do not exist: {', '.join(vanished)}")


@contextmanager
def staging_directory(stamp: str):
	"""Fresh staging directory, removed when the block exits for any reason."""
	path = Path(tempfile.mkdtemp(prefix=f"backup_{stamp}_"))
	logger.info(f"Created staging directory {path}")
	try:
		yield path
	finally:
		shutil.rmtree(path, ignore_errors=True)
		logger.debug(f"Removed staging directory {path}")


def run_folder_name(backup_name, stamp: str) -> str:
	return f"{backup_name}_{stamp}" if backup_name else stamp


def perform_backup(config, store, execute=execute_command, now=None, lock_path=None) -> RunManifest:
	"""
	Archive every configured path and publish the archives to the remote repository.

	Phases run strictly in order and the first failure aborts the run, so
	nothing is pushed unless all archives and the manifest were created.

	Parameters:
		config (Config): Configuration of the run. `last_backup` is updated on success.
		store (ConfigStore): Records the last-run marker after a successful run.
		execute (callable): Command executor, `execute(command, max_attempts)`.
		now (datetime | None): Run timestamp; defaults to the current reference time.
		lock_path (Path | None): Run lock file; defaults to one in the temp directory.

	Returns:
		RunManifest: Summary of the published run.

	Raises:
		PreconditionError: Before any external command runs.
		ExecutionError: If an external command exhausted its attempts.
	"""
	check_preconditions(config)

	moment = now or reference_now(config.timezone)
	stamp = run_stamp(moment)
	logger.info("Starting backup...")

	with run_lock(lock_path):
		with staging_directory(stamp) as staging:

			# 1. Repository
			logger.info("Setting up git repository...")
			init_repository(staging, config.repository, execute)
			branch = resolve_branch(staging, execute)
			logger.info(f"Using branch: {branch}")

			logger.info("Synchronizing with remote repository...")
			sync_with_remote(staging, branch, execute)
			write_ignore_file(staging)

			# 2. Archives
			label = run_folder_name(config.backup_name, stamp)
			run_dir = staging / label
			run_dir.mkdir(parents=True, exist_ok=True)

			manifest = RunManifest(
				timestamp=moment,
				label=label,
				branch=branch,
				sources=list(config.backup_paths),
				host=config.repository.host,
				username=config.repository.username,
			)
			for index, path in enumerate(config.backup_paths, 1):
				manifest.add(archive_target(index, path, run_dir, execute))

			manifest.write(run_dir)
			logger.debug(f"Wrote manifest for {len(manifest.archives)} archive(s)")

			# 3. Publish
			logger.info("Uploading to repository...")
			publish(staging, branch, manifest.commit_message(), execute)

	config.last_backup = moment.strftime("%Y-%m-%d %H:%M:%S %Z")
	store.record_last_backup(config.last_backup)

	logger.info(f"Backup finished: {len(manifest.archives)} archive(s), {format_megabytes(manifest.total_size)} total")
	return manifest
