import logging
import sys

from repobackup.config import YamlConfigStore
from repobackup.exceptions import BackupError
from repobackup.globals import Globals
from repobackup.log import add_file_handler, logger
from repobackup.menu import run_menu
from repobackup.parser import get_arguments
from repobackup.pipeline import perform_backup
from repobackup.scheduler import Scheduler
from repobackup.systemd import install_service
from repobackup.utils import check_system_dependencies, print_welcome_banner


def main(argv=None):

	# 1. Init
	args = get_arguments(argv)
	if args["verbose"]:
		logger.setLevel(logging.DEBUG)

	store = YamlConfigStore(args["config_file"])
	try:
		config = store.load()
	except BackupError as e:
		logger.error(str(e))
		return 1

	# 2. Non-interactive modes
	if args["install_service"]:
		try:
			install_service(config)
		except BackupError as e:
			logger.error(f"Service installation failed: {e}")
			return 1
		return 0

	if args["daemon"] or args["backup_now"]:
		if not check_system_dependencies():
			return 1

	if args["daemon"]:
		add_file_handler(Globals.DEFAULT_LOG_FILE)
		logger.info("Starting in daemon mode")
		Scheduler(config, lambda cfg: perform_backup(cfg, store)).run_forever()
		return 0

	if args["backup_now"]:
		try:
			perform_backup(config, store)
		except BackupError as e:
			logger.error(f"Backup failed: {e}")
			return 1
		return 0

	# 3. Interactive menu
	print_welcome_banner(store.path)
	try:
		run_menu(config, store)
	except (KeyboardInterrupt, EOFError):
		print()
	return 0


if __name__ == "__main__":
	sys.exit(main())
