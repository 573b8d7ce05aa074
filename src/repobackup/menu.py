import os

from datetime import datetime

from repobackup.clock import reference_now
from repobackup.config import RepositoryEndpoint
from repobackup.exceptions import BackupError, ConfigError
from repobackup.globals import Globals
from repobackup.log import logger
from repobackup.manifest import format_megabytes
from repobackup.pipeline import perform_backup
from repobackup.systemd import install_service, restart_daemon
from repobackup.utils import ask_yes_no, check_system_dependencies, choose_option, read_input


def setup_repository(config, store):
	print("\nRepository settings")

	while True:
		url = read_input("Full repository URL (e.g. git.example.com/alex/backup): ")
		try:
			RepositoryEndpoint.from_url(url)
			break
		except ConfigError as e:
			print(e)

	username = read_input("Username: ")
	password = read_input("Password or access token: ")
	config.set_repository_from_url(url, username, password)
	store.save(config)
	print("Repository settings saved.")


def setup_backup_name(config, store):
	print("\nBackup name")
	name = read_input("Name for the backups (e.g. the server name): ")
	config.backup_name = name or None
	store.save(config)
	print("Backup name saved.")


def setup_backup_schedule(config, store):
	print("\nBackup schedule")
	print(f"Times are given in {config.timezone}. Current time there: {reference_now(config.timezone).strftime('%H:%M:%S')}")

	frequency = choose_option("Select the backup frequency:", Globals.FREQUENCIES)

	while True:
		time_of_day = read_input(f"Backup time in {config.timezone} (HH:MM): ")
		try:
			config.set_schedule(frequency, time_of_day)
			break
		except ConfigError as e:
			print(e)
	store.save(config)

	try:
		install_service(config)
	except BackupError as e:
		logger.warning(f"Could not install the systemd service: {e}")
		print("Run 'sudo repobackup --install-service' to install the service.")
	else:
		restart_daemon()

	print(f"Backup schedule set: {frequency} at {time_of_day} ({config.timezone}).")


def manage_backup_paths(config, store):
	while True:
		print("\nCurrent backup paths:")
		if not config.backup_paths:
			print("No paths added")
		for i, path in enumerate(config.backup_paths, 1):
			print(f"{i}. {path}")

		action = choose_option("Actions:", ["Add a path", "Remove all paths", "Back to main menu"])

		if action == "Add a path":
			path = read_input("\nFile or directory to back up: ")
			if not path:
				continue
			if not os.path.exists(os.path.expanduser(path)):
				print("The path does not exist.")
				if not ask_yes_no("Create the directory? (y/n): "):
					continue
				os.makedirs(os.path.expanduser(path), exist_ok=True)

			if config.add_backup_path(path):
				print("Path added.")
			else:
				print("This path is already in the list.")
			store.save(config)

		elif action == "Remove all paths":
			if not config.backup_paths:
				print("The list is already empty.")
			elif ask_yes_no("This removes all backup paths. Are you sure? (y/n): "):
				config.clear_backup_paths()
				store.save(config)
				print("All paths removed.")

		else:
			break


def run_backup(config, store):
	if not check_system_dependencies():
		return
	try:
		manifest = perform_backup(config, store)
	except BackupError as e:
		logger.error(f"Backup failed: {e}")
		return
	print("Backup completed.")
	print(f"Total archive size: {format_megabytes(manifest.total_size)}")
	print(f"Archives created: {len(manifest.archives)}")


def print_header(config):
	print("\nRepository Backup")
	print(
		f"Local time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')} | "
		f"Reference time: {reference_now(config.timezone).strftime('%Y-%m-%d %H:%M:%S %Z')}"
	)
	if config.last_backup:
		print(f"Last backup: {config.last_backup}")
	if config.backup_name:
		print(f"Backup name: {config.backup_name}")
	if config.schedule and config.schedule.time:
		print(f"Backup time: {config.schedule.time} ({config.schedule.frequency})")


def run_menu(config, store):
	"""
	Interactive main menu. Walks through the initial setup first if no
	repository has been configured yet.
	"""
	if not config.repository.path:
		print("Welcome! Let's set up your backups.")
		setup_repository(config, store)
		setup_backup_name(config, store)
		setup_backup_schedule(config, store)
		manage_backup_paths(config, store)

	actions = {
		"Run backup now": run_backup,
		"Add/change backup paths": manage_backup_paths,
		"Change repository settings": setup_repository,
		"Change backup schedule": setup_backup_schedule,
		"Change backup name": setup_backup_name,
	}

	while True:
		print_header(config)
		choice = choose_option("Menu:", list(actions) + ["Exit"])
		if choice == "Exit":
			break
		try:
			actions[choice](config, store)
		except (ConfigError, OSError) as e:
			print(f"Error: {e}")
