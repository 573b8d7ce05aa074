import shutil

from repobackup.globals import Globals
from repobackup.log import logger


def check_system_dependencies():
	"""
	Checks whether all required system binaries are available in the system's PATH.

	This function iterates over the list of required system binaries defined in
	`Globals.REQUIRED_SYSTEM_BINS` and uses `shutil.which` to verify their presence.
	If any binary is missing, an error is logged and the function returns False.

	Returns:
		bool: True if all required binaries are found, False otherwise.
	"""
	for current_bin in Globals.REQUIRED_SYSTEM_BINS:
		path = shutil.which(current_bin)
		if path is None:
			logger.error(f"repobackup requires {current_bin}. Please install it on your system.")
			return False
	return True


def read_input(prompt):
	return input(prompt).strip()


def choose_option(prompt, options):
	"""
	Prompts the user to choose from a list of options.
	Returns the selected option.
	"""
	print(f"\n{prompt}")
	for i, key in enumerate(options, 1):
		print(f"  {i}. {key}")

	while True:
		choice = input("\nEnter the number of your choice: ").strip()
		if choice.isdigit():
			idx = int(choice) - 1
			if 0 <= idx < len(options):
				return options[idx]
		print("Invalid choice. Please try again.")


def ask_yes_no(prompt):
	"""
	Prompt the user with a yes/no question and return their response as a boolean

	Parameters:
	prompt (str): The question to display to the user

	Returns:
		bool: True if the user answers 'y' or 'yes', False if 'n' or 'no'

	The function will repeatedly prompt until a valid response is given.
	"""
	while True:
		answer = input(prompt).strip().lower()
		if answer == "y" or answer == "yes":
			return True
		elif answer == "n" or answer == "no":
			return False
		else:
			print("Please answer 'y', 'yes', 'n', or 'no'.")


def print_welcome_banner(config_file):
	banner = fr"""
 ____                  ____             _
|  _ \ ___ _ __   ___ | __ )  __ _  ___| | ___   _ _ __
| |_) / _ \ '_ \ / _ \|  _ \ / _` |/ __| |/ / | | | '_ \
|  _ <  __/ |_) | (_) | |_) | (_| | (__|   <| |_| | |_) |
|_| \_\___| .__/ \___/|____/ \__,_|\___|_|\_\\__,_| .__/
          |_|                                     |_|

Config: {config_file}
"""
	print(banner)
