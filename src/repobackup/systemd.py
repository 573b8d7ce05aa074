import getpass
import os
import shutil
import sys

from pathlib import Path

from repobackup.exceptions import BackupError, PreconditionError
from repobackup.executor import execute_command
from repobackup.globals import Globals
from repobackup.log import logger

CALENDARS = {
    "daily": "*-*-*",
    "weekly": "Mon *-*-*",
    "monthly": "*-*-1",
}


def calendar_expression(schedule, timezone=Globals.DEFAULT_TIMEZONE) -> str:
    """
    Build the OnCalendar expression for a schedule, e.g. "Mon *-*-* 14:30:00 Europe/Moscow".

    Without a schedule the backup runs daily at the default time.
    """
    frequency = schedule.frequency if schedule else "daily"
    time_of_day = schedule.time if schedule and schedule.time else Globals.DEFAULT_BACKUP_TIME
    return f"{CALENDARS[frequency]} {time_of_day}:00 {timezone}"


def default_exec_start() -> str:
    installed = shutil.which(Globals.SERVICE_NAME)
    if installed:
        return installed
    return f"{sys.executable} -m repobackup"


def render_service_unit(exec_start: str, user: str) -> str:
    return f"""[Unit]
Description=Repository backup agent
After=network.target

[Service]
Type=simple
ExecStart={exec_start} --daemon
Restart=always
User={user}

[Install]
WantedBy=multi-user.target
"""


def render_timer_unit(schedule, timezone=Globals.DEFAULT_TIMEZONE) -> str:
    return f"""[Unit]
Description=Repository backup agent timer

[Timer]
OnCalendar={calendar_expression(schedule, timezone)}
Persistent=true

[Install]
WantedBy=timers.target
"""


def install_service(config, execute=execute_command, systemd_dir=Globals.SYSTEMD_DIR, exec_start=None, user=None):
    """
    Write the service and timer units and enable the timer.

    Raises:
        PreconditionError: If not running as root.
        ExecutionError: If a systemctl call fails.
    """
    if os.geteuid() != 0:
        raise PreconditionError("Root privileges are required to install the systemd service")

    unit_dir = Path(systemd_dir)
    service_path = unit_dir / f"{Globals.SERVICE_NAME}.service"
    timer_path = unit_dir / f"{Globals.SERVICE_NAME}.timer"

    service_path.write_text(render_service_unit(exec_start or default_exec_start(), user or getpass.getuser()))
    timer_path.write_text(render_timer_unit(config.schedule, config.timezone))
    logger.info(f"Wrote {service_path} and {timer_path}")

    for args in (["daemon-reload"], ["enable", timer_path.name], ["start", timer_path.name]):
        execute(["systemctl", *args], 1)


def restart_daemon(execute=execute_command) -> bool:
    """Restart the daemon so it picks up a changed schedule."""
    logger.info("Restarting the daemon to apply the new schedule...")
    try:
        for unit in (f"{Globals.SERVICE_NAME}.service", f"{Globals.SERVICE_NAME}.timer"):
            execute(["systemctl", "restart", unit], 1)
    except BackupError as e:
        logger.warning(f"Could not restart the daemon: {e}")
        print(f"Restart the daemon manually: sudo systemctl restart {Globals.SERVICE_NAME}.service")
        return False
    return True
