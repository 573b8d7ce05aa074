from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from repobackup.exceptions import ConfigError
from repobackup.globals import Globals


def reference_zone(name=None) -> ZoneInfo:
    name = name or Globals.DEFAULT_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigError(f"Unknown timezone \"{name}\"")


def reference_now(name=None) -> datetime:
    """Current wall-clock time in the reference timezone (not the host's)."""
    return datetime.now(timezone.utc).astimezone(reference_zone(name))


def run_stamp(moment: datetime) -> str:
    return moment.strftime("%Y%m%d_%H%M%S")
