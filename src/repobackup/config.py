"""
Configuration of the backup agent.

The configuration is a plain value passed into every operation. Reading and
writing it is the job of a ConfigStore. The pipeline only touches the last-run
marker, through `record_last_backup`, after a successful run.
"""
import datetime
import os
import yaml

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol
from urllib.parse import quote

from repobackup.clock import reference_zone
from repobackup.exceptions import ConfigError
from repobackup.globals import Globals
from repobackup.log import logger


@dataclass
class RepositoryEndpoint:
    """
    Remote repository the archives are pushed to.

    Attributes:
        host (str): Server name, optionally with a base path (e.g. "git.example.com").
        path (str): Repository path on the server (e.g. "alex/backup").
        username (str): Account used for authentication and commit identity.
        password (str): Secret credential, percent-encoded inside the URL.
    """
    host: Optional[str] = None
    path: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def missing_fields(self) -> List[str]:
        return [name for name in ("host", "path", "username", "password") if not getattr(self, name)]

    def is_complete(self) -> bool:
        return not self.missing_fields()

    def connection_url(self) -> str:
        if not self.is_complete():
            raise ConfigError(f"Repository settings incomplete: missing {', '.join(self.missing_fields())}")
        secret = quote(self.password, safe="")
        return f"https://{self.username}:{secret}@{self.host}/{self.path}.git"

    @classmethod
    def from_url(cls, url: str, username=None, password=None) -> "RepositoryEndpoint":
        """Split "https://host/owner/repo" at its last slash into host and repository path."""
        cleaned = url.strip()
        for scheme in ("https://", "http://"):
            if cleaned.startswith(scheme):
                cleaned = cleaned[len(scheme):]
        cleaned = cleaned.rstrip("/")
        if cleaned.endswith(".git"):
            cleaned = cleaned[:-len(".git")]

        host, sep, path = cleaned.rpartition("/")
        if not sep or not host or not path:
            raise ConfigError(f"Repository URL \"{url}\" must look like host/owner/repository")
        return cls(host=host, path=path, username=username, password=password)


@dataclass
class ScheduleSpec:
    frequency: str = "daily"
    time: Optional[str] = None

    def __post_init__(self):
        if self.frequency not in Globals.FREQUENCIES:
            raise ConfigError(f"Unknown frequency \"{self.frequency}\" (expected one of {', '.join(Globals.FREQUENCIES)})")
        if self.time is not None:
            self.time = parse_time_of_day(self.time).strftime("%H:%M")

    def time_of_day(self) -> Optional[datetime.time]:
        return parse_time_of_day(self.time) if self.time else None


def parse_time_of_day(value) -> datetime.time:
    """
    Parse "HH:MM" on a 24-hour clock.

    YAML 1.1 reads an unquoted 14:30 as the base-60 integer 870, which is
    accepted as minutes since midnight.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value < 24 * 60:
            return datetime.time(*divmod(value, 60))
        raise ConfigError(f"Invalid time \"{value}\", expected HH:MM (24-hour clock)")

    try:
        hour, minute = str(value).strip().split(":")
        if len(minute) != 2:
            raise ValueError
        return datetime.time(int(hour), int(minute))
    except ValueError:
        raise ConfigError(f"Invalid time \"{value}\", expected HH:MM (24-hour clock)")


@dataclass
class Config:
    repository: RepositoryEndpoint = field(default_factory=RepositoryEndpoint)
    backup_paths: List[str] = field(default_factory=list)
    backup_name: Optional[str] = None
    schedule: Optional[ScheduleSpec] = None
    timezone: str = Globals.DEFAULT_TIMEZONE
    last_backup: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Config":
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")

        schedule = data.get("schedule")
        timezone = data.get("timezone") or Globals.DEFAULT_TIMEZONE
        reference_zone(timezone)

        paths = [str(p) for p in data.get("backup_paths") or []]
        if len(set(paths)) != len(paths):
            logger.warning("Duplicate backup paths found in configuration; keeping the first occurrence.")
            paths = list(dict.fromkeys(paths))

        return cls(
            repository=RepositoryEndpoint(**(data.get("repository") or {})),
            backup_paths=paths,
            backup_name=data.get("backup_name"),
            schedule=ScheduleSpec(**schedule) if schedule else None,
            timezone=timezone,
            last_backup=data.get("last_backup"),
        )

    def to_dict(self) -> dict:
        return {
            "repository": {
                "host": self.repository.host,
                "path": self.repository.path,
                "username": self.repository.username,
                "password": self.repository.password,
            },
            "backup_paths": list(self.backup_paths),
            "backup_name": self.backup_name,
            "schedule": None if self.schedule is None else {
                "frequency": self.schedule.frequency,
                "time": self.schedule.time,
            },
            "timezone": self.timezone,
            "last_backup": self.last_backup,
        }

    def add_backup_path(self, path: str) -> bool:
        """
        Add an existing file or directory to the backup set.

        Returns:
            bool: False if the path is already part of the set.

        Raises:
            ConfigError: If the path does not exist.
        """
        path = os.path.abspath(os.path.expanduser(path))
        if not os.path.exists(path):
            raise ConfigError(f"Path \"{path}\" does not exist")
        if path in self.backup_paths:
            return False
        self.backup_paths.append(path)
        return True

    def clear_backup_paths(self):
        self.backup_paths.clear()

    def set_repository_from_url(self, url: str, username: str, password: str):
        """Replace the repository settings; `url` is split like `RepositoryEndpoint.from_url`."""
        self.repository = RepositoryEndpoint.from_url(url, username=username, password=password)

    def set_schedule(self, frequency: str, time_of_day: str):
        self.schedule = ScheduleSpec(frequency=frequency, time=time_of_day.strip())


class ConfigStore(Protocol):
    def load(self) -> Config: ...

    def save(self, config: Config) -> None: ...

    def record_last_backup(self, timestamp: str) -> None: ...


class YamlConfigStore:
    """Persists the configuration as YAML."""

    def __init__(self, path=Globals.DEFAULT_CONFIG_FILE):
        self.path = Path(os.path.expanduser(str(path)))

    def load(self) -> Config:
        if not self.path.exists():
            logger.debug(f"Configuration file \"{self.path}\" not found, starting with defaults.")
            return Config()

        try:
            with open(self.path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Configuration file \"{self.path}\" is not valid YAML: {e}")

        config = Config.from_dict(data)
        logger.debug(f"Configuration contains {len(config.backup_paths)} backup path(s).")
        return config

    def save(self, config: Config) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.safe_dump(config.to_dict(), f, sort_keys=False, allow_unicode=True)
        # The file holds a credential.
        os.chmod(self.path, 0o600)

    def record_last_backup(self, timestamp: str) -> None:
        """
        Persist the last-run marker without touching anything else.

        The file is read again first, so settings saved by another process
        (the menu while the daemon runs) are kept.
        """
        config = self.load()
        config.last_backup = timestamp
        self.save(config)
