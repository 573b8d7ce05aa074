from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from repobackup.globals import Globals


def format_megabytes(size: Optional[int], digits: int = 2) -> str:
    if size is None:
        return "size unknown"
    return f"{size / 1_048_576:.{digits}f} MB"


@dataclass
class ArchiveEntry:
    name: str
    size: Optional[int]


@dataclass
class RunManifest:
    """
    Record of one pipeline run, rendered into the run directory as plain text.

    Attributes:
        timestamp (datetime): Start of the run in the reference timezone.
        label (str): Name of the run directory (backup label and timestamp).
        branch (str): Remote branch the run is published to.
        sources (list[str]): Configured backup paths, in order.
        host (str): Repository host.
        username (str): Account used to publish.
        archives (list[ArchiveEntry]): Archives created so far, in order.
    """
    timestamp: datetime
    label: str
    branch: str
    sources: List[str]
    host: Optional[str] = None
    username: Optional[str] = None
    archives: List[ArchiveEntry] = field(default_factory=list)

    @property
    def total_size(self) -> int:
        return sum(entry.size or 0 for entry in self.archives)

    def add(self, entry: ArchiveEntry):
        self.archives.append(entry)

    def commit_message(self) -> str:
        return (
            f"Backup {self.label} - {len(self.archives)} archive(s) "
            f"({format_megabytes(self.total_size, 1)}) - {self.timestamp.strftime('%Y-%m-%d %H:%M %Z')}"
        )

    def render(self) -> str:
        archives = "\n".join(
            f"  {entry.name} ({format_megabytes(entry.size)}, {entry.size} bytes)" if entry.size is not None
            else f"  {entry.name} (size unknown)"
            for entry in self.archives
        )
        sources = "\n".join(f"  {source}" for source in self.sources)

        return (
            "Backup information\n"
            "\n"
            f"Date and time:    {self.timestamp.strftime('%Y-%m-%d %H:%M:%S %Z')}\n"
            f"Backup name:      {self.label}\n"
            f"Total size:       {format_megabytes(self.total_size)} ({self.total_size} bytes)\n"
            f"Archive count:    {len(self.archives)}\n"
            "\n"
            "Archives:\n"
            f"{archives}\n"
            "\n"
            "Source paths:\n"
            f"{sources}\n"
            "\n"
            "Technical details:\n"
            "- Format: tar.gz (gzip)\n"
            f"- Timezone: {self.timestamp.tzname()}\n"
            f"- Branch: {self.branch}\n"
            "- Encoding: UTF-8\n"
            "\n"
            f"Server: {self.host or 'unknown'}\n"
            f"User: {self.username or 'unknown'}\n"
        )

    def write(self, run_dir: Path) -> Path:
        path = Path(run_dir) / Globals.MANIFEST_FILE
        path.write_text(self.render(), encoding="utf-8")
        return path
