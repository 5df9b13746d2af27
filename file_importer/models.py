import stat
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from . import config


class Provenance(str, Enum):
    """Which data source produced a resolved timestamp."""
    METADATA_WITH_OFFSET = "metadata-with-offset"
    METADATA_LOCAL = "metadata-local"
    FILESYSTEM_MTIME = "filesystem-mtime"


class OutcomeStatus(str, Enum):
    COPIED = "copied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class FileCandidate:
    """
    A file found while enumerating the source directory.
    """
    name: str
    path: Path
    mtime: float
    ext: str                # trimmed, case preserved (used for filtering)
    mode: int = stat.S_IFREG  # lstat st_mode

    @property
    def folder_ext(self) -> str:
        return self.ext.lower()

    @property
    def is_regular(self) -> bool:
        return stat.S_ISREG(self.mode)


@dataclass(frozen=True)
class ResolvedTimestamp:
    """
    The effective date of a file plus the trail of where it came from.
    """
    instant: datetime       # always timezone-aware
    provenance: Provenance
    source: str             # exifread/pillow/exiftool/mtime
    note: Optional[str] = None


@dataclass(frozen=True)
class CopyOutcome:
    candidate: FileCandidate
    status: OutcomeStatus
    destination: Optional[Path] = None
    timestamp: Optional[ResolvedTimestamp] = None
    error: Optional[str] = None
    reason: Optional[str] = None     # why a file was skipped

    @property
    def success(self) -> bool:
        return self.status is not OutcomeStatus.FAILED


@dataclass(frozen=True)
class ImportOptions:
    """
    Per-run settings, built from the command line.
    """
    source: Path
    dest: Path
    extension_filter: Optional[str] = None
    start_date: int = config.MIN_DATE_KEY
    end_date: int = config.MAX_DATE_KEY
    max_workers: int = config.DEFAULT_MAX_WORKERS
    dry_run: bool = False
    report_csv: Optional[Path] = None
    log_file: Optional[Path] = None
    strict: bool = False
    verbose: bool = False
