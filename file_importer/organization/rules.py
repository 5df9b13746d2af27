from datetime import datetime
from pathlib import Path

from .. import config
from ..models import FileCandidate


def date_key(instant: datetime) -> int:
    """8-digit YYYYMMDD number used for range checks."""
    return instant.year * 10000 + instant.month * 100 + instant.day


def in_range(key: int, start: int, end: int) -> bool:
    return start <= key <= end


def folder_name(instant: datetime, ext: str) -> str:
    return config.FOLDER_PATTERN.format(date=instant, ext=ext.lower())


def ensure_folder(folder: Path) -> Path:
    """Creates folder and any missing parents; an existing folder is fine."""
    folder.mkdir(mode=config.DIR_MODE, parents=True, exist_ok=True)
    return folder


class DestinationPlanner:
    """
    Maps a file and its resolved date onto the destination tree:

        {dest_root}/{YYYY-MM-DD}-{ext}/{original name}
    """

    def __init__(self, dest_root: Path):
        self.dest_root = Path(dest_root)

    def folder_for(self, candidate: FileCandidate, instant: datetime) -> Path:
        return self.dest_root / folder_name(instant, candidate.folder_ext)

    def path_for(self, candidate: FileCandidate, instant: datetime) -> Path:
        return self.folder_for(candidate, instant) / candidate.name
