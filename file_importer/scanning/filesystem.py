import logging
import os
from pathlib import Path
from typing import List, Optional

from ..exceptions import SourceDirectoryError
from ..models import FileCandidate


def file_extension(name: str) -> str:
    """Text after the last dot, without dots. Case is preserved."""
    idx = name.rfind('.')
    if idx < 0:
        return ""
    return name[idx:].strip('.')


def normalize_filter(extension_filter: Optional[str]) -> Optional[str]:
    """'.jpg' and 'jpg' mean the same thing; an empty filter means no filter."""
    if extension_filter is None:
        return None
    value = extension_filter.strip().strip('.')
    return value or None


class DirectoryScanner:
    def scan(self, root: Path, extension_filter: Optional[str] = None) -> List[FileCandidate]:
        """
        Lists the files directly inside root (no recursion) as FileCandidates.

        Subdirectories are skipped. When extension_filter is given, only
        files whose extension matches it exactly (case-sensitive) are kept.

        Raises:
            SourceDirectoryError: root cannot be read.
        """
        wanted = normalize_filter(extension_filter)

        try:
            with os.scandir(root) as it:
                entries = list(it)
        except OSError as e:
            raise SourceDirectoryError(f"Cannot read source directory {root}: {e}") from e

        # Sort for stable ordering
        entries.sort(key=lambda e: e.name)

        candidates = []
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                continue

            ext = file_extension(entry.name)
            if wanted is not None and ext != wanted:
                continue

            try:
                st = entry.stat(follow_symlinks=False)
            except OSError as e:
                # Vanished between listing and stat
                logging.warning(f"Cannot stat {entry.path}: {e}")
                continue

            candidates.append(FileCandidate(
                name=entry.name,
                path=Path(entry.path),
                mtime=st.st_mtime,
                ext=ext,
                mode=st.st_mode,
            ))

        logging.debug(f"Found {len(candidates)} candidate(s) in {root}")
        return candidates
