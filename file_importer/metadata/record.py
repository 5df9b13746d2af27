import re
from typing import Any, Iterator, Mapping, Optional, Set, Tuple

from .. import config

# "EXIF DateTimeOriginal" (exifread), "ExifIFD:DateTimeOriginal" (exiftool)
_KEY_SPLIT = re.compile(r"[\s:]+")


def _split_key(key: str) -> Tuple[str, str]:
    """Splits a reader key into (directory, canonical lowercased tag name)."""
    parts = _KEY_SPLIT.split(str(key).strip())
    name = parts[-1].lower()
    directory = " ".join(parts[:-1])
    return directory, config.TAG_ALIASES.get(name, name)


def _as_text(value: Any) -> Optional[str]:
    """
    Returns the textual content of a tag value, or None if it isn't text.

    exifread wraps values in IfdTag objects whose `.values` holds a str for
    ASCII tags and a list of numbers/ratios for everything else.
    """
    raw = getattr(value, "values", value)
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("ascii")
        except UnicodeDecodeError:
            return None
    if not isinstance(raw, str):
        return None
    text = raw.replace("\x00", "").strip()
    return text or None


class MetadataRecord:
    """
    Read-only view over the tag/value mapping produced by one metadata reader.

    Capture dates end up in different directories depending on the camera
    (IFD0, the Exif sub-IFD, a thumbnail IFD, ...), so lookups ignore the
    directory part of the key and match the tag name case-insensitively.
    """

    def __init__(self, tags: Mapping[str, Any]):
        self._entries = [(_split_key(k), v) for k, v in tags.items()]

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def _values(self, name: str) -> Iterator[Any]:
        wanted = name.lower()
        for (_, tag), value in self._entries:
            if tag == wanted:
                yield value

    def find_text(self, *names: str) -> Optional[str]:
        """First non-empty text value for the given tag names, tried in order."""
        for name in names:
            for value in self._values(name):
                text = _as_text(value)
                if text:
                    return text
        return None

    def directories(self) -> Set[str]:
        return {directory for (directory, _), _ in self._entries if directory}
