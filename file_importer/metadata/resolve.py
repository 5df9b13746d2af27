"""
Capture timestamp resolution.

A file's effective date comes from the first strategy that yields one:

    exifread -> Pillow -> exiftool (RAW only) -> filesystem modification time

Each strategy reads one metadata container and turns it into a timestamp
via `timestamp_from_record`. The last step cannot fail, so `resolve` always
returns a value and never raises.
"""
import logging
import os
import stat
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional, Sequence, Tuple, Union

from .. import config
from ..models import Provenance, ResolvedTimestamp
from .extract import MetadataExtractor
from .record import MetadataRecord

Strategy = Callable[[BinaryIO], Optional[ResolvedTimestamp]]
Reader = Callable[[BinaryIO], Optional[MetadataRecord]]


def parse_offset(text: Optional[str]) -> Optional[str]:
    """
    Validates a timezone offset tag value.

    Accepts "+HH:MM" (6 chars) or "+HHMM" (5 chars), sign "+" or "-".
    Returns the offset normalised to "+HH:MM", or None if it is malformed.
    """
    if not text:
        return None
    text = text.strip()
    if len(text) == 6 and text[3] == ':':
        hours, minutes = text[1:3], text[4:6]
    elif len(text) == 5:
        hours, minutes = text[1:3], text[3:5]
    else:
        return None

    if text[0] not in '+-':
        return None
    if not (hours.isascii() and hours.isdigit() and minutes.isascii() and minutes.isdigit()):
        return None
    if int(hours) > 23 or int(minutes) > 59:
        return None
    return f"{text[0]}{hours}:{minutes}"


def parse_capture_date(date_text: Optional[str],
                       offset_text: Optional[str] = None) -> Optional[Tuple[datetime, Provenance]]:
    """
    Parses an EXIF "YYYY:MM:DD HH:MM:SS" string.

    With a well-formed offset the result carries that offset; otherwise the
    date is interpreted in the local system timezone. A bad offset never
    invalidates a good date.
    """
    if not date_text:
        return None
    date_text = date_text.strip()

    offset = parse_offset(offset_text)
    if offset:
        try:
            dt = datetime.strptime(date_text + offset, config.EXIF_DATE_FORMAT + "%z")
            return dt, Provenance.METADATA_WITH_OFFSET
        except ValueError:
            pass
    elif offset_text:
        logging.debug(f"Ignoring malformed offset {offset_text!r}")

    try:
        dt = datetime.strptime(date_text, config.EXIF_DATE_FORMAT).astimezone()
    except (ValueError, OverflowError, OSError):
        return None
    return dt, Provenance.METADATA_LOCAL


def timestamp_from_record(record: Optional[MetadataRecord], source: str) -> Optional[ResolvedTimestamp]:
    if not record:
        return None

    offset_text = record.find_text(*config.OFFSET_TAGS)
    for tag in config.DATE_TAGS:
        date_text = record.find_text(tag)
        parsed = parse_capture_date(date_text, offset_text)
        if parsed:
            instant, provenance = parsed
            return ResolvedTimestamp(instant, provenance, source)
        if date_text:
            logging.debug(f"Unparseable {tag} value {date_text!r} ({source})")
    return None


def mtime_timestamp(mtime: Union[float, datetime], note: Optional[str] = None) -> ResolvedTimestamp:
    """Terminal fallback: the filesystem modification time, in local time."""
    if isinstance(mtime, datetime):
        instant = mtime if mtime.tzinfo else mtime.astimezone()
    else:
        instant = datetime.fromtimestamp(mtime).astimezone()
    return ResolvedTimestamp(instant, Provenance.FILESYSTEM_MTIME, "mtime", note)


def strategy_for(reader: Reader, source: str) -> Strategy:
    """Turns a metadata reader into a resolution strategy."""
    def strategy(fh: BinaryIO) -> Optional[ResolvedTimestamp]:
        return timestamp_from_record(reader(fh), source)
    return strategy


class TimestampResolver:
    """
    Resolves one authoritative timestamp per file.

    Strategies are tried in order and the first non-None result is used.
    A strategy that raises is logged and skipped; its message is kept as
    the note on the final result if everything else falls through too.
    """

    def __init__(self,
                 extractor: Optional[MetadataExtractor] = None,
                 strategies: Optional[Sequence[Tuple[str, Strategy]]] = None):
        self.extractor = extractor or MetadataExtractor()
        if strategies is None:
            strategies = [
                ("exifread", strategy_for(self.extractor.read_exifread, "exifread")),
                ("pillow", strategy_for(self.extractor.read_pillow, "pillow")),
                ("exiftool", strategy_for(self.extractor.read_exiftool, "exiftool")),
            ]
        self.strategies: List[Tuple[str, Strategy]] = list(strategies)

    def resolve(self, fh: Optional[BinaryIO], mtime: Union[float, datetime]) -> ResolvedTimestamp:
        if fh is None:
            return mtime_timestamp(mtime, note="file could not be read")

        name = getattr(fh, "name", "<stream>")
        errors = []
        for label, strategy in self.strategies:
            try:
                result = strategy(fh)
            except Exception as e:
                # Corrupt or unsupported metadata: try the next source
                logging.warning(f"{label} could not read metadata from {name}: {e}")
                errors.append(f"{label}: {e}")
                continue
            if result is not None:
                return result

        # Legitimately missing metadata is not an error
        logging.debug(f"No capture date in {name}, using modification time")
        return mtime_timestamp(mtime, note="; ".join(errors) or None)

    def resolve_path(self, path: Path, mtime: Union[float, datetime]) -> ResolvedTimestamp:
        """Opens `path` and resolves it, falling back to `mtime` if it can't be opened."""
        try:
            if not stat.S_ISREG(os.stat(path).st_mode):
                logging.warning(f"{path} is not a regular file, using modification time")
                return mtime_timestamp(mtime, note="not a regular file")
            with open(path, 'rb') as fh:
                return self.resolve(fh, mtime)
        except OSError as e:
            logging.warning(f"Could not open {path} ({e}), using modification time")
            return mtime_timestamp(mtime, note=f"file could not be read: {e}")
