import logging
import os
import shutil
import stat
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .. import config
from ..exceptions import NonRegularDestinationError, NonRegularSourceError

TimeLike = Union[datetime, float, int]


def _to_timestamp(value: TimeLike) -> float:
    if isinstance(value, datetime):
        return value.timestamp()
    return float(value)


def copy_file(src: Union[str, Path], dst: Union[str, Path], mtime: Optional[TimeLike] = None) -> bool:
    """
    Copies src to dst and stamps dst with `mtime` (default: the source's mtime).

    Returns True if data was copied, False if src and dst are the same file.

    Raises:
        FileNotFoundError: src does not exist.
        NonRegularSourceError: src is a directory, symlink, device, etc.
        NonRegularDestinationError: dst exists and is not a regular file.
        OSError: any failure while copying, stamping or syncing.
    """
    src = Path(src)
    dst = Path(dst)

    sfi = os.lstat(src)
    if not stat.S_ISREG(sfi.st_mode):
        raise NonRegularSourceError(
            f"Non-regular source file {src.name} ({stat.filemode(sfi.st_mode)})")

    try:
        dfi = os.lstat(dst)
    except FileNotFoundError:
        dfi = None

    if dfi is not None:
        if not stat.S_ISREG(dfi.st_mode):
            raise NonRegularDestinationError(
                f"Non-regular destination file {dst.name} ({stat.filemode(dfi.st_mode)})")
        if os.path.samestat(sfi, dfi):
            logging.debug(f"{src} and {dst} are the same file, nothing to copy")
            return False

    target_mtime = _to_timestamp(mtime) if mtime is not None else sfi.st_mtime
    copy_file_contents(src, dst, target_mtime)
    return True


def copy_file_contents(src: Path, dst: Path, mtime: TimeLike) -> None:
    """
    Replaces the contents of dst with those of src and sets dst's mtime.
    The parent directory of dst must already exist.
    """
    with open(src, 'rb') as fin:
        with open(dst, 'wb') as fout:
            try:
                shutil.copyfileobj(fin, fout, config.COPY_CHUNK_SIZE)
                fout.flush()
            except OSError:
                # Don't leave a truncated copy behind
                fout.close()
                dst.unlink(missing_ok=True)
                raise

            # Stamp after the last write, then sync (fsync leaves mtime alone)
            os.utime(dst, (time.time(), _to_timestamp(mtime)))
            os.fsync(fout.fileno())
