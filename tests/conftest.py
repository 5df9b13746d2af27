import os
from datetime import datetime

import pytest
from PIL import Image

# EXIF tag ids
DATETIME = 306
DATETIME_ORIGINAL = 36867
OFFSET_TIME = 36880
OFFSET_TIME_ORIGINAL = 36881


@pytest.fixture
def make_jpeg():
    """Returns a factory writing a tiny JPEG with the given EXIF tags (tag id -> value)."""
    def _make(path, tags=None, fmt="JPEG"):
        img = Image.new("RGB", (8, 8), "white")
        if tags:
            exif = Image.Exif()
            for tag_id, value in tags.items():
                exif[tag_id] = value
            img.save(path, fmt, exif=exif)
        else:
            img.save(path, fmt)
        return path
    return _make


@pytest.fixture
def set_mtime():
    """Returns a helper setting a file's mtime from a (naive, local) datetime."""
    def _set(path, dt: datetime):
        ts = dt.timestamp()
        os.utime(path, (ts, ts))
        return ts
    return _set
