import json
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional

import exifread
from PIL import ExifTags, Image, UnidentifiedImageError

from .. import config
from ..exceptions import MetadataExtractionError
from .record import MetadataRecord

# Pointer tag from IFD0 to the Exif sub-IFD
EXIF_IFD_POINTER = 0x8769


def _handle_name(fh: BinaryIO) -> str:
    return str(getattr(fh, "name", "<stream>"))


class MetadataExtractor:
    """
    Reads embedded metadata containers from an open binary file handle.

    Readers:
      - exifread: primary, handles JPEG/TIFF/HEIC and most RAW formats.
      - Pillow: secondary, for containers exifread does not recognise (PNG, WebP).
      - exiftool: last resort for RAW variants (e.g. CR3), only if installed.

    Every reader returns None when the file simply has no metadata and raises
    MetadataExtractionError when the metadata is there but can't be decoded.
    """

    def read_exifread(self, fh: BinaryIO) -> Optional[MetadataRecord]:
        try:
            fh.seek(0)
            # details=False skips MakerNotes, which we never need
            tags = exifread.process_file(fh, details=False)
        except Exception as e:
            raise MetadataExtractionError(f"exifread failed for {_handle_name(fh)}: {e}") from e

        if not tags:
            logging.debug(f"No EXIF tags found for {_handle_name(fh)}")
            return None
        return MetadataRecord(tags)

    def read_pillow(self, fh: BinaryIO) -> Optional[MetadataRecord]:
        try:
            fh.seek(0)
            with Image.open(fh) as img:
                exif = img.getexif()
                tags: Dict[str, Any] = {}
                for tag_id, value in exif.items():
                    tags[f"Image {self._pillow_tag_name(tag_id)}"] = value
                for tag_id, value in exif.get_ifd(EXIF_IFD_POINTER).items():
                    tags[f"EXIF {self._pillow_tag_name(tag_id)}"] = value
        except UnidentifiedImageError:
            # Not an image Pillow knows about: nothing to read
            logging.debug(f"Pillow does not recognise {_handle_name(fh)}")
            return None
        except Exception as e:
            raise MetadataExtractionError(f"Pillow failed for {_handle_name(fh)}: {e}") from e

        if not tags:
            return None
        return MetadataRecord(tags)

    def read_exiftool(self, fh: BinaryIO) -> Optional[MetadataRecord]:
        """
        Wraps the 'exiftool' command line utility for RAW containers.
        Must be installed and on the system PATH, otherwise this is a no-op.
        """
        path = getattr(fh, "name", None)
        if not isinstance(path, str) or Path(path).suffix.lower() not in config.RAW_EXTS:
            return None
        if shutil.which("exiftool") is None:
            return None

        # -j = JSON output, -n = no formatting, -a -G1 = keep duplicate tags with their group
        cmd = ["exiftool", "-j", "-n", "-a", "-G1", path]
        try:
            out = subprocess.check_output(cmd, stderr=subprocess.DEVNULL, text=True)
            data_list = json.loads(out)
        except (subprocess.SubprocessError, OSError, ValueError) as e:
            raise MetadataExtractionError(f"exiftool failed for {path}: {e}") from e

        if not data_list:
            return None
        tags = {k: v for k, v in data_list[0].items() if k != "SourceFile"}
        return MetadataRecord(tags) if tags else None

    @staticmethod
    def _pillow_tag_name(tag_id: int) -> str:
        return ExifTags.TAGS.get(tag_id, f"0x{tag_id:04x}")
