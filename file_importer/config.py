"""
Configuration constants for the file importer.
"""

# --- Metadata Parsing ---
# Tag names are matched case-insensitively in every metadata directory.
# Order matters: the first tag holding a parseable value wins.
DATE_TAGS = (
    'DateTimeOriginal',
    'DateTime',
)

OFFSET_TAGS = (
    'OffsetTimeOriginal',
    'OffsetTime',
)

# Alternate spellings of the tags above, keyed by lowercased name.
# exiftool calls IFD0 DateTime "ModifyDate"; older exifread releases
# do not name the offset tags and report them as "Tag 0x9010" etc.
TAG_ALIASES = {
    'modifydate': 'datetime',
    '0x9010': 'offsettime',
    '0x9011': 'offsettimeoriginal',
}

EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"

# Containers that get a second look with exiftool when exifread and Pillow
# come back empty (CR3 in particular is not understood by either).
RAW_EXTS = {'.cr2', '.cr3', '.nef', '.arw', '.orf', '.rw2', '.dng', '.raf', '.pef', '.srw'}

# --- Concurrency & I/O ---
DEFAULT_MAX_WORKERS = 10
COPY_CHUNK_SIZE = 64 * 1024  # 64 KB chunks for copying
DIR_MODE = 0o755

# --- Date Range ---
MIN_DATE_KEY = 0
MAX_DATE_KEY = 99999999

# --- Organization ---
FOLDER_PATTERN = "{date:%Y-%m-%d}-{ext}"
