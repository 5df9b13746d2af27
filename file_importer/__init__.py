"""
file_importer - copy files into date-stamped folders using their EXIF capture date.
"""

__version__ = "0.1.0"
