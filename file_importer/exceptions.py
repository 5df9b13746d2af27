"""
Custom exception hierarchy for the file importer.

The copier raises these so the dispatcher can report which file failed
and why without looking at the filesystem again.
"""


class FileImporterError(Exception):
    """Base exception for all file importer errors."""
    pass


class MetadataExtractionError(FileImporterError):
    """Raised when a metadata container is present but cannot be decoded."""
    pass


class FileOperationError(FileImporterError):
    """Raised when a file copy operation fails."""
    pass


class NonRegularSourceError(FileOperationError):
    """Raised when the copy source is a directory, symlink, device, etc."""
    pass


class NonRegularDestinationError(FileOperationError):
    """Raised when an existing copy destination is not a regular file."""
    pass


class SourceDirectoryError(FileImporterError):
    """Raised when the source directory cannot be enumerated."""
    pass
