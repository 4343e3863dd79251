"""
ustarscan.

Read-only access to USTAR tar archives: validation, lookups, directory
listings and byte-range reads, re-scanned from the archive on every call.
"""

from .archive import TarArchive
from .modules.config import ScanSettings
from .modules.exceptions import (
    TarScanError,
    TarFormatError,
    InvalidMagicError,
    InvalidVersionError,
    InvalidChecksumError,
    NotAFileError,
    OffsetOutOfRangeError,
    SymlinkLoopError,
    TruncatedPayloadError,
    UnsafeOutputPathError,
)
from .modules.finders import (
    TarHeader,
    EntryType,
    ListResult,
    parse_header,
    checksum_of,
    check_archive,
    exists,
    is_directory,
    is_regular_file,
    is_symlink,
    list_directory,
)
from .modules.keepers import ReadResult, read_file, carve_file

__version__ = "0.1.0"

__all__ = [
    "TarArchive",
    "ScanSettings",
    "TarScanError",
    "TarFormatError",
    "InvalidMagicError",
    "InvalidVersionError",
    "InvalidChecksumError",
    "NotAFileError",
    "OffsetOutOfRangeError",
    "SymlinkLoopError",
    "TruncatedPayloadError",
    "UnsafeOutputPathError",
    "TarHeader",
    "EntryType",
    "ListResult",
    "parse_header",
    "checksum_of",
    "check_archive",
    "exists",
    "is_directory",
    "is_regular_file",
    "is_symlink",
    "list_directory",
    "ReadResult",
    "read_file",
    "carve_file",
]
