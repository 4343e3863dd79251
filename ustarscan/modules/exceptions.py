# exceptions.py
# Error taxonomy for archive scanning
#
# Every error carries the integer code the C-style interface reports for it,
# so callers that want return codes (check_archive) can map back to them.

from typing import Any, Optional


class TarScanError(Exception):
    """Base exception for archive scanning."""
    code = 0

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.details = details


# =============================================================================
# Structural corruption (detected while validating headers)
# =============================================================================

class TarFormatError(TarScanError):
    """Raised when a header block fails validation."""
    pass


class InvalidMagicError(TarFormatError):
    """Raised when the magic field is not "ustar" followed by NUL."""
    code = -1


class InvalidVersionError(TarFormatError):
    """Raised when the version field is not "00"."""
    code = -2


class InvalidChecksumError(TarFormatError):
    """Raised when the stored checksum does not match the header bytes."""
    code = -3


# =============================================================================
# Query errors
# =============================================================================

class NotAFileError(TarScanError):
    """Raised when a read targets something other than a regular file."""
    code = -1


class OffsetOutOfRangeError(TarScanError):
    """Raised when a read starts past the end of the file."""
    code = -2


class SymlinkLoopError(TarScanError):
    """Raised when symlink resolution cycles or exceeds the hop limit."""
    code = -3


class TruncatedPayloadError(TarScanError):
    """Raised when the archive ends before a file's declared size."""
    code = -4


class UnsafeOutputPathError(TarScanError):
    """Raised when a carved entry would be written outside the output directory."""
    code = -5
