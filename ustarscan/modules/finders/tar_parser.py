# tar_parser.py
# USTAR header codec
#
# Decodes 512-byte tar header blocks into TarHeader records and validates
# their magic, version and checksum fields.

import logging
from dataclasses import dataclass
from enum import Enum

from ustarscan.modules.config import BLOCK_SIZE, NAME_LENGTH, USTAR_MAGIC, USTAR_VERSION
from ustarscan.modules.exceptions import (
    InvalidChecksumError,
    InvalidMagicError,
    InvalidVersionError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Header layout (POSIX ustar)
# =============================================================================
#
# - 0-99: name (100 bytes, null-terminated when shorter)
# - 100-107: mode (8 bytes octal)
# - 108-115: uid (8 bytes octal)
# - 116-123: gid (8 bytes octal)
# - 124-135: size (12 bytes octal)
# - 136-147: mtime (12 bytes octal)
# - 148-155: chksum (8 bytes octal)
# - 156: typeflag (1 byte)
# - 157-256: linkname (100 bytes)
# - 257-262: magic "ustar\0" (6 bytes)
# - 263-264: version "00" (2 bytes, no null)
# - 265-296: uname (32 bytes)
# - 297-328: gname (32 bytes)
# - 329-344: devmajor / devminor (unused here)

NAME_FIELD = slice(0, 100)
MODE_FIELD = slice(100, 108)
UID_FIELD = slice(108, 116)
GID_FIELD = slice(116, 124)
SIZE_FIELD = slice(124, 136)
MTIME_FIELD = slice(136, 148)
CHKSUM_FIELD = slice(148, 156)
TYPEFLAG_OFFSET = 156
LINKNAME_FIELD = slice(157, 257)
MAGIC_FIELD = slice(257, 263)
VERSION_FIELD = slice(263, 265)
UNAME_FIELD = slice(265, 297)
GNAME_FIELD = slice(297, 329)

OCTAL_DIGITS = b"01234567"


class EntryType(Enum):
    """Entry kinds the scanner distinguishes."""
    REGULAR = "regular"
    HARDLINK = "hardlink"
    SYMLINK = "symlink"
    DIRECTORY = "directory"
    OTHER = "other"

    @classmethod
    def from_flag(cls, typeflag: bytes) -> "EntryType":
        return {
            b"0": cls.REGULAR,
            b"\x00": cls.REGULAR,   # legacy regular file
            b"1": cls.HARDLINK,
            b"2": cls.SYMLINK,
            b"5": cls.DIRECTORY,
        }.get(typeflag, cls.OTHER)


@dataclass
class TarHeader:
    """A single decoded tar header block."""
    name: str
    mode: int
    uid: int
    gid: int
    size: int
    mtime: int
    chksum: int
    typeflag: bytes
    linkname: str
    magic: bytes
    version: bytes
    uname: str
    gname: str
    computed_chksum: int

    @property
    def entry_type(self) -> EntryType:
        return EntryType.from_flag(self.typeflag)

    @property
    def is_end_marker(self) -> bool:
        """An empty name marks the end of the archive."""
        return self.name == ""

    @property
    def is_dir(self) -> bool:
        return self.entry_type is EntryType.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.entry_type is EntryType.REGULAR

    @property
    def is_symlink(self) -> bool:
        # hard links resolve exactly like symlinks
        return self.entry_type in (EntryType.SYMLINK, EntryType.HARDLINK)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "size": self.size,
            "type": self.entry_type.value,
            "mode": self.mode,
            "uid": self.uid,
            "gid": self.gid,
            "mtime": self.mtime,
            "linkname": self.linkname,
            "uname": self.uname,
            "gname": self.gname,
        }


# =============================================================================
# Field decoding
# =============================================================================

def _parse_octal(data: bytes, default: int = 0) -> int:
    """
    Parse an octal ASCII field.

    Leading spaces are skipped and parsing stops at the first byte that is
    not an octal digit (normally the terminating NUL or space).
    """
    digits = data.lstrip(b" ")
    end = 0
    while end < len(digits) and digits[end] in OCTAL_DIGITS:
        end += 1
    if end == 0:
        return default
    return int(digits[:end], 8)


def _parse_string(data: bytes) -> str:
    """Decode a NUL-terminated string field."""
    return data.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


def fits_name_field(path: str) -> bool:
    """Whether a path can be stored in (and therefore matched by) a name field."""
    return len(path.encode("utf-8")) <= NAME_LENGTH


def checksum_of(block: bytes) -> int:
    """
    Sum all 512 header bytes as unsigned values, counting the checksum
    field itself as eight ASCII spaces.
    """
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"header block must be {BLOCK_SIZE} bytes, got {len(block)}")
    field_len = CHKSUM_FIELD.stop - CHKSUM_FIELD.start
    return sum(block[:CHKSUM_FIELD.start]) + field_len * 0x20 + sum(block[CHKSUM_FIELD.stop:])


def decode_header(block: bytes) -> TarHeader:
    """Decode a header block without validating it."""
    block = bytes(block)
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"header block must be {BLOCK_SIZE} bytes, got {len(block)}")

    return TarHeader(
        name=_parse_string(block[NAME_FIELD]),
        mode=_parse_octal(block[MODE_FIELD]),
        uid=_parse_octal(block[UID_FIELD]),
        gid=_parse_octal(block[GID_FIELD]),
        size=_parse_octal(block[SIZE_FIELD]),
        mtime=_parse_octal(block[MTIME_FIELD]),
        chksum=_parse_octal(block[CHKSUM_FIELD], default=-1),
        typeflag=block[TYPEFLAG_OFFSET:TYPEFLAG_OFFSET + 1],
        linkname=_parse_string(block[LINKNAME_FIELD]),
        magic=bytes(block[MAGIC_FIELD]),
        version=bytes(block[VERSION_FIELD]),
        uname=_parse_string(block[UNAME_FIELD]),
        gname=_parse_string(block[GNAME_FIELD]),
        computed_chksum=checksum_of(block),
    )


def verify_header(header: TarHeader) -> None:
    """
    Validate a decoded header.

    Checks run in order magic, version, checksum; the first failure raises.
    """
    if header.magic != USTAR_MAGIC:
        raise InvalidMagicError(
            f"invalid magic in header for {header.name!r}",
            details=header.magic,
        )
    if header.version != USTAR_VERSION:
        raise InvalidVersionError(
            f"invalid version in header for {header.name!r}",
            details=header.version,
        )
    if header.chksum != header.computed_chksum:
        raise InvalidChecksumError(
            f"checksum mismatch in header for {header.name!r}: "
            f"stored {header.chksum}, computed {header.computed_chksum}",
            details=(header.chksum, header.computed_chksum),
        )


def parse_header(block: bytes) -> TarHeader:
    """
    Decode and validate a 512-byte header block.

    The end-of-archive block (empty name) is returned as-is; it is a
    terminator rather than an entry and carries no magic or checksum.
    """
    header = decode_header(block)
    if header.is_end_marker:
        return header
    verify_header(header)
    logger.debug("parsed header %r (%d bytes)", header.name, header.size)
    return header
