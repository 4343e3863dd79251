# carver.py
# Byte-range extraction of regular files from a tar archive.
#
# read_file copies a window of a file's payload into a caller buffer and
# reports how much is left; carve_file loops over it to pull a whole file out
# to disk.

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Tuple

from ustarscan.modules.config import DEFAULT_CHUNK_SIZE, DEFAULT_OUTPUT_DIR, MAX_SYMLINK_HOPS
from ustarscan.modules.exceptions import (
    NotAFileError,
    OffsetOutOfRangeError,
    TarScanError,
    TruncatedPayloadError,
    UnsafeOutputPathError,
)
from ustarscan.modules.finders.resolver import resolve_path
from ustarscan.modules.finders.tar_parser import fits_name_field
from ustarscan.modules.finders.walker import iter_headers, rewound

logger = logging.getLogger(__name__)


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class ReadResult:
    """Outcome of one read_file window."""
    bytes_written: int
    remaining: int

    @property
    def complete(self) -> bool:
        """True when this window reached the end of the file."""
        return self.remaining == 0


@dataclass
class CarveResult:
    """Result of a file carving operation."""
    found: bool
    saved_path: Optional[str] = None
    target_file: str = ""
    resolved_path: Optional[str] = None
    size: int = 0
    elapsed_time: float = 0.0
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "found": self.found,
            "saved_path": self.saved_path,
            "target_file": self.target_file,
            "resolved_path": self.resolved_path,
            "size": self.size,
            "elapsed_time": self.elapsed_time,
            "error": self.error,
        }


# =============================================================================
# Range Reader
# =============================================================================

def _locate_file(fileobj: BinaryIO, path: str) -> Optional[Tuple[int, int]]:
    """Return (payload_offset, size) of the regular file named `path`."""
    if not fits_name_field(path):
        return None
    for header, payload_offset in iter_headers(fileobj):
        if header.name == path:
            if not header.is_file:
                return None
            return payload_offset, header.size
    return None


def _read_into(fileobj: BinaryIO, view: memoryview) -> int:
    """Fill `view` from the file, stopping early only at end of file."""
    filled = 0
    while filled < len(view):
        n = fileobj.readinto(view[filled:])
        if not n:
            break
        filled += n
    return filled


def read_file(
    fileobj: BinaryIO,
    path: str,
    offset: int,
    buffer,
    max_hops: int = MAX_SYMLINK_HOPS,
) -> ReadResult:
    """
    Read a file at a given path in the archive into `buffer`.

    Args:
        fileobj: Seekable binary file holding the archive
        path: Entry to read; symlinks are resolved to their target
        offset: Byte offset in the file to start reading from
        buffer: Writable buffer (bytearray, memoryview); its length is the
            maximum number of bytes copied

    Returns:
        ReadResult with the bytes copied and the bytes of the file left
        unread past this window (0 when the end of the file was reached)

    Raises:
        NotAFileError: no regular file at the resolved path
        OffsetOutOfRangeError: offset is past the end of the file
    """
    if offset < 0:
        raise ValueError("offset must be zero or positive")

    target = resolve_path(fileobj, path, max_hops)
    view = memoryview(buffer).cast("B")

    with rewound(fileobj):
        located = _locate_file(fileobj, target)
        if located is None:
            raise NotAFileError(f"no regular file at {target!r}", details=path)
        payload_offset, size = located

        if offset > size:
            raise OffsetOutOfRangeError(
                f"offset {offset} is past the end of {target!r} ({size} bytes)",
                details=(offset, size),
            )

        length = min(len(view), size - offset)
        fileobj.seek(payload_offset + offset)
        written = _read_into(fileobj, view[:length])

    logger.debug("read %d byte(s) of %r at offset %d", written, target, offset)
    return ReadResult(bytes_written=written, remaining=size - offset - written)


def carve_file_to_bytes(
    fileobj: BinaryIO,
    path: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_hops: int = MAX_SYMLINK_HOPS,
) -> bytes:
    """
    Read a whole file by issuing read_file windows of `chunk_size` bytes.

    Raises TruncatedPayloadError when the archive ends before the file does.
    """
    buffer = bytearray(chunk_size)
    parts = []
    offset = 0
    while True:
        result = read_file(fileobj, path, offset, buffer, max_hops)
        parts.append(bytes(buffer[:result.bytes_written]))
        offset += result.bytes_written
        if result.complete:
            break
        if result.bytes_written == 0:
            raise TruncatedPayloadError(
                f"archive ends {result.remaining} byte(s) short of the end of {path!r}",
                details=(offset, offset + result.remaining),
            )
    return b"".join(parts)


# =============================================================================
# File Extraction and Saving
# =============================================================================

def extract_and_save(content: bytes, target_path: str, output_dir: str) -> str:
    """
    Write carved content below `output_dir`.

    Returns the path where file was saved.

    Raises UnsafeOutputPathError when the entry name climbs out of
    `output_dir` (e.g. "../x").
    """
    clean_path = target_path.lstrip("/")
    root = Path(output_dir).resolve()
    output_path = (root / clean_path).resolve()
    if root not in output_path.parents:
        raise UnsafeOutputPathError(
            f"refusing to write {target_path!r} outside {output_dir}",
            details=str(output_path),
        )

    # Create parent directories
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(content)

    return str(output_path)


def carve_file(
    archive_path: str,
    target_path: str,
    output_dir: str = DEFAULT_OUTPUT_DIR,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_hops: int = MAX_SYMLINK_HOPS,
    verbose: bool = False,
) -> CarveResult:
    """
    Carve a single file out of a tar archive on disk.

    Args:
        archive_path: Path to the tar archive
        target_path: Entry path inside the archive (e.g., "etc/passwd")
        output_dir: Output directory for carved file (default: ./carved)
        chunk_size: Read window in bytes
        max_hops: Symlink hops to follow before giving up
        verbose: Whether to print progress output

    Returns:
        CarveResult with extraction stats and status
    """
    start_time = time.time()

    with open(archive_path, "rb") as fileobj:
        try:
            resolved = resolve_path(fileobj, target_path, max_hops)
            content = carve_file_to_bytes(fileobj, target_path, chunk_size, max_hops)
            saved_path = extract_and_save(content, target_path, output_dir)
        except TarScanError as e:
            if verbose:
                print(f"  [!] {e}")
            return CarveResult(
                found=False,
                target_file=target_path,
                elapsed_time=time.time() - start_time,
                error=str(e),
            )

    elapsed = time.time() - start_time

    if verbose:
        print(f"[*] Carved {target_path} ({len(content):,} bytes) to {saved_path} in {elapsed:.2f}s")

    return CarveResult(
        found=True,
        saved_path=saved_path,
        target_file=target_path,
        resolved_path=resolved,
        size=len(content),
        elapsed_time=elapsed,
    )
