# walker.py
# Block walker: steps through an archive header by header
#
# Every scan starts at offset 0 and hands the cursor back at offset 0, so one
# open file object can serve any sequence of queries.

import logging
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Tuple

from ustarscan.modules.config import BLOCK_SIZE
from ustarscan.modules.exceptions import TarFormatError
from ustarscan.modules.finders.tar_parser import TarHeader, decode_header, verify_header

logger = logging.getLogger(__name__)


def payload_block_count(size: int) -> int:
    """Number of 512-byte blocks holding a payload of `size` bytes."""
    return (size + BLOCK_SIZE - 1) // BLOCK_SIZE


def advance_to_next_header(fileobj: BinaryIO, header: TarHeader) -> None:
    """Skip the payload of `header`; the cursor must sit at its first payload byte."""
    fileobj.seek(payload_block_count(header.size) * BLOCK_SIZE, 1)


@contextmanager
def rewound(fileobj: BinaryIO):
    """Run a scan from offset 0 and seek back to 0 however it exits."""
    fileobj.seek(0)
    try:
        yield fileobj
    finally:
        fileobj.seek(0)


def iter_headers(fileobj: BinaryIO, validate: bool = False) -> Iterator[Tuple[TarHeader, int]]:
    """
    Yield (header, payload_offset) for each entry from the current position.

    Stops at the end-of-archive block or when fewer than 512 bytes remain.
    The consumer may read payload bytes between steps; the walker resumes from
    the recorded payload offset. With `validate`, each header is verified and
    the first TarFormatError propagates.
    """
    while True:
        block = fileobj.read(BLOCK_SIZE)
        if len(block) < BLOCK_SIZE:
            if block:
                logger.debug("short block (%d bytes) treated as end of archive", len(block))
            return

        header = decode_header(block)
        if header.is_end_marker:
            return
        if validate:
            verify_header(header)

        payload_offset = fileobj.tell()
        yield header, payload_offset

        fileobj.seek(payload_offset)
        advance_to_next_header(fileobj, header)


def check_archive(fileobj: BinaryIO) -> int:
    """
    Check whether the archive is valid.

    Returns:
        the number of headers (zero or positive) if every header is valid,
        -1 on the first header with an invalid magic value,
        -2 on the first header with an invalid version value,
        -3 on the first header with an invalid checksum
    """
    count = 0
    with rewound(fileobj):
        try:
            for header, _ in iter_headers(fileobj, validate=True):
                count += 1
        except TarFormatError as e:
            logger.debug("archive invalid after %d header(s): %s", count, e)
            return e.code
    return count
