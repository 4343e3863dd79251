"""Header decoding, archive walking and path resolution."""

from .tar_parser import TarHeader, EntryType, parse_header, decode_header, verify_header, checksum_of
from .walker import payload_block_count, advance_to_next_header, iter_headers, rewound, check_archive
from .resolver import (
    ListResult,
    find_header,
    exists,
    is_directory,
    is_regular_file,
    is_symlink,
    resolve_path,
    list_directory,
)
