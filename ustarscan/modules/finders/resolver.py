# resolver.py
# Path resolution against archive headers
#
# Answers existence and type queries, follows symlinks and lists directory
# children. Nothing is indexed: each query is one linear scan from offset 0.

import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, List, Optional

from ustarscan.modules.config import MAX_SYMLINK_HOPS
from ustarscan.modules.exceptions import SymlinkLoopError
from ustarscan.modules.finders.tar_parser import TarHeader, fits_name_field
from ustarscan.modules.finders.walker import iter_headers, rewound

logger = logging.getLogger(__name__)

SEPARATOR = "/"


@dataclass
class ListResult:
    """Result of listing a directory."""
    found: bool
    entries: List[str] = field(default_factory=list)
    total: int = 0

    @property
    def truncated(self) -> bool:
        return self.total > len(self.entries)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "found": self.found,
            "entries": self.entries,
            "total": self.total,
            "truncated": self.truncated,
        }


# =============================================================================
# Header lookup
# =============================================================================

def find_header_matching(fileobj: BinaryIO, predicate: Callable[[TarHeader], bool]) -> Optional[TarHeader]:
    """Return the first header satisfying `predicate`, or None."""
    with rewound(fileobj):
        for header, _ in iter_headers(fileobj):
            if predicate(header):
                return header
    return None


def find_header(fileobj: BinaryIO, path: str) -> Optional[TarHeader]:
    """Return the header whose name is exactly `path`, or None."""
    if not fits_name_field(path):
        logger.debug("path %r exceeds the name field, cannot match", path)
        return None
    return find_header_matching(fileobj, lambda header: header.name == path)


def exists(fileobj: BinaryIO, path: str) -> bool:
    """Whether an entry named exactly `path` exists."""
    return find_header(fileobj, path) is not None


def is_directory(fileobj: BinaryIO, path: str) -> bool:
    header = find_header(fileobj, path)
    return header is not None and header.is_dir


def is_regular_file(fileobj: BinaryIO, path: str) -> bool:
    header = find_header(fileobj, path)
    return header is not None and header.is_file


def is_symlink(fileobj: BinaryIO, path: str) -> bool:
    """Whether `path` names a symbolic or hard link."""
    header = find_header(fileobj, path)
    return header is not None and header.is_symlink


# =============================================================================
# Symlink resolution
# =============================================================================

def resolve_path(fileobj: BinaryIO, path: str, max_hops: int = MAX_SYMLINK_HOPS) -> str:
    """
    Follow links starting at `path` and return the final target path.

    The target is not required to exist; a dangling link resolves to its
    linkname and the caller reports the miss. Raises SymlinkLoopError when a
    path is revisited or more than `max_hops` links would be followed.
    """
    visited = {path}
    hops = 0
    while True:
        header = find_header(fileobj, path)
        if header is None or not header.is_symlink:
            return path

        target = header.linkname
        if target in visited:
            raise SymlinkLoopError(f"symlink cycle at {path!r} -> {target!r}", details=sorted(visited))
        if hops >= max_hops:
            raise SymlinkLoopError(
                f"more than {max_hops} symlink hop(s) resolving {path!r}",
                details=sorted(visited),
            )

        logger.debug("resolved link %r -> %r", path, target)
        visited.add(target)
        hops += 1
        path = target


# =============================================================================
# Directory listing
# =============================================================================

def _normalize_dir(path: str) -> str:
    """Give `path` exactly one trailing separator."""
    return path.rstrip(SEPARATOR) + SEPARATOR


def _child_name(prefix: str, name: str) -> Optional[str]:
    """
    Return `name` relative to directory `prefix` if it is an immediate child.

    Child directories keep their trailing separator ("sub/"); anything
    deeper ("sub/c") is not a child.
    """
    if not name.startswith(prefix) or name == prefix:
        return None
    rest = name[len(prefix):]
    if SEPARATOR in rest.rstrip(SEPARATOR) or rest.startswith(SEPARATOR):
        return None
    return rest


def list_directory(
    fileobj: BinaryIO,
    path: str,
    capacity: Optional[int] = None,
    max_hops: int = MAX_SYMLINK_HOPS,
) -> ListResult:
    """
    List the immediate children of the directory at `path`.

    Symlinks are resolved first. At most `capacity` names are returned when
    given; `total` always counts every child found.
    """
    if capacity is not None and capacity < 0:
        raise ValueError("capacity must be zero or positive")

    path = resolve_path(fileobj, path, max_hops)
    prefix = _normalize_dir(path)
    if not is_directory(fileobj, prefix):
        logger.debug("no directory at %r", prefix)
        return ListResult(found=False)

    result = ListResult(found=True)
    with rewound(fileobj):
        for header, _ in iter_headers(fileobj):
            child = _child_name(prefix, header.name)
            if child is None:
                continue
            result.total += 1
            if capacity is None or len(result.entries) < capacity:
                result.entries.append(child)
    return result
