# archive.py
# TarArchive: one archive handle with every query bound to it

from typing import BinaryIO, List, Optional

from ustarscan.modules.config import ScanSettings
from ustarscan.modules.finders import resolver
from ustarscan.modules.finders.tar_parser import TarHeader
from ustarscan.modules.finders.walker import check_archive, iter_headers, rewound
from ustarscan.modules.keepers import carver


class TarArchive:
    """
    Read-only view of a USTAR archive.

    The archive is re-scanned for every query and the file cursor is back at
    offset 0 after each call. A handle is not thread-safe; callers sharing
    one across threads must serialize access themselves.
    """

    def __init__(self, name=None, fileobj: Optional[BinaryIO] = None, settings: Optional[ScanSettings] = None):
        if fileobj is not None:
            self.f = fileobj
            self._owns_file = False
        elif name is not None:
            self.f = open(name, "rb")
            self._owns_file = True
        else:
            raise ValueError("Either name or fileobj must be provided to TarArchive")
        self.name = name
        self.settings = settings or ScanSettings()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        if self._owns_file:
            self.f.close()

    # --- structure

    def check(self) -> int:
        """Header count, or -1/-2/-3 for the first bad magic/version/checksum."""
        return check_archive(self.f)

    def entries(self) -> List[TarHeader]:
        """Every header in archive order."""
        with rewound(self.f):
            return [header for header, _ in iter_headers(self.f)]

    # --- lookups

    def exists(self, path: str) -> bool:
        return resolver.exists(self.f, path)

    def is_dir(self, path: str) -> bool:
        return resolver.is_directory(self.f, path)

    def is_file(self, path: str) -> bool:
        return resolver.is_regular_file(self.f, path)

    def is_symlink(self, path: str) -> bool:
        return resolver.is_symlink(self.f, path)

    def getheader(self, path: str) -> Optional[TarHeader]:
        return resolver.find_header(self.f, path)

    def resolve(self, path: str) -> str:
        return resolver.resolve_path(self.f, path, self.settings.max_symlink_hops)

    def list(self, path: str, capacity: Optional[int] = None) -> resolver.ListResult:
        return resolver.list_directory(self.f, path, capacity, self.settings.max_symlink_hops)

    # --- contents

    def read(self, path: str, offset: int, buffer) -> carver.ReadResult:
        return carver.read_file(self.f, path, offset, buffer, self.settings.max_symlink_hops)

    def read_all(self, path: str) -> bytes:
        return carver.carve_file_to_bytes(
            self.f, path, self.settings.chunk_size, self.settings.max_symlink_hops
        )
