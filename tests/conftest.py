"""
Pytest configuration: in-memory USTAR archives shared by the test modules.
"""
import io
import tarfile

import pytest


A_TEXT = b"alpha\n"
B_TEXT = bytes((i * 7) % 251 for i in range(600))          # spans two payload blocks
C_TEXT = b"charlie"
BIG_DATA = bytes(range(256)) * 6 + b"tail"                 # 1540 bytes, four blocks


def build_archive(members):
    """
    Build a USTAR archive in memory.

    members is a list of tuples:
        ("file", name, data) | ("dir", name) | ("symlink", name, target) | ("hardlink", name, target)
    """
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w", format=tarfile.USTAR_FORMAT) as tar:
        for member in members:
            kind, name = member[0], member[1]
            info = tarfile.TarInfo(name)
            info.mtime = 1700000000
            if kind == "file":
                data = member[2]
                info.size = len(data)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(data))
                continue
            if kind == "dir":
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
            elif kind == "symlink":
                info.type = tarfile.SYMTYPE
                info.linkname = member[2]
                info.mode = 0o777
            elif kind == "hardlink":
                info.type = tarfile.LNKTYPE
                info.linkname = member[2]
                info.mode = 0o644
            else:
                raise ValueError(kind)
            tar.addfile(info)
    buf.seek(0)
    return buf


SAMPLE_MEMBERS = [
    ("dir", "docs"),                        # stored as "docs/"
    ("file", "docs/a.txt", A_TEXT),
    ("file", "docs/b.txt", B_TEXT),
    ("dir", "docs/sub"),
    ("file", "docs/sub/c.txt", C_TEXT),
    ("symlink", "link_a", "docs/a.txt"),
    ("hardlink", "hard_b", "docs/b.txt"),
    ("symlink", "docs_link", "docs"),
    ("symlink", "dangling", "nowhere.txt"),
    ("symlink", "loop1", "loop2"),
    ("symlink", "loop2", "loop1"),
    ("symlink", "chain", "link_a"),
    ("file", "empty.txt", b""),
    ("file", "big.bin", BIG_DATA),
]


@pytest.fixture
def sample_tar():
    """Seekable in-memory archive with files, directories and links."""
    return build_archive(SAMPLE_MEMBERS)


@pytest.fixture
def sample_tar_path(tmp_path, sample_tar):
    """The sample archive written to disk."""
    path = tmp_path / "sample.tar"
    path.write_bytes(sample_tar.getvalue())
    return path


@pytest.fixture
def small_tar_bytes():
    """Three small files; headers sit at offsets 0, 1024 and 2048."""
    return bytearray(build_archive([
        ("file", "one.txt", b"1"),
        ("file", "two.txt", b"22"),
        ("file", "three.txt", b"333"),
    ]).getvalue())
