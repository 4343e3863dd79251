# config.py
# Scanner configuration: format constants and per-run settings

from dataclasses import dataclass


# =============================================================================
# USTAR layout
# =============================================================================

BLOCK_SIZE = 512
NAME_LENGTH = 100
LINKNAME_LENGTH = 100

USTAR_MAGIC = b"ustar\x00"
USTAR_VERSION = b"00"


# =============================================================================
# Defaults
# =============================================================================

MAX_SYMLINK_HOPS = 8            # links followed before giving up
DEFAULT_CHUNK_SIZE = 65536      # 64KB reads when carving whole files
DEFAULT_OUTPUT_DIR = "./carved"
DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 8000
ARCHIVE_ENV_VAR = "USTARSCAN_ARCHIVE"


@dataclass
class ScanSettings:
    """Knobs a caller may tune per archive handle."""
    max_symlink_hops: int = MAX_SYMLINK_HOPS
    chunk_size: int = DEFAULT_CHUNK_SIZE
    output_dir: str = DEFAULT_OUTPUT_DIR

    def __post_init__(self):
        if self.max_symlink_hops < 0:
            raise ValueError("max_symlink_hops must be zero or positive")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

    @classmethod
    def from_args(cls, args) -> "ScanSettings":
        """Build settings from parsed CLI arguments."""
        return cls(
            max_symlink_hops=args.max_hops,
            chunk_size=args.chunk_size * 1024,
            output_dir=args.output_dir,
        )
