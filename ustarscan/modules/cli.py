# CLI argument parsing for ustarscan

import argparse
import sys

from ustarscan.modules.config import (
    DEFAULT_API_HOST,
    DEFAULT_API_PORT,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_OUTPUT_DIR,
    MAX_SYMLINK_HOPS,
)


def build_parser():
    p = argparse.ArgumentParser(
        description="Inspect a USTAR tar archive without extracting it.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ustarscan backup.tar --check
  ustarscan backup.tar --entries
  ustarscan backup.tar -p docs/ --list
  ustarscan backup.tar -p docs/readme.txt --read --offset 10 --length 30 --hex
  ustarscan backup.tar -p docs/readme.txt --carve -o ./carved
  ustarscan backup.tar -p docs/            # run every query against one path
        """,
    )
    p.add_argument(
        "archive",
        nargs="?",
        help="Path to the tar archive",
    )
    p.add_argument(
        "--path", "-p",
        dest="path",
        help="Entry path inside the archive (e.g., docs/readme.txt)",
    )
    p.add_argument(
        "--check",
        action="store_true",
        help="Validate magic, version and checksum of every header",
    )
    p.add_argument(
        "--entries",
        action="store_true",
        help="Print every header in ls -la style",
    )
    p.add_argument(
        "--simple-output",
        action="store_true",
        help="Use simple output format instead of ls -la style",
    )
    p.add_argument(
        "--exists",
        action="store_true",
        help="Report whether --path exists and what type it is",
    )
    p.add_argument(
        "--list",
        action="store_true",
        help="List the immediate children of the directory at --path",
    )
    p.add_argument(
        "--capacity",
        type=int,
        default=None,
        help="Maximum number of names to list",
    )
    p.add_argument(
        "--read",
        action="store_true",
        help="Read a window of the file at --path",
    )
    p.add_argument(
        "--offset",
        type=int,
        default=0,
        help="Byte offset for --read (default: 0)",
    )
    p.add_argument(
        "--length",
        type=int,
        default=30,
        help="Buffer size in bytes for --read (default: 30)",
    )
    p.add_argument(
        "--hex",
        action="store_true",
        help="Show --read output as a hex dump",
    )
    p.add_argument(
        "--carve",
        action="store_true",
        help="Extract the file at --path to --output-dir",
    )
    p.add_argument(
        "--output-dir", "-o",
        dest="output_dir",
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory for carved files (default: {DEFAULT_OUTPUT_DIR})",
    )
    p.add_argument(
        "--chunk-size", "-c",
        dest="chunk_size",
        type=int,
        default=DEFAULT_CHUNK_SIZE // 1024,
        help=f"Read chunk size in KB when carving (default: {DEFAULT_CHUNK_SIZE // 1024})",
    )
    p.add_argument(
        "--max-hops",
        dest="max_hops",
        type=int,
        default=MAX_SYMLINK_HOPS,
        help=f"Symlink hops to follow before giving up (default: {MAX_SYMLINK_HOPS})",
    )
    p.add_argument(
        "--log-file", "-l",
        dest="log_file",
        help="Path to save a complete log of output",
    )
    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging from the scanner",
    )
    p.add_argument(
        "--api", "-A",
        action="store_true",
        help=f"Serve the archive over HTTP (uvicorn on {DEFAULT_API_HOST}:{DEFAULT_API_PORT})",
    )
    return p


def parse_args(argv=None):
    p = build_parser()
    args = p.parse_args(argv)

    if args.archive is None:
        p.print_help()
        sys.exit(0)

    needs_path = args.exists or args.list or args.read or args.carve
    if needs_path and not args.path:
        p.error("--exists, --list, --read and --carve require --path")
    if args.length < 0 or args.offset < 0:
        p.error("--offset and --length must be zero or positive")

    # Show help if no mode selected
    if not any([args.path, args.check, args.entries, args.api]):
        p.print_help()
        sys.exit(0)
    return args
