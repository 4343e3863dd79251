#  ustarscan main CLI: archive checks, lookups, listings, reads and carving
import logging
import os
import sys

from ustarscan.archive import TarArchive
from ustarscan.modules.cli import parse_args
from ustarscan.modules.config import DEFAULT_API_HOST, DEFAULT_API_PORT, ScanSettings
from ustarscan.modules.exceptions import TarScanError
from ustarscan.modules.keepers.carver import carve_file
from ustarscan.modules.keepers.report import (
    Tee,
    display_entries,
    display_listing,
    display_read,
    make_console,
)

CHECK_MESSAGES = {
    -1: "invalid magic value",
    -2: "invalid version value",
    -3: "invalid checksum",
}


def run_check(console, archive):
    result = archive.check()
    if result >= 0:
        console.print(f"[*] check_archive returned {result} (valid, {result} headers)")
    else:
        console.print(f"[!] check_archive returned {result} ({CHECK_MESSAGES[result]})")
    return result >= 0


def run_exists(console, archive, path):
    found = archive.exists(path)
    console.print(f"[*] exists returned {int(found)}")
    console.print(f"[*] is_dir returned {int(archive.is_dir(path))}")
    console.print(f"[*] is_file returned {int(archive.is_file(path))}")
    console.print(f"[*] is_symlink returned {int(archive.is_symlink(path))}")
    return found


def run_list(console, archive, path, capacity):
    result = archive.list(path, capacity)
    display_listing(console, path, result)
    return result.found


def run_read(console, archive, path, offset, length, as_hex):
    buffer = bytearray(length)
    try:
        result = archive.read(path, offset, buffer)
    except TarScanError as e:
        console.print(f"[!] read returned {getattr(e, 'code', -1)}: {e}")
        return False
    display_read(console, bytes(buffer[:result.bytes_written]), result.remaining, as_hex)
    return True


def run_harness(console, archive, args):
    """Every query against one path: check, lookups, list, then a hex-dumped read."""
    console.print(f"Path = '{args.path}'")
    run_check(console, archive)
    run_exists(console, archive, args.path)
    try:
        run_list(console, archive, args.path, args.capacity)
    except TarScanError as e:
        console.print(f"[!] list failed: {e}")
    run_read(console, archive, args.path, args.offset, args.length, as_hex=True)
    return True


def serve_api(archive_path, settings):
    import uvicorn
    from ustarscan.modules.api import create_app

    print(f"[*] Starting API server on http://{DEFAULT_API_HOST}:{DEFAULT_API_PORT}/docs")
    uvicorn.run(create_app(archive_path, settings), host=DEFAULT_API_HOST, port=DEFAULT_API_PORT)


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        settings = ScanSettings.from_args(args)
    except ValueError as e:
        print(f"[!] {e}")
        return 2

    if not os.path.isfile(args.archive):
        print(f"[!] Archive not found: {args.archive}")
        return 1

    if args.api:
        serve_api(args.archive, settings)
        return 0

    # set up logging/tee if requested
    log_f = None
    old_stdout, old_stderr = sys.stdout, sys.stderr
    if args.log_file:
        log_f = open(args.log_file, "w", encoding="utf-8")
        sys.stdout = Tee(sys.stdout, log_f)
        sys.stderr = Tee(sys.stderr, log_f)

    console = make_console()
    ok = True
    try:
        with TarArchive(name=args.archive, settings=settings) as archive:
            if args.check:
                ok = run_check(console, archive) and ok
            if args.entries:
                display_entries(console, archive.entries(), show_permissions=not args.simple_output)

            explicit = args.exists or args.list or args.read or args.carve
            if args.path and not explicit:
                run_harness(console, archive, args)
            if args.exists:
                ok = run_exists(console, archive, args.path) and ok
            if args.list:
                ok = run_list(console, archive, args.path, args.capacity) and ok
            if args.read:
                ok = run_read(console, archive, args.path, args.offset, args.length, args.hex) and ok

        if args.carve:
            result = carve_file(
                args.archive,
                args.path,
                output_dir=settings.output_dir,
                chunk_size=settings.chunk_size,
                max_hops=settings.max_symlink_hops,
                verbose=True,
            )
            ok = result.found and ok
    except TarScanError as e:
        print(f"[!] Error: {e}")
        ok = False
    finally:
        if log_f is not None:
            sys.stdout.flush()
            sys.stdout, sys.stderr = old_stdout, old_stderr
            log_f.close()

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
