# report.py
# Console output for the CLI: entry lines, listings and read windows

import sys

from rich.console import Console
from rich.text import Text

from ustarscan.modules.finders.resolver import ListResult
from ustarscan.modules.finders.tar_parser import TarHeader
from ustarscan.modules.formatters import _format_mtime, _mode_to_string, hexdump, human_readable_size


# split output to file and stdout
class Tee:
    """Duplicate stdout/stderr to a file and the console."""
    def __init__(self, *files):
        self.files = files
    def write(self, data):
        for f in self.files:
            f.write(data)
    def flush(self):
        for f in self.files:
            f.flush()
    def isatty(self):
        return False


def make_console() -> Console:
    # bound late so a Tee installed on sys.stdout is honoured
    return Console(file=sys.stdout, highlight=False, markup=False, emoji=False, soft_wrap=True)


#----- Tar format entry
def format_entry_line(entry: TarHeader, show_permissions=True):
    """
    Format a TarHeader for display, similar to ls -la output.

    Args:
        entry: TarHeader decoded from the archive
        show_permissions: Whether to show full ls -la style output

    Returns:
        Formatted string for display
    """
    if show_permissions:
        # Full ls -la style: drwxr-xr-x  0  0  2024-01-15 10:30  filename
        size_str = human_readable_size(entry.size).rjust(8)
        if entry.is_symlink and entry.linkname:
            name_display = f"{entry.name} -> {entry.linkname}"
        else:
            name_display = entry.name
        mode = _mode_to_string(entry.mode, entry.typeflag)
        return f"  {mode}  {entry.uid:4d} {entry.gid:4d}  {size_str}  {_format_mtime(entry.mtime)}  {name_display}"
    else:
        if entry.is_dir:
            return f"  [DIR]  {entry.name}"
        elif entry.is_symlink:
            return f"  [LINK] {entry.name} -> {entry.linkname}"
        else:
            return f"  [FILE] {entry.name} ({human_readable_size(entry.size)})"


def entry_text(entry: TarHeader, show_permissions=True) -> Text:
    """Styled version of format_entry_line for the console."""
    style = ""
    if entry.is_dir:
        style = "bold blue"
    elif entry.is_symlink:
        style = "cyan"
    return Text(format_entry_line(entry, show_permissions), style=style)


def display_entries(console: Console, entries, show_permissions=True):
    """Print every header of the archive, in archive order."""
    count = 0
    for entry in entries:
        console.print(entry_text(entry, show_permissions))
        count += 1
    console.print(f"\n  [Stats] Entries: {count}")


def display_listing(console: Console, path: str, result: ListResult):
    """Print the children of a directory listing."""
    if not result.found:
        console.print(f"[!] No directory at {path}")
        return
    for name in result.entries:
        style = "bold blue" if name.endswith("/") else ""
        console.print(Text(f"    {name}", style=style))
    more = f" (showing {len(result.entries)})" if result.truncated else ""
    console.print(f"[*] list {path}: {result.total} entries{more}")


def display_read(console: Console, data: bytes, remaining: int, as_hex=False):
    """Print one read window, raw or as a hex dump."""
    console.print(f"[*] buffer ({len(data)} bytes):")
    if as_hex:
        console.print(Text(hexdump(data)))
    else:
        console.print(Text(data.decode("utf-8", errors="replace")))
    state = "complete" if remaining == 0 else f"{remaining} bytes left"
    console.print(f"[*] read returned {remaining} ({state})")
