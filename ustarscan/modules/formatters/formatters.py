from datetime import datetime


#========= FORMATTER
def _mode_to_string(mode: int, typeflag: bytes) -> str:
    """Convert a header mode integer to an ls-style permission string."""
    type_char = {b'5': 'd', b'2': 'l', b'1': 'h', b'0': '-', b'\x00': '-'}.get(typeflag, '?')

    perms = ''
    for shift in [6, 3, 0]:
        bits = (mode >> shift) & 0o7
        perms += 'r' if bits & 4 else '-'
        perms += 'w' if bits & 2 else '-'
        perms += 'x' if bits & 1 else '-'

    return type_char + perms

#========= FORMATTER
def _format_mtime(unix_timestamp: int) -> str:
    """Format Unix timestamp to readable string."""
    try:
        if unix_timestamp <= 0:
            return "----.--.-- --:--"
        dt = datetime.fromtimestamp(unix_timestamp)
        return dt.strftime("%Y-%m-%d %H:%M")
    except (OSError, ValueError, OverflowError):
        return "----.--.-- --:--"


def human_readable_size(size):
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"


## Debug dump of file contents: offset, 16 hex bytes, then the same bytes as characters

def hexdump(data: bytes, width: int = 16) -> str:
    lines = []
    for i in range(0, len(data), width):
        chunk = data[i:i + width]
        hex_part = " ".join(f"{b:02x}" for b in chunk)
        char_part = " ".join(chr(b) if 0x20 <= b < 0x7f else "." for b in chunk)
        lines.append(f"{i:04x}:  {hex_part} \t{char_part}")
    return "\n".join(lines)
