from .formatters import _mode_to_string, _format_mtime, human_readable_size, hexdump
