#========= FORMATTERS
# Display helpers for archive listings.

from datetime import datetime
from typing import Iterable

from rich.table import Table
from rich.text import Text

from tarstream.modules.codec.tar_header import LF_DIR, LF_SYMLINK


def mode_to_string(mode: int, link_flag: str) -> str:
    """
    Convert octal mode to ls-style permission string.

    Examples:
        0o755, link_flag='5' -> 'drwxr-xr-x'
        0o644, link_flag='0' -> '-rw-r--r--'
        0o777, link_flag='2' -> 'lrwxrwxrwx'
    """
    type_char = {LF_DIR: 'd', LF_SYMLINK: 'l', '3': 'c', '4': 'b', '6': 'p'}.get(link_flag, '-')

    perms = ''
    for shift in [6, 3, 0]:
        bits = (mode >> shift) & 0o7
        perms += 'r' if bits & 4 else '-'
        perms += 'w' if bits & 2 else '-'
        perms += 'x' if bits & 1 else '-'

    return type_char + perms


def format_mtime(unix_timestamp: int) -> str:
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


def _display_name(entry) -> str:
    if entry.link_flag == LF_SYMLINK and entry.link_name:
        return f"{entry.name} -> {entry.link_name}"
    return entry.name


#----- Tar format entry
def format_entry_line(entry, show_permissions=True):
    """
    Format a TarEntry for display, similar to ls -la output.

    Args:
        entry: TarEntry
        show_permissions: Whether to show full ls -la style output

    Returns:
        Formatted string for display
    """
    if show_permissions:
        # drwxr-xr-x     0    0     0.0 B  2024-01-15 10:30  filename
        size_str = human_readable_size(entry.size).rjust(8)
        mode_str = mode_to_string(entry.mode, entry.link_flag)
        return (f"  {mode_str}  {entry.user_id:4d} {entry.group_id:4d}  "
                f"{size_str}  {format_mtime(entry.mod_time)}  {_display_name(entry)}")

    if entry.is_directory:
        return f"  [DIR]  {entry.name}"
    elif entry.link_flag == LF_SYMLINK:
        return f"  [LINK] {entry.name} -> {entry.link_name}"
    return f"  [FILE] {entry.name} ({human_readable_size(entry.size)})"


def entries_table(entries: Iterable, title: str = None) -> Table:
    """Build a rich Table of entries, one row per header."""
    table = Table(title=Text(title) if title else None, show_edge=False, header_style="bold")
    table.add_column("Mode", no_wrap=True)
    table.add_column("UID", justify="right")
    table.add_column("GID", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Modified", no_wrap=True)
    table.add_column("Name", overflow="fold")

    for entry in entries:
        name = _display_name(entry)
        table.add_row(
            mode_to_string(entry.mode, entry.link_flag),
            str(entry.user_id),
            str(entry.group_id),
            human_readable_size(entry.size),
            format_mtime(entry.mod_time),
            # Text, not markup: member names may contain [brackets]
            Text(name, style="bold blue" if entry.is_directory else ""),
        )
    return table
