from .formatters import (
    mode_to_string,
    format_mtime,
    human_readable_size,
    format_entry_line,
    entries_table,
)
