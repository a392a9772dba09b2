from __future__ import annotations

from dataclasses import replace

from rich.console import Console

from tarstream.modules.codec.tar_entry import TarEntry
from tarstream.modules.formatters import (
    entries_table,
    format_entry_line,
    format_mtime,
    human_readable_size,
    mode_to_string,
)


def test_mode_to_string():
    assert mode_to_string(0o755, "5") == "drwxr-xr-x"
    assert mode_to_string(0o644, "0") == "-rw-r--r--"
    assert mode_to_string(0o777, "2") == "lrwxrwxrwx"
    assert mode_to_string(0o440, "\x00") == "-r--r-----"


def test_format_mtime_handles_zero():
    assert format_mtime(0) == "----.--.-- --:--"
    assert len(format_mtime(1_700_000_000)) == len("2023-11-14 22:13")


def test_human_readable_size():
    assert human_readable_size(0) == "0.0 B"
    assert human_readable_size(2048) == "2.0 KB"
    assert human_readable_size(5 * 1024 ** 4) == "5.0 TB"


def test_format_entry_line_simple():
    file_entry = TarEntry.create("a.txt", 2048, 0)
    dir_entry = TarEntry.create("d", 0, 0, is_directory=True)
    link = TarEntry(replace(TarEntry.create("l", 0, 0).header, link_flag="2", link_name="a.txt"))

    assert format_entry_line(file_entry, show_permissions=False) == "  [FILE] a.txt (2.0 KB)"
    assert format_entry_line(dir_entry, show_permissions=False) == "  [DIR]  d/"
    assert format_entry_line(link, show_permissions=False) == "  [LINK] l -> a.txt"


def test_format_entry_line_ls_style():
    entry = TarEntry.create("bin/sh", 100, 0, permissions=0o755).with_ids(0, 0)
    line = format_entry_line(entry)
    assert line.startswith("  -rwxr-xr-x     0    0")
    assert line.endswith("bin/sh")


def test_entries_table_renders_every_entry():
    entries = [TarEntry.create("a.txt", 1, 0), TarEntry.create("dir", 0, 0, is_directory=True)]
    table = entries_table(entries, title="demo")
    assert table.row_count == 2

    console = Console(width=120, record=True)
    console.print(table)
    text = console.export_text()
    assert "a.txt" in text
    assert "dir/" in text


def test_entries_table_keeps_brackets_in_names():
    entries = [
        TarEntry.create("logs[/x]", 1, 0),
        TarEntry.create("[bold]plain", 1, 0),
        TarEntry.create("cfg[/]", 0, 0, is_directory=True),
    ]
    console = Console(width=120, record=True)
    console.print(entries_table(entries))
    text = console.export_text()
    assert "logs[/x]" in text
    assert "[bold]plain" in text
    assert "cfg[/]/" in text


def test_entries_table_title_is_not_markup():
    console = Console(width=120, record=True)
    console.print(entries_table([], title="backups/[/old].tar"))
    assert "backups/[/old].tar" in console.export_text()
