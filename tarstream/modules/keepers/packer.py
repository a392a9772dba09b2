# packer.py
# Build archives from files and directory trees on disk.

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from tarstream import config
from tarstream.modules.codec.tar_entry import FileBackedEntry
from tarstream.modules.streams.gzip_streams import GzipSink
from tarstream.modules.streams.tar_writer import TarWriter


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class PackResult:
    """Result of packing a tree into an archive."""
    source: str
    files_added: int = 0
    directories_added: int = 0
    content_bytes: int = 0
    archive_bytes: int = 0   # uncompressed tar size

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "source": self.source,
            "files_added": self.files_added,
            "directories_added": self.directories_added,
            "content_bytes": self.content_bytes,
            "archive_bytes": self.archive_bytes,
        }


# =============================================================================
# Tree Walking
# =============================================================================

def archive_tree(
    root: Union[str, os.PathLike],
    writer: TarWriter,
    permissions: int = config.DEFAULT_PERMISSIONS,
    verbose: bool = False,
) -> PackResult:
    """
    Add a file or directory tree to an open writer.

    Files are streamed in BUFFER_SIZE chunks. Empty directories get their
    own entry; directories with children are implied by their children's
    names. A directory root contributes its own name as the first path
    segment.

    Args:
        root: File or directory to add
        writer: Open TarWriter (left open)
        permissions: Mode bits recorded for every entry
        verbose: Whether to print each entry as it is added

    Returns:
        PackResult with counts for this call
    """
    root = Path(root)
    result = PackResult(source=str(root))

    name = root.resolve().name

    if root.is_file():
        _add_file(root, name, writer, permissions, result, verbose)
    else:
        _add_directory(root, name + "/", writer, permissions, result, verbose)

    result.archive_bytes = writer.bytes_written
    return result


def _add_directory(directory, prefix, writer, permissions, result, verbose):
    children = sorted(directory.iterdir())
    if not children:
        if verbose:
            print(f"  [+] {prefix}")
        writer.put_next_entry(FileBackedEntry.from_file(directory, prefix, permissions))
        result.directories_added += 1
        return

    for child in children:
        if child.is_file():
            _add_file(child, prefix + child.name, writer, permissions, result, verbose)
        elif child.is_dir():
            _add_directory(child, prefix + child.name + "/", writer, permissions, result, verbose)
        elif verbose:
            print(f"  [!] Skipping special file: {child}")


def _add_file(path, entry_name, writer, permissions, result, verbose):
    entry = FileBackedEntry.from_file(path, entry_name, permissions)
    if verbose:
        print(f"  [+] {entry.name} ({entry.size:,} bytes)")

    writer.put_next_entry(entry)
    with open(path, "rb") as origin:
        while True:
            data = origin.read(config.BUFFER_SIZE)
            if not data:
                break
            writer.write(data)
    writer.flush()

    result.files_added += 1
    result.content_bytes += entry.size


# =============================================================================
# Archive Creation
# =============================================================================

def create_tar(
    root: Union[str, os.PathLike],
    dest: Union[str, os.PathLike],
    permissions: int = config.DEFAULT_PERMISSIONS,
    verbose: bool = False,
) -> PackResult:
    """Write root into an uncompressed archive at dest."""
    if verbose:
        print(f"[*] Creating {dest} from {root}")
    with TarWriter.from_path(dest) as writer:
        result = archive_tree(root, writer, permissions, verbose)
    result.archive_bytes = writer.bytes_written
    return result


def create_tar_gz(
    root: Union[str, os.PathLike],
    dest: Union[str, os.PathLike],
    level: int = config.GZIP_LEVEL,
    permissions: int = config.DEFAULT_PERMISSIONS,
    verbose: bool = False,
) -> PackResult:
    """Write root into a gzip-compressed archive at dest."""
    if verbose:
        print(f"[*] Creating {dest} from {root} (gzip level {level})")
    with TarWriter(GzipSink(open(dest, "wb"), level)) as writer:
        result = archive_tree(root, writer, permissions, verbose)
    result.archive_bytes = writer.bytes_written
    return result
