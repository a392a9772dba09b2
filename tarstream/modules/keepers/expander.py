# expander.py
# Unpack (optionally gzipped) archives to a directory or hand each file's
# content to a callback.
#
# Thin orchestration over TarReader: gzip decoding happens in GzipSource
# and filesystem writes happen here, never in the codec.

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Tuple, Union

from tarstream import config
from tarstream.errors import UnsafeEntryPathError
from tarstream.modules.codec.tar_entry import TarEntry
from tarstream.modules.codec.tar_header import REGULAR_TYPES
from tarstream.modules.streams.sources import open_archive
from tarstream.modules.streams.tar_reader import SkipStrategy, TarReader


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class ExpandResult:
    """Result of expanding an archive to disk."""
    destination: str
    files_written: int = 0
    directories_created: int = 0
    entries_skipped: int = 0
    bytes_written: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "destination": self.destination,
            "files_written": self.files_written,
            "directories_created": self.directories_created,
            "entries_skipped": self.entries_skipped,
            "bytes_written": self.bytes_written,
        }


def safe_target(dest_root: Path, entry_name: str) -> Path:
    """Resolve entry_name under dest_root, refusing path traversal."""
    target = (dest_root / entry_name.lstrip("/")).resolve()
    if target != dest_root and dest_root not in target.parents:
        raise UnsafeEntryPathError(f"Unsafe tar member path detected: {entry_name!r}")
    return target


# =============================================================================
# Expander
# =============================================================================

class TarGzExpander:
    """
    Expands archives read through open_archive().

    Usage:
        TarGzExpander().expand_tar_gz_file("mods.tar.gz", "out/")
        TarGzExpander().handle_tar_gz_content("mods.tar.gz", on_file)
    """

    def __init__(
        self,
        buffer_size: int = config.BUFFER_SIZE,
        skip_strategy: SkipStrategy = SkipStrategy.READ_DISCARD,
        verify_checksums: bool = False,
        verbose: bool = False,
    ):
        self.buffer_size = buffer_size
        self.skip_strategy = skip_strategy
        self.verify_checksums = verify_checksums
        self.verbose = verbose

    def _open(self, source, gzip) -> TarReader:
        return open_archive(
            source,
            gzip=gzip,
            skip_strategy=self.skip_strategy,
            verify_checksums=self.verify_checksums,
        )

    # -------------------------------------------------------------------------
    # In-memory content
    # -------------------------------------------------------------------------

    def iter_tar_gz_content(self, source, gzip=True) -> Iterator[Tuple[TarEntry, bytes]]:
        """Yield (entry, content) for every non-directory entry."""
        with self._open(source, gzip) as reader:
            for entry in reader:
                if entry.is_directory:
                    continue
                yield entry, self._read_entry(reader)

    def handle_tar_gz_content(
        self,
        source,
        content_handler: Callable[[str, bytes], None],
        gzip=True,
    ):
        """Call content_handler(name, content) for every non-directory entry."""
        for entry, data in self.iter_tar_gz_content(source, gzip):
            content_handler(entry.name, data)

    def _read_entry(self, reader: TarReader) -> bytes:
        parts = []
        while True:
            data = reader.read(self.buffer_size)
            if not data:
                break
            parts.append(data)
        return b"".join(parts)

    # -------------------------------------------------------------------------
    # To disk
    # -------------------------------------------------------------------------

    def expand_tar_gz_file(self, source, dest_folder: Union[str, os.PathLike]) -> ExpandResult:
        """Expand a gzip-compressed archive into dest_folder."""
        return self._expand(source, dest_folder, gzip=True)

    def expand_tar_file(self, source, dest_folder: Union[str, os.PathLike]) -> ExpandResult:
        """Expand an uncompressed archive into dest_folder."""
        return self._expand(source, dest_folder, gzip=False)

    def expand(self, source, dest_folder: Union[str, os.PathLike]) -> ExpandResult:
        """Expand an archive, detecting gzip from the source."""
        return self._expand(source, dest_folder, gzip=None)

    def _expand(self, source, dest_folder, gzip) -> ExpandResult:
        dest_root = Path(dest_folder)
        dest_root.mkdir(parents=True, exist_ok=True)
        dest_root = dest_root.resolve()
        result = ExpandResult(destination=str(dest_root))

        if self.verbose:
            print(f"[*] Expanding into {dest_root}")

        with self._open(source, gzip) as reader:
            for entry in reader:
                self._untar_entry(reader, entry, dest_root, result)

        if self.verbose:
            print(f"[*] Done: {result.files_written} files, "
                  f"{result.directories_created} directories, "
                  f"{result.entries_skipped} skipped")
        return result

    def _untar_entry(self, reader: TarReader, entry: TarEntry, dest_root: Path, result: ExpandResult):
        target = safe_target(dest_root, entry.name)

        if entry.is_directory:
            target.mkdir(parents=True, exist_ok=True)
            result.directories_created += 1
            return

        if entry.link_flag not in REGULAR_TYPES:
            if self.verbose:
                print(f"  [!] Skipping {entry.name} (type {entry.link_flag!r})")
            result.entries_skipped += 1
            return

        target.parent.mkdir(parents=True, exist_ok=True)
        if self.verbose:
            print(f"  [+] {entry.name}")

        with open(target, "wb") as dest:
            while True:
                data = reader.read(self.buffer_size)
                if not data:
                    break
                dest.write(data)
                result.bytes_written += len(data)
        result.files_written += 1
