# peekers.py
# List archive contents or locate a single member without extracting.

from dataclasses import dataclass, field
from typing import List, Optional

from tarstream.errors import TarStreamError
from tarstream.modules.codec.tar_entry import TarEntry
from tarstream.modules.streams.sources import open_archive
from tarstream.modules.streams.gzip_streams import GzipSource
from tarstream.modules.streams.tar_reader import SkipStrategy


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class PeekResult:
    """Result of listing an archive."""
    source: str
    entries: List[TarEntry] = field(default_factory=list)
    bytes_read: int = 0           # tar bytes consumed
    bytes_decompressed: int = 0   # 0 for uncompressed input
    error: Optional[str] = None

    @property
    def entries_found(self) -> int:
        return len(self.entries)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "source": self.source,
            "entries_found": self.entries_found,
            "bytes_read": self.bytes_read,
            "bytes_decompressed": self.bytes_decompressed,
            "entries": [
                {
                    "name": e.name,
                    "size": e.size,
                    "mode": e.mode,
                    "uid": e.user_id,
                    "gid": e.group_id,
                    "mtime": e.mod_time,
                    "typeflag": e.link_flag,
                    "linkname": e.link_name,
                    "is_dir": e.is_directory,
                }
                for e in self.entries
            ],
            "error": self.error,
        }


@dataclass
class ScanResult:
    """Result of scanning for a target member."""
    found: bool
    entry: Optional[TarEntry] = None
    content_offset: int = 0   # offset in the tar stream where content starts
    content: bytes = b""
    entries_scanned: int = 0


def _normalize_path(path: str) -> str:
    """Normalize path for comparison (remove leading ./ or /)."""
    path = path.strip()
    if path.startswith("./"):
        path = path[2:]
    return path.lstrip("/")


# =============================================================================
# Peek
# =============================================================================

def peek_archive(
    source,
    gzip: Optional[bool] = None,
    skip_strategy: SkipStrategy = SkipStrategy.READ_DISCARD,
    verify_checksums: bool = False,
    verbose: bool = False,
) -> PeekResult:
    """
    Enumerate every entry header in an archive.

    Content is skipped, not buffered. Errors raised by the codec are caught
    and reported on the result together with the entries found so far.
    """
    result = PeekResult(source=str(source))

    reader = open_archive(
        source,
        gzip=gzip,
        skip_strategy=skip_strategy,
        verify_checksums=verify_checksums,
    )
    with reader:
        try:
            for entry in reader:
                result.entries.append(entry)
                if verbose:
                    print(f"  [+] {entry.name}")
        except TarStreamError as e:
            result.error = str(e)
        result.bytes_read = reader.current_offset
        stream = reader.source
        if isinstance(stream, GzipSource):
            result.bytes_decompressed = stream.bytes_decompressed

    if verbose:
        state = "partial" if result.error else "complete"
        print(f"[*] Files found: {result.entries_found} ({state})")
    return result


def find_entry(
    source,
    target_path: str,
    gzip: Optional[bool] = None,
    verbose: bool = False,
) -> ScanResult:
    """
    Stream through an archive until target_path is found and read its content.

    Stops reading as soon as the member's content has been consumed.
    """
    target = _normalize_path(target_path)
    scanned = 0

    with open_archive(source, gzip=gzip) as reader:
        for entry in reader:
            scanned += 1
            if _normalize_path(entry.name) != target:
                continue

            content_offset = reader.current_offset
            content = reader.read()
            if verbose:
                print(f"  FOUND: {entry.name} ({entry.size:,} bytes) "
                      f"at entry #{scanned}, offset {content_offset:,}")
            return ScanResult(
                found=True,
                entry=entry,
                content_offset=content_offset,
                content=content,
                entries_scanned=scanned,
            )

    if verbose:
        print(f"File not found: {target_path} (scanned {scanned} entries)")
    return ScanResult(found=False, entries_scanned=scanned)
