# tar_reader.py
# Sequential tar decoder over any readable byte stream.
#
# The reader keeps two counters: the absolute byte offset from the start of
# the stream, and how much of the current entry has been consumed. Every
# byte that moves through the reader moves through _read_source() so the
# offset stays exact.

import enum
import io
import os
from typing import Iterator, Optional, Union

from tarstream import config
from tarstream.errors import ClosedStreamError, MalformedHeaderError, TruncatedStreamError
from tarstream.modules.codec.tar_entry import TarEntry, compute_checksum
from tarstream.modules.codec.tar_header import CHKSUM_OFFSET, CHKSUMLEN, DATA_BLOCK, HEADER_BLOCK


class SkipStrategy(enum.Enum):
    """How the reader discards unread content and padding."""

    # Read into a scratch buffer and throw the bytes away. Works on any
    # stream and detects truncation.
    READ_DISCARD = "read-discard"

    # seek() forward on the source. Needs a seekable source; the offset is
    # advanced by the requested amount, so truncation goes unnoticed.
    NATIVE = "native"


_ZERO_BLOCK = bytes(HEADER_BLOCK)


class TarReader:
    """
    Reads entries and their content from a tar stream.

    Usage:
        with TarReader(open("archive.tar", "rb")) as reader:
            for entry in reader:
                data = reader.read()

    The reader owns the source and closes it on close().
    """

    def __init__(
        self,
        source,
        skip_strategy: SkipStrategy = SkipStrategy.READ_DISCARD,
        verify_checksums: bool = False,
    ):
        if skip_strategy is SkipStrategy.NATIVE:
            seekable = getattr(source, "seekable", None)
            if seekable is None or not seekable():
                raise ValueError("SkipStrategy.NATIVE requires a seekable source")

        self._source = source
        self._skip_strategy = skip_strategy
        self._verify_checksums = verify_checksums
        self._current_entry: Optional[TarEntry] = None
        self._entry_bytes_read = 0
        self._offset = 0
        self._closed = False

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike], **kwargs) -> "TarReader":
        """Open an uncompressed archive on disk."""
        return cls(open(path, "rb"), **kwargs)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def current_offset(self) -> int:
        """
        Bytes consumed from the start of the stream.

        Right after next_entry() returns, this is where the entry's content
        begins.
        """
        return self._offset

    @property
    def source(self):
        """The underlying byte stream."""
        return self._source

    @property
    def current_entry(self) -> Optional[TarEntry]:
        return self._current_entry

    @property
    def skip_strategy(self) -> SkipStrategy:
        return self._skip_strategy

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self):
        if self._closed:
            raise ClosedStreamError("I/O operation on closed tar reader")

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    def next_entry(self) -> Optional[TarEntry]:
        """
        Advance to the next entry.

        Any unread content of the current entry is skipped, along with its
        padding. Returns None when the next header block is all zeros or the
        stream ends on a block boundary.

        Raises:
            TruncatedStreamError: if the stream ends inside a header block or
                while skipping owed content
            MalformedHeaderError: if the header cannot be decoded
        """
        self._check_open()
        self._close_current_entry()

        header = bytearray()
        while len(header) < HEADER_BLOCK:
            chunk = self._read_source(HEADER_BLOCK - len(header))
            if not chunk:
                break
            header += chunk

        if not header:
            return None
        if len(header) < HEADER_BLOCK:
            raise TruncatedStreamError(
                f"Stream ended inside a header block ({len(header)} of {HEADER_BLOCK} bytes)"
            )

        # A single zero block ends the archive; the second one is not required.
        if header == _ZERO_BLOCK:
            return None

        entry = TarEntry.from_header_bytes(bytes(header))
        if self._verify_checksums:
            self._verify_checksum(header, entry)

        self._current_entry = entry
        self._entry_bytes_read = 0
        return entry

    def __iter__(self) -> Iterator[TarEntry]:
        while True:
            entry = self.next_entry()
            if entry is None:
                return
            yield entry

    @staticmethod
    def _verify_checksum(header: bytearray, entry: TarEntry):
        blanked = bytearray(header)
        blanked[CHKSUM_OFFSET:CHKSUM_OFFSET + CHKSUMLEN] = b" " * CHKSUMLEN
        expected = compute_checksum(blanked)
        if expected != entry.header.checksum:
            raise MalformedHeaderError(
                f"Checksum mismatch for {entry.name!r}: "
                f"stored {entry.header.checksum:o}, computed {expected:o}"
            )

    def _close_current_entry(self):
        if self._current_entry is None:
            return

        remaining = self._current_entry.size - self._entry_bytes_read
        if remaining > 0:
            # Not fully read, skip the rest of the content
            self._skip(remaining)

        self._current_entry = None
        self._entry_bytes_read = 0
        self._skip_pad()

    def _skip_pad(self):
        """Skip the padding after an entry's content."""
        extra = self._offset % DATA_BLOCK
        if extra > 0:
            self._skip(DATA_BLOCK - extra)

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def _remaining(self) -> int:
        if self._current_entry is None:
            return 0
        return self._current_entry.size - self._entry_bytes_read

    def read(self, size: int = -1) -> bytes:
        """
        Read content of the current entry.

        Returns b"" once the entry is exhausted or when no entry is open.
        With size < 0 the rest of the entry is returned.
        """
        self._check_open()
        remaining = self._remaining()
        if remaining <= 0 or size == 0:
            return b""

        if size < 0:
            parts = []
            while remaining > 0:
                parts.append(self.read(min(remaining, config.DEFAULT_CHUNK_SIZE)))
                remaining = self._remaining()
            return b"".join(parts)

        data = self._read_source(min(size, remaining))
        if not data:
            raise TruncatedStreamError(
                f"Stream ended with {remaining} bytes owed to {self._current_entry.name!r}"
            )
        self._entry_bytes_read += len(data)
        return data

    def readinto(self, buffer) -> int:
        """Read content of the current entry into a writable buffer."""
        view = memoryview(buffer).cast("B")
        data = self.read(len(view))
        view[:len(data)] = data
        return len(data)

    def _read_source(self, size: int) -> bytes:
        data = self._source.read(size)
        if data:
            self._offset += len(data)
        return data or b""

    def _skip(self, count: int):
        if count <= 0:
            return

        if self._skip_strategy is SkipStrategy.NATIVE:
            self._source.seek(count, io.SEEK_CUR)
            self._offset += count
            return

        left = count
        while left > 0:
            chunk = self._read_source(min(left, config.SKIP_BUFFER_SIZE))
            if not chunk:
                # I suspect file corruption
                raise TruncatedStreamError(
                    f"Possible tar file corruption: stream ended with {left} bytes left to skip"
                )
            left -= len(chunk)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._current_entry = None
        self._source.close()

    def __enter__(self) -> "TarReader":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
