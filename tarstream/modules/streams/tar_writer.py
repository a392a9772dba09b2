# tar_writer.py
# Sequential tar encoder over any writable byte stream.
#
# Callers must know each entry's size up front: writing past it, or moving
# on before it is complete, is an error rather than something the writer
# papers over with padding or truncation.

import os
from typing import Optional, Union

from tarstream.errors import ClosedStreamError, EntrySizeError
from tarstream.modules.codec.tar_entry import TarEntry
from tarstream.modules.codec.tar_header import DATA_BLOCK, EOF_BLOCK


class TarWriter:
    """
    Writes entries and their content to a tar stream.

    Usage:
        with TarWriter(open("archive.tar", "wb")) as writer:
            writer.put_next_entry(TarEntry.create("hello.txt", 5, mtime))
            writer.write(b"hello")

    The writer owns the sink and closes it on close().
    """

    def __init__(self, sink):
        self._sink = sink
        self._bytes_written = 0
        self._current_entry: Optional[TarEntry] = None
        self._entry_bytes_written = 0
        self._closed = False

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike]) -> "TarWriter":
        """Create (or truncate) an uncompressed archive on disk."""
        return cls(open(path, "wb"))

    @property
    def bytes_written(self) -> int:
        """Total bytes emitted, headers and padding included."""
        return self._bytes_written

    @property
    def current_entry(self) -> Optional[TarEntry]:
        return self._current_entry

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self):
        if self._closed:
            raise ClosedStreamError("I/O operation on closed tar writer")

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    def put_next_entry(self, entry: TarEntry):
        """
        Finish the current entry and write the header of the next one.

        Raises:
            EntrySizeError: if the current entry has not been fully written
        """
        self._check_open()
        self._close_current_entry()

        self._emit(entry.write_header_bytes())
        self._current_entry = entry
        self._entry_bytes_written = 0

    def _close_current_entry(self):
        if self._current_entry is None:
            return

        if self._current_entry.size > self._entry_bytes_written:
            raise EntrySizeError(
                f"The current entry[{self._current_entry.name}] of size"
                f"[{self._current_entry.size}] has not been fully written "
                f"({self._entry_bytes_written} bytes)."
            )

        self._current_entry = None
        self._entry_bytes_written = 0
        self._pad()

    def _pad(self):
        """Pad the last content block with zeros."""
        extra = self._bytes_written % DATA_BLOCK
        if extra > 0:
            self._emit(bytes(DATA_BLOCK - extra))

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def write(self, data) -> int:
        """
        Write content for the current entry.

        Raises:
            EntrySizeError: if no entry is open, or data would run past the
                declared size; nothing is written in that case
        """
        self._check_open()
        length = len(data)
        if self._current_entry is None:
            if length:
                raise EntrySizeError("No entry is open; call put_next_entry() first")
            return 0

        if self._entry_bytes_written + length > self._current_entry.size:
            raise EntrySizeError(
                f"The current entry[{self._current_entry.name}] size"
                f"[{self._current_entry.size}] is smaller than the bytes"
                f"[{self._entry_bytes_written + length}] being written."
            )

        self._emit(data)
        self._entry_bytes_written += length
        return length

    def _emit(self, data):
        self._sink.write(data)
        self._bytes_written += len(data)

    def flush(self):
        self._check_open()
        self._sink.flush()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self):
        """
        Finish the current entry, append the end-of-archive marker and close
        the sink. The sink is closed even if the current entry is incomplete.
        """
        if self._closed:
            return
        self._closed = True
        try:
            self._close_current_entry()
            self._emit(bytes(EOF_BLOCK))
            self._sink.flush()
        finally:
            self._sink.close()

    def __enter__(self) -> "TarWriter":
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
            return
        # The archive is unusable anyway; release the sink without
        # finalizing so the caller sees the exception that got us here.
        if not self._closed:
            self._closed = True
            self._sink.close()
