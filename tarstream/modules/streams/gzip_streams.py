# gzip_streams.py
# Incremental gzip filters placed in front of a TarReader or behind a
# TarWriter. Both wrap zlib directly so compressed data is processed one
# chunk at a time, never as a whole.

import os
import zlib
from typing import Union

from tarstream import config
from tarstream.errors import GzipFormatError

GZIP_MAGIC = b"\x1f\x8b"

# 16 + MAX_WBITS tells zlib to expect (or produce) gzip framing
_GZIP_WBITS = 16 + zlib.MAX_WBITS


def is_gzip_file(path: Union[str, os.PathLike]) -> bool:
    """Check a file's leading bytes for the gzip magic."""
    with open(path, "rb") as f:
        return f.read(2) == GZIP_MAGIC


# =============================================================================
# Incremental Gzip Decompressor
# =============================================================================

class GzipSource:
    """
    Readable stream of decompressed bytes pulled from a gzip source.

    Usage:
        reader = TarReader(GzipSource(open("archive.tar.gz", "rb")))

    Concatenated gzip members are decoded one after another. Bytes after the
    last member that do not start a new member (e.g. zero padding) are
    ignored.
    """

    def __init__(self, source, chunk_size: int = config.DEFAULT_CHUNK_SIZE):
        self._source = source
        self._chunk_size = chunk_size
        self._decompressor = zlib.decompressobj(_GZIP_WBITS)
        self._buffer = bytearray()
        self._pending = b""      # start of a possible next member, under 2 bytes
        self._first_chunk = True
        self._trailing = False
        self._eof = False
        self.bytes_read = 0
        self.bytes_decompressed = 0

    def _fill(self) -> bool:
        """Decompress one more chunk into the buffer. False at end of input."""
        if self._eof:
            return False

        compressed = self._source.read(self._chunk_size)
        if not compressed:
            self._eof = True
            if self._first_chunk:
                return False
            if not self._decompressor.eof:
                raise GzipFormatError("Compressed stream ended before the gzip trailer")
            return False

        if self._first_chunk:
            self._first_chunk = False
            if compressed[:2] != GZIP_MAGIC:
                raise GzipFormatError("Not a gzip file (missing magic bytes)")

        self.bytes_read += len(compressed)
        if not self._trailing:
            self._decompress(self._pending + compressed)
        return True

    def _decompress(self, data: bytes):
        self._pending = b""
        while data:
            if self._decompressor.eof:
                if len(data) < 2:
                    self._pending = data
                    return
                if data[:2] != GZIP_MAGIC:
                    # trailing data after the last gzip member is ignored
                    self._trailing = True
                    return
                self._decompressor = zlib.decompressobj(_GZIP_WBITS)

            try:
                decompressed = self._decompressor.decompress(data)
            except zlib.error as e:
                raise GzipFormatError(f"Decompression error: {e}") from e

            self._buffer += decompressed
            self.bytes_decompressed += len(decompressed)
            data = self._decompressor.unused_data if self._decompressor.eof else b""

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            while self._fill():
                pass
            data = bytes(self._buffer)
            self._buffer.clear()
            return data

        while len(self._buffer) < size and self._fill():
            pass
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def close(self):
        self._source.close()


# =============================================================================
# Incremental Gzip Compressor
# =============================================================================

class GzipSink:
    """Writable stream that gzip-compresses into an underlying sink."""

    def __init__(self, sink, level: int = config.GZIP_LEVEL):
        self._sink = sink
        self._compressor = zlib.compressobj(level, zlib.DEFLATED, _GZIP_WBITS)
        self._closed = False
        self.bytes_in = 0
        self.bytes_out = 0

    def write(self, data) -> int:
        compressed = self._compressor.compress(data)
        if compressed:
            self._sink.write(compressed)
            self.bytes_out += len(compressed)
        self.bytes_in += len(data)
        return len(data)

    def flush(self):
        self._sink.flush()

    def close(self):
        if self._closed:
            return
        self._closed = True
        try:
            tail = self._compressor.flush()
            self._sink.write(tail)
            self.bytes_out += len(tail)
            self._sink.flush()
        finally:
            self._sink.close()
