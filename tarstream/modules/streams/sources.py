# sources.py
# Turn a path, URL or open stream into a TarReader, with gzip in front
# when the input is compressed.

import os
from typing import Optional

from tarstream import config
from tarstream.modules.streams.downloaders import RemoteBlobSource, is_remote
from tarstream.modules.streams.gzip_streams import GZIP_MAGIC, GzipSource, is_gzip_file
from tarstream.modules.streams.tar_reader import SkipStrategy, TarReader

GZIP_SUFFIXES = (".gz", ".tgz")


def _looks_gzipped(source) -> bool:
    if is_remote(source):
        return source.split("?", 1)[0].endswith(GZIP_SUFFIXES)
    if isinstance(source, (str, os.PathLike)):
        return is_gzip_file(source)
    peek = getattr(source, "peek", None)
    if peek is not None:
        return peek(2)[:2] == GZIP_MAGIC
    return False


def _seekable(stream) -> bool:
    seekable = getattr(stream, "seekable", None)
    return seekable is not None and seekable()


def open_archive(
    source,
    gzip: Optional[bool] = None,
    skip_strategy: SkipStrategy = SkipStrategy.READ_DISCARD,
    verify_checksums: bool = False,
    chunk_size: int = config.DEFAULT_CHUNK_SIZE,
) -> TarReader:
    """
    Open an archive for reading.

    Args:
        source: Filesystem path, http(s) URL, or readable binary stream
            (the reader takes ownership of a stream)
        gzip: True/False to force, None to detect from magic bytes or suffix
        skip_strategy: Passed to TarReader; NATIVE falls back to
            READ_DISCARD when the stream cannot seek (gzip, HTTP)
        verify_checksums: Passed to TarReader
        chunk_size: Compressed bytes pulled per read

    Returns:
        TarReader positioned before the first entry
    """
    compressed = _looks_gzipped(source) if gzip is None else gzip

    if is_remote(source):
        stream = RemoteBlobSource(source, chunk_size=chunk_size)
    elif isinstance(source, (str, os.PathLike)):
        stream = open(source, "rb")
    else:
        stream = source

    try:
        if compressed:
            stream = GzipSource(stream, chunk_size=chunk_size)
        if skip_strategy is SkipStrategy.NATIVE and not _seekable(stream):
            skip_strategy = SkipStrategy.READ_DISCARD
        return TarReader(stream, skip_strategy=skip_strategy, verify_checksums=verify_checksums)
    except Exception:
        stream.close()
        raise
