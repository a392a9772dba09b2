"""
tarstream: streaming USTAR archive reader and writer.
"""

from tarstream.errors import (
    TarStreamError,
    MalformedHeaderError,
    FieldOverflowError,
    TruncatedStreamError,
    EntrySizeError,
    ClosedStreamError,
    UnsafeEntryPathError,
    GzipFormatError,
    RemoteSourceError,
)
from tarstream.modules.codec import TarEntry, FileBackedEntry, TarHeader, build_header, parse_header
from tarstream.modules.streams import (
    TarReader,
    TarWriter,
    SkipStrategy,
    GzipSource,
    GzipSink,
    RemoteBlobSource,
    open_archive,
)
from tarstream.modules.keepers import (
    TarGzExpander,
    calculate_tar_size,
    archive_tree,
    create_tar,
    create_tar_gz,
)
from tarstream.modules.finders import peek_archive, find_entry

__version__ = "0.1.0"
