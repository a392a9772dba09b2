from .tar_reader import TarReader, SkipStrategy
from .tar_writer import TarWriter
from .gzip_streams import GzipSource, GzipSink, is_gzip_file
from .downloaders import RemoteBlobSource, is_remote
from .sources import open_archive
