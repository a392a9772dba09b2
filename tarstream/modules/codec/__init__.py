from .octal import parse_octal, encode_octal, encode_checksum_octal, encode_long_octal
from .tar_header import TarHeader, build_header, parse_header
from .tar_entry import TarEntry, FileBackedEntry, compute_checksum
