"""
Exception classes raised by tarstream.
"""


class TarStreamError(Exception):
    """Base exception class for tarstream errors."""
    pass


class MalformedHeaderError(TarStreamError):
    """Raised when a header block cannot be decoded."""
    pass


class FieldOverflowError(TarStreamError, ValueError):
    """Raised when a value does not fit into its fixed-width octal field."""
    pass


class TruncatedStreamError(TarStreamError):
    """Raised when the source ends while an entry still owes bytes."""
    pass


class EntrySizeError(TarStreamError):
    """Raised when written content does not match the declared entry size."""
    pass


class ClosedStreamError(TarStreamError, ValueError):
    """Raised when a reader or writer is used after close()."""
    pass


class UnsafeEntryPathError(TarStreamError):
    """Raised when an entry would be extracted outside its destination."""
    pass


class GzipFormatError(TarStreamError):
    """Raised when gzip input is missing its magic bytes or is corrupt."""
    pass


class RemoteSourceError(TarStreamError):
    """Raised when a remote archive cannot be fetched."""
    pass
