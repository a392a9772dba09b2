# tar_entry.py
# Archive entries: a header plus the behavior the streams need from it.
#
# TarEntry carries only a header (read side, or entries built by hand).
# FileBackedEntry also remembers the file its header was built from.

import os
from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

from tarstream import config
from tarstream.modules.codec.octal import (
    encode_checksum_octal,
    encode_long_octal,
    encode_octal,
)
from tarstream.modules.codec.tar_header import (
    CHKSUM_OFFSET,
    CHKSUMLEN,
    GIDLEN,
    HEADER_BLOCK,
    LF_DIR,
    MODELEN,
    MODTIMELEN,
    NAMELEN,
    SIZELEN,
    UIDLEN,
    USTAR_DEVLEN,
    USTAR_FILENAME_PREFIX,
    USTAR_GROUP_NAMELEN,
    USTAR_MAGICLEN,
    USTAR_USER_NAMELEN,
    TarHeader,
    build_header,
    encode_name,
    parse_header,
)


def compute_checksum(buf: bytes) -> int:
    """Unsigned sum of every byte in the block."""
    return sum(b & 0xFF for b in buf)


class TarEntry:
    """
    A single archive entry.

    Entries are immutable. Equality and hashing use the composed name only,
    so two entries describing the same path compare equal even if their
    sizes or timestamps differ.
    """

    __slots__ = ("_header",)

    def __init__(self, header: TarHeader):
        self._header = header

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_header_bytes(cls, data: bytes) -> "TarEntry":
        """Parse a raw 512-byte header block into an entry."""
        return cls(parse_header(data))

    @classmethod
    def create(
        cls,
        entry_name: str,
        size: int,
        mod_time: int,
        is_directory: bool = False,
        permissions: int = config.DEFAULT_PERMISSIONS,
    ) -> "TarEntry":
        """Build a header-only entry for content that is not on disk."""
        return cls(build_header(entry_name, size, mod_time, is_directory, permissions))

    # -------------------------------------------------------------------------
    # Header access
    # -------------------------------------------------------------------------

    @property
    def header(self) -> TarHeader:
        return self._header

    @property
    def name(self) -> str:
        """Entry name with the USTAR prefix joined back on."""
        name = self._header.name
        if self._header.name_prefix:
            name = f"{self._header.name_prefix}/{name}"
        return name

    @property
    def size(self) -> int:
        return self._header.size

    @property
    def mode(self) -> int:
        return self._header.mode

    @property
    def mod_time(self) -> int:
        return self._header.mod_time

    @property
    def user_id(self) -> int:
        return self._header.user_id

    @property
    def group_id(self) -> int:
        return self._header.group_id

    @property
    def user_name(self) -> str:
        return self._header.user_name

    @property
    def group_name(self) -> str:
        return self._header.group_name

    @property
    def link_flag(self) -> str:
        return self._header.link_flag

    @property
    def link_name(self) -> str:
        return self._header.link_name

    @property
    def is_directory(self) -> bool:
        if self._header.link_flag == LF_DIR:
            return True
        return self.name.endswith("/")

    def is_descendant(self, other: "TarEntry") -> bool:
        """Whether other lives under this entry's path."""
        return other.name.startswith(self.name)

    # -------------------------------------------------------------------------
    # Pre-write adjustments
    # -------------------------------------------------------------------------

    def _with_header(self, **changes) -> "TarEntry":
        return TarEntry(replace(self._header, **changes))

    def with_ids(self, user_id: int, group_id: int) -> "TarEntry":
        return self._with_header(user_id=user_id, group_id=group_id)

    def with_owner(self, user_name: str, group_name: str) -> "TarEntry":
        return self._with_header(user_name=user_name, group_name=group_name)

    def with_size(self, size: int) -> "TarEntry":
        return self._with_header(size=size)

    def with_mod_time(self, seconds: float) -> "TarEntry":
        return self._with_header(mod_time=int(seconds))

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def write_header_bytes(self) -> bytes:
        """
        Serialize the header into a 512-byte block.

        Fields are written in on-disk order with the checksum field blanked
        to spaces; the checksum is then computed over the whole block and
        patched in place.
        """
        header = self._header
        buf = bytearray(HEADER_BLOCK)
        offset = 0

        offset = encode_name(header.name, buf, offset, NAMELEN)
        offset = encode_octal(header.mode, buf, offset, MODELEN)
        offset = encode_octal(header.user_id, buf, offset, UIDLEN)
        offset = encode_octal(header.group_id, buf, offset, GIDLEN)
        offset = encode_long_octal(header.size, buf, offset, SIZELEN)
        offset = encode_long_octal(header.mod_time, buf, offset, MODTIMELEN)

        buf[offset:offset + CHKSUMLEN] = b" " * CHKSUMLEN
        offset += CHKSUMLEN

        buf[offset] = ord(header.link_flag)
        offset += 1

        offset = encode_name(header.link_name, buf, offset, NAMELEN)
        offset = encode_name(header.magic, buf, offset, USTAR_MAGICLEN)
        offset = encode_name(header.user_name, buf, offset, USTAR_USER_NAMELEN)
        offset = encode_name(header.group_name, buf, offset, USTAR_GROUP_NAMELEN)
        offset = encode_octal(header.dev_major, buf, offset, USTAR_DEVLEN)
        offset = encode_octal(header.dev_minor, buf, offset, USTAR_DEVLEN)
        offset = encode_name(header.name_prefix, buf, offset, USTAR_FILENAME_PREFIX)

        # remaining bytes of the block stay zero

        encode_checksum_octal(compute_checksum(buf), buf, CHKSUM_OFFSET, CHKSUMLEN)
        return bytes(buf)

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------

    def __eq__(self, other):
        if not isinstance(other, TarEntry):
            return NotImplemented
        return self.name == other.name

    def __hash__(self):
        return hash(self.name)

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r}, size={self.size})"


class FileBackedEntry(TarEntry):
    """An entry whose header was built from a file on disk."""

    __slots__ = ("_path",)

    def __init__(self, header: TarHeader, path: Union[str, os.PathLike]):
        super().__init__(header)
        self._path = Path(path)

    @classmethod
    def from_file(
        cls,
        path: Union[str, os.PathLike],
        entry_name: Optional[str] = None,
        permissions: int = config.DEFAULT_PERMISSIONS,
    ) -> "FileBackedEntry":
        """
        Build an entry from a file's size, mtime and directory-ness.

        Args:
            path: File or directory on disk
            entry_name: Name inside the archive (default: the base name)
            permissions: Mode bits to record, since the source's own bits
                are not carried over
        """
        path = Path(path)
        st = path.stat()
        is_dir = path.is_dir()
        header = build_header(
            entry_name if entry_name is not None else path.name,
            0 if is_dir else st.st_size,
            int(st.st_mtime),
            is_dir,
            permissions,
        )
        return cls(header, path)

    @property
    def path(self) -> Path:
        return self._path

    def _with_header(self, **changes) -> "FileBackedEntry":
        return FileBackedEntry(replace(self._header, **changes), self._path)
