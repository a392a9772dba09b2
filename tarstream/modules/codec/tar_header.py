# tar_header.py
# The fixed 512-byte USTAR header record.
#
# Builds headers from entry metadata on the write side and decodes raw
# 512-byte blocks on the read side. Serialization lives on TarEntry.

from dataclasses import dataclass, field

from tarstream.errors import MalformedHeaderError
from tarstream.modules.codec.octal import parse_octal


# =============================================================================
# Block Layout
# =============================================================================

HEADER_BLOCK = 512
DATA_BLOCK = 512
EOF_BLOCK = 1024  # two zero blocks

# Field widths, in on-disk order:
#   0-99     name
#   100-107  mode
#   108-115  uid
#   116-123  gid
#   124-135  size
#   136-147  mtime
#   148-155  checksum
#   156      link flag
#   157-256  link name
#   257-264  magic "ustar" (NUL padded, no separate version)
#   265-296  user name
#   297-328  group name
#   329-336  device major
#   337-344  device minor
#   345-499  name prefix
NAMELEN = 100
MODELEN = 8
UIDLEN = 8
GIDLEN = 8
SIZELEN = 12
MODTIMELEN = 12
CHKSUMLEN = 8
USTAR_MAGICLEN = 8
USTAR_USER_NAMELEN = 32
USTAR_GROUP_NAMELEN = 32
USTAR_DEVLEN = 8
USTAR_FILENAME_PREFIX = 155

CHKSUM_OFFSET = NAMELEN + MODELEN + UIDLEN + GIDLEN + SIZELEN + MODTIMELEN

USTAR_MAGIC = "ustar"


# =============================================================================
# File Types
# =============================================================================

LF_OLDNORM = "\x00"   # Normal file (obsolete form)
LF_NORMAL = "0"
LF_LINK = "1"
LF_SYMLINK = "2"
LF_CHR = "3"
LF_BLK = "4"
LF_DIR = "5"
LF_FIFO = "6"
LF_CONTIG = "7"

REGULAR_TYPES = (LF_OLDNORM, LF_NORMAL, LF_CONTIG)


@dataclass(frozen=True)
class TarHeader:
    """Decoded contents of one header block."""
    name: str = ""
    mode: int = 0
    user_id: int = 0
    group_id: int = 0
    size: int = 0
    mod_time: int = 0       # Unix seconds
    checksum: int = field(default=0, compare=False)  # derived from the block
    link_flag: str = LF_OLDNORM
    link_name: str = ""
    magic: str = USTAR_MAGIC
    user_name: str = ""
    group_name: str = ""
    dev_major: int = 0
    dev_minor: int = 0
    name_prefix: str = ""


# =============================================================================
# String Fields
# =============================================================================

def parse_name(data: bytes, offset: int, length: int) -> str:
    """
    Decode a NUL-padded string field.

    Every NUL in the field is dropped, not just the trailing run, so writers
    that pad inconsistently still decode to the intended name.
    """
    raw = bytes(data[offset:offset + length]).replace(b"\x00", b"")
    return raw.decode("utf-8", errors="replace")


def encode_name(value: str, buf: bytearray, offset: int, length: int) -> int:
    """Write a string field, truncated to length bytes and NUL padded."""
    encoded = value.encode("utf-8")[:length]
    buf[offset:offset + len(encoded)] = encoded
    buf[offset + len(encoded):offset + length] = bytes(length - len(encoded))
    return offset + length


# =============================================================================
# Build / Parse
# =============================================================================

def build_header(
    entry_name: str,
    size: int,
    mod_time: int,
    is_directory: bool,
    permissions: int,
) -> TarHeader:
    """
    Create a header for a file or directory entry.

    Names longer than NAMELEN bytes are split at the last '/' at or before
    byte NAMELEN: the part before goes to name_prefix, the rest to name. If
    there is no such '/', the name is kept whole and truncated when written.

    Args:
        entry_name: Path inside the archive
        size: Content length in bytes (ignored for directories)
        mod_time: Last modification time in Unix seconds
        is_directory: Whether the entry is a directory
        permissions: Mode bits, e.g. 0o644

    Returns:
        TarHeader ready to be wrapped in a TarEntry
    """
    # replace any non-standard file separators with forward slashes
    name = entry_name.replace("\\", "/").strip("/")
    prefix = ""

    encoded = name.encode("utf-8")
    if len(encoded) > NAMELEN:
        split = encoded.rfind(b"/", 0, NAMELEN + 1)
        if split != -1:
            prefix = encoded[:split].decode("utf-8")
            name = encoded[split + 1:].decode("utf-8")

    if is_directory:
        # Split happens before the slash is added: a 100-byte directory name
        # loses its trailing slash on write and relies on LF_DIR alone.
        if not name.endswith("/"):
            name += "/"
        link_flag = LF_DIR
        size = 0
    else:
        link_flag = LF_NORMAL

    return TarHeader(
        name=name,
        mode=permissions,
        size=size,
        mod_time=int(mod_time),
        link_flag=link_flag,
        name_prefix=prefix,
    )


def parse_header(data: bytes) -> TarHeader:
    """
    Decode a raw 512-byte header block.

    Raises:
        MalformedHeaderError: if the block has the wrong length or a numeric
            field holds non-octal bytes
    """
    if len(data) != HEADER_BLOCK:
        raise MalformedHeaderError(
            f"Header block must be {HEADER_BLOCK} bytes, got {len(data)}"
        )

    offset = 0

    name = parse_name(data, offset, NAMELEN)
    offset += NAMELEN

    mode = parse_octal(data, offset, MODELEN)
    offset += MODELEN

    user_id = parse_octal(data, offset, UIDLEN)
    offset += UIDLEN

    group_id = parse_octal(data, offset, GIDLEN)
    offset += GIDLEN

    size = parse_octal(data, offset, SIZELEN)
    offset += SIZELEN

    mod_time = parse_octal(data, offset, MODTIMELEN)
    offset += MODTIMELEN

    checksum = parse_octal(data, offset, CHKSUMLEN)
    offset += CHKSUMLEN

    link_flag = chr(data[offset])
    offset += 1

    link_name = parse_name(data, offset, NAMELEN)
    offset += NAMELEN

    magic = parse_name(data, offset, USTAR_MAGICLEN)
    offset += USTAR_MAGICLEN

    user_name = parse_name(data, offset, USTAR_USER_NAMELEN)
    offset += USTAR_USER_NAMELEN

    group_name = parse_name(data, offset, USTAR_GROUP_NAMELEN)
    offset += USTAR_GROUP_NAMELEN

    dev_major = parse_octal(data, offset, USTAR_DEVLEN)
    offset += USTAR_DEVLEN

    dev_minor = parse_octal(data, offset, USTAR_DEVLEN)
    offset += USTAR_DEVLEN

    name_prefix = parse_name(data, offset, USTAR_FILENAME_PREFIX)

    return TarHeader(
        name=name,
        mode=mode,
        user_id=user_id,
        group_id=group_id,
        size=size,
        mod_time=mod_time,
        checksum=checksum,
        link_flag=link_flag,
        link_name=link_name,
        magic=magic,
        user_name=user_name,
        group_name=group_name,
        dev_major=dev_major,
        dev_minor=dev_minor,
        name_prefix=name_prefix,
    )
