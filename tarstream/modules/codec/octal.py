# octal.py
# Fixed-width ASCII octal fields used by every numeric tar header field.
#
# Encoders write into a caller-owned bytearray and return the offset just
# past the field, so header serialization can chain them field by field.

from tarstream.errors import FieldOverflowError, MalformedHeaderError

_NUL = 0x00
_SPACE = 0x20
_ZERO = 0x30
_SEVEN = 0x37


def parse_octal(data: bytes, offset: int, length: int) -> int:
    """
    Parse an octal number from a fixed-width header field.

    Leading spaces and zeros are padding. Parsing stops at the first NUL,
    or at a space once digits have started. An all-padding field is 0.

    Args:
        data: Header buffer
        offset: Start of the field
        length: Width of the field in bytes

    Returns:
        The decoded integer

    Raises:
        MalformedHeaderError: on a byte that is not an octal digit
    """
    result = 0
    still_padding = True

    for i in range(offset, offset + length):
        byte = data[i]
        if byte == _NUL:
            break

        if byte == _SPACE or byte == _ZERO:
            if still_padding:
                continue
            if byte == _SPACE:
                break

        if byte < _ZERO or byte > _SEVEN:
            raise MalformedHeaderError(
                f"Invalid octal digit {bytes([byte])!r} at offset {i}"
            )

        still_padding = False
        result = (result << 3) + (byte - _ZERO)

    return result


def encode_octal(value: int, buf: bytearray, offset: int, length: int) -> int:
    """
    Write value as right-justified, zero-padded octal followed by space, NUL.

    Raises:
        FieldOverflowError: if value is negative or needs more than
            length - 2 digits
    """
    width = length - 2
    if value < 0:
        raise FieldOverflowError(f"Negative value {value} cannot be stored in an octal field")

    digits = format(value, "o")
    if len(digits) > width:
        raise FieldOverflowError(
            f"Value {value} needs {len(digits)} octal digits, field holds {width}"
        )

    buf[offset:offset + width] = digits.rjust(width, "0").encode("ascii")
    buf[offset + width] = _SPACE
    buf[offset + width + 1] = _NUL
    return offset + length


def encode_checksum_octal(value: int, buf: bytearray, offset: int, length: int) -> int:
    """Like encode_octal, but the field ends with NUL then space."""
    encode_octal(value, buf, offset, length)
    buf[offset + length - 2] = _NUL
    buf[offset + length - 1] = _SPACE
    return offset + length


def encode_long_octal(value: int, buf: bytearray, offset: int, length: int) -> int:
    """
    Write value with one more digit than encode_octal allows.

    The value is encoded into a scratch field one byte wider and the trailing
    NUL is dropped, leaving length - 1 digits and a space.
    """
    scratch = bytearray(length + 1)
    encode_octal(value, scratch, 0, length + 1)
    buf[offset:offset + length] = scratch[:length]
    return offset + length
