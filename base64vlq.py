"""Decode and encode Base64 VLQ encoded sequences

Base64 VLQ is used in source maps.

VLQ values consist of 6 bits (matching the 64 characters of the Base64
alphabet), with the most significant bit a *continuation* flag. If the
flag is set, then the next character in the input is part of the same
integer value. Multiple VLQ character sequences so form one integer
value, in little-endian order.

The *first* VLQ value consists of a continuation flag, 4 bits for the
value, and the last bit the *sign* of the integer:

  +-----+-----+-----+-----+-----+-----+
  |  c  |  b3 |  b2 |  b1 |  b0 |  s  |
  +-----+-----+-----+-----+-----+-----+

while subsequent VLQ characters contain 5 bits of value:

  +-----+-----+-----+-----+-----+-----+
  |  c  |  b4 |  b3 |  b2 |  b1 |  b0 |
  +-----+-----+-----+-----+-----+-----+

Integers are limited to the signed 32-bit range [MIN_INT, MAX_INT]. The
magnitude of MIN_INT does not fit in 31 bits; it is encoded as a negative
zero ("B"), and a decoded negative zero is read back as MIN_INT.

"""

from typing import Iterable, Optional, Tuple

MIN_INT = -(1 << 31)
MAX_INT = (1 << 31) - 1

# "=" sits at position 64; it is never emitted but decodes as digit 64
_b64chars = b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/="
_b64table = [None] * 128
for i, b in enumerate(_b64chars):
    _b64table[b] = i
del i, b

_encode = _b64chars.decode().__getitem__
_shiftsize, _flag, _mask = 5, 1 << 5, (1 << 5) - 1
# largest magnitude a decoded group may carry (that of MIN_INT)
_limit = -MIN_INT


def _zigzag(value: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"Cannot encode non-integer value: {value!r}")
    if not MIN_INT <= value <= MAX_INT:
        raise ValueError(
            f"Value {value} outside the supported range [{MIN_INT}, {MAX_INT}]"
        )
    if value == MIN_INT:
        # 2**31 << 1 has no bits left inside 32 bits; only the sign remains
        return 1
    return (abs(value) << 1) | int(value < 0)


def base64vlq_encode_single(value: int) -> str:
    """Encode a single integer to a VLQ group

    Raises ValueError if the value is outside [MIN_INT, MAX_INT] and
    TypeError if it is not an integer.
    """
    v = _zigzag(value)
    digits = []
    add = digits.append
    shiftsize, flag, mask = _shiftsize, _flag, _mask
    while True:
        toencode, v = v & mask, v >> shiftsize
        add(_encode(toencode | (v and flag)))
        if not v:
            break
    return "".join(digits)


def base64vlq_encode(values: Iterable[int]) -> str:
    """Encode integers to a VLQ value"""
    return "".join(map(base64vlq_encode_single, values))


def base64vlq_decode(vlqval: str) -> Optional[Tuple[int, ...]]:
    """Decode Base64 VLQ value

    Returns None when the input contains a character outside the
    alphabet, ends in the middle of a group, or holds a group outside
    the signed 32-bit range.
    """
    results = []
    add = results.append
    shiftsize, flag, mask = _shiftsize, _flag, _mask
    table = _b64table
    shift = value = 0
    try:
        data = vlqval.encode("ascii")
    except UnicodeEncodeError:
        return None
    # use byte values and a table to go from base64 characters to integers
    for v in map(table.__getitem__, data):
        if v is None:
            return None
        value += (v & mask) << shift
        if value >> 1 > _limit:
            # the value only grows, stop before it gets any bigger
            return None
        if v & flag:
            shift += shiftsize
            continue
        # determine sign and add to results
        magnitude = value >> 1
        if not value & 1:
            decoded = magnitude
        elif magnitude:
            decoded = -magnitude
        else:
            decoded = MIN_INT
        if not MIN_INT <= decoded <= MAX_INT:
            return None
        add(decoded)
        shift = value = 0
    if shift:
        # trailing continuation flag
        return None
    return tuple(results)
