"""Conversions between 16-bit registers and 8-bit character data."""

from __future__ import annotations

import codecs
import locale

from omodscan.byteorder import ByteOrder, break_uint16, make_uint16


def uint16_to_ansi(value: int, order: ByteOrder = ByteOrder.DIRECT) -> bytes:
    """Return the two characters held by a register, high byte first."""
    lo, hi = break_uint16(value, order)
    return bytes((hi, lo))


def uint16_from_ansi(data: bytes, order: ByteOrder = ByteOrder.DIRECT) -> int:
    """Build a register from two characters; anything but two bytes gives 0."""
    if len(data) != 2:
        return 0
    return make_uint16(data[1], data[0], order)


def printable_ansi(data: bytes, codepage: str, sep: str | None = None) -> str:
    """Decode bytes with ``codepage``, showing control bytes as ``?``.

    A printable ``sep`` is placed after every byte. An unknown codepage falls
    back to the locale's encoding.
    """
    separator = b""
    if sep and len(sep) == 1 and sep.isprintable():
        separator = sep.encode("latin-1", errors="replace")

    result = bytearray()
    for byte in data:
        result.append(byte if byte >= 32 else ord("?"))
        result += separator

    try:
        encoding = codecs.lookup(codepage).name
    except LookupError:
        encoding = locale.getpreferredencoding(False)
    return bytes(result).decode(encoding, errors="replace")