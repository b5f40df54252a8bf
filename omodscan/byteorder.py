"""Byte-order aware helpers for combining and splitting Modbus register words."""

from __future__ import annotations

import struct
from enum import IntEnum


class ByteOrder(IntEnum):
    """Order of the two bytes inside a 16-bit register."""

    DIRECT = 0
    SWAPPED = 1


def _swap_bytes(value: int, size: int) -> int:
    return int.from_bytes(value.to_bytes(size, "little"), "big")


def to_byte_order_value(value: int, order: ByteOrder, size: int = 2) -> int:
    """Convert an integer of ``size`` bytes to the wire order.

    ``DIRECT`` stores the value big-endian (bytes reversed on a little-endian
    host), ``SWAPPED`` stores it little-endian (unchanged). A negative input is
    treated as two's complement and the result is returned signed.
    """
    bits = size * 8
    mask = (1 << bits) - 1
    unsigned = value & mask
    if order == ByteOrder.DIRECT:
        unsigned = _swap_bytes(unsigned, size)
    if value < 0 and unsigned >= 1 << (bits - 1):
        return unsigned - (1 << bits)
    return unsigned


def make_uint16(lo: int, hi: int, order: ByteOrder) -> int:
    """Combine two bytes into a 16-bit value."""
    lo &= 0xFF
    hi &= 0xFF
    if order == ByteOrder.SWAPPED:
        return (lo << 8) | hi
    return (hi << 8) | lo


def break_uint16(value: int, order: ByteOrder) -> tuple[int, int]:
    """Split a 16-bit value into ``(lo, hi)`` bytes; inverse of :func:`make_uint16`."""
    value &= 0xFFFF
    if order == ByteOrder.SWAPPED:
        return value >> 8, value & 0xFF
    return value & 0xFF, value >> 8


def _word(value: int, order: ByteOrder) -> int:
    value &= 0xFFFF
    if order == ByteOrder.SWAPPED:
        return _swap_bytes(value, 2)
    return value


def _combine(words: tuple[int, ...], order: ByteOrder) -> int:
    result = 0
    for shift, word in enumerate(words):
        result |= _word(word, order) << (16 * shift)
    return result


def make_uint32(value1: int, value2: int, order: ByteOrder) -> int:
    """Combine two registers (``value1`` is the low word) into an unsigned 32-bit value."""
    return _combine((value1, value2), order)


def make_int32(value1: int, value2: int, order: ByteOrder) -> int:
    """Combine two registers into a signed 32-bit value."""
    value = make_uint32(value1, value2, order)
    return value - (1 << 32) if value & 0x80000000 else value


def make_float(value1: int, value2: int, order: ByteOrder) -> float:
    """Combine two registers into an IEEE-754 single precision value."""
    raw = make_uint32(value1, value2, order).to_bytes(4, "little")
    return struct.unpack("<f", raw)[0]


def make_uint64(value1: int, value2: int, value3: int, value4: int, order: ByteOrder) -> int:
    """Combine four registers (``value1`` is the lowest word) into an unsigned 64-bit value."""
    return _combine((value1, value2, value3, value4), order)


def make_int64(value1: int, value2: int, value3: int, value4: int, order: ByteOrder) -> int:
    """Combine four registers into a signed 64-bit value."""
    value = make_uint64(value1, value2, value3, value4, order)
    return value - (1 << 64) if value & (1 << 63) else value


def make_double(value1: int, value2: int, value3: int, value4: int, order: ByteOrder) -> float:
    """Combine four registers into an IEEE-754 double precision value."""
    raw = make_uint64(value1, value2, value3, value4, order).to_bytes(8, "little")
    return struct.unpack("<d", raw)[0]