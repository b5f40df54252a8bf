"""Text formatting of register values, byte arrays and point addresses."""

from __future__ import annotations

import locale
from enum import IntEnum
from typing import Union

from omodscan.ansi import printable_ansi, uint16_to_ansi
from omodscan.byteorder import (
    ByteOrder,
    make_double,
    make_float,
    make_int32,
    make_int64,
    make_uint16,
    make_uint32,
    make_uint64,
    to_byte_order_value,
)

Number = Union[int, float]
Formatted = tuple[str, Union[Number, None]]


class DataDisplayMode(IntEnum):
    """How register contents are shown."""

    BINARY = 0
    UINT16 = 1
    INT16 = 2
    HEX = 3
    ANSI = 4
    FLOAT = 5
    DOUBLE = 6
    INT32 = 7
    UINT32 = 8
    INT64 = 9
    UINT64 = 10


class RegisterType(IntEnum):
    """Modbus data tables."""

    INVALID = 0
    DISCRETE_INPUTS = 1
    COILS = 2
    INPUT_REGISTERS = 3
    HOLDING_REGISTERS = 4


_DECIMAL_MODES = (DataDisplayMode.UINT16, DataDisplayMode.INT16)
_BIT_TYPES = (RegisterType.COILS, RegisterType.DISCRETE_INPUTS)
_REGISTER_TYPES = (RegisterType.HOLDING_REGISTERS, RegisterType.INPUT_REGISTERS)
_ADDRESS_PREFIX = {
    RegisterType.COILS: "0",
    RegisterType.DISCRETE_INPUTS: "1",
    RegisterType.HOLDING_REGISTERS: "4",
    RegisterType.INPUT_REGISTERS: "3",
}


def _signed16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def _locale_number(value: float, precision: int) -> str:
    return locale.format_string(f"%.{precision}g", value, grouping=True)


def format_uint8_value(mode: DataDisplayMode, value: int) -> str:
    """Format a byte as three decimal digits or as ``0xHH``."""
    value &= 0xFF
    if mode in _DECIMAL_MODES:
        return f"{value:03d}"
    return f"0x{value:02X}"


def format_uint8_array(mode: DataDisplayMode, data: bytes) -> str:
    """Format bytes separated by spaces, decimal or bare hex."""
    if mode in _DECIMAL_MODES:
        return " ".join(f"{byte:03d}" for byte in data)
    return " ".join(f"{byte:02X}" for byte in data)


def format_uint16_array(mode: DataDisplayMode, data: bytes, order: ByteOrder) -> str:
    """Format byte pairs as 16-bit words separated by spaces."""
    words = []
    for index in range(0, len(data), 2):
        hi = data[index]
        lo = data[index + 1] if index + 1 < len(data) else 0
        words.append(format_uint16_value(mode, make_uint16(lo, hi, order)))
    return " ".join(words)


def format_uint16_value(mode: DataDisplayMode, value: int) -> str:
    """Format a word as five decimal digits or as ``0xHHHH``."""
    value &= 0xFFFF
    if mode in _DECIMAL_MODES:
        return f"{value:05d}"
    return f"0x{value:04X}"


def format_binary_value(point_type: RegisterType, value: int, order: ByteOrder) -> Formatted:
    """Return the text and the displayed value of a point shown in binary."""
    if point_type in _BIT_TYPES:
        return f"<{value}>", value
    if point_type in _REGISTER_TYPES:
        value = to_byte_order_value(value & 0xFFFF, order)
        return f"<{value:016b}>", value
    return "", value


def format_point_uint16(point_type: RegisterType, value: int, order: ByteOrder) -> Formatted:
    """Return the text and value of a point shown as an unsigned word."""
    if point_type in _BIT_TYPES:
        return f"<{value:01d}>", value
    if point_type in _REGISTER_TYPES:
        value = to_byte_order_value(value & 0xFFFF, order)
        return f"<{value:05d}>", value
    return "", value


def format_int16_value(point_type: RegisterType, value: int, order: ByteOrder) -> Formatted:
    """Return the text and value of a point shown as a signed word."""
    value = _signed16(value)
    if point_type in _BIT_TYPES:
        return f"<{value}>", value
    if point_type in _REGISTER_TYPES:
        value = _signed16(to_byte_order_value(value & 0xFFFF, order))
        return f"<{value:5d}>", value
    return "", value


def format_hex_value(point_type: RegisterType, value: int, order: ByteOrder) -> Formatted:
    """Return the text and value of a point shown in hexadecimal."""
    if point_type in _BIT_TYPES:
        return f"<{value}>", value
    if point_type in _REGISTER_TYPES:
        value = to_byte_order_value(value & 0xFFFF, order)
        return f"<0x{value:04X}>", value
    return "", value


def format_ansi_value(point_type: RegisterType, value: int, order: ByteOrder, codepage: str) -> Formatted:
    """Return the text and value of a point shown as two characters."""
    if point_type in _BIT_TYPES:
        return f"<{value}>", value
    if point_type in _REGISTER_TYPES:
        value = to_byte_order_value(value & 0xFFFF, order)
        return f"<{printable_ansi(uint16_to_ansi(value), codepage)}>", value
    return "", value


def format_float_value(
    point_type: RegisterType, value1: int, value2: int, order: ByteOrder, flag: bool
) -> Formatted:
    """Format two registers as a float; ``flag`` marks the second word of a pair."""
    if point_type in _BIT_TYPES:
        return f"<{value1}>", value1
    if point_type in _REGISTER_TYPES and not flag:
        value = make_float(value1, value2, order)
        return _locale_number(value, 6), value
    return "", None


def format_int32_value(
    point_type: RegisterType, value1: int, value2: int, order: ByteOrder, flag: bool
) -> Formatted:
    """Format two registers as a signed 32-bit integer."""
    if point_type in _BIT_TYPES:
        return f"<{value1}>", value1
    if point_type in _REGISTER_TYPES and not flag:
        value = make_int32(value1, value2, order)
        return f"<{value:10d}>", value
    return "", None


def format_uint32_value(
    point_type: RegisterType, value1: int, value2: int, order: ByteOrder, flag: bool
) -> Formatted:
    """Format two registers as an unsigned 32-bit integer."""
    if point_type in _BIT_TYPES:
        return f"<{value1}>", value1
    if point_type in _REGISTER_TYPES and not flag:
        value = make_uint32(value1, value2, order)
        return f"<{value:010d}>", value
    return "", None


def format_double_value(
    point_type: RegisterType,
    value1: int,
    value2: int,
    value3: int,
    value4: int,
    order: ByteOrder,
    flag: bool,
) -> Formatted:
    """Format four registers as a double."""
    if point_type in _BIT_TYPES:
        return f"<{value1}>", value1
    if point_type in _REGISTER_TYPES and not flag:
        value = make_double(value1, value2, value3, value4, order)
        return _locale_number(value, 16), value
    return "", None


def format_int64_value(
    point_type: RegisterType,
    value1: int,
    value2: int,
    value3: int,
    value4: int,
    order: ByteOrder,
    flag: bool,
) -> Formatted:
    """Format four registers as a signed 64-bit integer."""
    if point_type in _BIT_TYPES:
        return f"<{value1}>", value1
    if point_type in _REGISTER_TYPES and not flag:
        value = make_int64(value1, value2, value3, value4, order)
        return f"<{value:20d}>", value
    return "", None


def format_uint64_value(
    point_type: RegisterType,
    value1: int,
    value2: int,
    value3: int,
    value4: int,
    order: ByteOrder,
    flag: bool,
) -> Formatted:
    """Format four registers as an unsigned 64-bit integer."""
    if point_type in _BIT_TYPES:
        return f"<{value1}>", value1
    if point_type in _REGISTER_TYPES and not flag:
        value = make_uint64(value1, value2, value3, value4, order)
        return f"<{value:020d}>", value
    return "", None


def format_address(point_type: RegisterType, address: int, hex_format: bool) -> str:
    """Format a point address, either as ``0xHHHH`` or with its table prefix digit."""
    if hex_format:
        return f"0x{address:04X}"
    return _ADDRESS_PREFIX.get(point_type, "") + f"{address:04d}"