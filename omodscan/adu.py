"""Modbus PDUs and the RTU/TCP application data units that carry them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum

from omodscan.byteorder import ByteOrder, break_uint16, make_uint16

EXCEPTION_BYTE = 0x80


class FunctionCode(IntEnum):
    """Modbus function codes."""

    INVALID = 0x00
    READ_COILS = 0x01
    READ_DISCRETE_INPUTS = 0x02
    READ_HOLDING_REGISTERS = 0x03
    READ_INPUT_REGISTERS = 0x04
    WRITE_SINGLE_COIL = 0x05
    WRITE_SINGLE_REGISTER = 0x06
    READ_EXCEPTION_STATUS = 0x07
    DIAGNOSTICS = 0x08
    GET_COMM_EVENT_COUNTER = 0x0B
    GET_COMM_EVENT_LOG = 0x0C
    WRITE_MULTIPLE_COILS = 0x0F
    WRITE_MULTIPLE_REGISTERS = 0x10
    REPORT_SERVER_ID = 0x11
    READ_FILE_RECORD = 0x14
    WRITE_FILE_RECORD = 0x15
    MASK_WRITE_REGISTER = 0x16
    READ_WRITE_MULTIPLE_REGISTERS = 0x17
    READ_FIFO_QUEUE = 0x18
    ENCAPSULATED_INTERFACE_TRANSPORT = 0x2B
    UNDEFINED_FUNCTION_CODE = 0x100


class ExceptionCode(IntEnum):
    """Modbus exception codes."""

    ILLEGAL_FUNCTION = 0x01
    ILLEGAL_DATA_ADDRESS = 0x02
    ILLEGAL_DATA_VALUE = 0x03
    SERVER_DEVICE_FAILURE = 0x04
    ACKNOWLEDGE = 0x05
    SERVER_DEVICE_BUSY = 0x06
    NEGATIVE_ACKNOWLEDGE = 0x07
    MEMORY_PARITY_ERROR = 0x08
    GATEWAY_PATH_UNAVAILABLE = 0x0A
    GATEWAY_TARGET_DEVICE_FAILED_TO_RESPOND = 0x0B
    EXTENDED_EXCEPTION = 0xFF


def _as_function_code(value: int) -> int:
    try:
        return FunctionCode(value)
    except ValueError:
        return value


@dataclass
class Pdu:
    """Protocol data unit: a raw function code (exception bit included) and its data."""

    code: int = FunctionCode.INVALID
    data: bytes = b""

    @property
    def function_code(self) -> int:
        """Function code with the exception bit removed."""
        return _as_function_code((self.code & 0xFF) & ~EXCEPTION_BYTE)

    def is_valid(self) -> bool:
        return (
            FunctionCode.READ_COILS <= self.code < FunctionCode.UNDEFINED_FUNCTION_CODE
            and len(self.data) < 253
        )

    def is_exception(self) -> bool:
        return bool(self.code & EXCEPTION_BYTE)

    def exception_code(self) -> int:
        if not self.data or not self.is_exception():
            return ExceptionCode.EXTENDED_EXCEPTION
        try:
            return ExceptionCode(self.data[0])
        except ValueError:
            return self.data[0]

    def size(self) -> int:
        return self.data_size() + 1

    def data_size(self) -> int:
        return len(self.data)


def calculate_crc(data: bytes) -> int:
    """Modbus RTU CRC with its bytes swapped, ready to be written big-endian."""
    crc = 0xFFFF
    for byte in data:
        for bit_index in range(8):
            bit = bool(crc & 0x8000)
            if byte & (1 << bit_index):
                bit = not bit
            crc = (crc << 1) & 0xFFFF
            if bit:
                crc ^= 0x8005
    reflected = int(f"{crc:016b}"[::-1], 2)
    return ((reflected >> 8) | (reflected << 8)) & 0xFFFF


class ModbusAdu(ABC):
    """Raw frame bytes together with the PDU decoded from them."""

    def __init__(self, data: bytes = b"") -> None:
        self._data = bytearray()
        self._pdu = Pdu()
        self.set_raw_data(data)

    def _byte(self, index: int) -> int:
        if 0 <= index < len(self._data):
            return self._data[index]
        return 0

    @abstractmethod
    def is_valid(self) -> bool:
        """Whether the frame is well formed."""

    @abstractmethod
    def set_raw_data(self, data: bytes) -> None:
        """Replace the frame bytes and decode the PDU from them."""

    @abstractmethod
    def server_address(self) -> int:
        """Unit identifier carried by the frame."""

    def raw_data(self) -> bytes:
        return bytes(self._data)

    def function_code(self) -> int:
        return self._pdu.function_code

    def exception_code(self) -> int:
        return self._pdu.exception_code()

    def is_exception(self) -> bool:
        return self._pdu.is_exception()

    def pdu(self) -> Pdu:
        return self._pdu


class RtuAdu(ModbusAdu):
    """Serial RTU frame: address, PDU and a trailing CRC."""

    def is_valid(self) -> bool:
        return self.matching_checksum() and self._pdu.is_valid()

    def set_raw_data(self, data: bytes) -> None:
        self._data = bytearray(data)
        end = max(2, len(self._data) - 2)
        self._pdu = Pdu(self._byte(1), bytes(self._data[2:end]))

    def server_address(self) -> int:
        return self._byte(0)

    def checksum(self) -> int:
        size = len(self._data)
        return make_uint16(self._byte(size - 1), self._byte(size - 2), ByteOrder.DIRECT)

    def calc_checksum(self) -> int:
        return calculate_crc(bytes(self._data[: max(0, len(self._data) - 2)]))

    def matching_checksum(self) -> bool:
        return self.checksum() == self.calc_checksum()


class TcpAdu(ModbusAdu):
    """Modbus TCP frame: MBAP header followed by the PDU."""

    def is_valid(self) -> bool:
        return self._pdu.is_valid() and self.length() == self._pdu.size() + 1

    def set_raw_data(self, data: bytes) -> None:
        self._data = bytearray(data)
        self._pdu = Pdu(self._byte(7), bytes(self._data[8:]))

    def transaction_id(self) -> int:
        return make_uint16(self._byte(1), self._byte(0), ByteOrder.DIRECT)

    def set_transaction_id(self, value: int) -> None:
        lo, hi = break_uint16(value, ByteOrder.DIRECT)
        if len(self._data) < 2:
            self._data.extend(bytes(2 - len(self._data)))
        self._data[0] = hi
        self._data[1] = lo

    def protocol_id(self) -> int:
        return make_uint16(self._byte(3), self._byte(2), ByteOrder.DIRECT)

    def length(self) -> int:
        return make_uint16(self._byte(5), self._byte(4), ByteOrder.DIRECT)

    def server_address(self) -> int:
        return self._byte(6)