"""Messages of the Modbus write functions."""

from __future__ import annotations

from omodscan.adu import FunctionCode
from omodscan.byteorder import ByteOrder, make_uint16
from omodscan.messages.message import ModbusMessage

COIL_OFF = 0x0000
COIL_ON = 0xFF00
MAX_READ_WRITE_READ_LENGTH = 0x7D
MAX_READ_WRITE_WRITE_LENGTH = 0x79
MIN_FILE_RECORD_LENGTH = 0x09
MAX_FILE_RECORD_LENGTH = 0xFB


class _WriteMessage(ModbusMessage):
    def _word(self, index: int) -> int:
        """Big-endian 16-bit value from the PDU data at ``index``."""
        return make_uint16(self._at(index + 1), self._at(index), ByteOrder.DIRECT)

    def _size_valid(self, size: int) -> bool:
        return super().is_valid() and self._data_size() == size

    def _counted_valid(self, count_index: int) -> bool:
        count = self._at(count_index)
        return super().is_valid() and count > 0 and count == len(self._payload(count_index + 1))


class WriteSingleCoilRequest(_WriteMessage):
    FUNCTION_CODE = FunctionCode.WRITE_SINGLE_COIL
    IS_REQUEST = True

    def is_valid(self) -> bool:
        return super().is_valid() and self.value() in (COIL_OFF, COIL_ON)

    def address(self) -> int:
        return self._word(0)

    def value(self) -> int:
        return self._word(2)


class WriteSingleCoilResponse(_WriteMessage):
    FUNCTION_CODE = FunctionCode.WRITE_SINGLE_COIL
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return super().is_valid() and self.value() in (COIL_OFF, COIL_ON)

    def address(self) -> int:
        return self._word(0)

    def value(self) -> int:
        return self._word(2)


class WriteSingleRegisterRequest(_WriteMessage):
    FUNCTION_CODE = FunctionCode.WRITE_SINGLE_REGISTER
    IS_REQUEST = True

    def is_valid(self) -> bool:
        return self._size_valid(4)

    def address(self) -> int:
        return self._word(0)

    def value(self) -> int:
        return self._word(2)


class WriteSingleRegisterResponse(_WriteMessage):
    FUNCTION_CODE = FunctionCode.WRITE_SINGLE_REGISTER
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return self._size_valid(4)

    def address(self) -> int:
        return self._word(0)

    def value(self) -> int:
        return self._word(2)


class WriteMultipleCoilsRequest(_WriteMessage):
    FUNCTION_CODE = FunctionCode.WRITE_MULTIPLE_COILS
    IS_REQUEST = True

    def is_valid(self) -> bool:
        return self._counted_valid(4)

    def start_address(self) -> int:
        return self._word(0)

    def quantity(self) -> int:
        return self._word(2)

    def byte_count(self) -> int:
        return self._at(4)

    def values(self) -> bytes:
        return self._payload(5)


class WriteMultipleCoilsResponse(_WriteMessage):
    FUNCTION_CODE = FunctionCode.WRITE_MULTIPLE_COILS
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return self._size_valid(4)

    def start_address(self) -> int:
        return self._word(0)

    def quantity(self) -> int:
        return self._word(2)


class WriteMultipleRegistersRequest(_WriteMessage):
    FUNCTION_CODE = FunctionCode.WRITE_MULTIPLE_REGISTERS
    IS_REQUEST = True

    def is_valid(self) -> bool:
        return self._counted_valid(4)

    def start_address(self) -> int:
        return self._word(0)

    def quantity(self) -> int:
        return self._word(2)

    def byte_count(self) -> int:
        return self._at(4)

    def values(self) -> bytes:
        return self._payload(5)


class WriteMultipleRegistersResponse(_WriteMessage):
    FUNCTION_CODE = FunctionCode.WRITE_MULTIPLE_REGISTERS
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return self._size_valid(4)

    def start_address(self) -> int:
        return self._word(0)

    def quantity(self) -> int:
        return self._word(2)


class ReadWriteMultipleRegistersRequest(_WriteMessage):
    FUNCTION_CODE = FunctionCode.READ_WRITE_MULTIPLE_REGISTERS
    IS_REQUEST = True

    def is_valid(self) -> bool:
        return (
            1 <= self.read_length() <= MAX_READ_WRITE_READ_LENGTH
            and 1 <= self.write_length() <= MAX_READ_WRITE_WRITE_LENGTH
            and self._counted_valid(8)
        )

    def read_start_address(self) -> int:
        return self._word(0)

    def read_length(self) -> int:
        return self._word(2)

    def write_start_address(self) -> int:
        return self._word(4)

    def write_length(self) -> int:
        return self._word(6)

    def write_byte_count(self) -> int:
        return self._at(8)

    def write_values(self) -> bytes:
        return self._payload(9)


class ReadWriteMultipleRegistersResponse(_WriteMessage):
    FUNCTION_CODE = FunctionCode.READ_WRITE_MULTIPLE_REGISTERS
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return self._counted_valid(0)

    def byte_count(self) -> int:
        return self._at(0)

    def values(self) -> bytes:
        return self._payload(1)


class WriteFileRecordRequest(_WriteMessage):
    FUNCTION_CODE = FunctionCode.WRITE_FILE_RECORD
    IS_REQUEST = True

    def is_valid(self) -> bool:
        return super().is_valid() and MIN_FILE_RECORD_LENGTH <= self.length() <= MAX_FILE_RECORD_LENGTH

    def length(self) -> int:
        return self._at(0)

    def data(self) -> bytes:
        return self._payload(1)


class WriteFileRecordResponse(_WriteMessage):
    FUNCTION_CODE = FunctionCode.WRITE_FILE_RECORD
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return super().is_valid() and MIN_FILE_RECORD_LENGTH <= self.length() <= MAX_FILE_RECORD_LENGTH

    def length(self) -> int:
        return self._at(0)

    def data(self) -> bytes:
        return self._payload(1)


class MaskWriteRegisterRequest(_WriteMessage):
    FUNCTION_CODE = FunctionCode.MASK_WRITE_REGISTER
    IS_REQUEST = True

    def is_valid(self) -> bool:
        return self._size_valid(6)

    def address(self) -> int:
        return self._word(0)

    def and_mask(self) -> int:
        return self._word(2)

    def or_mask(self) -> int:
        return self._word(4)


class MaskWriteRegisterResponse(_WriteMessage):
    FUNCTION_CODE = FunctionCode.MASK_WRITE_REGISTER
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return self._size_valid(6)

    def address(self) -> int:
        return self._word(0)

    def and_mask(self) -> int:
        return self._word(2)

    def or_mask(self) -> int:
        return self._word(4)