"""Messages of the Modbus read functions."""

from __future__ import annotations

from omodscan.adu import FunctionCode
from omodscan.byteorder import ByteOrder, make_uint16
from omodscan.messages.message import ModbusMessage

MAX_READ_BITS = 0x7D0
MAX_READ_REGISTERS = 0x7D
MAX_FIFO_COUNT = 31
MIN_FILE_RECORD_BYTES = 0x07
MAX_FILE_RECORD_BYTES = 0xF5


class _ReadMessage(ModbusMessage):
    def _word(self, index: int) -> int:
        """Big-endian 16-bit value from the PDU data at ``index``."""
        return make_uint16(self._at(index + 1), self._at(index), ByteOrder.DIRECT)

    def _range_valid(self, length: int, maximum: int) -> bool:
        return super().is_valid() and 1 <= length <= maximum

    def _bits_valid(self) -> bool:
        count = self._at(0)
        size = len(self._payload(1))
        return super().is_valid() and count > 0 and (count == size or count == size - 1)

    def _registers_valid(self) -> bool:
        count = self._at(0)
        return super().is_valid() and count > 0 and count == len(self._payload(1))

    def _file_record_valid(self) -> bool:
        return super().is_valid() and MIN_FILE_RECORD_BYTES <= self._at(0) <= MAX_FILE_RECORD_BYTES


class ReadCoilsRequest(_ReadMessage):
    FUNCTION_CODE = FunctionCode.READ_COILS
    IS_REQUEST = True

    def is_valid(self) -> bool:
        return self._range_valid(self.length(), MAX_READ_BITS)

    def start_address(self) -> int:
        return self._word(0)

    def length(self) -> int:
        return self._word(2)


class ReadCoilsResponse(_ReadMessage):
    FUNCTION_CODE = FunctionCode.READ_COILS
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return self._bits_valid()

    def byte_count(self) -> int:
        return self._at(0)

    def coil_status(self) -> bytes:
        return self._payload(1)


class ReadDiscreteInputsRequest(_ReadMessage):
    FUNCTION_CODE = FunctionCode.READ_DISCRETE_INPUTS
    IS_REQUEST = True

    def is_valid(self) -> bool:
        return self._range_valid(self.length(), MAX_READ_BITS)

    def start_address(self) -> int:
        return self._word(0)

    def length(self) -> int:
        return self._word(2)


class ReadDiscreteInputsResponse(_ReadMessage):
    FUNCTION_CODE = FunctionCode.READ_DISCRETE_INPUTS
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return self._bits_valid()

    def byte_count(self) -> int:
        return self._at(0)

    def input_status(self) -> bytes:
        return self._payload(1)


class ReadHoldingRegistersRequest(_ReadMessage):
    FUNCTION_CODE = FunctionCode.READ_HOLDING_REGISTERS
    IS_REQUEST = True

    def is_valid(self) -> bool:
        return self._range_valid(self.length(), MAX_READ_REGISTERS)

    def start_address(self) -> int:
        return self._word(0)

    def length(self) -> int:
        return self._word(2)


class ReadHoldingRegistersResponse(_ReadMessage):
    FUNCTION_CODE = FunctionCode.READ_HOLDING_REGISTERS
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return self._registers_valid()

    def byte_count(self) -> int:
        return self._at(0)

    def register_value(self) -> bytes:
        return self._payload(1)


class ReadInputRegistersRequest(_ReadMessage):
    FUNCTION_CODE = FunctionCode.READ_INPUT_REGISTERS
    IS_REQUEST = True

    def is_valid(self) -> bool:
        return self._range_valid(self.length(), MAX_READ_REGISTERS)

    def start_address(self) -> int:
        return self._word(0)

    def length(self) -> int:
        return self._word(2)


class ReadInputRegistersResponse(_ReadMessage):
    FUNCTION_CODE = FunctionCode.READ_INPUT_REGISTERS
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return self._registers_valid()

    def byte_count(self) -> int:
        return self._at(0)

    def register_value(self) -> bytes:
        return self._payload(1)


class ReadExceptionStatusRequest(_ReadMessage):
    FUNCTION_CODE = FunctionCode.READ_EXCEPTION_STATUS
    IS_REQUEST = True


class ReadExceptionStatusResponse(_ReadMessage):
    FUNCTION_CODE = FunctionCode.READ_EXCEPTION_STATUS
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return super().is_valid() and self._data_size() == 1

    def output_data(self) -> int:
        return self._at(0)


class ReadFifoQueueRequest(_ReadMessage):
    FUNCTION_CODE = FunctionCode.READ_FIFO_QUEUE
    IS_REQUEST = True

    def is_valid(self) -> bool:
        return super().is_valid() and self._data_size() == 2

    def fifo_address(self) -> int:
        return self._word(0)


class ReadFifoQueueResponse(_ReadMessage):
    FUNCTION_CODE = FunctionCode.READ_FIFO_QUEUE
    IS_REQUEST = False

    def is_valid(self) -> bool:
        count = self.fifo_count()
        return super().is_valid() and count <= MAX_FIFO_COUNT and count == len(self.fifo_value())

    def byte_count(self) -> int:
        return self._word(0)

    def fifo_count(self) -> int:
        return self._word(2)

    def fifo_value(self) -> bytes:
        return self._payload(4)


class ReadFileRecordRequest(_ReadMessage):
    FUNCTION_CODE = FunctionCode.READ_FILE_RECORD
    IS_REQUEST = True

    def is_valid(self) -> bool:
        return self._file_record_valid()

    def byte_count(self) -> int:
        return self._at(0)

    def data(self) -> bytes:
        return self._payload(1)


class ReadFileRecordResponse(_ReadMessage):
    FUNCTION_CODE = FunctionCode.READ_FILE_RECORD
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return self._file_record_valid()

    def byte_count(self) -> int:
        return self._at(0)

    def data(self) -> bytes:
        return self._payload(1)