"""Messages of the Modbus diagnostic and serial-line information functions."""

from __future__ import annotations

from omodscan.adu import FunctionCode
from omodscan.byteorder import ByteOrder, make_uint16
from omodscan.messages.message import ModbusMessage


class _DiagnosticMessage(ModbusMessage):
    def _word(self, index: int) -> int:
        """Big-endian 16-bit value from the PDU data at ``index``."""
        return make_uint16(self._at(index + 1), self._at(index), ByteOrder.DIRECT)


class DiagnosticsRequest(_DiagnosticMessage):
    FUNCTION_CODE = FunctionCode.DIAGNOSTICS
    IS_REQUEST = True

    def is_valid(self) -> bool:
        return super().is_valid() and self._data_size() > 2

    def subfunc(self) -> int:
        return self._word(0)

    def data(self) -> bytes:
        return self._payload(2)


class DiagnosticsResponse(_DiagnosticMessage):
    FUNCTION_CODE = FunctionCode.DIAGNOSTICS
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return super().is_valid() and self._data_size() > 2

    def subfunc(self) -> int:
        return self._word(0)

    def data(self) -> bytes:
        return self._payload(2)


class GetCommEventCounterRequest(_DiagnosticMessage):
    FUNCTION_CODE = FunctionCode.GET_COMM_EVENT_COUNTER
    IS_REQUEST = True


class GetCommEventCounterResponse(_DiagnosticMessage):
    FUNCTION_CODE = FunctionCode.GET_COMM_EVENT_COUNTER
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return super().is_valid() and self._data_size() == 4

    def status(self) -> int:
        return self._word(0)

    def event_count(self) -> int:
        return self._word(2)


class GetCommEventLogRequest(_DiagnosticMessage):
    FUNCTION_CODE = FunctionCode.GET_COMM_EVENT_LOG
    IS_REQUEST = True


class GetCommEventLogResponse(_DiagnosticMessage):
    FUNCTION_CODE = FunctionCode.GET_COMM_EVENT_LOG
    IS_REQUEST = False

    def is_valid(self) -> bool:
        count = self.byte_count()
        return super().is_valid() and count > 0 and count == len(self.events()) - 6

    def byte_count(self) -> int:
        return self._at(0)

    def status(self) -> int:
        return self._word(1)

    def event_count(self) -> int:
        return self._word(3)

    def message_count(self) -> int:
        return self._word(5)

    def events(self) -> bytes:
        return self._payload(7)


class ReportServerIdRequest(_DiagnosticMessage):
    FUNCTION_CODE = FunctionCode.REPORT_SERVER_ID
    IS_REQUEST = True


class ReportServerIdResponse(_DiagnosticMessage):
    FUNCTION_CODE = FunctionCode.REPORT_SERVER_ID
    IS_REQUEST = False

    def is_valid(self) -> bool:
        return super().is_valid() and self._data_size() > 1

    def byte_count(self) -> int:
        return self._at(0)

    def data(self) -> bytes:
        return self._payload(1)