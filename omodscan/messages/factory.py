"""Creation of the message class that matches a frame's function code."""

from __future__ import annotations

from datetime import datetime

from omodscan.adu import FunctionCode, ModbusAdu, Pdu, RtuAdu, TcpAdu
from omodscan.messages.diagnostics import (
    DiagnosticsRequest,
    DiagnosticsResponse,
    GetCommEventCounterRequest,
    GetCommEventCounterResponse,
    GetCommEventLogRequest,
    GetCommEventLogResponse,
    ReportServerIdRequest,
    ReportServerIdResponse,
)
from omodscan.messages.message import ModbusMessage, ProtocolType
from omodscan.messages.read import (
    ReadCoilsRequest,
    ReadCoilsResponse,
    ReadDiscreteInputsRequest,
    ReadDiscreteInputsResponse,
    ReadExceptionStatusRequest,
    ReadExceptionStatusResponse,
    ReadFifoQueueRequest,
    ReadFifoQueueResponse,
    ReadFileRecordRequest,
    ReadFileRecordResponse,
    ReadHoldingRegistersRequest,
    ReadHoldingRegistersResponse,
    ReadInputRegistersRequest,
    ReadInputRegistersResponse,
)
from omodscan.messages.write import (
    MaskWriteRegisterRequest,
    MaskWriteRegisterResponse,
    ReadWriteMultipleRegistersRequest,
    ReadWriteMultipleRegistersResponse,
    WriteFileRecordRequest,
    WriteFileRecordResponse,
    WriteMultipleCoilsRequest,
    WriteMultipleCoilsResponse,
    WriteMultipleRegistersRequest,
    WriteMultipleRegistersResponse,
    WriteSingleCoilRequest,
    WriteSingleCoilResponse,
    WriteSingleRegisterRequest,
    WriteSingleRegisterResponse,
)

_MESSAGE_TYPES: dict[int, tuple[type[ModbusMessage], type[ModbusMessage]]] = {
    FunctionCode.READ_COILS: (ReadCoilsRequest, ReadCoilsResponse),
    FunctionCode.READ_DISCRETE_INPUTS: (ReadDiscreteInputsRequest, ReadDiscreteInputsResponse),
    FunctionCode.READ_HOLDING_REGISTERS: (ReadHoldingRegistersRequest, ReadHoldingRegistersResponse),
    FunctionCode.READ_INPUT_REGISTERS: (ReadInputRegistersRequest, ReadInputRegistersResponse),
    FunctionCode.WRITE_SINGLE_COIL: (WriteSingleCoilRequest, WriteSingleCoilResponse),
    FunctionCode.WRITE_SINGLE_REGISTER: (WriteSingleRegisterRequest, WriteSingleRegisterResponse),
    FunctionCode.READ_EXCEPTION_STATUS: (ReadExceptionStatusRequest, ReadExceptionStatusResponse),
    FunctionCode.DIAGNOSTICS: (DiagnosticsRequest, DiagnosticsResponse),
    FunctionCode.GET_COMM_EVENT_COUNTER: (GetCommEventCounterRequest, GetCommEventCounterResponse),
    FunctionCode.GET_COMM_EVENT_LOG: (GetCommEventLogRequest, GetCommEventLogResponse),
    FunctionCode.WRITE_MULTIPLE_COILS: (WriteMultipleCoilsRequest, WriteMultipleCoilsResponse),
    FunctionCode.WRITE_MULTIPLE_REGISTERS: (WriteMultipleRegistersRequest, WriteMultipleRegistersResponse),
    FunctionCode.REPORT_SERVER_ID: (ReportServerIdRequest, ReportServerIdResponse),
    FunctionCode.READ_FILE_RECORD: (ReadFileRecordRequest, ReadFileRecordResponse),
    FunctionCode.WRITE_FILE_RECORD: (WriteFileRecordRequest, WriteFileRecordResponse),
    FunctionCode.MASK_WRITE_REGISTER: (MaskWriteRegisterRequest, MaskWriteRegisterResponse),
    FunctionCode.READ_WRITE_MULTIPLE_REGISTERS: (
        ReadWriteMultipleRegistersRequest,
        ReadWriteMultipleRegistersResponse,
    ),
    FunctionCode.READ_FIFO_QUEUE: (ReadFifoQueueRequest, ReadFifoQueueResponse),
}


def _message_type(function_code: int, request: bool) -> type[ModbusMessage] | None:
    pair = _MESSAGE_TYPES.get(function_code)
    if pair is None:
        return None
    return pair[0] if request else pair[1]


def create_from_pdu(
    pdu: Pdu,
    protocol: ProtocolType,
    device_id: int,
    timestamp: datetime | None = None,
    request: bool = False,
) -> ModbusMessage:
    """Frame ``pdu`` as the message class that matches its function code."""
    message_type = _message_type(pdu.function_code, request)
    if message_type is None:
        return ModbusMessage.from_pdu(pdu, protocol, device_id, timestamp, request)
    return message_type.from_pdu(pdu, protocol, device_id, timestamp, request)


def create_from_raw(
    data: bytes,
    protocol: ProtocolType,
    timestamp: datetime | None = None,
    request: bool = False,
) -> ModbusMessage:
    """Wrap raw frame bytes in the message class that matches their function code."""
    protocol = ProtocolType(protocol)
    adu: ModbusAdu = RtuAdu(bytes(data)) if protocol == ProtocolType.RTU else TcpAdu(bytes(data))
    message_type = _message_type(adu.function_code(), request)
    if message_type is None:
        return ModbusMessage.from_raw(data, protocol, timestamp, request)
    return message_type.from_raw(data, protocol, timestamp, request)