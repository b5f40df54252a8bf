import pytest

from omodscan.adu import FunctionCode, Pdu
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
from omodscan.messages.message import ProtocolType

PROTOCOLS = [ProtocolType.RTU, ProtocolType.TCP]


@pytest.mark.parametrize("protocol", PROTOCOLS)
@pytest.mark.parametrize("cls", [DiagnosticsRequest, DiagnosticsResponse])
def test_diagnostics_fields(cls, protocol):
    msg = cls.from_pdu(Pdu(FunctionCode.DIAGNOSTICS, b"\x00\x00\x12\x34"), protocol, 5)
    assert msg.is_valid()
    assert msg.subfunc() == 0x0000
    assert msg.data() == b"\x12\x34"
    assert msg.device_id() == 5


@pytest.mark.parametrize("cls", [DiagnosticsRequest, DiagnosticsResponse])
def test_diagnostics_needs_more_than_two_bytes(cls):
    msg = cls.from_pdu(Pdu(FunctionCode.DIAGNOSTICS, b"\x00\x01"), ProtocolType.RTU, 1)
    assert msg.is_valid() is False
    assert msg.subfunc() == 0x0001
    assert msg.data() == b""


def test_request_flags_follow_class():
    pdu = Pdu(FunctionCode.DIAGNOSTICS, b"\x00\x00\x00\x00")
    assert DiagnosticsRequest.from_pdu(pdu, ProtocolType.TCP, 1, request=False).is_request is True
    assert DiagnosticsResponse.from_pdu(pdu, ProtocolType.TCP, 1, request=True).is_request is False


def test_wrong_function_code_rejected():
    with pytest.raises(ValueError):
        DiagnosticsRequest.from_pdu(Pdu(FunctionCode.READ_COILS, b"\x00\x00\x00\x01"), ProtocolType.RTU, 1)


def test_exception_diagnostics_response():
    msg = DiagnosticsResponse.from_pdu(Pdu(0x88, b"\x01"), ProtocolType.RTU, 3)
    assert msg.is_exception()
    assert msg.function_code() == FunctionCode.DIAGNOSTICS
    assert msg.is_valid() is False


@pytest.mark.parametrize("protocol", PROTOCOLS)
def test_comm_event_counter_request_is_valid_without_data(protocol):
    msg = GetCommEventCounterRequest.from_pdu(Pdu(FunctionCode.GET_COMM_EVENT_COUNTER), protocol, 1)
    assert msg.is_valid()
    assert msg.is_request


@pytest.mark.parametrize("protocol", PROTOCOLS)
def test_comm_event_counter_response(protocol):
    pdu = Pdu(FunctionCode.GET_COMM_EVENT_COUNTER, b"\xff\xff\x01\x08")
    msg = GetCommEventCounterResponse.from_pdu(pdu, protocol, 1)
    assert msg.is_valid()
    assert msg.status() == 0xFFFF
    assert msg.event_count() == 0x0108


def test_comm_event_counter_response_wrong_size():
    pdu = Pdu(FunctionCode.GET_COMM_EVENT_COUNTER, b"\xff\xff\x01")
    msg = GetCommEventCounterResponse.from_pdu(pdu, ProtocolType.RTU, 1)
    assert msg.is_valid() is False
    assert msg.event_count() == 0x0100


def test_comm_event_log_request_flag():
    msg = GetCommEventLogRequest.from_pdu(Pdu(FunctionCode.GET_COMM_EVENT_LOG), ProtocolType.TCP, 9)
    assert msg.is_request
    assert msg.function_code() == FunctionCode.GET_COMM_EVENT_LOG


@pytest.mark.parametrize("protocol", PROTOCOLS)
def test_comm_event_log_response_fields(protocol):
    events = b"\x20\x00\x01\x02\x03\x04\x05\x06"
    data = bytes([2, 0x00, 0x00, 0x01, 0x08, 0x01, 0x21]) + events
    msg = GetCommEventLogResponse.from_pdu(Pdu(FunctionCode.GET_COMM_EVENT_LOG, data), protocol, 1)
    assert msg.byte_count() == 2
    assert msg.status() == 0x0000
    assert msg.event_count() == 0x0108
    assert msg.message_count() == 0x0121
    assert msg.events() == events
    assert msg.is_valid()


def test_comm_event_log_response_count_mismatch():
    data = bytes([8, 0, 0, 0, 0, 0, 0]) + b"\x01" * 8
    msg = GetCommEventLogResponse.from_pdu(Pdu(FunctionCode.GET_COMM_EVENT_LOG, data), ProtocolType.RTU, 1)
    assert msg.is_valid() is False
    assert len(msg.events()) == 8


def test_comm_event_log_response_zero_count_invalid():
    data = bytes([0, 0, 0, 0, 0, 0, 0])
    msg = GetCommEventLogResponse.from_pdu(Pdu(FunctionCode.GET_COMM_EVENT_LOG, data), ProtocolType.RTU, 1)
    assert msg.is_valid() is False
    assert msg.events() == b""


def test_report_server_id_request():
    msg = ReportServerIdRequest.from_pdu(Pdu(FunctionCode.REPORT_SERVER_ID), ProtocolType.RTU, 1)
    assert msg.is_request
    assert msg.is_valid()


@pytest.mark.parametrize("protocol", PROTOCOLS)
def test_report_server_id_response(protocol):
    pdu = Pdu(FunctionCode.REPORT_SERVER_ID, b"\x02\x11\xff")
    msg = ReportServerIdResponse.from_pdu(pdu, protocol, 1)
    assert msg.is_valid()
    assert msg.byte_count() == 2
    assert msg.data() == b"\x11\xff"


def test_report_server_id_response_too_short():
    msg = ReportServerIdResponse.from_pdu(Pdu(FunctionCode.REPORT_SERVER_ID, b"\x00"), ProtocolType.RTU, 1)
    assert msg.is_valid() is False
    assert msg.data() == b""


def test_raw_round_trip_keeps_fields():
    built = GetCommEventCounterResponse.from_pdu(
        Pdu(FunctionCode.GET_COMM_EVENT_COUNTER, b"\x00\x00\x00\x07"), ProtocolType.RTU, 4
    )
    parsed = GetCommEventCounterResponse.from_raw(built.raw_data(), ProtocolType.RTU)
    assert bytes(parsed) == bytes(built)
    assert parsed.event_count() == built.event_count()
    assert parsed.is_valid()