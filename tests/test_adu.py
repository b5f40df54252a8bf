import pytest

from omodscan.adu import (
    ExceptionCode,
    FunctionCode,
    ModbusAdu,
    Pdu,
    RtuAdu,
    TcpAdu,
    calculate_crc,
)


def _rtu_frame(body: bytes) -> bytes:
    return body + calculate_crc(body).to_bytes(2, "big")


TCP_FRAME = bytes.fromhex("0001000000061103006B0003")


def test_crc_known_modbus_request():
    assert calculate_crc(bytes.fromhex("01030000000A")) == 0xC5CD


def test_crc_check_string():
    assert calculate_crc(b"123456789") == 0x374B


def test_rtu_frame_decodes():
    adu = RtuAdu(_rtu_frame(bytes.fromhex("01030000000A")))
    assert adu.server_address() == 1
    assert adu.function_code() == FunctionCode.READ_HOLDING_REGISTERS
    assert adu.pdu().data == bytes.fromhex("0000000A")
    assert adu.matching_checksum()
    assert adu.is_valid()


def test_rtu_bad_checksum_is_invalid():
    frame = bytearray(_rtu_frame(bytes.fromhex("01030000000A")))
    frame[-1] ^= 0xFF
    adu = RtuAdu(bytes(frame))
    assert not adu.matching_checksum()
    assert not adu.is_valid()


def test_rtu_exception_frame():
    adu = RtuAdu(_rtu_frame(bytes([0x01, 0x83, 0x02])))
    assert adu.is_exception()
    assert adu.function_code() == FunctionCode.READ_HOLDING_REGISTERS
    assert adu.exception_code() == ExceptionCode.ILLEGAL_DATA_ADDRESS


def test_raw_data_round_trip():
    frame = _rtu_frame(bytes.fromhex("110100130025"))
    assert RtuAdu(frame).raw_data() == frame


def test_tcp_header_fields():
    adu = TcpAdu(TCP_FRAME)
    assert adu.transaction_id() == 1
    assert adu.protocol_id() == 0
    assert adu.length() == 6
    assert adu.server_address() == 0x11
    assert adu.function_code() == FunctionCode.READ_HOLDING_REGISTERS
    assert adu.is_valid()


def test_tcp_wrong_length_is_invalid():
    frame = bytearray(TCP_FRAME)
    frame[5] = 9
    assert not TcpAdu(bytes(frame)).is_valid()


def test_tcp_set_transaction_id():
    adu = TcpAdu(TCP_FRAME)
    adu.set_transaction_id(0xBEEF)
    assert adu.transaction_id() == 0xBEEF
    assert adu.raw_data()[2:] == TCP_FRAME[2:]


def test_pdu_validity_and_sizes():
    pdu = Pdu(FunctionCode.READ_COILS, b"\x00\x01\x00\x02")
    assert pdu.is_valid()
    assert pdu.data_size() == 4
    assert pdu.size() == 5
    assert not Pdu(FunctionCode.INVALID, b"").is_valid()
    assert not Pdu(FunctionCode.READ_COILS, bytes(253)).is_valid()


def test_pdu_non_exception_reports_extended():
    assert Pdu(FunctionCode.READ_COILS, b"\x02").exception_code() == ExceptionCode.EXTENDED_EXCEPTION


def test_base_adu_is_abstract():
    with pytest.raises(TypeError):
        ModbusAdu(b"")