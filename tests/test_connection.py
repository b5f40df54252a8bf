import io

import pytest

from omodscan.connection import (
    ConnectionDetails,
    ConnectionType,
    FlowControl,
    ModbusProtocolSelections,
    Parity,
    SerialConnectionParams,
    StopBits,
    TcpConnectionParams,
    TransmissionMode,
)


def _round_trip(obj):
    buffer = io.BytesIO()
    obj.write(buffer)
    buffer.seek(0)
    return type(obj).read(buffer)


def test_tcp_normalize():
    params = TcpConnectionParams(service_port=0, ip_address="")
    params.normalize()
    assert params == TcpConnectionParams(service_port=1, ip_address="127.0.0.1")


def test_tcp_stream_ends_with_port():
    buffer = io.BytesIO()
    TcpConnectionParams().write(buffer)
    assert buffer.getvalue()[-2:] == (502).to_bytes(2, "big")


def test_tcp_stream_round_trip():
    params = TcpConnectionParams(service_port=1502, ip_address="192.168.0.10")
    assert _round_trip(params) == params


def test_short_stream_raises():
    buffer = io.BytesIO()
    TcpConnectionParams().write(buffer)
    with pytest.raises(EOFError):
        TcpConnectionParams.read(io.BytesIO(buffer.getvalue()[:-1]))


def test_serial_normalize_clamps():
    params = SerialConnectionParams(baud_rate=300, word_length=9, parity=7, flow_control=5)
    params.normalize()
    assert params.baud_rate == 1200
    assert params.word_length == 8
    assert params.parity == Parity.MARK_PARITY
    assert params.flow_control == FlowControl.SOFTWARE_CONTROL


def test_serial_stream_round_trip():
    params = SerialConnectionParams(
        port_name="COM3",
        baud_rate=19200,
        word_length=7,
        parity=Parity.EVEN_PARITY,
        stop_bits=StopBits.TWO_STOP,
        flow_control=FlowControl.HARDWARE_CONTROL,
        set_dtr=False,
        set_rts=True,
    )
    assert _round_trip(params) == params


def test_modbus_normalize_bounds():
    params = ModbusProtocolSelections(slave_response_timeout=1, number_of_retries=50, inter_frame_delay=10**7)
    params.normalize()
    assert params.slave_response_timeout == 10
    assert params.number_of_retries == 10
    assert params.inter_frame_delay == 300000


def test_modbus_stream_round_trip():
    params = ModbusProtocolSelections(TransmissionMode.ASCII, 1000, 5, 20, True)
    assert _round_trip(params) == params


def test_connection_details_stream_round_trip():
    details = ConnectionDetails(
        connection_type=ConnectionType.SERIAL,
        serial_params=SerialConnectionParams(port_name="ttyUSB0", baud_rate=38400),
        modbus_params=ModbusProtocolSelections(number_of_retries=2),
    )
    assert _round_trip(details) == details


def test_settings_round_trip():
    details = ConnectionDetails(
        connection_type=ConnectionType.TCP,
        tcp_params=TcpConnectionParams(service_port=5020, ip_address="10.0.0.2"),
        exclude_virtual_ports=True,
    )
    settings = {}
    details.save(settings)
    assert ConnectionDetails.load(settings) == details


def test_settings_strings_are_parsed():
    settings = {"TcpParams/ServicePort": "1502", "ModbusParams/ForceModbus15And16Func": "true"}
    assert TcpConnectionParams.load(settings).service_port == 1502
    assert ModbusProtocolSelections.load(settings).force_modbus15_and16_func is True


def test_load_from_empty_settings_uses_source_defaults():
    details = ConnectionDetails.load({})
    assert details.connection_type == ConnectionType.TCP
    assert details.tcp_params == TcpConnectionParams()
    assert details.serial_params.set_dtr is False
    assert details.serial_params.set_rts is False
    assert details.modbus_params == ModbusProtocolSelections()


def test_equality_ignores_inactive_params():
    first = ConnectionDetails(serial_params=SerialConnectionParams(port_name="COM1"))
    second = ConnectionDetails(serial_params=SerialConnectionParams(port_name="COM2"))
    assert first == second
    first.connection_type = second.connection_type = ConnectionType.SERIAL
    assert first != second