"""Connection settings for TCP and serial Modbus links, with binary and settings storage."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, BinaryIO, Mapping, MutableMapping, TypeVar


class ConnectionType(IntEnum):
    TCP = 0
    SERIAL = 1


class TransmissionMode(IntEnum):
    ASCII = 0
    RTU = 1


class Parity(IntEnum):
    NO_PARITY = 0
    EVEN_PARITY = 2
    ODD_PARITY = 3
    SPACE_PARITY = 4
    MARK_PARITY = 5


class StopBits(IntEnum):
    ONE_STOP = 1
    TWO_STOP = 2
    ONE_AND_HALF_STOP = 3


class FlowControl(IntEnum):
    NO_FLOW_CONTROL = 0
    HARDWARE_CONTROL = 1
    SOFTWARE_CONTROL = 2


_E = TypeVar("_E", bound=IntEnum)


def _enum(cls: type[_E], value: int, default: _E) -> _E:
    try:
        return cls(value)
    except ValueError:
        return default


def _clamp(low: int, value: int, high: int) -> int:
    return max(low, min(value, high))


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise EOFError("unexpected end of stream")
    return data


def _pack(stream: BinaryIO, fmt: str, value: Any) -> None:
    stream.write(struct.pack(fmt, value))


def _unpack(stream: BinaryIO, fmt: str) -> Any:
    return struct.unpack(fmt, _read_exact(stream, struct.calcsize(fmt)))[0]


def _write_string(stream: BinaryIO, text: str) -> None:
    raw = text.encode("utf-16-be")
    _pack(stream, ">I", len(raw))
    stream.write(raw)


def _read_string(stream: BinaryIO) -> str:
    size = _unpack(stream, ">I")
    if size == 0xFFFFFFFF:
        return ""
    if size % 2:
        raise ValueError("corrupt string length in stream")
    return _read_exact(stream, size).decode("utf-16-be")


def _to_uint(value: Any, default: int) -> int:
    if value is None:
        value = default
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return 0
    try:
        return int(value) & 0xFFFFFFFF
    except (TypeError, ValueError):
        return 0


def _to_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false")
    return bool(value)


@dataclass
class TcpConnectionParams:
    """Address and port of a Modbus TCP server."""

    service_port: int = 502
    ip_address: str = "127.0.0.1"

    def normalize(self) -> None:
        self.ip_address = self.ip_address or "127.0.0.1"
        self.service_port = max(1, self.service_port)

    def write(self, stream: BinaryIO) -> None:
        _write_string(stream, self.ip_address)
        _pack(stream, ">H", self.service_port)

    @classmethod
    def read(cls, stream: BinaryIO) -> TcpConnectionParams:
        ip_address = _read_string(stream)
        params = cls(service_port=_unpack(stream, ">H"), ip_address=ip_address)
        params.normalize()
        return params

    def save(self, settings: MutableMapping[str, Any]) -> None:
        settings["TcpParams/IPAddress"] = self.ip_address
        settings["TcpParams/ServicePort"] = self.service_port

    @classmethod
    def load(cls, settings: Mapping[str, Any]) -> TcpConnectionParams:
        ip_address = settings.get("TcpParams/IPAddress", "127.0.0.1")
        params = cls(
            service_port=_to_uint(settings.get("TcpParams/ServicePort"), 502) & 0xFFFF,
            ip_address="" if ip_address is None else str(ip_address),
        )
        params.normalize()
        return params


@dataclass
class SerialConnectionParams:
    """Serial port line settings."""

    port_name: str = ""
    baud_rate: int = 9600
    word_length: int = 8
    parity: Parity = Parity.NO_PARITY
    stop_bits: StopBits = StopBits.ONE_STOP
    flow_control: FlowControl = FlowControl.NO_FLOW_CONTROL
    set_dtr: bool = True
    set_rts: bool = True

    def normalize(self) -> None:
        self.baud_rate = max(1200, self.baud_rate)
        self.word_length = _clamp(5, self.word_length, 8)
        self.parity = _enum(Parity, _clamp(Parity.NO_PARITY, self.parity, Parity.MARK_PARITY), Parity.NO_PARITY)
        self.flow_control = _enum(
            FlowControl,
            _clamp(FlowControl.NO_FLOW_CONTROL, self.flow_control, FlowControl.SOFTWARE_CONTROL),
            FlowControl.NO_FLOW_CONTROL,
        )

    def write(self, stream: BinaryIO) -> None:
        _write_string(stream, self.port_name)
        for value in (self.baud_rate, self.word_length, self.parity, self.stop_bits, self.flow_control):
            _pack(stream, ">i", int(value))
        _pack(stream, ">?", self.set_dtr)
        _pack(stream, ">?", self.set_rts)

    @classmethod
    def read(cls, stream: BinaryIO) -> SerialConnectionParams:
        port_name = _read_string(stream)
        baud_rate, word_length, parity, stop_bits, flow_control = (_unpack(stream, ">i") for _ in range(5))
        params = cls(
            port_name=port_name,
            baud_rate=baud_rate,
            word_length=word_length,
            parity=parity,
            stop_bits=_enum(StopBits, stop_bits, StopBits.ONE_STOP),
            flow_control=flow_control,
            set_dtr=_unpack(stream, ">?"),
            set_rts=_unpack(stream, ">?"),
        )
        params.normalize()
        return params

    def save(self, settings: MutableMapping[str, Any]) -> None:
        settings["SerialParams/PortName"] = self.port_name
        settings["SerialParams/BaudRate"] = self.baud_rate
        settings["SerialParams/WordLength"] = self.word_length
        settings["SerialParams/Parity"] = int(self.parity)
        settings["SerialParams/FlowControl"] = int(self.flow_control)
        settings["SerialParams/DTR"] = self.set_dtr
        settings["SerialParams/RTS"] = self.set_rts

    @classmethod
    def load(cls, settings: Mapping[str, Any]) -> SerialConnectionParams:
        port_name = settings.get("SerialParams/PortName")
        params = cls(
            port_name="" if port_name is None else str(port_name),
            baud_rate=_to_uint(settings.get("SerialParams/BaudRate"), 9600),
            word_length=_to_uint(settings.get("SerialParams/WordLength"), 8),
            parity=_to_uint(settings.get("SerialParams/Parity"), 0),
            flow_control=_to_uint(settings.get("SerialParams/FlowControl"), 0),
            set_dtr=_to_bool(settings.get("SerialParams/DTR"), False),
            set_rts=_to_bool(settings.get("SerialParams/RTS"), False),
        )
        params.normalize()
        return params


@dataclass
class ModbusProtocolSelections:
    """Protocol timing and framing options."""

    mode: TransmissionMode = TransmissionMode.RTU
    slave_response_timeout: int = 250
    number_of_retries: int = 3
    inter_frame_delay: int = 0
    force_modbus15_and16_func: bool = False

    def normalize(self) -> None:
        self.mode = TransmissionMode(_clamp(TransmissionMode.ASCII, self.mode, TransmissionMode.RTU))
        self.slave_response_timeout = _clamp(10, self.slave_response_timeout, 300000)
        self.number_of_retries = _clamp(1, self.number_of_retries, 10)
        self.inter_frame_delay = _clamp(0, self.inter_frame_delay, 300000)

    def write(self, stream: BinaryIO) -> None:
        _pack(stream, ">i", int(self.mode))
        _pack(stream, ">I", self.slave_response_timeout)
        _pack(stream, ">I", self.number_of_retries)
        _pack(stream, ">I", self.inter_frame_delay)
        _pack(stream, ">?", self.force_modbus15_and16_func)

    @classmethod
    def read(cls, stream: BinaryIO) -> ModbusProtocolSelections:
        params = cls(
            mode=_unpack(stream, ">i"),
            slave_response_timeout=_unpack(stream, ">I"),
            number_of_retries=_unpack(stream, ">I"),
            inter_frame_delay=_unpack(stream, ">I"),
            force_modbus15_and16_func=_unpack(stream, ">?"),
        )
        params.normalize()
        return params

    def save(self, settings: MutableMapping[str, Any]) -> None:
        settings["ModbusParams/Mode"] = int(self.mode)
        settings["ModbusParams/SlaveResponseTimeOut"] = self.slave_response_timeout
        settings["ModbusParams/NumberOfRetries"] = self.number_of_retries
        settings["ModbusParams/InterFrameDelay"] = self.inter_frame_delay
        settings["ModbusParams/ForceModbus15And16Func"] = self.force_modbus15_and16_func

    @classmethod
    def load(cls, settings: Mapping[str, Any]) -> ModbusProtocolSelections:
        params = cls(
            mode=_to_uint(settings.get("ModbusParams/Mode"), 1),
            slave_response_timeout=_to_uint(settings.get("ModbusParams/SlaveResponseTimeOut"), 250),
            number_of_retries=_to_uint(settings.get("ModbusParams/NumberOfRetries"), 3),
            inter_frame_delay=_to_uint(settings.get("ModbusParams/InterFrameDelay"), 0),
            force_modbus15_and16_func=_to_bool(settings.get("ModbusParams/ForceModbus15And16Func"), False),
        )
        params.normalize()
        return params


@dataclass(eq=False)
class ConnectionDetails:
    """Complete description of one connection."""

    connection_type: ConnectionType = ConnectionType.TCP
    tcp_params: TcpConnectionParams = field(default_factory=TcpConnectionParams)
    serial_params: SerialConnectionParams = field(default_factory=SerialConnectionParams)
    modbus_params: ModbusProtocolSelections = field(default_factory=ModbusProtocolSelections)
    exclude_virtual_ports: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConnectionDetails):
            return NotImplemented
        if (
            self.connection_type != other.connection_type
            or self.exclude_virtual_ports != other.exclude_virtual_ports
            or self.modbus_params != other.modbus_params
        ):
            return False
        if self.connection_type == ConnectionType.TCP:
            return self.tcp_params == other.tcp_params
        return self.serial_params == other.serial_params

    __hash__ = None  # type: ignore[assignment]

    def write(self, stream: BinaryIO) -> None:
        _pack(stream, ">i", int(self.connection_type))
        self.tcp_params.write(stream)
        self.serial_params.write(stream)
        self.modbus_params.write(stream)

    @classmethod
    def read(cls, stream: BinaryIO) -> ConnectionDetails:
        connection_type = _enum(ConnectionType, _unpack(stream, ">i"), ConnectionType.TCP)
        return cls(
            connection_type=connection_type,
            tcp_params=TcpConnectionParams.read(stream),
            serial_params=SerialConnectionParams.read(stream),
            modbus_params=ModbusProtocolSelections.read(stream),
        )

    def save(self, settings: MutableMapping[str, Any]) -> None:
        settings["ConnectionParams/Type"] = int(self.connection_type)
        settings["ConnectionParams/ExcludeVirtualPorts"] = self.exclude_virtual_ports
        self.tcp_params.save(settings)
        self.serial_params.save(settings)
        self.modbus_params.save(settings)

    @classmethod
    def load(cls, settings: Mapping[str, Any]) -> ConnectionDetails:
        return cls(
            connection_type=_enum(
                ConnectionType, _to_uint(settings.get("ConnectionParams/Type"), 0), ConnectionType.TCP
            ),
            exclude_virtual_ports=_to_bool(settings.get("ConnectionParams/ExcludeVirtualPorts"), False),
            tcp_params=TcpConnectionParams.load(settings),
            serial_params=SerialConnectionParams.load(settings),
            modbus_params=ModbusProtocolSelections.load(settings),
        )