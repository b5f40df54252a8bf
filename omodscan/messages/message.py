"""A Modbus frame captured or built for one side of an exchange."""

from __future__ import annotations

import struct
from datetime import datetime
from enum import IntEnum
from typing import ClassVar

from omodscan.adu import ModbusAdu, Pdu, RtuAdu, TcpAdu, calculate_crc
from omodscan.formatting import DataDisplayMode, format_uint8_array


class ProtocolType(IntEnum):
    """Framing of the message on the wire."""

    RTU = 0
    TCP = 1


def _build_frame(pdu: Pdu, protocol: ProtocolType, device_id: int) -> bytes:
    code = pdu.code & 0xFF
    if protocol == ProtocolType.RTU:
        body = bytes((device_id & 0xFF, code)) + pdu.data
        return body + calculate_crc(body).to_bytes(2, "big")
    header = struct.pack(">HHHBB", 0, 0, (pdu.size() + 1) & 0xFFFF, device_id & 0xFF, code)
    return header + pdu.data


def _make_adu(data: bytes, protocol: ProtocolType) -> ModbusAdu:
    if protocol == ProtocolType.RTU:
        return RtuAdu(data)
    return TcpAdu(data)


class ModbusMessage:
    """A request or response frame with its timestamp.

    Subclasses for particular functions set ``FUNCTION_CODE`` (checked on
    construction) and ``IS_REQUEST`` (which overrides the ``request`` flag).
    """

    FUNCTION_CODE: ClassVar[int | None] = None
    IS_REQUEST: ClassVar[bool | None] = None

    def __init__(
        self,
        adu: ModbusAdu,
        protocol: ProtocolType,
        timestamp: datetime | None = None,
        request: bool = False,
    ) -> None:
        self._adu = adu
        self._protocol = ProtocolType(protocol)
        self._timestamp = timestamp if timestamp is not None else datetime.now()
        self._request = self.IS_REQUEST if self.IS_REQUEST is not None else bool(request)
        if self.FUNCTION_CODE is not None and self.function_code() != self.FUNCTION_CODE:
            raise ValueError(
                f"{type(self).__name__} expects function code {int(self.FUNCTION_CODE):#04x}, "
                f"got {int(self.function_code()):#04x}"
            )

    @classmethod
    def from_pdu(
        cls,
        pdu: Pdu,
        protocol: ProtocolType,
        device_id: int,
        timestamp: datetime | None = None,
        request: bool = False,
    ) -> ModbusMessage:
        """Frame ``pdu`` for ``device_id`` using the given protocol."""
        protocol = ProtocolType(protocol)
        return cls(_make_adu(_build_frame(pdu, protocol, device_id), protocol), protocol, timestamp, request)

    @classmethod
    def from_raw(
        cls,
        data: bytes,
        protocol: ProtocolType,
        timestamp: datetime | None = None,
        request: bool = False,
    ) -> ModbusMessage:
        """Wrap raw frame bytes as received on the wire."""
        protocol = ProtocolType(protocol)
        return cls(_make_adu(bytes(data), protocol), protocol, timestamp, request)

    @property
    def protocol_type(self) -> ProtocolType:
        return self._protocol

    @property
    def timestamp(self) -> datetime:
        return self._timestamp

    @property
    def is_request(self) -> bool:
        return self._request

    @property
    def adu(self) -> ModbusAdu:
        return self._adu

    def is_valid(self) -> bool:
        return self._adu.is_valid()

    def is_exception(self) -> bool:
        return self._adu.is_exception()

    def device_id(self) -> int:
        return self._adu.server_address()

    def function_code(self) -> int:
        """Function code without the exception bit."""
        return self._adu.function_code()

    def exception_code(self) -> int:
        return self._adu.exception_code()

    def to_string(self, mode: DataDisplayMode) -> str:
        """The frame's bytes in the given display mode."""
        return format_uint8_array(mode, self.raw_data())

    def raw_data(self) -> bytes:
        return self._adu.raw_data()

    def __bytes__(self) -> bytes:
        return self.raw_data()

    def __repr__(self) -> str:
        kind = "request" if self._request else "response"
        return f"<{type(self).__name__} {self._protocol.name} {kind} {self.raw_data().hex(' ')}>"

    def _data_size(self) -> int:
        return self._adu.pdu().data_size()

    def _at(self, index: int) -> int:
        """PDU data byte at ``index``, or 0 past the end."""
        data = self._adu.pdu().data
        return data[index] if 0 <= index < len(data) else 0

    def _payload(self, index: int, length: int | None = None) -> bytes:
        """Slice of the PDU data starting at ``index``."""
        data = self._adu.pdu().data
        end = None if length is None or length < 0 else index + length
        return bytes(data[index:end])