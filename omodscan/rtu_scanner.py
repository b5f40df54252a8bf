"""Scan of serial Modbus RTU lines for unit identifiers that answer a request."""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Protocol

import serial

from omodscan.adu import ExceptionCode, Pdu
from omodscan.connection import ConnectionDetails, Parity, StopBits
from omodscan.messages.message import ModbusMessage, ProtocolType
from omodscan.scanner import ModbusScanner, ScanParams

_GATEWAY_EXCEPTIONS = (
    ExceptionCode.GATEWAY_PATH_UNAVAILABLE,
    ExceptionCode.GATEWAY_TARGET_DEVICE_FAILED_TO_RESPOND,
)
_POLL_INTERVAL = 0.01

_FIXED_LENGTHS = {0x05: 8, 0x06: 8, 0x07: 5, 0x08: 8, 0x0B: 8, 0x0F: 8, 0x10: 8, 0x16: 10}
_COUNTED_REPLIES = {0x01, 0x02, 0x03, 0x04, 0x0C, 0x11, 0x14, 0x15, 0x17}

_PARITY = {
    Parity.NO_PARITY: serial.PARITY_NONE,
    Parity.EVEN_PARITY: serial.PARITY_EVEN,
    Parity.ODD_PARITY: serial.PARITY_ODD,
    Parity.SPACE_PARITY: serial.PARITY_SPACE,
    Parity.MARK_PARITY: serial.PARITY_MARK,
}
_STOP_BITS = {
    StopBits.ONE_STOP: serial.STOPBITS_ONE,
    StopBits.TWO_STOP: serial.STOPBITS_TWO,
    StopBits.ONE_AND_HALF_STOP: serial.STOPBITS_ONE_POINT_FIVE,
}

Found = tuple[ConnectionDetails, int, bool]


class _RtuLink(Protocol):
    async def transact(self, frame: bytes, timeout: float) -> bytes: ...

    def close(self) -> None: ...


def _is_device_reply(pdu: Pdu) -> bool:
    return not (pdu.is_exception() and pdu.exception_code() in _GATEWAY_EXCEPTIONS)


def _expected_length(frame: bytes) -> int | None:
    """Full length of an RTU reply, once enough of it has arrived to tell."""
    if len(frame) < 2:
        return None
    code = frame[1]
    if code & 0x80:
        return 5
    if code in _FIXED_LENGTHS:
        return _FIXED_LENGTHS[code]
    if code in _COUNTED_REPLIES:
        return 5 + frame[2] if len(frame) > 2 else None
    if code == 0x18:
        return 6 + int.from_bytes(frame[2:4], "big") if len(frame) > 3 else None
    return None


class _SerialLink:
    """Serial port that writes a frame and collects the reply bytes."""

    def __init__(self, details: ConnectionDetails) -> None:
        params = details.serial_params
        try:
            self._port = serial.Serial(
                port=params.port_name,
                baudrate=params.baud_rate,
                bytesize=params.word_length,
                parity=_PARITY.get(params.parity, serial.PARITY_NONE),
                stopbits=_STOP_BITS.get(params.stop_bits, serial.STOPBITS_ONE),
                timeout=0,
            )
        except (ValueError, serial.SerialException) as exc:
            raise OSError(str(exc)) from exc

    async def transact(self, frame: bytes, timeout: float) -> bytes:
        return await asyncio.to_thread(self._transact, frame, timeout)

    def _transact(self, frame: bytes, timeout: float) -> bytes:
        port = self._port
        port.reset_input_buffer()
        port.write(frame)
        port.flush()
        received = bytearray()
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            port.timeout = min(remaining, _POLL_INTERVAL)
            chunk = port.read(max(1, port.in_waiting))
            if chunk:
                received += chunk
                expected = _expected_length(received)
                if expected is not None and len(received) >= expected:
                    break
        return bytes(received)

    def close(self) -> None:
        self._port.close()


class ModbusRtuScanner(ModbusScanner):
    """Opens each serial connection in turn and probes every unit identifier on it.

    ``transport_factory`` is called with a connection's details and returns a
    link with ``async transact(frame, timeout) -> bytes`` and ``close()``; it
    raises ``OSError`` when the port cannot be opened. By default the serial
    port named in the details is opened.
    """

    def __init__(
        self,
        params: ScanParams,
        tick_interval: float = 1.0,
        transport_factory: Callable[[ConnectionDetails], _RtuLink] | None = None,
    ) -> None:
        super().__init__(tick_interval)
        self._params = params
        self._factory = transport_factory or _SerialLink
        self._worker: asyncio.Task[None] | None = None

    def start_scan(self) -> None:
        self._cancel_worker()
        super().start_scan()
        self._worker = asyncio.get_running_loop().create_task(self._run())

    def stop_scan(self) -> None:
        self._cancel_worker()
        super().stop_scan()

    async def scan(self) -> list[Found]:
        """Run a whole scan and return every ``(details, device_id, dubious)`` found."""
        results: list[Found] = []

        def collect(details: ConnectionDetails, device_id: int, dubious: bool) -> None:
            results.append((details, device_id, dubious))

        self.found.connect(collect)
        try:
            await super().scan()
        finally:
            self.found.disconnect(collect)
        return results

    def _cancel_worker(self) -> None:
        worker, self._worker = self._worker, None
        if worker is None or worker.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if worker is not current:
            worker.cancel()

    @property
    def _timeout(self) -> float:
        return self._params.timeout / 1000

    async def _run(self) -> None:
        connections = self._params.conn_params
        for index, details in enumerate(connections):
            if not self.in_progress():
                return
            try:
                link = self._factory(details)
            except OSError as exc:
                self.stop_scan()
                self.error_occurred.emit(str(exc))
                return
            try:
                for device_id in self._params.device_ids:
                    if not self.in_progress():
                        return
                    self.progress.emit(details, device_id, self._progress_percent(index, device_id))
                    if await self._probe_device(link, details, device_id):
                        await asyncio.sleep(self._timeout)
            finally:
                link.close()

        if self.in_progress():
            self.stop_scan()

    def _progress_percent(self, index: int, device_id: int) -> int:
        size = len(self._params.conn_params)
        ids = self._params.device_ids
        total = size * len(ids)
        value = index / size + (device_id - ids.start + 1) / total
        return int(value * 100)

    async def _probe_device(self, link: _RtuLink, details: ConnectionDetails, device_id: int) -> bool:
        """Probe one unit; return whether to pause before the next one."""
        request = self._params.request
        frame = ModbusMessage.from_pdu(request, ProtocolType.RTU, device_id, request=True).raw_data()

        if device_id == 0:
            await link.transact(frame, 0.0)
            return False

        heard = False
        attempts = 2 if self._params.retry_on_timeout else 1
        for _ in range(attempts):
            try:
                raw = await link.transact(frame, self._timeout)
            except OSError:
                return True
            if not raw:
                continue
            if not heard:
                heard = True
                self.found.emit(details, device_id, True)
            reply = ModbusMessage.from_raw(raw, ProtocolType.RTU, request=False)
            if (
                reply.is_valid()
                and reply.device_id() == device_id
                and reply.function_code() == request.function_code
            ):
                if _is_device_reply(reply.adu.pdu()):
                    self.found.emit(details, device_id, False)
                return True
        return False