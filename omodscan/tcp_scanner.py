"""Scan of Modbus TCP servers for unit identifiers that answer a request."""

from __future__ import annotations

import asyncio
import ipaddress
import socket
import struct
from collections import deque

from omodscan.adu import ExceptionCode, Pdu
from omodscan.connection import ConnectionDetails
from omodscan.scanner import ModbusScanner, ScanParams

_GATEWAY_EXCEPTIONS = (
    ExceptionCode.GATEWAY_PATH_UNAVAILABLE,
    ExceptionCode.GATEWAY_TARGET_DEVICE_FAILED_TO_RESPOND,
)

Found = tuple[ConnectionDetails, int, bool]


def _is_device_reply(pdu: Pdu) -> bool:
    """A reply proves a device unless it is a gateway's "nobody there" exception."""
    return not (pdu.is_exception() and pdu.exception_code() in _GATEWAY_EXCEPTIONS)


def _ipv4_key(details: ConnectionDetails) -> int:
    try:
        return int(ipaddress.IPv4Address(details.tcp_params.ip_address))
    except ValueError:
        return 0


async def _probe(details: ConnectionDetails, timeout: float) -> tuple[ConnectionDetails, bool]:
    """Check whether a TCP connection to the server can be opened."""
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(
                details.tcp_params.ip_address,
                details.tcp_params.service_port,
                family=socket.AF_INET,
            ),
            timeout,
        )
    except (OSError, asyncio.TimeoutError):
        return details, False
    writer.close()
    return details, True


class _TcpClient:
    """Minimal Modbus TCP client sending raw PDUs."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._reader = reader
        self._writer = writer
        self._transaction = 0

    @classmethod
    async def open(cls, host: str, port: int, timeout: float) -> _TcpClient:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port, family=socket.AF_INET), timeout
        )
        return cls(reader, writer)

    async def request(self, pdu: Pdu, unit: int, timeout: float) -> Pdu:
        """Send ``pdu`` to ``unit`` and return the matching reply PDU.

        Raises ``asyncio.TimeoutError`` when no reply comes in time and
        ``ConnectionError`` when the link fails.
        """
        self._transaction = (self._transaction + 1) & 0xFFFF
        transaction = self._transaction
        frame = (
            struct.pack(">HHHBB", transaction, 0, (pdu.size() + 1) & 0xFFFF, unit & 0xFF, pdu.code & 0xFF)
            + pdu.data
        )
        try:
            self._writer.write(frame)
            await self._writer.drain()
            return await asyncio.wait_for(self._read_reply(transaction), timeout)
        except asyncio.TimeoutError:
            raise
        except (EOFError, OSError) as exc:
            raise ConnectionError(str(exc) or "connection lost") from exc

    async def _read_reply(self, transaction: int) -> Pdu:
        while True:
            header = await self._reader.readexactly(7)
            reply_id, _protocol, length, _unit = struct.unpack(">HHHB", header)
            if length < 2:
                raise ConnectionError("malformed Modbus TCP frame")
            body = await self._reader.readexactly(length - 1)
            if reply_id == transaction:
                return Pdu(body[0], bytes(body[1:]))

    def close(self) -> None:
        try:
            self._writer.close()
        except (OSError, RuntimeError):
            pass


class ModbusTcpScanner(ModbusScanner):
    """Finds reachable servers first, then probes each one's unit identifiers in turn."""

    def __init__(self, params: ScanParams, tick_interval: float = 1.0) -> None:
        super().__init__(tick_interval)
        self._params = params
        self._processed_socket_count = 0
        self._conn_params: deque[ConnectionDetails] = deque()
        self._worker: asyncio.Task[None] | None = None

    def start_scan(self) -> None:
        self._cancel_worker()
        super().start_scan()
        self._conn_params.clear()
        self._processed_socket_count = 0
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
        params = self._params
        if not params.conn_params:
            self.stop_scan()
            return

        probes = [asyncio.ensure_future(_probe(details, self._timeout)) for details in params.conn_params]
        try:
            for next_done in asyncio.as_completed(probes):
                details, connected = await next_done
                self._process_socket(details, connected)
        finally:
            for probe in probes:
                probe.cancel()

        self._conn_params = deque(sorted(self._conn_params, key=_ipv4_key))
        while self._conn_params:
            if not self.in_progress():
                return
            await self._scan_connection(self._conn_params.popleft())

        if self.in_progress():
            self.stop_scan()

    def _process_socket(self, details: ConnectionDetails, connected: bool) -> None:
        if not self.in_progress():
            return
        self._processed_socket_count += 1
        if connected:
            self._conn_params.append(details)
        else:
            unreachable = self._processed_socket_count - len(self._conn_params)
            value = unreachable * 100.0 / len(self._params.conn_params)
            self.progress.emit(details, self._params.device_ids.start, int(value))

    def _progress_percent(self, device_id: int) -> int:
        ids = self._params.device_ids
        current = (device_id - ids.start + 1) / len(ids)
        remaining = len(self._conn_params)
        done = (self._processed_socket_count - remaining - 1) / len(self._params.conn_params)
        value = done + (1 - done) * current / (remaining + 1)
        return int(value * 100)

    async def _scan_connection(self, details: ConnectionDetails) -> None:
        try:
            client = await _TcpClient.open(
                details.tcp_params.ip_address, details.tcp_params.service_port, self._timeout
            )
        except (OSError, asyncio.TimeoutError):
            return
        try:
            for device_id in self._params.device_ids:
                if not self.in_progress():
                    return
                self.progress.emit(details, device_id, self._progress_percent(device_id))
                if await self._probe_device(client, details, device_id):
                    await asyncio.sleep(self._timeout)
        finally:
            client.close()

    async def _probe_device(self, client: _TcpClient, details: ConnectionDetails, device_id: int) -> bool:
        """Probe one unit; return whether to pause before the next one."""
        attempts = 2 if self._params.retry_on_timeout else 1
        for _ in range(attempts):
            try:
                reply = await client.request(self._params.request, device_id, self._timeout)
            except asyncio.TimeoutError:
                continue
            except ConnectionError:
                return True
            if _is_device_reply(reply):
                self.found.emit(details, device_id, False)
            return True
        return False