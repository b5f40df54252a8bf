import asyncio
import contextlib
import socket
import struct

import pytest

from omodscan.adu import FunctionCode, Pdu
from omodscan.connection import ConnectionDetails, TcpConnectionParams
from omodscan.scanner import ScanParams
from omodscan.tcp_scanner import ModbusTcpScanner

REQUEST = Pdu(FunctionCode.READ_HOLDING_REGISTERS, bytes([0, 0, 0, 1]))


@contextlib.asynccontextmanager
async def modbus_server(replies):
    seen = []

    async def handle(reader, writer):
        try:
            while True:
                header = await reader.readexactly(7)
                tid, _pid, length, unit = struct.unpack(">HHHB", header)
                await reader.readexactly(length - 1)
                seen.append(unit)
                reply = replies.get(unit)
                if reply is not None:
                    writer.write(struct.pack(">HHHB", tid, 0, len(reply) + 1, unit) + reply)
                    await writer.drain()
        except (asyncio.IncompleteReadError, ConnectionError):
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        yield port, seen
    finally:
        server.close()
        await server.wait_closed()


def closed_port():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def details(port):
    return ConnectionDetails(tcp_params=TcpConnectionParams(service_port=port, ip_address="127.0.0.1"))


class Recorder:
    def __init__(self, scanner):
        self.progress = []
        self.finished = 0
        scanner.progress.connect(lambda cd, dev, pct: self.progress.append((cd, dev, pct)))
        scanner.finished.connect(self._on_finished)

    def _on_finished(self):
        self.finished += 1


REPLIES = {
    1: bytes([0x03, 0x02, 0x00, 0x07]),
    2: bytes([0x83, 0x0B]),
    3: bytes([0x83, 0x02]),
}


@pytest.mark.asyncio
async def test_finds_answering_units():
    async with modbus_server(REPLIES) as (port, seen):
        cd = details(port)
        params = ScanParams(timeout=40, device_ids=range(1, 5), request=REQUEST, conn_params=[cd])
        scanner = ModbusTcpScanner(params)
        recorder = Recorder(scanner)
        found = await asyncio.wait_for(scanner.scan(), 5)
    assert found == [(cd, 1, False), (cd, 3, False)]
    assert seen == [1, 2, 3, 4]
    assert recorder.finished == 1
    assert not scanner.in_progress()
    percents = [pct for _, _, pct in recorder.progress]
    assert percents == sorted(percents)
    assert percents[-1] == 100


@pytest.mark.asyncio
async def test_unreachable_server_reports_progress_only():
    cd = details(closed_port())
    params = ScanParams(timeout=200, device_ids=range(1, 3), request=REQUEST, conn_params=[cd])
    scanner = ModbusTcpScanner(params)
    recorder = Recorder(scanner)
    found = await asyncio.wait_for(scanner.scan(), 5)
    assert found == []
    assert [(c, d) for c, d, _ in recorder.progress] == [(cd, 1)]
    assert recorder.finished == 1


@pytest.mark.asyncio
async def test_only_reachable_connection_is_scanned():
    async with modbus_server(REPLIES) as (port, seen):
        live = details(port)
        dead = details(closed_port())
        params = ScanParams(timeout=30, device_ids=range(1, 2), request=REQUEST, conn_params=[dead, live])
        found = await asyncio.wait_for(ModbusTcpScanner(params).scan(), 5)
    assert found == [(live, 1, False)]
    assert seen == [1]


@pytest.mark.asyncio
async def test_empty_connection_list_finishes():
    scanner = ModbusTcpScanner(ScanParams(request=REQUEST))
    recorder = Recorder(scanner)
    found = await asyncio.wait_for(scanner.scan(), 5)
    assert found == []
    assert recorder.finished == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("retry, expected", [(False, [5]), (True, [5, 5])])
async def test_retry_on_timeout(retry, expected):
    async with modbus_server({}) as (port, seen):
        params = ScanParams(
            timeout=40,
            retry_on_timeout=retry,
            device_ids=range(5, 6),
            request=REQUEST,
            conn_params=[details(port)],
        )
        found = await asyncio.wait_for(ModbusTcpScanner(params).scan(), 5)
        await asyncio.sleep(0.02)
    assert found == []
    assert seen == expected


@pytest.mark.asyncio
async def test_stop_scan_cancels_work():
    async with modbus_server({}) as (port, seen):
        params = ScanParams(timeout=5000, device_ids=range(1, 10), request=REQUEST, conn_params=[details(port)])
        scanner = ModbusTcpScanner(params)
        recorder = Recorder(scanner)
        scanner.start_scan()
        assert scanner.in_progress()
        await asyncio.sleep(0.2)
        scanner.stop_scan()
        await asyncio.sleep(0.05)
        assert not scanner.in_progress()
        assert recorder.finished == 1
        assert seen == [1]