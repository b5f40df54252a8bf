"""Common state and notifications of a Modbus device scan."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable

from omodscan.adu import Pdu
from omodscan.connection import ConnectionDetails


@dataclass
class ScanParams:
    """What to scan: connections, device ids and the probing request."""

    timeout: int = 1000
    retry_on_timeout: bool = False
    device_ids: range = range(1, 11)
    request: Pdu = field(default_factory=Pdu)
    conn_params: list[ConnectionDetails] = field(default_factory=list)


class _Signal:
    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []

    def connect(self, slot: Callable[..., Any]) -> None:
        self._slots.append(slot)

    def disconnect(self, slot: Callable[..., Any]) -> None:
        self._slots.remove(slot)

    def emit(self, *args: Any) -> None:
        for slot in list(self._slots):
            slot(*args)


class ModbusScanner:
    """Scan lifecycle with a once-per-interval elapsed-time counter.

    Notifications: ``finished()``, ``timeout(seconds)``,
    ``found(details, device_id, dubious)``, ``progress(details, device_id, percent)``
    and ``error_occurred(message)``.
    """

    def __init__(self, tick_interval: float = 1.0) -> None:
        self.finished = _Signal()
        self.timeout = _Signal()
        self.found = _Signal()
        self.progress = _Signal()
        self.error_occurred = _Signal()
        self._tick_interval = tick_interval
        self._scan_time = 0
        self._in_progress = False
        self._timer: asyncio.Task[None] | None = None
        self._stopped = asyncio.Event()

    @property
    def scan_time(self) -> int:
        return self._scan_time

    def start_scan(self) -> None:
        """Mark the scan running and start the elapsed-time counter; needs a running loop."""
        loop = asyncio.get_running_loop()
        self._cancel_timer()
        self._scan_time = 0
        self._in_progress = True
        self._stopped.clear()
        self._timer = loop.create_task(self._tick())

    def stop_scan(self) -> None:
        self._in_progress = False
        self._cancel_timer()
        self._stopped.set()
        self.finished.emit()

    def in_progress(self) -> bool:
        return self._in_progress

    async def scan(self) -> None:
        """Start the scan and wait until it is stopped."""
        self.start_scan()
        await self._stopped.wait()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            self._scan_time += 1
            self.timeout.emit(self._scan_time)