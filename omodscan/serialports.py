"""Discovery of serial ports present on the system."""

from __future__ import annotations

import os
import re
import sys

from serial.tools import list_ports

_SYS_TTY = "/sys/class/tty"
_NON_DIGITS = re.compile(r"\D")


def is_virtual_port(port_name: str) -> bool:
    """Whether a Linux tty is a placeholder 8250 platform port; always False elsewhere."""
    if not sys.platform.startswith("linux"):
        return False
    link = os.path.join(_SYS_TTY, port_name)
    if not os.path.islink(link):
        return False
    return "platform/serial8250" in os.path.realpath(link)


def _port_number(name: str) -> int:
    digits = _NON_DIGITS.sub("", name)
    try:
        return int(digits)
    except ValueError:
        return 0


def available_serial_ports(exclude_virtuals: bool = False) -> list[str]:
    """Names of the available serial ports, ordered by the number in their name."""
    names = [port.name or os.path.basename(port.device) for port in list_ports.comports()]
    if exclude_virtuals:
        names = [name for name in names if not is_virtual_port(name)]
    return sorted(names, key=_port_number)