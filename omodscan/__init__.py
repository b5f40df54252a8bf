"""Modbus client toolkit: RTU/TCP framing, message decoding, value formatting, settings and device scanning."""

__version__ = "1.9.2"