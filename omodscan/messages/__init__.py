"""Typed Modbus request and response messages and the factory that picks them by function code."""