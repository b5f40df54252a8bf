# omodscan

A library for the client (master) side of Modbus. It frames and decodes
RTU and TCP messages, formats register values for display, holds connection
settings, and scans TCP servers or serial lines for units that answer.

## What is in it

| Module | Contents |
| --- | --- |
| `omodscan.byteorder` | `ByteOrder` (`DIRECT`, `SWAPPED`), `make_uint16`, `break_uint16`, `make_uint32`, `make_int32`, `make_float`, `make_uint64`, `make_int64`, `make_double`, `to_byte_order_value` |
| `omodscan.adu` | `FunctionCode`, `ExceptionCode`, `Pdu`, the frame classes `RtuAdu` and `TcpAdu` (base `ModbusAdu`), and `calculate_crc` |
| `omodscan.messages.message` | `ProtocolType` (`RTU`, `TCP`) and `ModbusMessage`, built with `from_pdu` or `from_raw` |
| `omodscan.messages.read` | request/response messages for read coils, discrete inputs, holding and input registers, exception status, FIFO queue and file record |
| `omodscan.messages.write` | request/response messages for write single coil/register, write multiple coils/registers, read/write multiple registers, write file record and mask write register |
| `omodscan.messages.diagnostics` | diagnostics, comm event counter, comm event log and report server id messages |
| `omodscan.messages.factory` | `create_from_pdu` and `create_from_raw`, which pick the message class from the function code |
| `omodscan.formatting` | `DataDisplayMode`, `RegisterType` and the `format_*` functions |
| `omodscan.connection` | `ConnectionDetails`, `TcpConnectionParams`, `SerialConnectionParams`, `ModbusProtocolSelections` and their enums |
| `omodscan.scanner` | `ScanParams` and the `ModbusScanner` base class |
| `omodscan.tcp_scanner` | `ModbusTcpScanner` |
| `omodscan.rtu_scanner` | `ModbusRtuScanner` |
| `omodscan.validators` | `HexValidator`, `Int64Validator`, `UIntValidator` returning a `ValidatorState` |
| `omodscan.recentfiles` | `RecentFileList`, up to ten recent files, saved as JSON |
| `omodscan.serialports` | `available_serial_ports` and `is_virtual_port` |

## Installation

```
pip install omodscan
```

Python 3.10 or later is required. Serial access uses `pyserial`.

## Examples

Decode a raw RTU frame. The factory returns the class that matches the
function code, here `ReadHoldingRegistersRequest`:

```python
from datetime import datetime
from omodscan.messages.factory import create_from_raw
from omodscan.messages.message import ProtocolType

frame = bytes.fromhex("010300000002c40b")
msg = create_from_raw(frame, ProtocolType.RTU, datetime.now(), request=True)
print(type(msg).__name__, msg.is_valid(), msg.start_address(), msg.length())
```

Build a TCP frame from a PDU:

```python
from omodscan.adu import FunctionCode, Pdu
from omodscan.messages.message import ModbusMessage, ProtocolType

pdu = Pdu(FunctionCode.READ_COILS, bytes.fromhex("00000008"))
msg = ModbusMessage.from_pdu(pdu, ProtocolType.TCP, device_id=1, request=True)
print(bytes(msg).hex(" "))
```

`calculate_crc` returns the RTU CRC with its bytes swapped, so it is appended
big-endian:

```python
from omodscan.adu import calculate_crc

body = bytes.fromhex("010300000002")
frame = body + calculate_crc(body).to_bytes(2, "big")
```

The point formatters return the text and the value shown:

```python
from omodscan.byteorder import ByteOrder
from omodscan.formatting import RegisterType, format_hex_value

text, value = format_hex_value(RegisterType.HOLDING_REGISTERS, 0x1234, ByteOrder.DIRECT)
```

Connection settings can be written to and read from a binary stream, or saved
to and loaded from any string-keyed mapping; loading normalises out-of-range
values:

```python
import io
from omodscan.connection import ConnectionDetails

details = ConnectionDetails()
buffer = io.BytesIO()
details.write(buffer)
buffer.seek(0)
assert ConnectionDetails.read(buffer) == details

settings = {}
details.save(settings)
restored = ConnectionDetails.load(settings)
```

## Scanning

Scanners run on asyncio. `scan()` starts a scan, waits for it to finish and
returns a list of `(details, device_id, dubious)` tuples:

```python
import asyncio
from omodscan.adu import FunctionCode, Pdu
from omodscan.connection import ConnectionDetails, TcpConnectionParams
from omodscan.scanner import ScanParams
from omodscan.tcp_scanner import ModbusTcpScanner

params = ScanParams(
    timeout=500,
    device_ids=range(1, 5),
    request=Pdu(FunctionCode.READ_HOLDING_REGISTERS, bytes.fromhex("00000001")),
    conn_params=[ConnectionDetails(tcp_params=TcpConnectionParams(ip_address="127.0.0.1"))],
)
found = asyncio.run(ModbusTcpScanner(params).scan())
```

`ModbusTcpScanner` first checks which servers accept a connection, then probes
each one's unit ids in turn, ordered by IPv4 address. `ModbusRtuScanner` opens
each serial connection in `conn_params` and probes every unit id. Any reply
bytes count as a *dubious* find, and a valid matching reply counts as a sure
one. It takes an optional `transport_factory`, which receives the connection
details and returns an object with `async transact(frame, timeout)` and
`close()`.

While running, a scanner also reports through callbacks attached with
`connect`: `found`, `progress` (an integer percentage), `timeout` (seconds
elapsed), `finished` and `error_occurred`. `start_scan()` and `stop_scan()`
control a scan directly; `start_scan()` needs a running event loop.

## What it does not do

This is a library only. It has no command-line program and no graphical
interface. It does not poll devices continuously, simulate data, or act as a
Modbus server. Its only transports are the TCP client and serial link used by
the scanners. ASCII framing is not implemented; `TransmissionMode.ASCII`
exists only as a stored setting.

## Running the tests

```
pip install -e ".[test]"
pytest
```