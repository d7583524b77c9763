# vcontrol

Talk to heating controllers through their Optolink interface, either over a
serial adapter (4800 baud, 8 data bits, even parity, 2 stop bits) or over a
TCP bridge. The package detects the link protocol (VS2, falling back to VS1),
identifies the connected device and lets you read and write its values by
name.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Command catalog

Which addresses exist, how their bytes are decoded, and which devices are
known is described by five YAML files in one directory:

| File                          | Content                                            |
|-------------------------------|----------------------------------------------------|
| `translations.used.yml`       | translation id → text                              |
| `mappings.used.yml`           | mapping id → { value code → translation id }       |
| `event_types.used.yml`        | command id → command definition (with a `name`)    |
| `system_event_types.used.yml` | command name → command definition                  |
| `devices.used.yml`            | device name → device definition                    |

A command definition holds `addr`, `mode` (`read`, `write`, `read_write`),
`data_type`, `parameter`, `block_len`, `byte_len`, `byte_pos`, `bit_pos`, and
optionally `block_count`, `bit_len`, `conversion` (with `conversion_factor`
and `conversion_offset` for `mul_offset`), `lower_border`, `upper_border`,
`unit` and `mapping` (a mapping id). A device definition holds `id`,
optionally `id_ext`, `id_ext_till`, `f0`, `f0_till`, a list of `commands`
(command ids) and an `error_mapping` (a mapping id).

The system commands must include `device_id` (and may include
`device_id_f0`); they are used to identify the connected device.

```python
from vcontrol.catalog import Catalog

catalog = Catalog.load("path/to/catalog")
```

`Catalog.from_data(...)` builds the same from already parsed data, and
`catalog.detect_device(device_id, device_id_f0)` picks the matching device.

## Using the library

```python
from vcontrol.catalog import Catalog
from vcontrol.client import VControl
from vcontrol.optolink import Optolink

catalog = Catalog.load("path/to/catalog")

with Optolink.open("/dev/ttyUSB0") as optolink:
    client = VControl.connect(optolink, catalog)
    print(client.device.name, client.protocol)

    output = client.get("device_id")
    print(output)            # human readable, with unit and mapped text
    print(output.to_json())  # JSON-friendly form
```

To reach an Optolink adapter exposed over the network, use
`Optolink.connect("localhost", 1234)` instead of `Optolink.open(...)`;
`Optolink.from_socket(sock)` wraps a socket you have already connected.

`client.get(name)` returns an `OutputValue` whose `value` is an `int`,
`float`, `bytes`, `str`, a `list` of values, one of `Date`, `DateTime`,
`CircuitTimes`, `ErrorRecord`, `DeviceId`, `DeviceIdF0`, or `None` when the
controller reports an empty value (all bytes `0xFF`).

Writing works the same way; the value is converted back, range-checked and
encoded according to the command's definition before it is sent:

```python
client.set("<command name>", 21.5)
```

Errors are raised as subclasses of `vcontrol.errors.VControlError`, for
example `UnsupportedCommandError` for an unknown command name,
`UnsupportedModeError` when a command cannot be read or written,
`InvalidArgumentError` for an out-of-range or wrongly typed value, and
`UnsupportedDeviceError` when no catalog device matches. Link failures
surface as `OSError` or `EOFError`.

### Lower level access

`vcontrol.protocol.Protocol` gives raw access to addresses:

```python
from vcontrol.protocol import Protocol

protocol = Protocol.detect(optolink)   # None if neither protocol answers
data = protocol.get(optolink, 0x00F8, 2)
protocol.set(optolink, 0x2323, b"\x01")
```

Decoded value types live in `vcontrol.date_time`, `vcontrol.circuit_time`,
`vcontrol.device_id` and `vcontrol.error_record`; conversion helpers in
`vcontrol.value`.

## Command line

Installing the package provides the `vcontrol` command. Connect either with
`-d/--device` (a serial port) or with `-p/--port` and optionally
`-h/--host` (default `localhost`). `-c/--catalog` names the catalog
directory (default `codegen`). Since `-h` selects the host, help is shown
with `-?` or `--help`.

```
vcontrol --device /dev/ttyUSB0 get device_id
vcontrol --host localhost --port 1234 get device_id
vcontrol --device /dev/ttyUSB0 set <command name> <value>
vcontrol --device /dev/ttyUSB0 dump
vcontrol --device /dev/ttyUSB0 scan --cache scan-cache.yml
```

- `get` prints the value as JSON.
- `set` reads the value as JSON when possible and otherwise takes it as a
  plain string.
- `dump` prints every readable command with a non-empty value, sorted by
  name; commands that fail are reported on standard error.
- `scan` needs no catalog: it reads one byte from every address from
  `0x0000` to `0xFFFE`, skips addresses already in the cache file, and
  appends lines of the form `0x00F8: 32` to it (default `scan-cache.yml`).

The exit status is 0 on success and 1 on an error.

## What is not included

- No catalog data ships with the package; you must provide the YAML files
  described above.
- There is no server mode: values can only be read and written through the
  library or the command line, not over HTTP or any other network API.