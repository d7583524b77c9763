import pytest

from vcontrol.catalog import Catalog
from vcontrol.client import VControl
from vcontrol.error_record import ErrorRecord
from vcontrol.errors import (
    InvalidArgumentError,
    UnsupportedCommandError,
    UnsupportedDeviceError,
    UnsupportedModeError,
)
from vcontrol.protocol import Protocol
from vcontrol.vs2 import checksum

DEVICE_ID_BYTES = bytes([0x20, 0xCB, 0x00, 0x08, 0x00, 0x00, 0x01, 0x46])
ERROR_BYTES = bytes([0xAC, 0x20, 0x18, 0x12, 0x23, 0x07, 0x17, 0x49, 0x31])


class FakeController:
    """Answers like a controller speaking the VS2 protocol."""

    def __init__(self, memory):
        self.memory = dict(memory)
        self.pending = bytearray()
        self.fail_reads = 0
        self.mute = False
        self.reinitialized = 0
        self.closed = False

    def write_all(self, data):
        data = bytes(data)
        if data == b"\x04":
            if not self.mute:
                self.pending.append(0x05)
        elif data == b"\x16\x00\x00":
            self.pending.append(0x06)
        elif data[0] == 0x41:
            self._telegram(data)

    def _telegram(self, data):
        function = data[3]
        addr = int.from_bytes(data[4:6], "big")
        length = data[6]
        if function == 1:
            payload = self.memory.get(addr, b"\xff" * length)
            body = bytes([1, function]) + data[4:6] + bytes([length]) + payload
        else:
            self.memory[addr] = data[7 : 7 + length]
            body = bytes([1, function]) + data[4:6] + bytes([length])
        framed = bytes([len(body)]) + body
        self.pending += bytes([0x06, 0x41]) + framed + bytes([checksum(framed)])

    def read_exact(self, size):
        if self.fail_reads:
            self.fail_reads -= 1
            raise EOFError("line dropped")
        if len(self.pending) < size:
            raise EOFError("no data")
        data = bytes(self.pending[:size])
        del self.pending[:size]
        return data

    def flush(self):
        pass

    def purge(self):
        self.pending.clear()

    def reinitialize(self):
        self.reinitialized += 1
        self.mute = False

    def close(self):
        self.closed = True


def _data():
    translations = {1: "Burner fault", 2: "Off", 3: "On"}
    mappings = {10: {0: 2, 1: 3}, 20: {0xAC: 1}}
    commands = {
        100: {
            "name": "outside_temp",
            "addr": 0x0800,
            "mode": "read",
            "data_type": "Double",
            "parameter": "s_int",
            "block_len": 2,
            "byte_len": 2,
            "byte_pos": 0,
            "bit_pos": 0,
            "conversion": "div10",
            "unit": "°C",
        },
        101: {
            "name": "pump_state",
            "addr": 0x2906,
            "mode": "read_write",
            "data_type": "Int",
            "parameter": "byte",
            "block_len": 1,
            "byte_len": 1,
            "byte_pos": 0,
            "bit_pos": 0,
            "lower_border": 0,
            "upper_border": 1,
            "mapping": "10",
        },
        102: {
            "name": "error_history_1",
            "addr": 0x7507,
            "mode": "read",
            "data_type": "Error",
            "parameter": "array",
            "block_len": 9,
            "byte_len": 9,
            "byte_pos": 0,
            "bit_pos": 0,
        },
    }
    system_commands = {
        "device_id": {
            "addr": 0x00F8,
            "mode": "read",
            "data_type": "DeviceId",
            "parameter": "array",
            "block_len": 8,
            "byte_len": 8,
            "byte_pos": 0,
            "bit_pos": 0,
        },
        "device_id_f0": {
            "addr": 0x00F0,
            "mode": "read",
            "data_type": "DeviceIdF0",
            "parameter": "array",
            "block_len": 2,
            "byte_len": 2,
            "byte_pos": 0,
            "bit_pos": 0,
        },
    }
    devices = {
        "VScotHO1_4": {"id": 0x20CB, "id_ext": 0x0008, "commands": [100, 101, 102], "error_mapping": 20},
    }
    return translations, mappings, commands, system_commands, devices


@pytest.fixture
def catalog():
    return Catalog.from_data(*_data())


@pytest.fixture
def controller():
    return FakeController(
        {
            0x00F8: DEVICE_ID_BYTES,
            0x0800: bytes([0xEB, 0x00]),
            0x2906: b"\x01",
            0x7507: ERROR_BYTES,
        }
    )


@pytest.fixture
def client(controller, catalog):
    return VControl.connect(controller, catalog)


def test_connect_detects_protocol_and_device(client):
    assert client.protocol is Protocol.VS2
    assert client.device.name == "VScotHO1_4"
    assert client.connected is True


def test_get_converted_value_with_unit(client):
    output = client.get("outside_temp")
    assert output.value == pytest.approx(23.5)
    assert output.unit == "°C"


def test_get_mapped_value(client):
    output = client.get("pump_state")
    assert output.value == 1
    assert str(output) == "On"


def test_get_error_uses_device_errors(client):
    output = client.get("error_history_1")
    assert output.value == ErrorRecord.from_bytes(ERROR_BYTES)
    assert output.mapping == {0xAC: "Burner fault"}
    assert str(output) == "Burner fault"


def test_set_round_trip(client, controller):
    client.set("pump_state", 0)
    assert controller.memory[0x2906] == b"\x00"
    assert client.get("pump_state").value == 0


def test_set_out_of_bounds(client):
    with pytest.raises(InvalidArgumentError):
        client.set("pump_state", 2)


def test_set_read_only_command(client):
    with pytest.raises(UnsupportedModeError):
        client.set("outside_temp", 1.0)


def test_unknown_command(client):
    with pytest.raises(UnsupportedCommandError):
        client.get("no_such_command")


def test_system_command_is_available(client):
    assert client.command_by_name("device_id").addr == 0x00F8
    assert client.get("device_id").value.to_bytes() == DEVICE_ID_BYTES


def test_unsupported_device(catalog):
    controller = FakeController({0x00F8: bytes([0x20, 0x99, 0x00, 0x08, 0x00, 0x00, 0x01, 0x46])})
    with pytest.raises(UnsupportedDeviceError) as info:
        VControl.connect(controller, catalog)
    assert info.value.device_id.id == 0x99
    assert info.value.device_id_f0 is None


def test_failed_read_renegotiates(client, controller):
    controller.fail_reads = 1
    with pytest.raises(EOFError):
        client.get("outside_temp")
    assert client.connected is False
    assert client.get("outside_temp").value == pytest.approx(23.5)
    assert client.connected is True
    assert controller.reinitialized == 0


def test_failed_negotiation_reinitializes(client, controller):
    controller.fail_reads = 1
    with pytest.raises(EOFError):
        client.get("pump_state")
    controller.mute = True
    assert client.get("pump_state").value == 1
    assert controller.reinitialized == 1


def test_close_closes_link(client, controller):
    with client:
        output = client.get("pump_state")
    assert output.value == 1
    assert controller.closed is True