import pytest

from vcontrol.device_id import DeviceId, DeviceIdF0
from vcontrol.errors import InvalidFormatError

SAMPLE = bytes([0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07, 0x08])


def test_from_bytes_fields():
    device_id = DeviceId.from_bytes(SAMPLE)
    assert device_id.group_id == SAMPLE[0]
    assert device_id.id == SAMPLE[1]
    assert device_id.hardware_index == SAMPLE[2]
    assert device_id.software_index == SAMPLE[3]
    assert device_id.protocol_version_lda == SAMPLE[4]
    assert device_id.protocol_version_rda == SAMPLE[5]
    assert device_id.developer_version == 0x0708


def test_round_trip():
    assert DeviceId.from_bytes(SAMPLE).to_bytes() == SAMPLE


def test_round_trip_high_values():
    data = bytes([0xFF] * 8)
    assert DeviceId.from_bytes(data).to_bytes() == data


@pytest.mark.parametrize("length", [0, 7, 9])
def test_wrong_length(length):
    with pytest.raises(InvalidFormatError):
        DeviceId.from_bytes(bytes(length))


def test_f0_big_endian():
    assert DeviceIdF0.from_bytes(b"\x12\x34").value == 0x1234


def test_f0_wrong_length():
    with pytest.raises(InvalidFormatError):
        DeviceIdF0.from_bytes(b"\x12")


def test_equality():
    assert DeviceId.from_bytes(SAMPLE) == DeviceId.from_bytes(bytearray(SAMPLE))