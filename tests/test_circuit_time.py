import json

import pytest

from vcontrol.circuit_time import CircuitTime, CircuitTimes, Time, TimeSpan
from vcontrol.errors import InvalidFormatError


def test_time_from_str_24():
    assert Time.parse(json.loads('"24:00"')) == Time(24, 0)


def test_time_from_byte_unset():
    assert Time.from_byte(0xFF) is None


def test_time_byte_round_trip():
    for hour in range(25):
        for minute in range(0, 60, 10):
            time = Time(hour, minute)
            assert Time.from_byte(time.to_byte()) == time


def test_time_from_byte_invalid():
    with pytest.raises(InvalidFormatError):
        Time.from_byte(0b00000110)


@pytest.mark.parametrize(
    "text, message",
    [
        ("a0:00", "first hour character is not a number"),
        ("0a:00", "second hour character is not a number"),
        ("00-00", "separator is not ':'"),
        ("00:a0", "first minute character is not a number"),
        ("00:0", "second minute character is not a number"),
        ("25:00", "hour out of range"),
        ("12:60", "minute out of range"),
    ],
)
def test_time_parse_errors(text, message):
    with pytest.raises(InvalidFormatError) as info:
        Time.parse(text)
    assert str(info.value) == message


def test_time_display_round_trip():
    time = Time(6, 30)
    assert str(time) == "06:30"
    assert Time.parse(str(time)) == time


def test_time_span_display():
    assert str(TimeSpan(Time(6, 0), Time(22, 30))) == "06:00 – 22:30"


def test_circuit_time_bytes_round_trip():
    data = bytes([Time(6, 0).to_byte(), Time(8, 0).to_byte(), 0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF])
    circuit = CircuitTime.from_bytes(data)
    assert circuit.spans[0] == TimeSpan(Time(6, 0), Time(8, 0))
    assert circuit.spans[1:] == (None, None, None)
    assert circuit.to_bytes() == data


def test_circuit_time_half_set_span_is_none():
    data = bytes([Time(6, 0).to_byte(), 0xFF] + [0xFF] * 6)
    assert CircuitTime.from_bytes(data).spans[0] is None


def test_circuit_time_display():
    circuit = CircuitTime((TimeSpan(Time(6, 0), Time(8, 0)), None, None, None))
    assert str(circuit) == "06:00 – 08:00, --:-- – --:--, --:-- – --:--, --:-- – --:--"
    assert repr(circuit).startswith("CircuitTime(06:00")


def test_circuit_time_needs_four_spans():
    with pytest.raises(InvalidFormatError):
        CircuitTime((None, None))


def test_circuit_times_round_trip():
    data = bytes(range(0, 56 * 2, 2))
    data = bytes(b if Time.from_byte_safe_ok(b) else 0xFF for b in data) if False else bytes(
        Time(i % 25, (i % 6) * 10).to_byte() for i in range(56)
    )
    times = CircuitTimes.from_bytes(data)
    assert times.to_bytes() == data


def test_circuit_times_json_round_trip():
    data = bytes([Time(6, 0).to_byte(), Time(22, 0).to_byte()] + [0xFF] * 6) * 7
    times = CircuitTimes.from_bytes(data)
    encoded = times.to_json()
    assert encoded["mon"][0] == {"from": "06:00", "to": "22:00"}
    assert encoded["sun"][3] is None
    assert CircuitTimes.from_json(json.loads(json.dumps(encoded))) == times


def test_circuit_times_wrong_length():
    with pytest.raises(InvalidFormatError):
        CircuitTimes.from_bytes(bytes(55))


def test_circuit_times_from_json_missing_day():
    with pytest.raises(InvalidFormatError):
        CircuitTimes.from_json({"mon": [None, None, None, None]})