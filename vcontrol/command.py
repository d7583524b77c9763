"""Commands reading and writing values at controller addresses."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .circuit_time import CircuitTimes
from .date_time import Date, DateTime
from .device_id import DeviceId, DeviceIdF0
from .enums import AccessMode, Conversion, DataType, Parameter
from .error_record import ErrorRecord
from .errors import InvalidArgumentError, InvalidFormatError, UnsupportedModeError
from .value import ConversionError, _format_float, convert, convert_back

log = logging.getLogger(__name__)

_MASK32 = 0xFFFFFFFF

_HIGH_FIRST_READ = {
    Parameter.INT_HIGH_BYTE_FIRST,
    Parameter.INT4_HIGH_BYTE_FIRST,
    Parameter.S_INT_HIGH_BYTE_FIRST,
    Parameter.S_INT4_HIGH_BYTE_FIRST,
}

# parameter -> (size, byteorder, signed)
_LAYOUT = {
    Parameter.BYTE: (1, "little", False),
    Parameter.INT: (2, "little", False),
    Parameter.INT_HIGH_BYTE_FIRST: (2, "big", False),
    Parameter.INT4: (4, "little", False),
    Parameter.INT4_HIGH_BYTE_FIRST: (4, "big", False),
    Parameter.S_BYTE: (1, "little", True),
    Parameter.S_INT: (2, "little", True),
    Parameter.S_INT_HIGH_BYTE_FIRST: (2, "big", True),
    Parameter.S_INT4: (4, "little", True),
    Parameter.S_INT4_HIGH_BYTE_FIRST: (4, "big", True),
}

_DOUBLE_WIDTH = {
    Parameter.S_BYTE: 8,
    Parameter.S_INT: 16,
    Parameter.S_INT_HIGH_BYTE_FIRST: 16,
    Parameter.S_INT4: 32,
    Parameter.S_INT4_HIGH_BYTE_FIRST: 32,
}


def _to_i32(n: int) -> int:
    n &= _MASK32
    return n - (1 << 32) if n & 0x80000000 else n


def _saturate(number: float, bits: int, signed: bool) -> int:
    if math.isnan(number):
        return 0
    low, high = (-(1 << (bits - 1)), (1 << (bits - 1)) - 1) if signed else (0, (1 << bits) - 1)
    if number <= low:
        return low
    if number >= high:
        return high
    return int(number)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class Command:
    """A command which can be executed on an Optolink connection."""

    addr: int
    mode: AccessMode
    data_type: DataType
    parameter: Parameter
    block_count: Optional[int] = None
    block_len: int = 0
    byte_len: int = 0
    byte_pos: int = 0
    bit_pos: int = 0
    bit_len: Optional[int] = None
    conversion: Optional[Conversion] = None
    lower_bound: Optional[float] = None
    upper_bound: Optional[float] = None
    unit: Optional[str] = None
    mapping: Optional[Mapping[int, str]] = None

    @property
    def access_mode(self) -> AccessMode:
        return self.mode

    def _raw_number(self, data: bytes) -> int:
        n = 0
        if self.bit_len is not None:
            for i in range(self.bit_len):
                bit_pos = self.bit_pos + i - self.byte_pos * 8
                byte, bit = divmod(bit_pos, 8)
                n = ((n << 1) | (1 if data[byte] & (0x80 >> bit) else 0)) & _MASK32
        else:
            chosen = data[:4] if self.parameter in _HIGH_FIRST_READ else data[::-1][:4]
            for b in chosen:
                n = ((n << 8) | b) & _MASK32
        return _to_i32(n)

    def _parse_number(self, data: bytes) -> Any:
        n = self._raw_number(data)
        dt, param = self.data_type, self.parameter
        if dt is DataType.BYTE and param in (Parameter.BYTE, Parameter.S_BYTE):
            return n & 0xFF
        if dt is DataType.INT and param in _LAYOUT:
            return n
        if dt is DataType.DOUBLE and param in _LAYOUT:
            width = _DOUBLE_WIDTH.get(param)
            return float(n if width is None else _saturate(float(n), width, True))
        raise InvalidFormatError(f"data type {dt.name} with parameter {param.name} is not supported")

    def parse_value(self, data: bytes) -> Any:
        """Decode the bytes of one value."""
        data = bytes(data)
        if all(b == 0xFF for b in data):
            return None
        dt = self.data_type
        if dt is DataType.DEVICE_ID:
            value: Any = DeviceId.from_bytes(data)
        elif dt is DataType.DEVICE_ID_F0:
            value = DeviceIdF0.from_bytes(data)
        elif dt is DataType.DATE:
            value = Date.from_bytes(data)
        elif dt is DataType.DATE_TIME:
            value = DateTime.from_bytes(data)
        elif dt is DataType.CIRCUIT_TIMES:
            value = CircuitTimes.from_bytes(data)
        elif dt is DataType.ERROR_INDEX:
            if len(data) != 10:
                raise InvalidFormatError("array length is not 10")
            end = data.find(0)
            value = data if end < 0 else data[:end]
        elif dt is DataType.ERROR:
            value = ErrorRecord.from_bytes(data)
        elif dt is DataType.STRING:
            end = data.find(0)
            try:
                value = (data if end < 0 else data[:end]).decode("utf-8")
            except UnicodeDecodeError as err:
                raise InvalidFormatError(str(err)) from None
        elif dt is DataType.BYTE_ARRAY:
            value = data
        else:
            value = self._parse_number(data)

        if self.conversion is not None:
            try:
                value = convert(value, self.conversion)
            except ConversionError as err:
                log.warning("Failed to convert 0x%04X: %s", self.addr, err)
        return value

    def _check_bounds(self, n: Any, lower: Any, upper: Any, fmt) -> None:
        if lower is not None and n < lower:
            raise InvalidArgumentError(f"{fmt(n)} is less than minimum {fmt(lower)}")
        if upper is not None and n > upper:
            raise InvalidArgumentError(f"{fmt(n)} is greater than maximum {fmt(upper)}")

    def _layout(self) -> tuple[int, str, bool]:
        try:
            return _LAYOUT[self.parameter]
        except KeyError:
            raise InvalidFormatError(f"parameter {self.parameter.name} is not numeric") from None

    def encode_value(self, value: Any) -> bytes:
        """Encode a value into the bytes written to the device."""
        if self.conversion is not None:
            value = convert_back(value, self.conversion)
        dt = self.data_type
        if dt is DataType.DATE_TIME and isinstance(value, DateTime):
            return value.to_bytes()
        if dt is DataType.CIRCUIT_TIMES and isinstance(value, CircuitTimes):
            return value.to_bytes()
        if dt is DataType.BYTE_ARRAY and isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if dt is DataType.STRING and isinstance(value, str):
            return value.encode("utf-8")
        if dt is DataType.ERROR and isinstance(value, ErrorRecord):
            return value.to_bytes()
        if dt in (DataType.INT, DataType.BYTE) and _is_int(value):
            lower = int(self.lower_bound) if self.lower_bound is not None else None
            upper = int(self.upper_bound) if self.upper_bound is not None else None
            self._check_bounds(value, lower, upper, str)
            size, order, _ = self._layout()
            return (value & ((1 << (size * 8)) - 1)).to_bytes(size, order)
        if dt is DataType.DOUBLE and isinstance(value, float):
            self._check_bounds(value, self.lower_bound, self.upper_bound, _format_float)
            size, order, signed = self._layout()
            n = _saturate(value, size * 8, signed)
            return n.to_bytes(size, order, signed=signed)
        raise InvalidArgumentError(f"expected {dt.name}, got {value!r}")

    def get(self, optolink: Any, protocol: Any) -> Any:
        """Read the command's value."""
        if not self.mode.is_read():
            raise UnsupportedModeError(f"Address 0x{self.addr:04X} does not support reading.")
        buf = protocol.get(optolink, self.addr, self.block_len)
        data = bytes(buf)[self.byte_pos : self.byte_pos + self.byte_len]
        if self.block_count is None:
            return self.parse_value(data)
        size = self.block_len // self.block_count
        return [self.parse_value(data[i * size : (i + 1) * size]) for i in range(self.block_count)]

    def set(self, optolink: Any, protocol: Any, value: Any) -> None:
        """Write a value for the command."""
        if not self.mode.is_write():
            raise UnsupportedModeError(f"Address 0x{self.addr:04X} does not support writing.")
        protocol.set(optolink, self.addr, self.encode_value(value))