"""Values read from or written to the controller.

A value is one of: ``int``, ``float``, ``bytes``, ``list`` of values, ``str``,
:class:`Date`, :class:`DateTime`, :class:`CircuitTimes`, :class:`ErrorRecord`,
:class:`DeviceId`, :class:`DeviceIdF0`, or ``None`` for an empty value.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from .circuit_time import CircuitTimes
from .date_time import Date, DateTime
from .device_id import DeviceId, DeviceIdF0
from .enums import Conversion, ConversionKind
from .error_record import ErrorRecord
from .errors import InvalidFormatError, VControlError

log = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")


class ConversionError(VControlError):
    """A conversion does not apply to a value."""

    def __init__(self, value: Any, conversion: Conversion):
        self.value = value
        self.conversion = conversion
        super().__init__(f"Conversion {conversion!r} not applicable to value {value!r}.")


_FORWARD = {
    ConversionKind.DIV2: lambda n: n / 2.0,
    ConversionKind.DIV5: lambda n: n / 5.0,
    ConversionKind.DIV10: lambda n: n / 10.0,
    ConversionKind.DIV100: lambda n: n / 100.0,
    ConversionKind.DIV1000: lambda n: n / 1000.0,
    ConversionKind.MUL2: lambda n: n * 2.0,
    ConversionKind.MUL5: lambda n: n * 5.0,
    ConversionKind.MUL10: lambda n: n * 10.0,
    ConversionKind.MUL100: lambda n: n * 100.0,
    ConversionKind.SEC_TO_MINUTE: lambda n: n / 60.0,
    ConversionKind.SEC_TO_HOUR: lambda n: n / 3600.0,
}

_BACKWARD = {
    ConversionKind.DIV2: lambda n: n * 2.0,
    ConversionKind.DIV5: lambda n: n * 5.0,
    ConversionKind.DIV10: lambda n: n * 10.0,
    ConversionKind.DIV100: lambda n: n * 100.0,
    ConversionKind.DIV1000: lambda n: n * 1000.0,
    ConversionKind.MUL2: lambda n: n / 2.0,
    ConversionKind.MUL5: lambda n: n / 5.0,
    ConversionKind.MUL10: lambda n: n / 10.0,
    ConversionKind.MUL100: lambda n: n / 100.0,
}


def convert(value: Any, conversion: Conversion) -> Any:
    """Apply a conversion to a raw value."""
    kind = conversion.kind
    if isinstance(value, float):
        if kind in _FORWARD:
            return _FORWARD[kind](value)
        if kind is ConversionKind.MUL_OFFSET:
            return value * conversion.factor + conversion.offset
    if isinstance(value, bytes):
        if kind is ConversionKind.HEX_BYTE_TO_ASCII_BYTE:
            return "".join(chr(b) for b in value if b != ord("0"))
        if kind is ConversionKind.HEX_BYTE_TO_VERSION:
            return ".".join(str(b) for b in value)
        if kind is ConversionKind.ROTATE_BYTES:
            return value[::-1]
    if kind is ConversionKind.ROTATE_BYTES and isinstance(value, int) and not isinstance(value, bool):
        return value
    raise ConversionError(value, conversion)


def convert_back(value: Any, conversion: Conversion) -> Any:
    """Undo a conversion before writing a value."""
    kind = conversion.kind
    if isinstance(value, float):
        if kind in _BACKWARD:
            return _BACKWARD[kind](value)
        if kind is ConversionKind.MUL_OFFSET:
            return (value - conversion.offset) / conversion.factor
    raise ConversionError(value, conversion)


def parse_value(text: str) -> Any:
    """Parse text as an integer, a float, or else keep it as a string."""
    if _INT_RE.fullmatch(text):
        return int(text)
    if text and not any(c.isspace() or c == "_" for c in text):
        try:
            return float(text)
        except ValueError:
            pass
    return text


def _format_float(number: float) -> str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "inf" if number > 0 else "-inf"
    if number.is_integer():
        return str(int(number))
    return format(Decimal(repr(number)), "f")


def to_json(value: Any) -> Any:
    """Convert a value to JSON-compatible data."""
    if value is None or isinstance(value, (int, float, str)):
        return value
    if isinstance(value, bytes):
        return list(value)
    if isinstance(value, list):
        return [to_json(item) for item in value]
    if isinstance(value, (Date, DateTime)):
        return str(value)
    if isinstance(value, (CircuitTimes, ErrorRecord)):
        return value.to_json()
    if isinstance(value, DeviceId):
        return asdict(value)
    if isinstance(value, DeviceIdF0):
        return value.value
    raise InvalidFormatError(f"not a value: {value!r}")


def from_json(data: Any) -> Any:
    """Build a value from JSON data, trying each kind in turn."""
    if data is None:
        return None
    if isinstance(data, bool):
        raise InvalidFormatError(f"cannot convert {data!r} to a value")
    if isinstance(data, (int, float)):
        return data
    if isinstance(data, list):
        if all(isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= 0xFF for x in data):
            return bytes(data)
        return [from_json(item) for item in data]
    if isinstance(data, str):
        return data
    if isinstance(data, dict):
        for kind in (CircuitTimes, ErrorRecord):
            try:
                return kind.from_json(data)
            except (InvalidFormatError, KeyError, TypeError):
                continue
    raise InvalidFormatError(f"cannot convert {data!r} to a value")


@dataclass
class OutputValue:
    """A value together with its unit and value mapping."""

    value: Any
    unit: Optional[str] = None
    mapping: Optional[Mapping[int, str]] = None

    def __str__(self) -> str:
        value = self.value
        if value is None:
            return ""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            if isinstance(value, bytes):
                text = str(list(value))
            elif isinstance(value, ErrorRecord):
                described = value.describe(self.mapping) if self.mapping is not None else None
                text = described if described is not None else str(value)
            elif isinstance(value, list):
                text = repr(value)
            elif isinstance(value, (DeviceId, DeviceIdF0, CircuitTimes)):
                text = repr(value)
            else:
                text = str(value)
        elif isinstance(value, float):
            text = _format_float(value)
        elif self.mapping is not None and value in self.mapping:
            text = self.mapping[value]
        else:
            if self.mapping is not None:
                log.warning("Missing mapping for %s.", value)
            text = str(value)
        return f"{text} {self.unit}" if self.unit is not None else text

    def to_json(self) -> dict[str, Any]:
        result: dict[str, Any] = {"value": to_json(self.value)}
        if self.unit is not None:
            result["unit"] = self.unit
        if self.mapping is not None:
            result["mapping"] = {str(k): v for k, v in self.mapping.items()}
        return result