"""Enumerations describing how a command's data is laid out and converted."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from .errors import InvalidFormatError, UnknownEnumVariantError


class AccessMode(Enum):
    """Whether a command can be read, written or both."""

    READ = "read"
    WRITE = "write"
    READ_WRITE = "read_write"

    def is_read(self) -> bool:
        return self in (AccessMode.READ, AccessMode.READ_WRITE)

    def is_write(self) -> bool:
        return self in (AccessMode.WRITE, AccessMode.READ_WRITE)


class DataType(Enum):
    """The kind of value a command carries."""

    DEVICE_ID = "DeviceId"
    DEVICE_ID_F0 = "DeviceIdF0"
    STRING = "String"
    INT = "Int"
    DOUBLE = "Double"
    DATE = "Date"
    DATE_TIME = "DateTime"
    CIRCUIT_TIMES = "CircuitTimes"
    ERROR_INDEX = "ErrorIndex"
    ERROR = "Error"
    BYTE = "Byte"
    BYTE_ARRAY = "ByteArray"


class Parameter(Enum):
    """The raw encoding of a numeric value."""

    BYTE = "byte"
    S_BYTE = "s_byte"
    INT = "int"
    S_INT = "s_int"
    INT4 = "int4"
    S_INT4 = "s_int4"
    INT_HIGH_BYTE_FIRST = "int_high_byte_first"
    S_INT_HIGH_BYTE_FIRST = "s_int_high_byte_first"
    INT4_HIGH_BYTE_FIRST = "int4_high_byte_first"
    S_INT4_HIGH_BYTE_FIRST = "s_int4_high_byte_first"
    ARRAY = "array"
    STRING = "string"
    STRING_NT = "string_nt"
    STRING_CR = "string_cr"


_RAW_SIZES = {"i8": 1, "i16": 2, "i32": 4, "u8": 1, "u16": 2, "u32": 4}


class RawType(Enum):
    """Primitive raw types."""

    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    ARRAY = "array"

    def size(self) -> Optional[int]:
        """Size in bytes for types with a static size."""
        return _RAW_SIZES.get(self.value)


class ConversionKind(Enum):
    """Named conversions applied to raw values."""

    DIV2 = "div2"
    DIV5 = "div5"
    DIV10 = "div10"
    DIV100 = "div100"
    DIV1000 = "div1000"
    MUL2 = "mul2"
    MUL5 = "mul5"
    MUL10 = "mul10"
    MUL100 = "mul100"
    MUL1000 = "mul1000"
    MUL_OFFSET = "mul_offset"
    SEC_TO_MINUTE = "sec_to_minute"
    SEC_TO_HOUR = "sec_to_hour"
    HEX_BYTE_TO_ASCII_BYTE = "hex_byte_to_ascii_byte"
    HEX_BYTE_TO_UTF16_BYTE = "hex_byte_to_utf16_byte"
    HEX_BYTE_TO_DECIMAL_BYTE = "hex_byte_to_decimal_byte"
    HEX_BYTE_TO_VERSION = "hex_byte_to_version"
    FIXED_STRING_TERMINAL_ZEROES = "fixed_string_terminal_zeroes"
    DAY_MONTH_BCD = "day_month_bcd"
    DAY_TO_DATE = "day_to_date"
    ESTRICH = "estrich"
    ROTATE_BYTES = "rotate_bytes"
    IP_ADDRESS = "ip_address"
    LAST_BURNER_CHECK = "last_burner_check"
    LAST_CHECK_INTERVAL = "last_check_interval"


@dataclass(frozen=True)
class Conversion:
    """A conversion, with factor and offset for ``mul_offset``."""

    kind: ConversionKind
    factor: Optional[float] = None
    offset: Optional[float] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Conversion:
        """Build from a mapping holding a ``conversion`` key."""
        name = data.get("conversion")
        try:
            kind = ConversionKind(name)
        except ValueError:
            raise UnknownEnumVariantError(f"unknown conversion: {name!r}") from None
        if kind is not ConversionKind.MUL_OFFSET:
            return cls(kind)
        try:
            factor = float(data["conversion_factor"])
            offset = float(data["conversion_offset"])
        except (KeyError, TypeError, ValueError):
            raise InvalidFormatError("mul_offset needs conversion_factor and conversion_offset") from None
        return cls(kind, factor, offset)