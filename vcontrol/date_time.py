"""Dates and timestamps in the controller's BCD encoding."""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass

from .errors import InvalidFormatError


def _bcd_to_int(byte: int) -> int:
    return byte // 16 * 10 + byte % 16


def _int_to_bcd(number: int) -> int:
    return (number // 10 * 16 + number % 10) & 0xFF


def _exact(data: bytes, length: int) -> bytes:
    data = bytes(data)
    if len(data) != length:
        raise InvalidFormatError(f"array length is not {length}")
    return data


def _date_fields(data: bytes) -> tuple[int, int, int]:
    year = _bcd_to_int(data[0]) * 100 + _bcd_to_int(data[1])
    return year, _bcd_to_int(data[2]), _bcd_to_int(data[3])


def _date_prefix(value: _dt.date) -> bytes:
    return bytes(
        [
            _int_to_bcd(value.year // 100),
            _int_to_bcd(value.year % 100),
            _int_to_bcd(value.month),
            _int_to_bcd(value.day),
            value.isoweekday(),
        ]
    )


@dataclass(frozen=True)
class Date:
    """A calendar date."""

    value: _dt.date

    @property
    def year(self) -> int:
        return self.value.year

    @property
    def month(self) -> int:
        return self.value.month

    @property
    def day(self) -> int:
        return self.value.day

    @property
    def weekday(self) -> int:
        """Day of the week, Monday being 1."""
        return self.value.isoweekday()

    @classmethod
    def from_bytes(cls, data: bytes) -> Date:
        year, month, day = _date_fields(_exact(data, 8))
        try:
            return cls(_dt.date(year, month, day))
        except ValueError:
            raise InvalidFormatError(f"invalid date: {year:04}-{month:02}-{day:02}") from None

    def to_bytes(self) -> bytes:
        return _date_prefix(self.value) + bytes(3)

    @classmethod
    def parse(cls, text: str) -> Date:
        try:
            return cls(_dt.date.fromisoformat(text))
        except (TypeError, ValueError):
            raise InvalidFormatError(f"invalid date: {text!r}") from None

    def __str__(self) -> str:
        return f"{self.year:04}-{self.month:02}-{self.day:02}"

    def __repr__(self) -> str:
        return f"Date({self})"


@dataclass(frozen=True)
class DateTime:
    """A date with a time of day."""

    value: _dt.datetime

    @property
    def year(self) -> int:
        return self.value.year

    @property
    def month(self) -> int:
        return self.value.month

    @property
    def day(self) -> int:
        return self.value.day

    @property
    def weekday(self) -> int:
        """Day of the week, Monday being 1."""
        return self.value.isoweekday()

    @property
    def hour(self) -> int:
        return self.value.hour

    @property
    def minute(self) -> int:
        return self.value.minute

    @property
    def second(self) -> int:
        return self.value.second

    @classmethod
    def new(cls, year: int, month: int, day: int, hour: int, minute: int, second: int) -> DateTime:
        try:
            return cls(_dt.datetime(year, month, day, hour, minute, second))
        except ValueError:
            raise InvalidFormatError(
                f"invalid datetime: {year:04}-{month:02}-{day:02}T{hour:02}:{minute:02}:{second:02}"
            ) from None

    @classmethod
    def from_bytes(cls, data: bytes) -> DateTime:
        data = _exact(data, 8)
        year, month, day = _date_fields(data)
        hour, minute, second = (_bcd_to_int(b) for b in data[5:8])
        return cls.new(year, month, day, hour, minute, second)

    def to_bytes(self) -> bytes:
        clock = bytes(_int_to_bcd(n) for n in (self.hour, self.minute, self.second))
        return _date_prefix(self.value) + clock

    @classmethod
    def parse(cls, text: str) -> DateTime:
        for pattern in ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M:%S.%f"):
            try:
                return cls(_dt.datetime.strptime(text, pattern))
            except (TypeError, ValueError):
                continue
        raise InvalidFormatError(f"invalid datetime: {text!r}")

    def __str__(self) -> str:
        return (
            f"{self.year:04}-{self.month:02}-{self.day:02}"
            f"T{self.hour:02}:{self.minute:02}:{self.second:02}"
        )

    def __repr__(self) -> str:
        return f"DateTime({self})"