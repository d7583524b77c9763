"""Weekly switching times of a heating circuit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .errors import InvalidFormatError

_DAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
_UNSET = 0xFF


def _exact(data: bytes, length: int) -> bytes:
    data = bytes(data)
    if len(data) != length:
        raise InvalidFormatError(f"array length is not {length}")
    return data


@dataclass(frozen=True)
class Time:
    """A time of day in ten-minute steps."""

    hour: int
    minute: int

    @classmethod
    def from_byte(cls, byte: int) -> Optional[Time]:
        """Decode a byte; 0xFF means no time is set."""
        if byte == _UNSET:
            return None
        hour, minute = byte >> 3, (byte & 0b111) * 10
        if hour > 24 or minute >= 60:
            raise InvalidFormatError(f"invalid time byte: 0x{byte:02X}")
        return cls(hour, minute)

    def to_byte(self) -> int:
        return ((self.hour << 3) | (self.minute // 10)) & 0xFF

    @classmethod
    def parse(cls, text: str) -> Time:
        """Parse a time in the form HH:MM."""
        chars = iter(text)

        def digit(message: str) -> int:
            char = next(chars, "")
            if len(char) == 1 and "0" <= char <= "9":
                return ord(char) - ord("0")
            raise InvalidFormatError(message)

        h1 = digit("first hour character is not a number")
        h2 = digit("second hour character is not a number")
        if next(chars, "") != ":":
            raise InvalidFormatError("separator is not ':'")
        m1 = digit("first minute character is not a number")
        m2 = digit("second minute character is not a number")

        hour = h1 * 10 + h2
        if hour > 24:
            raise InvalidFormatError("hour out of range")
        minute = m1 * 10 + m2
        if minute >= 60:
            raise InvalidFormatError("minute out of range")
        return cls(hour, minute)

    def __str__(self) -> str:
        return f"{self.hour:02}:{self.minute:02}"


@dataclass(frozen=True)
class TimeSpan:
    """A switching period from one time to another."""

    start: Time
    end: Time

    def to_bytes(self) -> bytes:
        return bytes([self.start.to_byte(), self.end.to_byte()])

    def __str__(self) -> str:
        return f"{self.start} – {self.end}"


@dataclass(frozen=True)
class CircuitTime:
    """The four switching periods of one day."""

    spans: tuple[Optional[TimeSpan], ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "spans", tuple(self.spans))
        if len(self.spans) != 4:
            raise InvalidFormatError(f"expected 4 time spans, got {len(self.spans)}")

    @classmethod
    def from_bytes(cls, data: bytes) -> CircuitTime:
        data = _exact(data, 8)
        spans = []
        for first, second in zip(data[0::2], data[1::2]):
            start, end = Time.from_byte(first), Time.from_byte(second)
            spans.append(TimeSpan(start, end) if start is not None and end is not None else None)
        return cls(tuple(spans))

    def to_bytes(self) -> bytes:
        return b"".join(
            span.to_bytes() if span is not None else bytes([_UNSET, _UNSET]) for span in self.spans
        )

    def to_json(self) -> list[Optional[dict[str, str]]]:
        return [
            {"from": str(span.start), "to": str(span.end)} if span is not None else None
            for span in self.spans
        ]

    @classmethod
    def from_json(cls, data: Any) -> CircuitTime:
        if not isinstance(data, list):
            raise InvalidFormatError("circuit time must be a list")
        spans = []
        for item in data:
            if item is None:
                spans.append(None)
            elif isinstance(item, dict) and isinstance(item.get("from"), str) and isinstance(item.get("to"), str):
                spans.append(TimeSpan(Time.parse(item["from"]), Time.parse(item["to"])))
            else:
                raise InvalidFormatError(f"invalid time span: {item!r}")
        return cls(tuple(spans))

    def __str__(self) -> str:
        return ", ".join(str(span) if span is not None else "--:-- – --:--" for span in self.spans)

    def __repr__(self) -> str:
        return f"CircuitTime({self})"


@dataclass(frozen=True)
class CircuitTimes:
    """Switching times for every day of the week."""

    mon: CircuitTime
    tue: CircuitTime
    wed: CircuitTime
    thu: CircuitTime
    fri: CircuitTime
    sat: CircuitTime
    sun: CircuitTime

    @classmethod
    def from_bytes(cls, data: bytes) -> CircuitTimes:
        data = _exact(data, 56)
        return cls(
            **{day: CircuitTime.from_bytes(data[i * 8 : (i + 1) * 8]) for i, day in enumerate(_DAYS)}
        )

    def to_bytes(self) -> bytes:
        return b"".join(getattr(self, day).to_bytes() for day in _DAYS)

    def to_json(self) -> dict[str, Any]:
        return {day: getattr(self, day).to_json() for day in _DAYS}

    @classmethod
    def from_json(cls, data: Any) -> CircuitTimes:
        if not isinstance(data, dict):
            raise InvalidFormatError("circuit times must be an object")
        missing = [day for day in _DAYS if day not in data]
        if missing:
            raise InvalidFormatError(f"missing days: {', '.join(missing)}")
        return cls(**{day: CircuitTime.from_json(data[day]) for day in _DAYS})