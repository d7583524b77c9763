"""Entries of the controller's error history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .date_time import DateTime
from .errors import InvalidFormatError


@dataclass(frozen=True)
class ErrorRecord:
    """An error code with the time it occurred."""

    index: int
    time: Optional[DateTime] = None

    @classmethod
    def from_bytes(cls, data: bytes) -> ErrorRecord:
        data = bytes(data)
        if len(data) != 9:
            raise InvalidFormatError("array length is not 9")
        index = data[0]
        try:
            time: Optional[DateTime] = DateTime.from_bytes(data[1:])
        except InvalidFormatError as err:
            if index != 0:
                raise InvalidFormatError(f"invalid time for error {index}: {err}") from None
            time = None
        return cls(index, time)

    def to_bytes(self) -> bytes:
        time = self.time.to_bytes() if self.time is not None else bytes(8)
        return bytes([self.index]) + time

    def describe(self, errors: Mapping[int, str]) -> Optional[str]:
        """Look the error code up in a device's error table."""
        return errors.get(self.index)

    def to_json(self) -> dict[str, Any]:
        return {"index": self.index, "time": str(self.time) if self.time is not None else None}

    @classmethod
    def from_json(cls, data: Any) -> ErrorRecord:
        if not isinstance(data, dict) or not isinstance(data.get("index"), int):
            raise InvalidFormatError(f"invalid error record: {data!r}")
        index = data["index"]
        if not 0 <= index <= 0xFF:
            raise InvalidFormatError(f"error index out of range: {index}")
        time = data.get("time")
        return cls(index, DateTime.parse(time) if time is not None else None)

    def __str__(self) -> str:
        if self.time is not None:
            return f"{self.time}: Error {self.index:02X}"
        return f"0000-00-00: Error {self.index:02X}"

    def __repr__(self) -> str:
        return f"ErrorRecord({self.index}, {self.time!r})"