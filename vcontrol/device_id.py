"""Device identifiers reported by the heating controller."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import InvalidFormatError


def _exact(data: bytes, length: int) -> bytes:
    data = bytes(data)
    if len(data) != length:
        raise InvalidFormatError(f"array length is not {length}")
    return data


@dataclass(frozen=True)
class DeviceId:
    """The eight-byte device identifier."""

    group_id: int
    id: int
    hardware_index: int
    software_index: int
    protocol_version_lda: int
    protocol_version_rda: int
    developer_version: int

    @classmethod
    def from_bytes(cls, data: bytes) -> DeviceId:
        data = _exact(data, 8)
        return cls(
            group_id=data[0],
            id=data[1],
            hardware_index=data[2],
            software_index=data[3],
            protocol_version_lda=data[4],
            protocol_version_rda=data[5],
            developer_version=int.from_bytes(data[6:8], "big"),
        )

    def to_bytes(self) -> bytes:
        head = bytes(
            [
                self.group_id,
                self.id,
                self.hardware_index,
                self.software_index,
                self.protocol_version_lda,
                self.protocol_version_rda,
            ]
        )
        return head + self.developer_version.to_bytes(2, "big")


@dataclass(frozen=True)
class DeviceIdF0:
    """The two-byte F0 device identifier."""

    value: int

    @classmethod
    def from_bytes(cls, data: bytes) -> DeviceIdF0:
        return cls(int.from_bytes(_exact(data, 2), "big"))