"""Heating system devices and their detection from identifiers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from .command import Command
from .device_id import DeviceId, DeviceIdF0

log = logging.getLogger(__name__)

# Devices are matched on the software index only; the hardware index varies.
USE_HARDWARE_INDEX = False

_F0_IDS = range(192, 204)
_F0_MIN_SOFTWARE_INDEX = 200


@dataclass(frozen=True)
class DeviceIdRange:
    """Device identifier range used for detecting the device type."""

    group_id: int
    id: int
    hardware_index: Optional[int] = None
    hardware_index_till: Optional[int] = None
    software_index: Optional[int] = None
    software_index_till: Optional[int] = None
    f0: Optional[int] = None
    f0_till: Optional[int] = None


@dataclass(frozen=True)
class Device:
    """A heating system device with its commands and error texts."""

    name: str
    commands: Mapping[str, Command] = field(default_factory=dict)
    errors: Mapping[int, str] = field(default_factory=dict)

    def command(self, name: str) -> Optional[Command]:
        """Get a command supported by the device, if there is one."""
        return self.commands.get(name)


def _index_matches(wanted: int, actual: int) -> bool:
    return not USE_HARDWARE_INDEX or wanted == actual


def detect_device(
    devices: Iterable[tuple[DeviceIdRange, Device]],
    device_id: DeviceId,
    device_id_f0: Optional[DeviceIdF0] = None,
) -> Optional[Device]:
    """Find the device matching the given identifiers."""
    candidates = [(id_range, device) for id_range, device in devices if id_range.id == device_id.id]

    if (
        device_id_f0 is not None
        and device_id.id in _F0_IDS
        and device_id.software_index >= _F0_MIN_SOFTWARE_INDEX
    ):
        f0 = device_id_f0.value
        for id_range, device in candidates:
            if id_range.f0 is not None and id_range.f0 == f0:
                log.debug("Found device with exact ID and F0.")
                return device
        for id_range, device in candidates:
            if id_range.f0 is not None and id_range.f0_till is not None and id_range.f0 <= f0 <= id_range.f0_till:
                log.debug("Found device with exact ID and F0 in range %s–%s.", id_range.f0, id_range.f0_till)
                return device

    fallback: Optional[Device] = None

    for id_range, device in candidates:
        if id_range.hardware_index is not None and id_range.software_index is not None:
            if (
                _index_matches(id_range.hardware_index, device_id.hardware_index)
                and device_id.software_index == id_range.software_index
            ):
                log.debug("Found device with exact ID, hardware index and software index.")
                return device
        fallback = device

    for id_range, device in candidates:
        if None in (
            id_range.hardware_index,
            id_range.software_index,
            id_range.hardware_index_till,
            id_range.software_index_till,
        ):
            continue
        hardware_ok = not USE_HARDWARE_INDEX or (
            id_range.hardware_index <= device_id.hardware_index <= id_range.hardware_index_till
        )
        if hardware_ok and id_range.software_index <= device_id.software_index <= id_range.software_index_till:
            log.debug("Found device with exact ID and indices in range.")
            return device

    if fallback is not None:
        log.debug("Found device with exact ID.")
    return fallback