"""Exceptions raised by the package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .device_id import DeviceId, DeviceIdF0


class VControlError(Exception):
    """Base class for all errors raised by this package."""


class UnsupportedDeviceError(VControlError):
    """The connected device is not known."""

    def __init__(self, device_id: DeviceId, device_id_f0: Optional[DeviceIdF0] = None):
        self.device_id = device_id
        self.device_id_f0 = device_id_f0
        message = (
            f"Device ID 0x{device_id.id:04X} HX 0x{device_id.hardware_index:02X} "
            f"SW 0x{device_id.software_index:02X}"
        )
        if device_id_f0 is not None:
            message += f" F0 0x{device_id_f0.value:04X}"
        super().__init__(message + " not supported.")


class UnsupportedCommandError(VControlError):
    """The command is not known for the device."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"command {command} is not supported")


class UnsupportedModeError(VControlError):
    """The command does not support the requested access mode."""


class InvalidArgumentError(VControlError, ValueError):
    """A value given to a command is not acceptable."""


class InvalidFormatError(VControlError, ValueError):
    """Data read from or given to the device is malformed."""


class UnknownEnumVariantError(VControlError, ValueError):
    """A name does not denote any known variant."""