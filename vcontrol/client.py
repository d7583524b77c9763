"""A connection to a detected device using a detected protocol."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .catalog import Catalog
from .command import Command
from .device import Device
from .device_id import DeviceId, DeviceIdF0
from .error_record import ErrorRecord
from .errors import InvalidFormatError, UnsupportedCommandError, UnsupportedDeviceError, VControlError
from .optolink import Optolink
from .protocol import Protocol
from .value import OutputValue

log = logging.getLogger(__name__)

DEVICE_ID_COMMAND = "device_id"
DEVICE_ID_F0_COMMAND = "device_id_f0"

_LINK_ERRORS = (OSError, EOFError, VControlError)


class VControl:
    """An Optolink connection to a specific device using a specific protocol."""

    def __init__(
        self,
        optolink: Optolink,
        device: Device,
        protocol: Protocol,
        catalog: Catalog,
        connected: bool = True,
    ):
        self._optolink = optolink
        self._device = device
        self._protocol = protocol
        self._catalog = catalog
        self._connected = connected

    @property
    def device(self) -> Device:
        return self._device

    @property
    def protocol(self) -> Protocol:
        return self._protocol

    @property
    def connected(self) -> bool:
        return self._connected

    def _renegotiate(self) -> None:
        if self._connected:
            return

        reinitialized = False
        while True:
            try:
                self._protocol.negotiate(self._optolink)
            except _LINK_ERRORS as err:
                if reinitialized:
                    raise
                try:
                    self._optolink.reinitialize()
                except OSError as reinit_error:
                    log.warning("Failed to re-initialize Optolink port after error: %s", reinit_error)
                    raise err from None
                log.info("Optolink port successfully re-initialized after error.")
                reinitialized = True
                continue
            self._connected = True
            return

    @classmethod
    def connect(cls, optolink: Optolink, catalog: Catalog) -> VControl:
        """Detect the protocol and the device, and connect to it."""
        protocol = Protocol.detect(optolink)
        if protocol is not None:
            log.debug("Protocol detected: %s", protocol)
            connected = True
        else:
            protocol = Protocol.VS1
            log.warning("No protocol detected, defaulting to %s.", protocol)
            connected = False

        id_command = catalog.system_command(DEVICE_ID_COMMAND)
        if id_command is None:
            raise UnsupportedCommandError(DEVICE_ID_COMMAND)
        device_id = id_command.get(optolink, protocol)
        if not isinstance(device_id, DeviceId):
            raise InvalidFormatError(f"expected DeviceId, got {device_id!r}")

        device_id_f0: Optional[DeviceIdF0] = None
        f0_command = catalog.system_command(DEVICE_ID_F0_COMMAND)
        if f0_command is not None:
            try:
                f0_value = f0_command.get(optolink, protocol)
            except _LINK_ERRORS as err:
                log.debug("Failed to get `device_id_f0`: %s", err)
            else:
                if isinstance(f0_value, DeviceIdF0):
                    device_id_f0 = f0_value
                elif f0_value is not None:
                    raise InvalidFormatError(f"expected DeviceIdF0, got {f0_value!r}")

        device = catalog.detect_device(device_id, device_id_f0)
        if device is None:
            raise UnsupportedDeviceError(device_id, device_id_f0)

        log.debug("Device detected: %s", device.name)
        client = cls(optolink, device, protocol, catalog, connected)
        client._renegotiate()
        return client

    def command_by_name(self, name: str) -> Command:
        """Find a system or device command by name."""
        command = self._catalog.system_command(name)
        if command is None:
            command = self._device.command(name)
        if command is None:
            raise UnsupportedCommandError(name)
        return command

    def get(self, name: str) -> OutputValue:
        """Get the value for the given command."""
        command = self.command_by_name(name)
        self._renegotiate()
        try:
            value = command.get(self._optolink, self._protocol)
        except Exception:
            self._connected = False
            raise
        mapping = self._device.errors if isinstance(value, ErrorRecord) else command.mapping
        return OutputValue(value=value, unit=command.unit, mapping=mapping)

    def set(self, name: str, value: Any) -> None:
        """Set the value for the given command."""
        command = self.command_by_name(name)
        self._renegotiate()
        try:
            command.set(self._optolink, self._protocol, value)
        except Exception:
            self._connected = False
            raise

    def close(self) -> None:
        self._optolink.close()

    def __enter__(self) -> VControl:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()