"""Optolink connections over a serial port or a TCP socket."""

from __future__ import annotations

import logging
import socket
import time
from typing import Optional

import serial

log = logging.getLogger(__name__)

_BAUD_RATE = 4800
_REOPEN_ATTEMPTS = 10
_REOPEN_DELAY = 1.0


def _open_serial(port: str, exclusive: Optional[bool] = None) -> serial.Serial:
    return serial.Serial(
        port,
        _BAUD_RATE,
        bytesize=serial.EIGHTBITS,
        parity=serial.PARITY_EVEN,
        stopbits=serial.STOPBITS_TWO,
        xonxoff=False,
        rtscts=False,
        dsrdtr=False,
        exclusive=exclusive,
    )


class _SerialDevice:
    def __init__(self, port: str, handle: serial.Serial):
        self.port = port
        self.handle = handle

    def read(self, size: int) -> bytes:
        chunk = self.handle.read(size)
        if not chunk:
            raise TimeoutError(f"timed out reading from {self.port}")
        return chunk

    def write(self, data: bytes) -> None:
        self.handle.write(data)

    def flush(self) -> None:
        self.handle.flush()

    def purge(self) -> None:
        self.handle.reset_input_buffer()

    def reinitialize(self) -> None:
        # Disable exclusive access so the device can be opened again.
        try:
            self.handle.exclusive = False
        except (OSError, ValueError):
            pass

        for _ in range(_REOPEN_ATTEMPTS):
            try:
                handle = _open_serial(self.port)
            except OSError:
                time.sleep(_REOPEN_DELAY)
                continue
            self.handle.close()
            self.handle = handle
            return

        self.handle.exclusive = True

    def close(self) -> None:
        self.handle.close()


class _SocketDevice:
    def __init__(self, sock: socket.socket):
        self.sock = sock

    def read(self, size: int) -> bytes:
        chunk = self.sock.recv(size)
        if not chunk:
            raise EOFError("unexpected end of stream")
        return chunk

    def write(self, data: bytes) -> None:
        self.sock.sendall(data)

    def flush(self) -> None:
        pass

    def purge(self) -> None:
        timeout = self.sock.gettimeout()
        self.sock.setblocking(False)
        try:
            while self.sock.recv(16):
                pass
        except BlockingIOError:
            pass
        finally:
            self.sock.settimeout(timeout)

    def reinitialize(self) -> None:
        pass

    def close(self) -> None:
        self.sock.close()


def _format_address(sockaddr: tuple) -> str:
    host, port = sockaddr[0], sockaddr[1]
    return f"[{host}]:{port}" if ":" in host else f"{host}:{port}"


class Optolink:
    """An Optolink connection via either a serial or TCP connection."""

    def __init__(self, device: _SerialDevice | _SocketDevice):
        self._device = device

    @classmethod
    def open(cls, port: str) -> Optolink:
        """Open a serial device."""
        log.debug("Opening serial port %s.", port)
        return cls(_SerialDevice(port, _open_serial(port)))

    @classmethod
    def connect(cls, host: str, port: int) -> Optolink:
        """Connect to a device via TCP."""
        log.debug("Connecting to %s:%s.", host, port)
        try:
            infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
            addresses = ", ".join(_format_address(info[4]) for info in infos)
        except OSError:
            addresses = f"{host}:{port}"
        try:
            sock = socket.create_connection((host, port))
        except OSError as err:
            raise OSError(err.errno, f"{err}: {addresses}") from err
        return cls(_SocketDevice(sock))

    @classmethod
    def from_socket(cls, sock: socket.socket) -> Optolink:
        """Use an already connected socket."""
        return cls(_SocketDevice(sock))

    def read_exact(self, size: int) -> bytes:
        """Read exactly ``size`` bytes."""
        data = bytearray()
        while len(data) < size:
            data += self._device.read(size - len(data))
        return bytes(data)

    def write_all(self, data: bytes) -> None:
        self._device.write(bytes(data))

    def flush(self) -> None:
        self._device.flush()

    def purge(self) -> None:
        """Discard everything waiting in the input buffer."""
        self._device.purge()

    def reinitialize(self) -> None:
        """Reopen a serial port after an error; a no-op for TCP."""
        self._device.reinitialize()

    def close(self) -> None:
        self._device.close()

    def __enter__(self) -> Optolink:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()