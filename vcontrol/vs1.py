"""The KW (VS1) Optolink protocol."""

from __future__ import annotations

import logging
import time
from typing import Any

log = logging.getLogger(__name__)

_RESET = 0x04
_SYNC = 0x05

_VIRTUAL_READ = 247
_VIRTUAL_WRITE = 244


def _request(function: int, addr: int, length: int) -> bytes:
    return bytes([0x01, function]) + (addr & 0xFFFF).to_bytes(2, "big") + bytes([length & 0xFF])


def _sync(optolink: Any) -> None:
    # Resetting first makes the controller send SYNC sooner.
    negotiate(optolink)
    while True:
        try:
            byte = optolink.read_exact(1)
        except OSError:
            continue
        if byte == bytes([_SYNC]):
            optolink.purge()
            return


def negotiate(optolink: Any) -> None:
    """Reset the connection."""
    optolink.purge()
    optolink.write_all(bytes([_RESET]))
    optolink.flush()


def get(optolink: Any, addr: int, size: int) -> bytes:
    """Read ``size`` bytes at ``addr``."""
    request = _request(_VIRTUAL_READ, addr, size)
    _sync(optolink)

    while True:
        optolink.write_all(request)
        optolink.flush()

        start = time.monotonic()
        buf = optolink.read_exact(size)
        elapsed = time.monotonic() - start

        if _SYNC not in buf:
            return buf

        log.debug("Vs1 get buf = %s", " ".join(f"{b:02X}" for b in buf))
        log.debug("Vs1 get read_time = %.3fs", elapsed)

        # A quick answer means the SYNC bytes are most likely real data.
        if elapsed < 0.5 * size:
            return buf

        optolink.purge()


def set(optolink: Any, addr: int, value: bytes) -> None:
    """Write ``value`` at ``addr``."""
    value = bytes(value)
    request = _request(_VIRTUAL_WRITE, addr, len(value)) + value
    _sync(optolink)

    while True:
        optolink.write_all(request)
        optolink.flush()
        if optolink.read_exact(1) == b"\x00":
            return