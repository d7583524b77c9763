"""The 300 (VS2) Optolink protocol."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional

from .errors import InvalidArgumentError, InvalidFormatError

log = logging.getLogger(__name__)

_LEADIN = 0x41
_RESET = b"\x04"
_SYNC = 0x05
_START = b"\x16\x00\x00"
_ACK = 0x06
_NACK = 0x15

_HEADER_LEN = 5
_MAX_PAYLOAD_LEN = 0xFF - _HEADER_LEN


class _MessageType(IntEnum):
    REQUEST = 0
    RESPONSE = 1
    UNACKNOWLEDGED = 2
    ERROR = 3

    def __str__(self) -> str:
        return self.name.lower()


class _Function(IntEnum):
    VIRTUAL_READ = 1
    VIRTUAL_WRITE = 2
    PHYSICAL_READ = 3
    PHYSICAL_WRITE = 4
    EEPROM_READ = 5
    EEPROM_WRITE = 6
    REMOTE_PROCEDURE_CALL = 7
    VIRTUAL_MBUS = 33
    VIRTUAL_MARKET_MANAGER_READ = 34
    VIRTUAL_MARKET_MANAGER_WRITE = 35
    VIRTUAL_WILO_READ = 36
    VIRTUAL_WILO_WRITE = 37
    XRAM_READ = 49
    XRAM_WRITE = 50
    PORT_READ = 51
    PORT_WRITE = 52
    BE_READ = 53
    BE_WRITE = 54
    KMBUS_RAM_READ = 65
    KMBUS_EEPROM_READ = 67
    KBUS_DATAELEMENT_READ = 81
    KBUS_DATAELEMENT_WRITE = 82
    KBUS_DATABLOCK_READ = 83
    KBUS_DATABLOCK_WRITE = 84
    KBUS_TRANSPARENT_READ = 85
    KBUS_TRANSPARENT_WRITE = 86
    KBUS_INITIALIZATION_READ = 87
    KBUS_INITIALIZATION_WRITE = 88
    KBUS_EEPROM_LT_READ = 89
    KBUS_EEPROM_LT_WRITE = 90
    KBUS_CONTROL_WRITE = 91
    KBUS_MEMBERLIST_READ = 93
    KBUS_MEMBERLIST_WRITE = 94
    KBUS_VIRTUAL_READ = 95
    KBUS_VIRTUAL_WRITE = 96
    KBUS_DIRECT_READ = 97
    KBUS_DIRECT_WRITE = 98
    KBUS_INDIRECT_READ = 99
    KBUS_INDIRECT_WRITE = 100
    KBUS_GATEWAY_READ = 101
    KBUS_GATEWAY_WRITE = 102
    PROCESS_WRITE = 120
    PROCESS_READ = 123
    OT_PHYSICAL_READ = 180
    OT_VIRTUAL_READ = 181
    OT_PHYSICAL_WRITE = 182
    OT_VIRTUAL_WRITE = 183
    GFA_READ = 201
    GFA_WRITE = 202


@dataclass(frozen=True)
class _Header:
    message_type: _MessageType
    function: _Function
    addr: int
    payload_len: int


def checksum(data: bytes) -> int:
    """Sum of all bytes, wrapping at 256."""
    return sum(data) & 0xFF


def _read_status(optolink: Any) -> int:
    return optolink.read_exact(1)[0]


def _reset(optolink: Any) -> None:
    optolink.purge()
    optolink.write_all(_RESET)
    optolink.flush()


def _write_telegram(optolink: Any, header: _Header, payload: Optional[bytes]) -> None:
    if payload is not None and len(payload) > _MAX_PAYLOAD_LEN:
        raise InvalidArgumentError(f"payload too long: {len(payload)} bytes")

    body = bytes([header.message_type, header.function]) + header.addr.to_bytes(2, "big")
    if payload is not None:
        body += bytes([len(payload)]) + payload
    else:
        body += bytes([header.payload_len])
    message_len = _HEADER_LEN + (len(payload) if payload is not None else 0)
    framed = bytes([message_len]) + body
    telegram = bytes([_LEADIN]) + framed + bytes([checksum(framed)])

    while True:
        optolink.write_all(telegram)
        optolink.flush()
        status = _read_status(optolink)
        if status == _ACK:
            return
        if status == _NACK:
            negotiate(optolink)
            continue
        raise InvalidFormatError("send telegram failed")


def _read_telegram(optolink: Any, size: Optional[int]) -> tuple[_Header, bytes]:
    if optolink.read_exact(1)[0] != _LEADIN:
        raise InvalidFormatError("telegram leadin expected")

    message_len = optolink.read_exact(1)[0]
    rest = optolink.read_exact(message_len + 1)
    body, received = rest[:-1], rest[-1]

    expected = checksum(bytes([message_len]) + body)
    if expected == received:
        optolink.write_all(bytes([_ACK]))
        optolink.flush()
    else:
        optolink.write_all(bytes([_NACK]))
        optolink.flush()
        raise InvalidFormatError(f"invalid checksum: {expected} != {received}")

    if message_len < _HEADER_LEN:
        raise InvalidFormatError(f"message too short: {message_len}")

    try:
        message_type = _MessageType(body[0])
    except ValueError:
        raise InvalidFormatError(f"unknown message identifier: {body[0]}") from None
    try:
        function = _Function(body[1])
    except ValueError:
        raise InvalidFormatError(f"unknown function: {body[1]}") from None
    addr = int.from_bytes(body[2:4], "big")
    payload_len = body[4]

    payload = b""
    if size is not None:
        if payload_len != message_len - _HEADER_LEN:
            raise InvalidFormatError(
                f"message length ({message_len}) does not match payload length ({payload_len}): "
                f"{message_len} - 5 != {payload_len}"
            )
        if size != payload_len:
            raise InvalidFormatError(f"invalid payload length, expected {size}, got {payload_len}")
        payload = body[5 : 5 + size]
    elif message_len != _HEADER_LEN:
        raise InvalidFormatError(f"invalid message length, expected 5, got {message_len}")

    return _Header(message_type, function, addr, payload_len), payload


def _check_response(header: _Header, function: _Function, addr: int) -> None:
    if header.message_type is not _MessageType.RESPONSE:
        raise InvalidFormatError(f"expected response message identifier, got {header.message_type}")
    if header.function is not function:
        raise InvalidFormatError(f"expected function {function.name}, got {header.function.name}")
    if header.addr != addr:
        raise InvalidFormatError(f"expected address {addr}, got {header.addr}")


def negotiate(optolink: Any) -> None:
    """Reset the connection and start the protocol."""
    _reset(optolink)
    while True:
        if _read_status(optolink) != _SYNC:
            continue
        optolink.write_all(_START)
        optolink.flush()
        status = _read_status(optolink)
        if status == _ACK:
            return
        if status == _NACK:
            continue
        raise InvalidFormatError("protocol negotiation failed")


def get(optolink: Any, addr: int, size: int) -> bytes:
    """Read ``size`` bytes at ``addr``."""
    if not 0 <= size <= 0xFF:
        raise InvalidArgumentError(f"invalid read length: {size}")
    header = _Header(_MessageType.REQUEST, _Function.VIRTUAL_READ, addr, size)
    _write_telegram(optolink, header, None)
    response, payload = _read_telegram(optolink, size)
    _check_response(response, header.function, addr)
    if response.payload_len != size:
        raise InvalidFormatError(f"expected to read {size}, read {response.payload_len}")
    return payload


def set(optolink: Any, addr: int, value: bytes) -> None:
    """Write ``value`` at ``addr``."""
    value = bytes(value)
    header = _Header(_MessageType.REQUEST, _Function.VIRTUAL_WRITE, addr, len(value) & 0xFF)
    _write_telegram(optolink, header, value)
    response, _ = _read_telegram(optolink, None)
    _check_response(response, header.function, addr)
    if response.payload_len != len(value):
        raise InvalidFormatError(f"expected to write {len(value)}, wrote {response.payload_len}")