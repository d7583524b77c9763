import pytest

from vcontrol import vs2
from vcontrol.errors import InvalidArgumentError, InvalidFormatError


class FakeLink:
    def __init__(self, incoming=b""):
        self.incoming = bytearray(incoming)
        self.written = bytearray()
        self.purges = 0

    def read_exact(self, size):
        if len(self.incoming) < size:
            raise EOFError("unexpected end of stream")
        chunk = bytes(self.incoming[:size])
        del self.incoming[:size]
        return chunk

    def write_all(self, data):
        self.written += data

    def flush(self):
        pass

    def purge(self):
        self.purges += 1


def telegram(message_type, function, addr, payload_len, payload=b""):
    framed = bytes([5 + len(payload), message_type, function]) + addr.to_bytes(2, "big")
    framed += bytes([payload_len]) + payload
    return b"\x41" + framed + bytes([vs2.checksum(framed)])


def test_checksum_wraps():
    data = bytes([0xF0, 0x20, 0x01])
    assert 0 <= vs2.checksum(data) <= 0xFF
    assert vs2.checksum(data + bytes([(-vs2.checksum(data)) & 0xFF])) == 0


def test_checksum_of_empty_is_zero():
    assert vs2.checksum(b"") == 0


def test_negotiate_sends_start():
    link = FakeLink(b"\x05\x06")
    vs2.negotiate(link)
    assert link.written == b"\x04\x16\x00\x00"
    assert link.purges == 1


def test_negotiate_waits_for_sync():
    link = FakeLink(b"\x00\x00\x05\x06")
    vs2.negotiate(link)
    assert link.written == b"\x04\x16\x00\x00"
    assert link.incoming == b""


def test_negotiate_retries_after_nack():
    link = FakeLink(b"\x05\x15\x05\x06")
    vs2.negotiate(link)
    assert link.written == b"\x04" + b"\x16\x00\x00" * 2


def test_negotiate_fails_on_unknown_status():
    link = FakeLink(b"\x05\x99")
    with pytest.raises(InvalidFormatError):
        vs2.negotiate(link)


def test_get_request_and_response():
    link = FakeLink(b"\x06" + telegram(1, 1, 0x00F8, 2, b"\x20\xcb"))
    assert vs2.get(link, 0x00F8, 2) == b"\x20\xcb"
    request = bytes(link.written[:8])
    assert request[:7] == bytes([0x41, 0x05, 0x00, 0x01, 0x00, 0xF8, 0x02])
    assert request[7] == vs2.checksum(request[1:7])
    assert link.written[8:] == b"\x06"


def test_get_bad_checksum_sends_nack():
    response = bytearray(telegram(1, 1, 0x00F8, 1, b"\x01"))
    response[-1] ^= 0xFF
    link = FakeLink(b"\x06" + bytes(response))
    with pytest.raises(InvalidFormatError):
        vs2.get(link, 0x00F8, 1)
    assert link.written[-1:] == b"\x15"


def test_get_rejects_missing_leadin():
    link = FakeLink(b"\x06\x40")
    with pytest.raises(InvalidFormatError):
        vs2.get(link, 0x00F8, 1)


def test_get_rejects_request_type():
    link = FakeLink(b"\x06" + telegram(0, 1, 0x00F8, 1, b"\x01"))
    with pytest.raises(InvalidFormatError):
        vs2.get(link, 0x00F8, 1)


def test_get_rejects_other_address():
    link = FakeLink(b"\x06" + telegram(1, 1, 0x00F9, 1, b"\x01"))
    with pytest.raises(InvalidFormatError):
        vs2.get(link, 0x00F8, 1)


def test_get_rejects_unknown_function():
    link = FakeLink(b"\x06" + telegram(1, 8, 0x00F8, 1, b"\x01"))
    with pytest.raises(InvalidFormatError):
        vs2.get(link, 0x00F8, 1)


def test_get_rejects_wrong_length():
    link = FakeLink(b"\x06" + telegram(1, 1, 0x00F8, 2, b"\x01\x02"))
    with pytest.raises(InvalidFormatError):
        vs2.get(link, 0x00F8, 1)


def test_send_fails_on_unknown_status():
    link = FakeLink(b"\x42")
    with pytest.raises(InvalidFormatError):
        vs2.get(link, 0x00F8, 1)


def test_set_request_and_response():
    link = FakeLink(b"\x06" + telegram(2 - 1, 2, 0x2323, 1))
    assert vs2.set(link, 0x2323, b"\x02") is None
    request = bytes(link.written[:9])
    assert request[:8] == bytes([0x41, 0x06, 0x00, 0x02, 0x23, 0x23, 0x01, 0x02])
    assert request[8] == vs2.checksum(request[1:8])
    assert link.written[9:] == b"\x06"


def test_set_renegotiates_after_nack():
    response = telegram(1, 2, 0x2323, 1)
    link = FakeLink(b"\x15" + b"\x05\x06" + b"\x06" + response)
    vs2.set(link, 0x2323, b"\x02")
    request = bytes(link.written[:9])
    assert link.written == request + b"\x04\x16\x00\x00" + request + b"\x06"


def test_set_rejects_wrong_written_length():
    link = FakeLink(b"\x06" + telegram(1, 2, 0x2323, 2))
    with pytest.raises(InvalidFormatError):
        vs2.set(link, 0x2323, b"\x02")


def test_set_rejects_oversized_payload():
    link = FakeLink()
    with pytest.raises(InvalidArgumentError):
        vs2.set(link, 0x2323, bytes(300))
    assert link.written == b""