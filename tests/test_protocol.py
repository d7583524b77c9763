import pytest

from vcontrol.protocol import Protocol


class FakeLink:
    def __init__(self, incoming=b""):
        self.incoming = bytearray(incoming)
        self.written = bytearray()

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
        pass


class BrokenLink(FakeLink):
    def write_all(self, data):
        raise OSError("device gone")


def test_display_names():
    assert str(Protocol.detect(FakeLink(b"\x05\x06"))) == "VS2"
    assert str(Protocol.detect(FakeLink())) == "VS1"


def test_detect_prefers_vs2():
    link = FakeLink(b"\x05\x06")
    assert Protocol.detect(link) is Protocol.VS2


def test_detect_falls_back_to_vs1():
    link = FakeLink()
    assert Protocol.detect(link) is Protocol.VS1
    assert link.written.endswith(b"\x04")


def test_detect_none_when_nothing_answers():
    assert Protocol.detect(BrokenLink()) is None


def test_vs1_dispatch_get():
    link = FakeLink(b"\x05\x2a")
    assert Protocol.VS1.get(link, 0x0800, 1) == b"\x2a"
    assert link.written == b"\x04\x01\xf7\x08\x00\x01"


def test_vs1_dispatch_set():
    link = FakeLink(b"\x05\x00")
    Protocol.VS1.set(link, 0x0800, b"\x01")
    assert link.written == b"\x04\x01\xf4\x08\x00\x01\x01"


def test_vs2_dispatch_negotiate():
    link = FakeLink(b"\x05\x06")
    Protocol.VS2.negotiate(link)
    assert link.written == b"\x04\x16\x00\x00"


def test_vs2_dispatch_propagates_errors():
    with pytest.raises(EOFError):
        Protocol.VS2.get(FakeLink(), 0x00F8, 2)