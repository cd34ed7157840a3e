"""
Unit tests for GMC command framing and response decoders.
"""

from datetime import datetime

import pytest

from gmc_host import protocol
from gmc_host.protocol import Command, GmcProtocolError


class TestFraming:
    """Test command framing."""

    @pytest.mark.parametrize("command", list(Command))
    def test_every_command_framed(self, command):
        """Every keyword is wrapped as <KEYWORD>>."""
        assert command.wire == f"<{command.value}>>"

    def test_getcpm_wire_form(self):
        """GETCPM matches the documented wire form."""
        assert protocol.frame("GETCPM") == "<GETCPM>>"

    def test_doubled_closing_delimiter(self):
        """Closing delimiter is two characters, opening is one."""
        wire = protocol.frame("GETVER")
        assert wire.startswith("<") and not wire.startswith("<<")
        assert wire.endswith(">>")

    def test_arbitrary_keyword_not_validated(self):
        """Framer does no validation or escaping."""
        assert protocol.frame("A<B>") == "<A<B>>>"

    def test_frame_accepts_command_member(self):
        """Command members frame the same as their keyword."""
        assert protocol.frame(Command.GETDATETIME) == "<GETDATETIME>>"

    def test_wire_bytes_ascii(self):
        """Wire bytes are the ASCII encoding of the framed string."""
        assert Command.GETCFG.wire_bytes == b"<GETCFG>>"


class TestTextDecoder:
    """Test text reply decoding."""

    def test_empty(self):
        """Empty reply yields empty string."""
        assert protocol.decode_text(b"") == ""

    def test_version_string(self):
        """Version text is returned verbatim."""
        assert protocol.decode_text(b"GMC-300Re 4.54") == "GMC-300Re 4.54"

    def test_binary_blob_preserved(self):
        """Non-ASCII bytes survive and can be recovered."""
        blob = bytes(range(256))
        text = protocol.decode_text(blob)
        assert len(text) == 256
        assert text.encode("latin-1") == blob


class TestIntegerDecoders:
    """Test big-endian unsigned integer decoding."""

    @pytest.mark.parametrize(
        "decoder", [protocol.decode_uint16, protocol.decode_uint32, protocol.decode_uint64]
    )
    def test_empty_yields_zero(self, decoder):
        """Empty reply is not an error."""
        assert decoder(b"") == 0

    def test_uint16(self):
        """First two bytes, big-endian."""
        assert protocol.decode_uint16(b"\x00\x0f") == 15
        assert protocol.decode_uint16(b"\x01\x00") == 256
        assert protocol.decode_uint16(b"\xff\xff") == 0xFFFF

    def test_uint16_ignores_trailing_bytes(self):
        """Trailing bytes do not change the value."""
        assert protocol.decode_uint16(b"\x00\x0f\xaa\xbb\xcc") == 15

    def test_uint32(self):
        """First four bytes, big-endian."""
        assert protocol.decode_uint32(b"\x00\x00\x01\x00") == 256
        assert protocol.decode_uint32(b"\x12\x34\x56\x78\x9a") == 0x12345678

    def test_uint64(self):
        """First eight bytes, big-endian."""
        assert protocol.decode_uint64(b"\x00" * 7 + b"\x2a") == 42
        assert protocol.decode_uint64(b"\xff" * 8) == 0xFFFFFFFFFFFFFFFF

    @pytest.mark.parametrize(
        "decoder,width",
        [
            (protocol.decode_uint16, 2),
            (protocol.decode_uint32, 4),
            (protocol.decode_uint64, 8),
        ],
    )
    def test_truncated_raises(self, decoder, width):
        """Short non-empty reply is a protocol error with expected width."""
        with pytest.raises(GmcProtocolError) as exc_info:
            decoder(b"\x01" * (width - 1))

        assert exc_info.value.expected == width
        assert exc_info.value.actual == width - 1


class TestDateTimeDecoder:
    """Test GETDATETIME reply decoding."""

    def test_decode(self):
        """Bytes decode to the device's local date-time."""
        value = protocol.decode_datetime(bytes([25, 3, 15, 10, 30, 45, 0]))

        assert value.replace(tzinfo=None) == datetime(2025, 3, 15, 10, 30, 45)
        assert value.microsecond == 0

    def test_local_timezone(self):
        """Result carries the local timezone."""
        value = protocol.decode_datetime(bytes([25, 3, 15, 10, 30, 45, 0xAA]))

        assert value.tzinfo is not None
        assert value.utcoffset() == datetime(2025, 3, 15, 10, 30, 45).astimezone().utcoffset()

    def test_trailer_byte_ignored(self):
        """The seventh byte does not affect the value."""
        a = protocol.decode_datetime(bytes([24, 12, 31, 23, 59, 59, 0x00]))
        b = protocol.decode_datetime(bytes([24, 12, 31, 23, 59, 59, 0xAA]))
        assert a == b

    def test_empty_yields_none(self):
        """Empty reply is not an error."""
        assert protocol.decode_datetime(b"") is None

    @pytest.mark.parametrize("length", [1, 6, 8, 12])
    def test_wrong_length(self, length):
        """Any length other than 7 fails with expected length 7."""
        with pytest.raises(GmcProtocolError, match="unexpected response length") as exc_info:
            protocol.decode_datetime(bytes([1] * length))

        assert exc_info.value.expected == 7
        assert exc_info.value.actual == length

    def test_invalid_month(self):
        """Out-of-range calendar fields are a protocol error."""
        with pytest.raises(GmcProtocolError, match="invalid date/time"):
            protocol.decode_datetime(bytes([25, 13, 1, 0, 0, 0, 0xAA]))


class TestErrors:
    """Test error hierarchy."""

    def test_hierarchy(self):
        """All errors derive from GmcError."""
        for cls in (
            protocol.GmcConnectionError,
            protocol.GmcIOError,
            protocol.GmcProtocolError,
            protocol.GmcNotConnectedError,
        ):
            assert issubclass(cls, protocol.GmcError)

    def test_io_error_carries_port(self):
        """I/O errors name the port."""
        e = protocol.GmcIOError("/dev/ttyUSB0", "read failed")
        assert e.port == "/dev/ttyUSB0"
        assert "/dev/ttyUSB0" in str(e)

    def test_protocol_error_message(self):
        """Length errors report expected and actual."""
        e = GmcProtocolError(expected=7, actual=3)
        assert str(e) == "unexpected response length: expected 7, got 3"
