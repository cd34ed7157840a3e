"""
GMC command protocol: framing, response decoders and error types.

Commands are ASCII keywords wrapped as ``<KEYWORD>>``. Replies are raw bytes
whose shape (text, big-endian integer, 7-byte date-time) is fixed per command.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

# Device framing. The doubled closing character is part of the firmware protocol.
FRAME_START = "<"
FRAME_END = ">>"

DATETIME_LENGTH = 7
DATETIME_BASE_YEAR = 2000


class Command(Enum):
    """GMC command keywords."""

    GETVER = "GETVER"
    GETCPM = "GETCPM"
    GETCPML = "GETCPML"
    GETCPMH = "GETCPMH"
    GETCPS = "GETCPS"
    GETCPSL = "GETCPSL"
    GETCPSH = "GETCPSH"
    GETCFG = "GETCFG"
    GETDATETIME = "GETDATETIME"

    @property
    def wire(self) -> str:
        """Framed command string as sent on the line."""
        return frame(self.value)

    @property
    def wire_bytes(self) -> bytes:
        """Framed command as ASCII bytes."""
        return self.wire.encode("ascii")


def frame(keyword: "str | Command") -> str:
    """
    Wrap a bare keyword into the on-wire command syntax.

    No escaping or validation is done.

    Args:
        keyword: Command keyword (e.g. "GETCPM") or Command member.

    Returns:
        Framed command, e.g. "<GETCPM>>".
    """
    if isinstance(keyword, Command):
        keyword = keyword.value
    return FRAME_START + keyword + FRAME_END


class GmcError(Exception):
    """Base exception for GMC errors."""

    pass


class GmcConnectionError(GmcError):
    """Serial port could not be opened."""

    def __init__(self, port: str, reason: str):
        self.port = port
        self.reason = reason
        super().__init__(f"Failed to open port {port}: {reason}")


class GmcIOError(GmcError):
    """Read, write or line-status call failed on an open port."""

    def __init__(self, port: str, reason: str):
        self.port = port
        self.reason = reason
        super().__init__(f"I/O error on port {port}: {reason}")


class GmcProtocolError(GmcError):
    """Response does not have the structure its decoder requires."""

    def __init__(
        self,
        message: str = "unexpected response length",
        expected: Optional[int] = None,
        actual: Optional[int] = None,
    ):
        self.expected = expected
        self.actual = actual
        if expected is not None and actual is not None:
            message = f"{message}: expected {expected}, got {actual}"
        super().__init__(message)


class GmcNotConnectedError(GmcError):
    """Command issued while the session is disconnected."""

    def __init__(self, command: str = ""):
        self.command = command
        detail = f" (command {command})" if command else ""
        super().__init__(f"Session is not connected{detail}")


def decode_text(data: bytes) -> str:
    """
    Decode a text reply verbatim.

    Bytes map one-to-one onto characters (latin-1), so binary configuration
    blobs survive unchanged. Empty input yields "".
    """
    if not data:
        return ""
    return data.decode("latin-1")


def _decode_uint(data: bytes, width: int) -> int:
    if not data:
        return 0
    if len(data) < width:
        raise GmcProtocolError(expected=width, actual=len(data))
    return int.from_bytes(data[:width], "big", signed=False)


def decode_uint16(data: bytes) -> int:
    """
    Decode the first 2 bytes as a big-endian unsigned integer.

    Trailing bytes are ignored. Empty input yields 0.

    Raises:
        GmcProtocolError: If only 1 byte is present.
    """
    return _decode_uint(data, 2)


def decode_uint32(data: bytes) -> int:
    """Decode the first 4 bytes as a big-endian unsigned integer (0 if empty)."""
    return _decode_uint(data, 4)


def decode_uint64(data: bytes) -> int:
    """Decode the first 8 bytes as a big-endian unsigned integer (0 if empty)."""
    return _decode_uint(data, 8)


def decode_datetime(data: bytes) -> Optional[datetime]:
    """
    Decode a GETDATETIME reply.

    Layout: [YY-2000, MM, DD, hh, mm, ss, 0xAA]. The last byte is a trailer
    and is not part of the value.

    Args:
        data: Raw reply.

    Returns:
        Timezone-aware datetime in the local zone, or None for an empty reply.

    Raises:
        GmcProtocolError: If the reply is not exactly 7 bytes, or a field is
            out of range for a calendar date.
    """
    if not data:
        return None
    if len(data) != DATETIME_LENGTH:
        raise GmcProtocolError(expected=DATETIME_LENGTH, actual=len(data))

    try:
        naive = datetime(
            DATETIME_BASE_YEAR + data[0],
            data[1],
            data[2],
            data[3],
            data[4],
            data[5],
        )
    except ValueError as e:
        raise GmcProtocolError(f"invalid date/time fields {data[:6].hex()}: {e}") from e

    # Naive values are interpreted as local time
    return naive.astimezone()
