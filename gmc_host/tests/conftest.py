"""
Shared test doubles for GMC Host tests.

FakeLink stands in for SerialLink and records every call in order, so tests
can check the write / sleep / status / read sequence.
"""

from typing import List, Optional

import pytest

from gmc_host.commands import Session
from gmc_host.config import SessionConfig
from gmc_host.protocol import GmcIOError
from gmc_host.serial_link import LineStatus


class FakeLink:
    """Scripted SerialLink replacement."""

    def __init__(
        self,
        config: SessionConfig,
        replies: Optional[List[bytes]] = None,
        write_chunks: Optional[List[int]] = None,
        events: Optional[list] = None,
    ):
        self.config = config
        self.port = config.port
        self.replies = list(replies or [])
        self.write_chunks = list(write_chunks or [])
        self.events = events if events is not None else []
        self.written = bytearray()
        self.closed = False
        self.close_count = 0
        self.fail_write = False
        self.fail_status = False
        self.fail_read = False
        self.read_sizes: List[int] = []

    def write(self, data: bytes) -> int:
        self.events.append(("write", bytes(data)))
        if self.fail_write:
            raise GmcIOError(self.port, "write failed: broken pipe")
        n = self.write_chunks.pop(0) if self.write_chunks else len(data)
        n = min(n, len(data))
        self.written.extend(data[:n])
        return n

    def line_status(self) -> LineStatus:
        self.events.append(("status",))
        if self.fail_status:
            raise GmcIOError(self.port, "line status query failed")
        return LineStatus(cts=True, dsr=True, ri=False, cd=False)

    def read(self, size: int) -> bytes:
        self.events.append(("read", size))
        self.read_sizes.append(size)
        if self.fail_read:
            raise GmcIOError(self.port, "read failed: timeout")
        if not self.replies:
            return b""
        return self.replies.pop(0)

    def close(self) -> None:
        self.events.append(("close",))
        self.closed = True
        self.close_count += 1


class FakeSleep:
    """Records requested sleeps instead of sleeping."""

    def __init__(self, events: list):
        self.events = events
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.events.append(("sleep", seconds))
        self.calls.append(seconds)


class Harness:
    """Session wired to a FakeLink and FakeSleep sharing one event log."""

    def __init__(self, config: Optional[SessionConfig] = None):
        self.config = config or SessionConfig(port="/dev/ttyFAKE0")
        self.events: list = []
        self.links: List[FakeLink] = []
        self.replies: List[bytes] = []
        self.write_chunks: List[int] = []
        self.sleep = FakeSleep(self.events)
        self.session = Session(self.config, link_factory=self._open, sleep=self.sleep)

    def _open(self, config: SessionConfig) -> FakeLink:
        link = FakeLink(config, self.replies, self.write_chunks, self.events)
        self.links.append(link)
        return link

    @property
    def link(self) -> FakeLink:
        return self.links[-1]

    def connect(self, *replies: bytes) -> Session:
        self.replies.extend(replies)
        self.session.connect()
        return self.session


@pytest.fixture
def harness() -> Harness:
    return Harness()


@pytest.fixture
def make_harness():
    """Factory for harnesses with a custom SessionConfig."""
    return Harness
