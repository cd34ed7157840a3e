"""
High-level command API for GMC Host.

Provides the Session class: connection lifecycle, the write / settle / read
exchange, and one getter per GMC command.
"""

import logging
import time
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, TypeVar

from gmc_host import protocol
from gmc_host.config import SessionConfig
from gmc_host.protocol import Command
from gmc_host.serial_link import SerialLink

logger = logging.getLogger(__name__)

READ_BUFFER_SIZE = 1024

T = TypeVar("T")


class SessionState(Enum):
    """Session connection state."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class Session:
    """
    GMC session for communicating with the counter.

    Strictly half-duplex: each command is one write, a fixed settle delay and
    one bounded read. Not safe for concurrent use.
    """

    def __init__(
        self,
        config: SessionConfig,
        link_factory: Callable[[SessionConfig], SerialLink] = SerialLink,
        sleep: Callable[[float], None] = time.sleep,
        frame_dump: bool = True,
    ):
        """
        Initialize session (disconnected).

        Args:
            config: Session configuration.
            link_factory: Opens the transport for a config.
            sleep: Used for the settle delay.
            frame_dump: Log TX/RX bytes at DEBUG level.
        """
        self.config = config
        self.link_factory = link_factory
        self.sleep = sleep
        self.frame_dump = frame_dump
        self.state = SessionState.DISCONNECTED
        self.link: Optional[SerialLink] = None

        # Statistics
        self.stats = {
            "commands": 0,
            "bytes_tx": 0,
            "bytes_rx": 0,
            "empty_replies": 0,
            "io_errors": 0,
            "protocol_errors": 0,
        }

    @classmethod
    def open(cls, config: SessionConfig, **kwargs) -> "Session":
        """
        Open a new connected session.

        Args:
            config: Session configuration.
            **kwargs: Passed to the constructor.

        Returns:
            Connected Session instance.
        """
        session = cls(config, **kwargs)
        session.connect()
        return session

    @property
    def is_connected(self) -> bool:
        return self.state is SessionState.CONNECTED

    def connect(self) -> None:
        """
        Open the transport.

        Raises:
            protocol.GmcConnectionError: If the port cannot be opened. The
                session stays disconnected.
            protocol.GmcError: If already connected.
        """
        if self.state is SessionState.CONNECTED:
            raise protocol.GmcError(f"Session already connected to {self.config.port}")

        self.link = self.link_factory(self.config)
        self.state = SessionState.CONNECTED
        logger.info(f"Connected to {self.config.port}")

    def disconnect(self) -> None:
        """Close the transport. Safe to call when already disconnected."""
        if self.state is SessionState.DISCONNECTED:
            return

        link, self.link = self.link, None
        self.state = SessionState.DISCONNECTED
        if link is not None:
            link.close()
        logger.info(f"Disconnected from {self.config.port}")

    def close(self) -> None:
        """Close session and serial link."""
        self.disconnect()

    def _require_link(self, command: str) -> SerialLink:
        if self.state is not SessionState.CONNECTED or self.link is None:
            raise protocol.GmcNotConnectedError(command)
        return self.link

    def _write_all(self, link: SerialLink, data: bytes) -> None:
        """Write data, continuing after short writes."""
        sent = 0
        while sent < len(data):
            n = link.write(data[sent:])
            if n <= 0:
                raise protocol.GmcIOError(
                    self.config.port, f"write made no progress after {sent}/{len(data)} bytes"
                )
            sent += n
        self.stats["bytes_tx"] += sent

    def exchange(self, wire_command: str) -> bytes:
        """
        Send one framed command and read its reply.

        Args:
            wire_command: Framed command, e.g. "<GETCPM>>".

        Returns:
            Raw reply bytes (possibly empty).

        Raises:
            protocol.GmcNotConnectedError: If the session is not connected.
            protocol.GmcIOError: On write, line-status or read failure.
            protocol.GmcError: If the command is not ASCII. Nothing is written.
        """
        link = self._require_link(wire_command)
        try:
            data = wire_command.encode("ascii")
        except UnicodeEncodeError as e:
            raise protocol.GmcError(f"Command {wire_command!r} is not ASCII") from e

        self.stats["commands"] += 1
        if self.frame_dump:
            logger.debug(f"TX: {wire_command} ({data.hex()})")

        try:
            self._write_all(link, data)

            # Firmware needs this quiet interval before the reply is ready
            self.sleep(self.config.settle_delay_s)

            status = link.line_status()
            logger.debug(f"Line status: {status}")

            response = link.read(READ_BUFFER_SIZE)[:READ_BUFFER_SIZE]
        except protocol.GmcIOError as e:
            self.stats["io_errors"] += 1
            logger.error(f"{wire_command} on {self.config.port} failed: {e}")
            raise

        self.stats["bytes_rx"] += len(response)
        if not response:
            self.stats["empty_replies"] += 1
            logger.warning(f"End of stream: no reply to {wire_command}")
        elif self.frame_dump:
            logger.debug(f"RX: {len(response)} bytes {response.hex()}")

        return response

    def query(self, command: Command, decoder: Callable[[bytes], T]) -> T:
        """
        Frame a command, exchange it and decode the reply.

        Args:
            command: Command keyword.
            decoder: Reply decoder from gmc_host.protocol.

        Returns:
            Decoded value.

        Raises:
            protocol.GmcError: First error from exchange or decoder.
        """
        self._require_link(command.value)
        response = self.exchange(command.wire)
        try:
            value = decoder(response)
        except protocol.GmcProtocolError as e:
            self.stats["protocol_errors"] += 1
            logger.error(f"{command.value}: {e}")
            raise

        logger.info(f"{command.value} -> {value!r}")
        return value

    def get_ver(self) -> str:
        """Firmware model and version string."""
        return self.query(Command.GETVER, protocol.decode_text)

    def get_cpm(self) -> int:
        """Counts per minute."""
        return self.query(Command.GETCPM, protocol.decode_uint16)

    def get_cpml(self) -> int:
        return self.query(Command.GETCPML, protocol.decode_uint16)

    def get_cpmh(self) -> int:
        return self.query(Command.GETCPMH, protocol.decode_uint16)

    def get_cps(self) -> int:
        """Counts per second."""
        return self.query(Command.GETCPS, protocol.decode_uint16)

    def get_cpsl(self) -> int:
        return self.query(Command.GETCPSL, protocol.decode_uint16)

    def get_cpsh(self) -> int:
        return self.query(Command.GETCPSH, protocol.decode_uint16)

    def get_cfg(self) -> str:
        """
        Configuration blob.

        Returned as text with one character per byte; use
        ``.encode("latin-1")`` to recover the raw bytes.
        """
        return self.query(Command.GETCFG, protocol.decode_text)

    def get_datetime(self) -> Optional[datetime]:
        """
        Device clock.

        Returns:
            Local-zone datetime, or None if the device did not reply.

        Raises:
            protocol.GmcProtocolError: If the reply is not 7 bytes.
        """
        return self.query(Command.GETDATETIME, protocol.decode_datetime)

    def __enter__(self) -> "Session":
        """Context manager entry. Connects if needed."""
        if self.state is SessionState.DISCONNECTED:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
