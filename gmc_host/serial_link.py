"""
Serial link to the GMC counter.

Thin pyserial wrapper that opens the port from a SessionConfig and maps
pyserial failures onto GmcConnectionError / GmcIOError.
"""

import logging
from dataclasses import dataclass

import serial

from gmc_host.config import SessionConfig
from gmc_host.protocol import GmcConnectionError, GmcIOError

logger = logging.getLogger(__name__)


@dataclass
class LineStatus:
    """Modem line-status bits."""

    cts: bool
    dsr: bool
    ri: bool
    cd: bool

    def __str__(self) -> str:
        return f"CTS={int(self.cts)} DSR={int(self.dsr)} RI={int(self.ri)} CD={int(self.cd)}"


class SerialLink:
    """
    Serial link to a GMC device.

    Owns the pyserial port handle from construction until close().
    """

    def __init__(self, config: SessionConfig):
        """
        Open the serial port.

        Args:
            config: Session configuration (port, line settings, timeouts).

        Raises:
            GmcConnectionError: If the port cannot be opened.
        """
        self.config = config
        self.port = config.port

        try:
            self.serial = serial.Serial(
                port=config.port,
                baudrate=config.baud,
                bytesize=config.data_bits,
                parity=config.parity,
                stopbits=config.stop_bits,
                timeout=config.read_timeout_s,
                write_timeout=config.write_timeout_s,
            )
        except (serial.SerialException, ValueError) as e:
            raise GmcConnectionError(config.port, str(e)) from e

        logger.info(
            f"Serial link opened: {config.port} @ {config.baud} baud "
            f"{config.data_bits}{config.parity}{config.stop_bits}"
        )

    def close(self) -> None:
        """Close serial port. Does nothing if already closed."""
        if self.serial.is_open:
            self.serial.close()
            logger.info(f"Serial link closed: {self.port}")

    def write(self, data: bytes) -> int:
        """
        Write data to serial port.

        Args:
            data: Bytes to write.

        Returns:
            Number of bytes written (may be less than len(data)).

        Raises:
            GmcIOError: On write failure or write timeout.
        """
        try:
            n = self.serial.write(data)
        except (serial.SerialException, OSError) as e:
            raise GmcIOError(self.port, f"write failed: {e}") from e
        # Some pyserial backends return None for a complete write
        return len(data) if n is None else n

    def read(self, size: int) -> bytes:
        """
        Single bounded read.

        Returns the bytes already buffered (up to size). If nothing is buffered,
        blocks up to the read timeout for the first byte, then drains whatever
        else has arrived.

        Args:
            size: Maximum number of bytes to return.

        Returns:
            Bytes read; empty on timeout.

        Raises:
            GmcIOError: On read failure.
        """
        try:
            first = b""
            if self.serial.in_waiting == 0:
                first = self.serial.read(1)
                if not first:
                    return b""

            available = min(self.serial.in_waiting, size - len(first))
            if available > 0:
                return first + self.serial.read(available)
            return first
        except (serial.SerialException, OSError) as e:
            raise GmcIOError(self.port, f"read failed: {e}") from e

    def line_status(self) -> LineStatus:
        """
        Query modem line-status bits.

        Raises:
            GmcIOError: If the status cannot be read.
        """
        try:
            return LineStatus(
                cts=self.serial.cts,
                dsr=self.serial.dsr,
                ri=self.serial.ri,
                cd=self.serial.cd,
            )
        except (serial.SerialException, OSError) as e:
            raise GmcIOError(self.port, f"line status query failed: {e}") from e

    def __enter__(self) -> "SerialLink":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
