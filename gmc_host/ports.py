"""
Serial port enumeration.

Informational only; the session never consults it.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import serial.tools.list_ports

logger = logging.getLogger(__name__)


@dataclass
class PortInfo:
    """
    Discovered serial port.

    Attributes:
        name: Device path (e.g. '/dev/ttyUSB0', 'COM3').
        description: Human-readable description from the OS.
        is_usb: True if the port is USB-attached.
        vid: USB vendor ID (USB ports only).
        pid: USB product ID (USB ports only).
        serial_number: USB serial number (USB ports only).
    """

    name: str
    description: str = ""
    is_usb: bool = False
    vid: Optional[int] = None
    pid: Optional[int] = None
    serial_number: Optional[str] = None

    @property
    def usb_id(self) -> str:
        """VID:PID as hex, e.g. '1a86:7523'. Empty for non-USB ports."""
        if not self.is_usb or self.vid is None or self.pid is None:
            return ""
        return f"{self.vid:04x}:{self.pid:04x}"


def list_ports() -> List[PortInfo]:
    """
    List available serial ports, sorted by device name.

    Returns:
        Discovered ports (empty list if none).
    """
    ports = []
    for port in serial.tools.list_ports.comports():
        is_usb = port.vid is not None
        ports.append(
            PortInfo(
                name=port.device,
                description=port.description or "",
                is_usb=is_usb,
                vid=port.vid if is_usb else None,
                pid=port.pid if is_usb else None,
                serial_number=port.serial_number if is_usb else None,
            )
        )

    if not ports:
        logger.info("No ports could be enumerated")

    ports.sort(key=lambda p: p.name)
    return ports
