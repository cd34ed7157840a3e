"""
GMC Host - GQ GMC Geiger Counter Serial Driver

Python host driver for GMC-300E-class Geiger counters over a USB serial line.
Sends framed ASCII commands and decodes version, CPM/CPS counts,
configuration and device date-time replies.
"""

__version__ = "0.1.0"
__author__ = "GMC Host Contributors"

from gmc_host.commands import Session, SessionState
from gmc_host.config import SessionConfig
from gmc_host.protocol import (
    Command,
    GmcConnectionError,
    GmcError,
    GmcIOError,
    GmcNotConnectedError,
    GmcProtocolError,
)

__all__ = [
    "Command",
    "GmcConnectionError",
    "GmcError",
    "GmcIOError",
    "GmcNotConnectedError",
    "GmcProtocolError",
    "Session",
    "SessionConfig",
    "SessionState",
    "__version__",
]
