"""
Configuration management for GMC Host.

Loads/saves TOML configuration for the serial session and logging.
"""

import os
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SessionConfig(BaseModel):
    """Serial session configuration. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    port: str = Field(default="/dev/ttyUSB0", description="Serial port device")
    baud: int = Field(default=57600, gt=0, description="Baud rate")
    data_bits: Literal[5, 6, 7, 8] = Field(default=8, description="Data bits per character")
    parity: Literal["N", "E", "O", "M", "S"] = Field(default="N", description="Parity mode")
    stop_bits: Literal[1, 1.5, 2] = Field(default=1, description="Stop bits")
    read_timeout_s: float = Field(default=3.0, ge=0, description="Read timeout in seconds")
    write_timeout_s: float = Field(default=3.0, ge=0, description="Write timeout in seconds")
    settle_delay_ms: int = Field(
        default=500, ge=0, description="Wait between sending a command and reading its reply"
    )

    @property
    def settle_delay_s(self) -> float:
        """Settle delay in seconds."""
        return self.settle_delay_ms / 1000.0


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    frame_dump: bool = Field(default=True, description="Log TX/RX bytes at DEBUG level")
    log_file: Optional[str] = Field(default=None, description="Log file (stderr if unset)")


class Config(BaseModel):
    """Complete GMC Host configuration."""

    serial: SessionConfig = Field(default_factory=SessionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_config_path() -> Path:
    """
    Default config location.

    GMC_HOST_CONFIG names the file directly; otherwise
    $XDG_CONFIG_HOME/gmc_host/config.toml (~/.config if XDG is unset).
    """
    explicit = os.getenv("GMC_HOST_CONFIG")
    if explicit:
        return Path(explicit).expanduser()
    config_home = os.getenv("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "gmc_host" / "config.toml"


def load_config(path: Optional[Union[str, Path]] = None) -> Config:
    """
    Read [serial] and [logging] tables from a TOML file.

    Missing tables and keys keep their defaults, so an absent file yields the
    reference 57600 8N1 /dev/ttyUSB0 session.

    Args:
        path: TOML file; "~" is expanded. Defaults to get_config_path().

    Raises:
        tomli.TOMLDecodeError: If the file is not valid TOML.
        pydantic.ValidationError: If a value is out of range.
    """
    path = get_config_path() if path is None else Path(path).expanduser()
    if not path.is_file():
        return Config()

    import tomli

    with open(path, "rb") as f:
        return Config.model_validate(tomli.load(f))


def save_config(config: Config, path: Optional[Union[str, Path]] = None) -> None:
    """
    Write config as TOML, creating parent directories.

    An unset log_file is omitted since TOML has no null.
    """
    path = get_config_path() if path is None else Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    import tomli_w

    with open(path, "wb") as f:
        tomli_w.dump(config.model_dump(exclude_none=True), f)
