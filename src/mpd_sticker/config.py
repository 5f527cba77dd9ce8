"""Centralized application configuration."""

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

DEFAULT_DATA_DIR = Path.home() / ".local" / "mpd-sticker"

# Keys accepted from config.toml, with the TOML types they must have
_TOML_KEYS: dict[str, tuple[type, ...]] = {
    "host": (str,),
    "port": (int,),
    "timeout": (int, float),
    "password": (str,),
    "default_type": (str,),
}


class Config(BaseModel):
    """Application-wide configuration."""

    model_config = ConfigDict(frozen=True)

    data_dir: Path = Field(description="Base directory for all application data")
    host: str = Field(default="localhost", min_length=1, description="MPD host name, IP address or Unix socket path")
    port: int = Field(default=6600, ge=1, le=65535, description="MPD TCP port")
    timeout: float = Field(default=30.0, gt=0, description="Socket timeout in seconds")
    password: str | None = Field(default=None, description="Password sent after connecting")
    default_type: str = Field(default="song", min_length=1, description="Sticker object type used when none is given")

    @computed_field(description="Optional TOML configuration file")
    @property
    def config_path(self) -> Path:
        """Optional TOML configuration file."""
        return self.data_dir / "config.toml"

    @computed_field(description="Log file")
    @property
    def log_path(self) -> Path:
        """Log file."""
        return self.data_dir / "sticker.log"

    @property
    def is_unix_socket(self) -> bool:
        """Whether ``host`` names a Unix domain socket (``@name`` is a Linux abstract socket)."""
        return self.host.startswith(("/", "@"))

    @staticmethod
    def build(data_dir: Path | None = None, env: Mapping[str, str] | None = None) -> "Config":
        """Build a Config from defaults, optional config.toml and MPD_* environment variables.

        Later sources win: defaults, then config.toml, then the environment.
        ``MPD_HOST`` may carry a password as ``password@host``.
        """
        resolved_dir = data_dir if data_dir is not None else DEFAULT_DATA_DIR
        config_path = resolved_dir / "config.toml"
        environ = os.environ if env is None else env

        kwargs: dict[str, Any] = {"data_dir": resolved_dir}
        if config_path.is_file():
            with config_path.open("rb") as f:
                toml_data = tomllib.load(f)
            for key, types in _TOML_KEYS.items():
                value = toml_data.get(key)
                if isinstance(value, types) and not isinstance(value, bool):
                    kwargs[key] = value

        if mpd_host := environ.get("MPD_HOST"):
            # Password ends at the first "@"; a leading "@" is an abstract socket name
            password, sep, host = mpd_host.partition("@")
            if sep and password:
                kwargs["password"] = password
                kwargs["host"] = host
            else:
                kwargs["host"] = mpd_host
        if mpd_port := environ.get("MPD_PORT"):
            kwargs["port"] = mpd_port
        if mpd_timeout := environ.get("MPD_TIMEOUT"):
            kwargs["timeout"] = mpd_timeout

        return Config(**kwargs)
