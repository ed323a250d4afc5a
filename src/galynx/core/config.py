"""Configuration management for the Galynx desktop core"""

import getpass
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from galynx.shared.exceptions import ConfigurationError
from galynx.shared.urls import normalize_api_base

DEFAULT_API_BASE = "http://localhost:3000/api/v1"
TOKEN_STORE_FILE = "secure-tokens.bin"
TOKEN_STORE_KEY = "auth_tokens"
API_BASE_STORE_KEY = "api_base"
APP_IDENTIFIER = "galynx-desktop"


def get_data_dir() -> Path:
    """Get the per-user data directory

    Priority order:
    1. GALYNX_DATA_DIR environment variable
    2. $XDG_DATA_HOME/galynx
    3. ~/.local/share/galynx

    Returns:
        Path object for the data directory (not created here)
    """
    override = os.getenv("GALYNX_DATA_DIR")
    if override:
        return Path(override).expanduser()

    xdg = os.getenv("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "galynx"

    return Path.home() / ".local" / "share" / "galynx"


def derive_store_seed(data_dir: Path) -> str:
    """Build the fallback store secret from machine-local facts"""
    try:
        user = getpass.getuser()
    except Exception:
        user = ""
    return f"{APP_IDENTIFIER}|{sys.platform}|{user}|{data_dir}"


@dataclass
class Config:
    """Configuration for the desktop core loaded from environment variables"""

    data_dir: Path
    store_secret: str

    api_base_override: str | None = None
    request_timeout: float = 30.0
    log_level: str = "INFO"

    @property
    def store_path(self) -> Path:
        return self.data_dir / TOKEN_STORE_FILE

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables

        Returns:
            Config instance with values from environment

        Raises:
            ConfigurationError: If a numeric variable is malformed
        """
        data_dir = get_data_dir()

        api_base_override = None
        raw_base = os.getenv("GALYNX_API_BASE")
        if raw_base:
            api_base_override = normalize_api_base(raw_base)
            if api_base_override is None:
                logger.warning(
                    f"Ignoring GALYNX_API_BASE, not an http(s) URL: {raw_base!r}"
                )

        raw_timeout = os.getenv("GALYNX_HTTP_TIMEOUT", "30")
        try:
            request_timeout = float(raw_timeout)
        except ValueError as e:
            raise ConfigurationError(
                f"GALYNX_HTTP_TIMEOUT must be a number, got {raw_timeout!r}"
            ) from e
        if request_timeout <= 0:
            raise ConfigurationError("GALYNX_HTTP_TIMEOUT must be positive")

        store_secret = os.getenv("GALYNX_STORE_SECRET")
        if not store_secret:
            logger.debug("GALYNX_STORE_SECRET not set, using derived seed")
            store_secret = derive_store_seed(data_dir)

        return cls(
            data_dir=data_dir,
            store_secret=store_secret,
            api_base_override=api_base_override,
            request_timeout=request_timeout,
            log_level=os.getenv("GALYNX_LOG_LEVEL", "INFO").upper(),
        )
