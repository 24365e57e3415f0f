"""
Static configuration for the write pipeline.

Values are fixed at setup time and handed to ``WriteApi`` as one immutable
``WriteConfig``.  ``WriteConfig.from_env`` reads them from the process
environment after loading ``~/.inscribe/.env`` (if present).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError


# Default config directory
INSCRIBE_DIR = Path.home() / ".inscribe"
INSCRIBE_ENV = INSCRIBE_DIR / ".env"

# Default node endpoint (local nodeos)
DEFAULT_RPC_URL = "http://127.0.0.1:8888"
DEFAULT_TIMEOUT = 30.0

SignProvider = Callable[[Any], Any]


def load_env(env_path: Optional[Path] = None) -> Path:
    """Load the .env file into ``os.environ`` without clobbering set values."""
    env_path = env_path or INSCRIBE_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)
    return env_path


def get_rpc_url() -> str:
    """Get the node URL from environment or default."""
    return os.environ.get("INSCRIBE_RPC_URL", DEFAULT_RPC_URL)


def get_chain_id() -> Optional[str]:
    """Get the hex chain identifier from environment."""
    return os.environ.get("INSCRIBE_CHAIN_ID")


def check_chain_id(chain_id: Any) -> str:
    if not isinstance(chain_id, str):
        raise ConfigurationError("config.chain_id is required")
    try:
        bytes.fromhex(chain_id)
    except ValueError as exc:
        raise ConfigurationError(f"config.chain_id must be hex: {chain_id!r}") from exc
    return chain_id


@dataclass(frozen=True)
class WriteConfig:
    chain_id: str
    sign_provider: Optional[SignProvider] = None
    rpc_url: str = DEFAULT_RPC_URL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        check_chain_id(self.chain_id)

    @classmethod
    def from_env(
        cls,
        env_path: Optional[Path] = None,
        sign_provider: Optional[SignProvider] = None,
    ) -> "WriteConfig":
        """
        Build a config from ``INSCRIBE_*`` environment variables.

        Args:
            env_path: .env file to load first (default: ~/.inscribe/.env)
            sign_provider: Signer to attach (default: none, signing disabled)

        Raises:
            ConfigurationError: If INSCRIBE_CHAIN_ID is missing or not hex
        """
        env_path = load_env(env_path)
        chain_id = get_chain_id()
        if not chain_id:
            raise ConfigurationError(
                f"INSCRIBE_CHAIN_ID not found. Set it in the environment or in {env_path}"
            )
        return cls(
            chain_id=chain_id,
            sign_provider=sign_provider,
            rpc_url=get_rpc_url(),
            timeout=float(os.environ.get("INSCRIBE_TIMEOUT", DEFAULT_TIMEOUT)),
        )
