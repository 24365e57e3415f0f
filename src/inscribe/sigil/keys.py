"""
ECDSA / secp256k1 signing for transactions.

This module provides:
- ``sign``: the low-level primitive handed to sign providers
- ``local_signer``: a sign provider that signs with in-process keys

Keys are stored in ~/.inscribe/.env as PRIVATE_KEY (hex format, several keys
comma-separated for multi-signature accounts).

Dependencies: eth-account (lightweight, no full web3.py needed)
"""

from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import Callable, Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount

from ..config import INSCRIBE_ENV, load_env
from ..errors import ConfigurationError, SigningError
from ..spec.models import SignRequest


def _normalize_key(private_key: str) -> str:
    private_key = private_key.strip()
    if not private_key.startswith("0x"):
        private_key = "0x" + private_key
    return private_key


def generate_key() -> tuple[str, str]:
    """
    Generate a new secp256k1 keypair.

    Returns:
        Tuple of (private_key_hex, address)
    """
    private_key = "0x" + secrets.token_hex(32)
    account = Account.from_key(private_key)
    return private_key, account.address


def save_private_key(private_key: str, env_path: Optional[Path] = None) -> Path:
    """
    Save a private key to the .env file, keeping other entries.

    Returns:
        Path to the saved .env file
    """
    env_path = env_path or INSCRIBE_ENV
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing = {}
    if env_path.exists():
        for line in env_path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                k, v = line.split("=", 1)
                existing[k.strip()] = v.strip()

    existing["PRIVATE_KEY"] = private_key

    lines = [f"{k}={v}" for k, v in existing.items()]
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    if os.name != "nt":
        env_path.chmod(0o600)

    return env_path


def load_private_keys(env_path: Optional[Path] = None) -> list[str]:
    """
    Load private keys from the .env file or environment.

    Raises:
        ConfigurationError: If PRIVATE_KEY is not set
    """
    env_path = load_env(env_path)
    value = os.environ.get("PRIVATE_KEY", "")
    keys = [_normalize_key(k) for k in value.split(",") if k.strip()]
    if not keys:
        raise ConfigurationError(f"PRIVATE_KEY not found. Set PRIVATE_KEY in {env_path}")
    return keys


def get_account(private_key: str) -> LocalAccount:
    return Account.from_key(_normalize_key(private_key))


def get_address(private_key: str) -> str:
    return get_account(private_key).address


def sign(buf: bytes, private_key: str) -> str:
    """
    Sign bytes using EIP-191 personal_sign.

    Args:
        buf: Bytes to sign (chain id followed by the canonical transaction)
        private_key: 0x-prefixed hex private key

    Returns:
        0x-prefixed hex signature (65 bytes: r + s + v)
    """
    signable = encode_defunct(primitive=bytes(buf))
    signed = get_account(private_key).sign_message(signable)
    return "0x" + bytes(signed.signature).hex()


def recover_signer(buf: bytes, signature: str) -> str:
    """Return the address that produced ``signature`` over ``buf``."""
    signable = encode_defunct(primitive=bytes(buf))
    try:
        return Account.recover_message(
            signable, signature=bytes.fromhex(signature.removeprefix("0x"))
        )
    except Exception as exc:
        raise SigningError("Invalid signature.") from exc


def local_signer(*private_keys: str) -> Callable[[SignRequest], list[str]]:
    """
    Build a sign provider that signs with every given key, in order.

    With no keys, PRIVATE_KEY is loaded from the environment when the
    provider is created.
    """
    keys = [_normalize_key(k) for k in private_keys] or load_private_keys()

    def sign_provider(request: SignRequest) -> list[str]:
        return [request.sign(request.buf, key) for key in keys]

    return sign_provider
