"""
Node HTTP client.

Lightweight async client for the node's ``/v1/chain/*`` endpoints using
httpx.  Supplies the reference-block context a transaction is built on and
pushes signed transactions.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import httpx

from ..config import DEFAULT_RPC_URL, DEFAULT_TIMEOUT
from ..errors import NetworkError
from ..utils import add_seconds

logger = logging.getLogger(__name__)


class Network(Protocol):
    async def create_transaction_context(self, expire_in_seconds: int) -> dict[str, Any]: ...

    async def push_transaction(self, transaction: dict[str, Any]) -> dict[str, Any]: ...


class RpcNetwork:
    """
    Network collaborator backed by a node's HTTP API.

    Args:
        rpc_url: Node base URL (e.g. ``http://127.0.0.1:8888``)
        timeout: Per-request timeout in seconds
        client: Optional pre-built ``httpx.AsyncClient`` (owned by the caller)
    """

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.rpc_url = rpc_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def _post(self, path: str, body: Any = None) -> Any:
        """
        POST a JSON body to a chain endpoint.

        Returns:
            Decoded JSON response

        Raises:
            NetworkError: On transport failure or a non-2xx response
        """
        url = f"{self.rpc_url}{path}"
        try:
            if self._client is not None:
                response = await self._client.post(url, json=body)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=body)
        except httpx.HTTPError as exc:
            raise NetworkError(f"{path} failed: {exc}") from exc

        if response.is_error:
            raise NetworkError(
                f"{path} failed: {_error_message(response)}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(f"{path} returned invalid JSON") from exc

    async def get_info(self) -> dict[str, Any]:
        return await self._post("/v1/chain/get_info")

    async def get_block(self, block_num_or_id: int | str) -> dict[str, Any]:
        return await self._post("/v1/chain/get_block", {"block_num_or_id": block_num_or_id})

    async def create_transaction_context(self, expire_in_seconds: int) -> dict[str, Any]:
        """
        Build the reference-block skeleton of a new transaction.

        The reference block is the last irreversible block; the expiration is
        ``expire_in_seconds`` after the head block time.
        """
        info = await self.get_info()
        try:
            block_num = int(info["last_irreversible_block_num"])
            head_block_time = info["head_block_time"]
        except (KeyError, TypeError, ValueError) as exc:
            raise NetworkError(f"Unexpected get_info response: {info!r}") from exc

        block = await self.get_block(block_num)
        try:
            ref_block_prefix = int(block["ref_block_prefix"])
        except (KeyError, TypeError, ValueError) as exc:
            raise NetworkError(f"Unexpected get_block response for {block_num}") from exc

        context = {
            "ref_block_num": block_num & 0xFFFF,
            "ref_block_prefix": ref_block_prefix,
            "expiration": add_seconds(head_block_time, expire_in_seconds),
            "scope": [],
            "readscope": [],
            "messages": [],
            "signatures": [],
        }
        logger.debug("transaction context %s", context)
        return context

    async def push_transaction(self, transaction: dict[str, Any]) -> dict[str, Any]:
        return await self._post("/v1/chain/push_transaction", transaction)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text[:200]}"
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            return str(error.get("what") or error.get("name") or error)
        if payload.get("message"):
            return str(payload["message"])
    return f"HTTP {response.status_code}"
