"""Shared fixtures: an in-memory network, a fixed key and a ready WriteApi."""

from __future__ import annotations

from typing import Any, Optional

import pytest

from inscribe.config import WriteConfig
from inscribe.sigil.keys import local_signer
from inscribe.spec.schemas import SchemaRegistry
from inscribe.utils import add_seconds
from inscribe.write.api import WriteApi

CHAIN_ID = "00" * 32
PRIVATE_KEY = "0x" + "11" * 32
HEAD_BLOCK_TIME = "2017-09-01T12:00:00"


class FakeNetwork:
    """Network double recording every call."""

    def __init__(
        self,
        context_error: Optional[BaseException] = None,
        push_error: Optional[BaseException] = None,
    ) -> None:
        self.context_error = context_error
        self.push_error = push_error
        self.context_requests: list[int] = []
        self.pushed: list[dict[str, Any]] = []

    async def create_transaction_context(self, expire_in_seconds: int) -> dict[str, Any]:
        self.context_requests.append(expire_in_seconds)
        if self.context_error is not None:
            raise self.context_error
        return {
            "ref_block_num": 4464,
            "ref_block_prefix": 1183234592,
            "expiration": add_seconds(HEAD_BLOCK_TIME, expire_in_seconds),
            "scope": [],
            "readscope": [],
            "messages": [],
            "signatures": [],
        }

    async def push_transaction(self, transaction: dict[str, Any]) -> dict[str, Any]:
        self.pushed.append(transaction)
        if self.push_error is not None:
            raise self.push_error
        return {"transaction_id": "ab" * 32}


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(scope="session")
def registry() -> SchemaRegistry:
    return SchemaRegistry.default()


@pytest.fixture()
def network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture()
def config() -> WriteConfig:
    return WriteConfig(chain_id=CHAIN_ID, sign_provider=local_signer(PRIVATE_KEY))


@pytest.fixture()
def api(config: WriteConfig, network: FakeNetwork, registry: SchemaRegistry) -> WriteApi:
    return WriteApi(config, network=network, registry=registry)


@pytest.fixture()
def unsigned_api(network: FakeNetwork, registry: SchemaRegistry) -> WriteApi:
    return WriteApi(WriteConfig(chain_id=CHAIN_ID), network=network, registry=registry)
