"""
Transaction finalizer - Fetch context, serialize, sign and submit.

What gets signed and broadcast is the transaction decoded back from its
canonical bytes, so the signed payload matches what goes over the wire even
when the request used shorthand values.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from typing import Any, Coroutine, Mapping, Optional

from ..chain.codec import Codec
from ..chain.rpc import Network
from ..config import WriteConfig
from ..errors import ArgumentError, ConfigurationError, NetworkError, SigningError, ValidationError
from ..sigil.keys import sign
from ..spec.models import FinalizerState, SignRequest
from ..spec.schemas import TRANSACTION, SchemaRegistry
from ..utils import sha256_hex, sorted_unique

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS = {"expire_in_seconds": 60, "broadcast": True, "sign": True}


def merge_options(options: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    merged = dict(DEFAULT_OPTIONS)
    merged.update(options or {})
    return merged


async def collect_signatures(value: Any) -> list[str]:
    """Flatten a signature, a list of them, awaitables of either, in order.

    Every nested awaitable is awaited before the first failure is raised.
    """
    if inspect.isawaitable(value):
        value = await value
    if isinstance(value, (list, tuple)):
        nested = await asyncio.gather(
            *(collect_signatures(item) for item in value), return_exceptions=True
        )
        for group in nested:
            if isinstance(group, BaseException):
                raise group
        return [sig for group in nested for sig in group]
    if not isinstance(value, str):
        raise SigningError(f"Expecting signature string, got {type(value).__name__}")
    return [value]


class Finalizer:
    def __init__(
        self,
        config: WriteConfig,
        network: Network,
        registry: SchemaRegistry,
        codec: Codec,
    ) -> None:
        self.config = config
        self.network = network
        self.registry = registry
        self.codec = codec

    def check_signer(self, options: Mapping[str, Any]) -> None:
        if options["sign"] and not callable(self.config.sign_provider):
            raise ConfigurationError(
                "Expecting config.sign_provider function (disable using {'sign': False})"
            )

    def check(self, transaction: Any, options: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        """
        Validate a transaction request and resolve its options.

        Raises:
            ArgumentError: If the transaction is not a mapping
            ValidationError: If scope, messages or an authorization is malformed
            ConfigurationError: If signing is requested without a sign provider
        """
        if not isinstance(transaction, Mapping):
            raise ArgumentError("First transaction argument should be an object or function")
        scope = transaction.get("scope")
        if not isinstance(scope, (list, tuple)) or not all(isinstance(s, str) for s in scope):
            raise ValidationError("Expecting scope array")
        messages = transaction.get("messages")
        if not isinstance(messages, (list, tuple)):
            raise ValidationError("Expecting messages array")
        for message in messages:
            authorization = message.get("authorization") if isinstance(message, Mapping) else None
            if not isinstance(authorization, (list, tuple)) or not authorization:
                raise ValidationError(f"Expecting message.authorization array: {message!r}")

        options = merge_options(options)
        expire = options["expire_in_seconds"]
        if isinstance(expire, bool) or not isinstance(expire, int) or expire <= 0:
            raise ValidationError(f"expire_in_seconds must be a positive integer, got {expire!r}")
        self.check_signer(options)
        return options

    def submit(
        self, transaction: Any, options: Optional[Mapping[str, Any]] = None
    ) -> Coroutine[Any, Any, dict[str, Any]]:
        """Check the request now and return the coroutine that finalizes it."""
        options = self.check(transaction, options)
        return self.finalize(transaction, options)

    async def finalize(self, transaction: Mapping[str, Any], options: Mapping[str, Any]) -> dict[str, Any]:
        state = FinalizerState.RECEIVED
        try:
            context = await self._fetch_context(options["expire_in_seconds"])
            state = self._transition(FinalizerState.CONTEXT_FETCHED)

            raw = dict(context)
            raw["scope"] = sorted_unique(transaction["scope"])
            raw["messages"] = list(transaction["messages"])
            raw["readscope"] = list(transaction.get("readscope") or [])

            tx_object = self.registry.resolve_shorthand(TRANSACTION, raw)
            buf = self.codec.encode(TRANSACTION, tx_object)
            tr = self.codec.decode(TRANSACTION, buf)
            state = self._transition(FinalizerState.SERIALIZED)

            signatures: list[str] = []
            if options["sign"]:
                signatures = await self._sign(tr, buf)
                state = self._transition(FinalizerState.SIGNED)
            else:
                state = self._transition(FinalizerState.SIGN_SKIPPED)
            tr["signatures"] = signatures

            logger.debug("transaction %s", json.dumps(tr, indent=4))

            if not options["broadcast"]:
                state = self._transition(FinalizerState.BROADCAST_SKIPPED)
            else:
                await self._push(tr, buf)
                state = self._transition(FinalizerState.SUBMITTED)
        except BaseException:
            logger.debug("finalizer %s -> %s", state.value, FinalizerState.FAILED.value)
            raise

        self._transition(FinalizerState.COMPLETED)
        return tr

    @staticmethod
    def _transition(state: FinalizerState) -> FinalizerState:
        logger.debug("finalizer -> %s", state.value)
        return state

    async def _fetch_context(self, expire_in_seconds: int) -> dict[str, Any]:
        try:
            return await self.network.create_transaction_context(expire_in_seconds)
        except NetworkError:
            raise
        except Exception as exc:
            raise NetworkError(f"create_transaction_context failed: {exc}") from exc

    async def _sign(self, tr: dict[str, Any], buf: bytes) -> list[str]:
        request = SignRequest(
            transaction=tr,
            buf=bytes.fromhex(self.config.chain_id) + buf,
            sign=sign,
        )
        try:
            return await collect_signatures(self.config.sign_provider(request))
        except SigningError:
            raise
        except Exception as exc:
            raise SigningError(f"Sign provider failed: {exc}") from exc

    async def _push(self, tr: dict[str, Any], buf: bytes) -> None:
        digest = sha256_hex(buf)
        try:
            await self.network.push_transaction(tr)
        except Exception as exc:
            message = exc.message if isinstance(exc, NetworkError) else str(exc)
            logger.error("[push_transaction error] '%s', digest '%s'", message, digest)
            raise NetworkError(
                message,
                digest=digest,
                status_code=getattr(exc, "status_code", None),
            ) from exc
        logger.info("pushed transaction %s", digest)
