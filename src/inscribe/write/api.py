"""
Write API - One callable per action type plus ``transaction``.

    api = WriteApi(WriteConfig(chain_id=..., sign_provider=local_signer()))
    tr = await api.transfer("alice", "bob", "1.0000 EOS", "")

    async def batch(tr):
        tr.transfer("alice", "bob", "1.0000 EOS", "")
        tr.transfer("alice", "carol", "2.0000 EOS", "")

    tr = await api.transaction(batch)

Calls return an awaitable (a task when an event loop is running, otherwise
a coroutine for ``asyncio.run``).  Passing ``callback(error, result)`` as the
last argument schedules the work on the running loop and returns ``None``.
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Callable, Coroutine, Mapping, Optional

from ..chain.codec import AbiCodec, Codec
from ..chain.rpc import Network, RpcNetwork
from ..config import WriteConfig, check_chain_id
from ..errors import ArgumentError, ConfigurationError
from ..spec.models import Callback, OptionOverrides
from ..spec.schemas import SchemaRegistry
from .actions import build_fragment
from .args import call_shape, normalize_call
from .batch import BatchRoutine, MessageCollector, collect_batch
from .finalize import Finalizer, merge_options
from .usage import usage

logger = logging.getLogger(__name__)


def _settle(callback: Callback, task: asyncio.Task) -> None:
    if task.cancelled():
        callback(asyncio.CancelledError(), None)
    elif task.exception() is not None:
        callback(task.exception(), None)
    else:
        callback(None, task.result())


class WriteApi:
    def __init__(
        self,
        config: WriteConfig,
        network: Optional[Network] = None,
        registry: Optional[SchemaRegistry] = None,
        codec: Optional[Codec] = None,
    ) -> None:
        check_chain_id(getattr(config, "chain_id", None))
        self.config = config
        self.registry = registry or SchemaRegistry.default()
        self.codec = codec or AbiCodec(self.registry)
        self.network = network or RpcNetwork(config.rpc_url, config.timeout)
        self.finalizer = Finalizer(config, self.network, self.registry, self.codec)
        self.actions: dict[str, Callable[..., Any]] = {
            name: self._action_method(name) for name in self.registry.actions
        }

    def __getattr__(self, name: str) -> Callable[..., Any]:
        actions = self.__dict__.get("actions") or {}
        if name in actions:
            return actions[name]
        raise AttributeError(f"{type(self).__name__} has no action {name!r}")

    def __getitem__(self, name: str) -> Callable[..., Any]:
        self.registry.definition(name)
        return self.actions[name]

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self.actions))

    def _action_method(self, name: str) -> Callable[..., Any]:
        def method(*args: Any) -> Any:
            return self._invoke(name, args)

        method.__name__ = name
        method.__qualname__ = f"{type(self).__name__}.{name}"
        method.__doc__ = usage(self.registry, name)
        return method

    def usage(self, name: str) -> str:
        return usage(self.registry, name)

    def _invoke(
        self,
        name: str,
        args: tuple[Any, ...],
        overrides: Optional[OptionOverrides] = None,
    ) -> Any:
        """
        Build one action and either return its fragment or submit it.

        ``overrides`` is the internal call mode used by ``MessageCollector``;
        it is not reachable through the public argument list.
        """
        definition = self.registry.definition(name)
        overrides = overrides or OptionOverrides()

        call = normalize_call(args, definition)
        if call is None:
            if overrides.message_only:
                raise ArgumentError(call_shape(definition))
            logger.info("%s", usage(self.registry, name))
            return None

        if overrides.no_callback and call.callback is not None:
            raise ConfigurationError(
                "Callbacks can not be used when creating a multi-action transaction"
            )

        self.registry.resolve_shorthand(name, call.params)
        options = overrides.apply(call.options)
        fragment = build_fragment(self.registry, definition, call.params, options)

        if overrides.message_only:
            return fragment
        return self._complete(self.finalizer.submit(fragment.to_dict(), options), call.callback)

    def transaction(self, *args: Any) -> Any:
        """
        Submit an explicit transaction or run a batch routine atomically.

        ``transaction(tx_or_routine, [settings], [callback])`` where ``tx`` is
        ``{"scope": [...], "messages": [...], "readscope": [...]}`` and a
        routine is called once with a ``MessageCollector``.
        """
        args = list(args)
        callback = None
        if len(args) > 1 and callable(args[-1]):
            callback = args.pop()

        options = None
        if len(args) > 1 and isinstance(args[-1], Mapping):
            options = args.pop()

        if len(args) != 1:
            raise ArgumentError("Transaction args: transaction, [settings], [callback]")

        target = args[0]
        if callable(target):
            options = merge_options(options)
            self.finalizer.check_signer(options)
            return self._complete(self._atomic(target, options), callback)
        return self._complete(self.finalizer.submit(target, options), callback)

    async def _atomic(self, routine: BatchRoutine, options: dict[str, Any]) -> dict[str, Any]:
        merged = await collect_batch(MessageCollector(self), routine)
        return await self.finalizer.submit(merged, options)

    @staticmethod
    def _complete(coro: Coroutine[Any, Any, Any], callback: Optional[Callback]) -> Any:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if callback is None:
                return coro
            coro.close()
            raise ConfigurationError("Callbacks require a running event loop") from None

        task = loop.create_task(coro)
        if callback is None:
            return task
        task.add_done_callback(partial(_settle, callback))
        return None
