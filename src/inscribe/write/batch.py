"""
Atomic multi-action transactions.

A batch routine receives a ``MessageCollector`` and calls actions on it the
same way it would on the API.  Each call yields a fragment instead of a
submission; once the routine finishes the fragments are merged into a single
transaction, so either every action is submitted or none is.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from functools import partial
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Union

from ..spec.models import BATCH_MEMBER, ActionFragment
from ..utils import sorted_unique

if TYPE_CHECKING:
    from .api import WriteApi

logger = logging.getLogger(__name__)

Collected = Union[ActionFragment, Awaitable[ActionFragment]]
BatchRoutine = Callable[["MessageCollector"], Any]


class MessageCollector:
    """Exposes one method per action type; every call is recorded in order."""

    def __init__(self, api: "WriteApi") -> None:
        self._api = api
        self._collected: list[Collected] = []

    @property
    def collected(self) -> list[Collected]:
        return list(self._collected)

    def __getattr__(self, name: str) -> Callable[..., Collected]:
        if name.startswith("_") or name not in self._api.actions:
            raise AttributeError(f"Unknown action type: {name}")
        return partial(self._collect, name)

    def __getitem__(self, name: str) -> Callable[..., Collected]:
        self._api.registry.definition(name)
        return partial(self._collect, name)

    def __dir__(self) -> list[str]:
        return sorted(self._api.actions)

    def _collect(self, name: str, *args: Any) -> Collected:
        fragment = self._api._invoke(name, args, overrides=BATCH_MEMBER)
        self._collected.append(fragment)
        return fragment


async def _resolve(item: Collected) -> ActionFragment:
    if inspect.isawaitable(item):
        return await item
    return item


def merge_fragments(fragments: Iterable[ActionFragment]) -> dict[str, Any]:
    """Union the scopes and concatenate the messages, keeping call order."""
    scopes: set[str] = set()
    messages: list[dict[str, Any]] = []
    for fragment in fragments:
        scopes.update(fragment.scope)
        messages.append(fragment.message)
    return {"scope": sorted_unique(scopes), "messages": messages}


async def collect_batch(collector: MessageCollector, routine: BatchRoutine) -> dict[str, Any]:
    """
    Run a batch routine once and merge what it collected.

    The routine may be a plain function or a coroutine function.  Any error
    it raises, directly or from a member call, propagates before anything is
    submitted.
    """
    result = routine(collector)
    if inspect.isawaitable(result):
        await result

    fragments = await asyncio.gather(*(_resolve(item) for item in collector.collected))
    merged = merge_fragments(fragments)
    logger.debug(
        "collected %d messages, scope %s", len(merged["messages"]), merged["scope"]
    )
    return merged
