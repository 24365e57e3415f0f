from __future__ import annotations

from typing import Any, Mapping

from ..errors import ArgumentError
from ..spec.models import ActionDefinition, ActionFragment, Authorization
from ..spec.schemas import SchemaRegistry
from ..utils import sorted_unique


def is_creation_action(name: str) -> bool:
    # Name-based: the created account must not share scope with its creator.
    return "newaccount" in name


def _scope_override(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set, frozenset)) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ArgumentError(f"scope must be an account name or a list of account names, got {value!r}")


def build_fragment(
    registry: SchemaRegistry,
    definition: ActionDefinition,
    params: Mapping[str, Any],
    options: Mapping[str, Any],
) -> ActionFragment:
    """
    Build the single-message fragment for one action call.

    Unless ``options`` carries a ``scope``, the scope is derived from the
    leading fields: an ``AccountName`` first field is scoped and authorizes
    the message with its ``active`` permission; an ``AccountName`` second
    field is scoped only (never for account creation).  An
    ``authorization`` option replaces the derived authorization.
    """
    fields = definition.field_names
    scope: list[str] = []
    authorization: list[Authorization] = []

    first = fields[0]
    if registry.is_account_type(definition.fields[first]):
        authorization.append(Authorization(params[first]))
        scope.append(params[first])

    if len(fields) > 1 and not is_creation_action(definition.name):
        second = fields[1]
        if registry.is_account_type(definition.fields[second]):
            scope.append(params[second])

    # A scope setting replaces the derived scope only. Authorization is still
    # derived from the first field so the message keeps a signer.
    if options.get("scope") is not None:
        scope = _scope_override(options["scope"])

    if options.get("authorization") is not None:
        entries = options["authorization"]
        if isinstance(entries, (str, Mapping)):
            entries = [entries]
        authorization = [Authorization.parse(a) for a in entries]

    message = {
        "code": registry.code,
        "type": definition.name,
        "data": dict(params),
        "authorization": [a.to_dict() for a in authorization],
    }
    return ActionFragment(scope=tuple(sorted_unique(scope)), messages=(message,))
