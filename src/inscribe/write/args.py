"""
Argument normalization for action calls.

An action call is ``(*field_values, [settings], [callback])``: field values in
declared order (or one mapping of field name to value), an optional settings
mapping or broadcast flag, and an optional ``callback(error, result)``.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..errors import ArgumentError
from ..spec.models import ActionDefinition, NormalizedCall


def call_shape(definition: ActionDefinition) -> str:
    fields = ", ".join(definition.field_names)
    return f"{definition.name}({fields}, [settings], [callback])"


def format_settings(value: Any) -> Optional[dict[str, Any]]:
    """Settings are a mapping of overrides, or a bool shorthand for ``broadcast``."""
    if isinstance(value, bool):
        return {"broadcast": value}
    if isinstance(value, Mapping):
        return dict(value)
    return None


def normalize_call(args: Sequence[Any], definition: ActionDefinition) -> Optional[NormalizedCall]:
    """
    Split raw call arguments into params, options and callback.

    Returns:
        ``None`` for an empty argument list (the caller should show usage),
        otherwise the normalized call

    Raises:
        ArgumentError: If the values do not match the declared fields
    """
    args = list(args)
    if not args:
        return None

    callback = None
    if callable(args[-1]):
        callback = args.pop()

    fields = definition.field_names
    expected = len(fields)

    options: dict[str, Any] = {}
    if args and (len(args) == expected + 1 or (len(args) == 2 and isinstance(args[0], Mapping))):
        settings = format_settings(args[-1])
        if settings is not None:
            args.pop()
            options = settings

    if len(args) == 1 and isinstance(args[0], Mapping):
        named = args[0]
        missing = [f for f in fields if f not in named]
        extra = [k for k in named if k not in fields]
        if missing or extra:
            problems = []
            if missing:
                problems.append(f"missing {', '.join(missing)}")
            if extra:
                problems.append(f"unknown {', '.join(map(str, extra))}")
            raise ArgumentError(f"{call_shape(definition)}: {'; '.join(problems)}")
        params = {f: named[f] for f in fields}
    else:
        if len(args) != expected:
            raise ArgumentError(
                f"{call_shape(definition)} is expecting {expected} parameters "
                f"but {len(args)} were provided"
            )
        params = dict(zip(fields, args))

    return NormalizedCall(params=params, options=options, callback=callback)
