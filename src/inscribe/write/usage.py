from __future__ import annotations

import json

from ..spec.schemas import SchemaRegistry


def usage(registry: SchemaRegistry, name: str) -> str:
    """Describe an action's fields with a default-populated example."""
    definition = registry.definition(name)

    text = ""

    def out(line: str = "") -> None:
        nonlocal text
        text += line + "\n"

    out(name)
    out()
    out("USAGE")
    out(json.dumps(definition.to_dict(), indent=4))
    out()
    out("EXAMPLE STRUCTURE")
    out(json.dumps(registry.default_object(name), indent=4))
    return text
