"""
Canonical transaction codec.

Transactions are written with eth-abi head/tail encoding.  Each message's
``data`` is itself an ABI-encoded tuple of the action's fields, so the outer
layout does not depend on the action types it carries.

decode(encode(x)) yields an object that encodes back to the same bytes.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError

from ..errors import ValidationError
from ..spec.models import ActionDefinition
from ..spec.schemas import TRANSACTION, SchemaRegistry, format_asset, parse_asset
from ..utils import format_time, parse_time

TRANSACTION_TYPES = [
    "uint16",  # ref_block_num
    "uint32",  # ref_block_prefix
    "uint32",  # expiration
    "string[]",  # scope
    "string[]",  # readscope
    "(string,string,(string,string)[],bytes)[]",  # messages
]


class Codec(Protocol):
    def encode(self, struct_name: str, obj: Mapping[str, Any]) -> bytes: ...

    def decode(self, struct_name: str, data: bytes) -> dict[str, Any]: ...


class AbiCodec:
    """Codec for canonical structured objects (see ``SchemaRegistry.resolve_shorthand``)."""

    def __init__(self, registry: SchemaRegistry) -> None:
        self.registry = registry

    def encode(self, struct_name: str, obj: Mapping[str, Any]) -> bytes:
        try:
            if struct_name == TRANSACTION:
                return self._encode_transaction(obj)
            return self._encode_action(self.registry.definition(struct_name), obj)
        except (EncodingError, TypeError, KeyError) as exc:
            raise ValidationError(f"Cannot encode {struct_name}: {exc}") from exc

    def decode(self, struct_name: str, data: bytes) -> dict[str, Any]:
        try:
            if struct_name == TRANSACTION:
                return self._decode_transaction(data)
            return self._decode_action(self.registry.definition(struct_name), data)
        except DecodingError as exc:
            raise ValidationError(f"Cannot decode {struct_name}: {exc}") from exc

    # -- transaction ---------------------------------------------------

    def _encode_transaction(self, tx: Mapping[str, Any]) -> bytes:
        messages = [
            (
                m["code"],
                m["type"],
                [(a["account"], a["permission"]) for a in m["authorization"]],
                self._encode_action(self.registry.definition(m["type"]), m["data"]),
            )
            for m in tx["messages"]
        ]
        values = [
            tx["ref_block_num"],
            tx["ref_block_prefix"],
            parse_time(tx["expiration"]),
            list(tx["scope"]),
            list(tx.get("readscope") or []),
            messages,
        ]
        return encode(TRANSACTION_TYPES, values)

    def _decode_transaction(self, data: bytes) -> dict[str, Any]:
        ref_block_num, ref_block_prefix, expiration, scope, readscope, messages = decode(
            TRANSACTION_TYPES, data
        )
        return {
            "ref_block_num": ref_block_num,
            "ref_block_prefix": ref_block_prefix,
            "expiration": format_time(expiration),
            "scope": list(scope),
            "readscope": list(readscope),
            "messages": [
                {
                    "code": code,
                    "type": type_name,
                    "authorization": [
                        {"account": account, "permission": permission}
                        for account, permission in authorization
                    ],
                    "data": self._decode_action(self.registry.definition(type_name), payload),
                }
                for code, type_name, authorization, payload in messages
            ],
        }

    # -- action data ---------------------------------------------------

    def _field_types(self, definition: ActionDefinition) -> list[str]:
        return [self.registry.abi_type(t) for t in definition.fields.values()]

    def _encode_action(self, definition: ActionDefinition, data: Mapping[str, Any]) -> bytes:
        values = [
            self._to_abi(type_name, data[name]) for name, type_name in definition.fields.items()
        ]
        return encode(self._field_types(definition), values)

    def _decode_action(self, definition: ActionDefinition, payload: bytes) -> dict[str, Any]:
        values = decode(self._field_types(definition), payload)
        return {
            name: self._from_abi(type_name, value)
            for (name, type_name), value in zip(definition.fields.items(), values)
        }

    def _to_abi(self, type_name: str, value: Any) -> Any:
        if type_name == "Time":
            return parse_time(value)
        if type_name == "Asset":
            return parse_asset(value)
        if self.registry.abi_type(type_name) == "bytes":
            return bytes.fromhex(value)
        return value

    def _from_abi(self, type_name: str, value: Any) -> Any:
        if type_name == "Time":
            return format_time(value)
        if type_name == "Asset":
            amount, precision, symbol = value
            # "5 EOS" parses back with the default precision, not 0.
            if precision == 0:
                raise ValidationError(f"Cannot decode asset with precision 0: {value!r}")
            return format_asset(amount, precision, symbol)
        if self.registry.abi_type(type_name) == "bytes":
            return bytes(value).hex()
        return value
