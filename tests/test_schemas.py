"""Tests for the action schema registry and shorthand resolution."""

from __future__ import annotations

import copy
import json

import pytest

from inscribe.errors import UnknownActionError, ValidationError
from inscribe.spec.schemas import (
    DEFAULT_DOCUMENT,
    SchemaRegistry,
    format_asset,
    parse_asset,
)


@pytest.fixture()
def document() -> dict:
    with DEFAULT_DOCUMENT.open("r", encoding="utf-8") as f:
        return json.load(f)


class TestRegistryLoading:
    def test_default_registry_lists_actions(self, registry: SchemaRegistry) -> None:
        assert "transfer" in registry.actions
        assert "newaccount" in registry.actions
        assert registry.code == "eos"

    def test_fields_keep_declared_order(self, registry: SchemaRegistry) -> None:
        definition = registry.definition("transfer")
        assert definition.field_names == ["from", "to", "quantity", "memo"]
        assert definition.fields["from"] == "AccountName"

    def test_unknown_action(self, registry: SchemaRegistry) -> None:
        with pytest.raises(UnknownActionError, match="Unknown type: nosuch"):
            registry.definition("nosuch")

    def test_rejects_invalid_document(self, document: dict) -> None:
        del document["types"]
        with pytest.raises(ValidationError) as exc_info:
            SchemaRegistry.from_dict(document)
        assert any("types" in e for e in exc_info.value.errors)

    def test_rejects_uppercase_action_names(self, document: dict) -> None:
        document["actions"]["Transfer"] = copy.deepcopy(document["actions"]["transfer"])
        with pytest.raises(ValidationError):
            SchemaRegistry.from_dict(document)

    def test_rejects_transaction_action(self, document: dict) -> None:
        document["actions"]["transaction"] = copy.deepcopy(document["actions"]["transfer"])
        with pytest.raises(ValidationError, match="Conflicting"):
            SchemaRegistry.from_dict(document)

    def test_rejects_undeclared_field_type(self, document: dict) -> None:
        document["actions"]["transfer"]["fields"]["memo"] = "Memo"
        with pytest.raises(ValidationError, match="Memo"):
            SchemaRegistry.from_dict(document)


class TestAssets:
    def test_parse_with_decimals(self) -> None:
        assert parse_asset("1.5000 EOS") == (15000, 4, "EOS")

    def test_parse_whole_amount_uses_default_precision(self) -> None:
        assert parse_asset("1 EOS") == (10000, 4, "EOS")

    def test_format(self) -> None:
        assert format_asset(15000, 4, "EOS") == "1.5000 EOS"
        assert format_asset(0, 8, "SYS") == "0.00000000 SYS"
        assert format_asset(-5, 2, "X") == "-0.05 X"

    def test_amount_must_fit_int64(self) -> None:
        assert parse_asset("922337203685477.5807 EOS") == (2**63 - 1, 4, "EOS")
        with pytest.raises(ValidationError, match="int64"):
            parse_asset("99999999999999999999 EOS")
        with pytest.raises(ValidationError, match="int64"):
            parse_asset("-922337203685477.5809 EOS")

    def test_precision_must_fit_uint8(self) -> None:
        with pytest.raises(ValidationError, match="precision 256"):
            parse_asset("1." + "0" * 256 + " EOS")

    def test_resolve_rejects_oversized_asset(self, registry: SchemaRegistry) -> None:
        with pytest.raises(ValidationError):
            registry.resolve_value("Asset", "99999999999999999999 EOS")

    def test_invalid(self) -> None:
        with pytest.raises(ValidationError):
            parse_asset("lots of EOS")
        with pytest.raises(ValidationError):
            parse_asset(10)


class TestResolveShorthand:
    def test_action_data(self, registry: SchemaRegistry) -> None:
        data = registry.resolve_shorthand(
            "transfer", {"from": "alice", "to": "bob", "quantity": "1 EOS", "memo": "hi"}
        )
        assert data == {"from": "alice", "to": "bob", "quantity": "1.0000 EOS", "memo": "hi"}

    def test_integer_and_bool_strings(self, registry: SchemaRegistry) -> None:
        assert registry.resolve_value("UInt64", "42") == 42
        assert registry.resolve_value("UInt8", "08") == 8
        assert registry.resolve_value("Bool", "true") is True
        assert registry.resolve_value("Bool", False) is False

    def test_integer_strings_are_decimal(self, registry: SchemaRegistry) -> None:
        with pytest.raises(ValidationError, match="expecting integer"):
            registry.resolve_value("UInt8", "0x10")

    def test_integer_bounds(self, registry: SchemaRegistry) -> None:
        with pytest.raises(ValidationError, match="out of range"):
            registry.resolve_value("UInt8", 256)
        with pytest.raises(ValidationError):
            registry.resolve_value("UInt64", -1)
        with pytest.raises(ValidationError):
            registry.resolve_value("UInt64", True)

    def test_bytes(self, registry: SchemaRegistry) -> None:
        assert registry.resolve_value("Bytes", b"\x00\x61") == "0061"
        assert registry.resolve_value("Bytes", "0xABCD") == "abcd"
        with pytest.raises(ValidationError):
            registry.resolve_value("Bytes", "zz")

    def test_account_names(self, registry: SchemaRegistry) -> None:
        with pytest.raises(ValidationError, match="invalid account name"):
            registry.resolve_value("AccountName", "Alice")
        with pytest.raises(ValidationError):
            registry.resolve_value("AccountName", 7)

    def test_missing_and_extra_fields(self, registry: SchemaRegistry) -> None:
        with pytest.raises(ValidationError, match="missing fields: memo"):
            registry.resolve_shorthand("transfer", {"from": "a", "to": "b", "quantity": "1 EOS"})
        with pytest.raises(ValidationError, match="unknown fields: extra"):
            registry.resolve_shorthand(
                "unlock", {"account": "alice", "amount": 1, "extra": True}
            )

    def test_transaction(self, registry: SchemaRegistry) -> None:
        tx = registry.resolve_shorthand(
            "transaction",
            {
                "ref_block_num": "7",
                "ref_block_prefix": 99,
                "expiration": "2017-09-01T12:01:00.000Z",
                "scope": ["alice"],
                "messages": [
                    {
                        "type": "unlock",
                        "authorization": ["alice@owner"],
                        "data": {"account": "alice", "amount": "5"},
                    }
                ],
            },
        )
        assert tx == {
            "ref_block_num": 7,
            "ref_block_prefix": 99,
            "expiration": "2017-09-01T12:01:00",
            "scope": ["alice"],
            "readscope": [],
            "messages": [
                {
                    "code": "eos",
                    "type": "unlock",
                    "authorization": [{"account": "alice", "permission": "owner"}],
                    "data": {"account": "alice", "amount": 5},
                }
            ],
        }

    def test_transaction_with_unknown_message_type(self, registry: SchemaRegistry) -> None:
        with pytest.raises(UnknownActionError):
            registry.resolve_shorthand(
                "transaction",
                {"scope": [], "messages": [{"type": "nosuch", "authorization": [], "data": {}}]},
            )


class TestDefaults:
    def test_default_object(self, registry: SchemaRegistry) -> None:
        assert registry.default_object("transfer") == {
            "from": "",
            "to": "",
            "quantity": "0.0000 EOS",
            "memo": "",
        }
        assert registry.default_object("okproducer")["approve"] is False
        assert registry.default_object("setcode")["vmtype"] == 0
