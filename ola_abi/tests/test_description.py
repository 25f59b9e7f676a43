from __future__ import annotations

import json
from pathlib import Path

import pytest

from ola_abi.description import dump_description, load_description, parse_param
from ola_abi.errors import DescriptionError
from ola_abi.schemas import list_json_schemas, load_json_schema
from ola_abi.types import StringType, TupleType, U32Type

TUPLE_ABI = """
[
    {
        "inputs": [
            {"internalType": "u32", "name": "n", "type": "u32"},
            {
                "components": [
                    {"internalType": "u32", "name": "a", "type": "u32"},
                    {"internalType": "string", "name": "b", "type": "string"}
                ],
                "internalType": "struct Example.Pair",
                "name": "x",
                "type": "tuple"
            }
        ],
        "name": "f",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    }
]
"""


def test_load_from_text_bytes_list_and_path(tmp_path: Path, vote_abi_json) -> None:
    from_text = load_description(vote_abi_json)
    from_bytes = load_description(vote_abi_json.encode())
    from_list = load_description(json.loads(vote_abi_json))
    path = tmp_path / "vote.abi.json"
    path.write_text(vote_abi_json, encoding="utf-8")
    from_path = load_description(path)
    assert from_text == from_bytes == from_list == from_path
    assert [f.signature() for f in from_text.functions] == [
        "contract_init(u32[])",
        "winningProposal()",
        "getWinnerName()",
        "vote_proposal(u32)",
        "get_caller()",
    ]


def test_tuple_components_and_extra_keys() -> None:
    abi = load_description(TUPLE_ABI)
    fn = abi.functions[0]
    assert fn.signature() == "f(u32,(u32,string))"
    assert fn.inputs[1].type == TupleType((("a", U32Type()), ("b", StringType())))


def test_events_and_errors_are_accepted(book_abi_json) -> None:
    abi = load_description(book_abi_json)
    assert [e.signature() for e in abi.events] == ["BookCreated(u32,string,u32,string)"]
    assert [p.is_indexed for p in abi.events[0].inputs] == [True, True, False, False]
    assert [e.signature() for e in abi.errors] == ["Unauthorized(address)"]


def test_indexed_is_ignored_on_function_params() -> None:
    p = parse_param({"name": "a", "type": "u32", "indexed": True})
    assert p.indexed is None
    assert parse_param({"type": "u32", "indexed": True}, allow_indexed=True).is_indexed


@pytest.mark.parametrize(
    "entries",
    [
        [{"type": "constructor", "inputs": []}],
        [{"type": "receive", "name": "r"}],
        [{"type": "function", "inputs": []}],
        [{"type": "function", "name": ""}],
        [{"type": "function", "name": "f", "inputs": [{"name": "x", "type": "u64"}]}],
        [{"type": "function", "name": "f", "inputs": [{"name": "x", "type": "tuple"}]}],
        [{"type": "function", "name": "f", "inputs": [{"name": "x"}]}],
        [{"type": "function", "name": "f"}, {"type": "function", "name": "f"}],
        {"type": "function", "name": "f"},
        ["function"],
    ],
)
@pytest.mark.parametrize("validate", [True, False])
def test_malformed_descriptions_are_rejected(entries, validate) -> None:
    with pytest.raises(DescriptionError):
        load_description(entries, validate=validate)


def test_malformed_json() -> None:
    with pytest.raises(DescriptionError) as ei:
        load_description('[{"type": "function",')
    assert ei.value.code == "description_error"
    with pytest.raises(DescriptionError):
        load_description(b"\xff\xfe")
    with pytest.raises(DescriptionError):
        load_description(Path("/nonexistent/abi.json"))


def test_schema_rejects_wrong_field_types() -> None:
    bad = [{"type": "function", "name": "f", "inputs": "u32"}]
    with pytest.raises(DescriptionError) as ei:
        load_description(bad, validate=True)
    assert "schema" in ei.value.message
    assert ei.value.context["path"] == "0/inputs"

    bad_event = [{"type": "event", "name": "E", "anonymous": "no", "inputs": []}]
    with pytest.raises(DescriptionError):
        load_description(bad_event, validate=True)


def test_schema_validation_follows_config(monkeypatch, fresh_config) -> None:
    bad_event = [{"type": "event", "name": "E", "anonymous": "no", "inputs": []}]
    monkeypatch.setenv("OLA_ABI_VALIDATE_SCHEMA", "0")
    # without the schema the loose value is coerced by the loader
    abi = load_description(bad_event)
    assert abi.events[0].anonymous is True


def test_packaged_schema() -> None:
    assert list_json_schemas() == ["abi"]
    schema = load_json_schema("abi")
    assert schema["type"] == "array"
    with pytest.raises(KeyError):
        load_json_schema("nope")


def test_dump_roundtrip(book_abi_json) -> None:
    abi = load_description(book_abi_json)
    dumped = dump_description(abi)
    assert [e["type"] for e in dumped] == ["function", "event", "error"]
    assert dumped[0]["outputs"][0]["type"] == "tuple"
    assert load_description(dumped) == abi
    assert load_description(json.dumps(dumped)) == abi
