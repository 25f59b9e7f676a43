from __future__ import annotations

import json

import pytest

from ola_abi import boundary
from ola_abi.description import load_description


def _assert_error(env, code: str) -> None:
    assert env["ok"] is False
    assert env["error"]["code"] == code
    assert isinstance(env["error"]["message"], str)
    json.dumps(env)


def test_encode_then_decode_input(book_abi_json) -> None:
    enc = boundary.encode_input(book_abi_json, "createBook(u32,string)", [60, "olavm"])
    assert enc["ok"] is True
    assert all(isinstance(w, str) for w in enc["words"])
    assert enc["words"][1:] == ["7", "60", "5", "111", "108", "97", "118", "109"]

    dec = boundary.decode_input(book_abi_json, enc["words"])
    assert dec == {
        "ok": True,
        "function": "createBook(u32,string)",
        "params": [
            {"name": "id", "type": "u32", "value": 60},
            {"name": "name", "type": "string", "value": "olavm"},
        ],
    }


def test_decode_output(book_abi_json) -> None:
    env = boundary.decode_output(book_abi_json, "createBook(u32,string)", [60, 1, 120])
    assert env["ok"] is True
    assert env["params"][0]["value"] == {"book_id": 60, "book_name": "x"}
    assert env["params"][0]["type"] == "(u32,string)"


def test_decode_log(book_abi_json) -> None:
    abi = load_description(book_abi_json)
    topic0 = abi.events[0].topic().to_hex()
    env = boundary.decode_log(
        book_abi_json,
        [topic0, ["0", "0", "0", "60"], "0x" + "ab" * 32],
        [100, 0],
    )
    assert env["ok"] is True
    assert env["event"] == "BookCreated(u32,string,u32,string)"
    values = {p["name"]: p["value"] for p in env["params"]}
    assert values == {"id": 60, "name": "0x" + "ab" * 32, "price": 100, "title": ""}


def test_unknown_selector(book_abi_json) -> None:
    _assert_error(boundary.decode_input(book_abi_json, [1, 0]), "not_found")


def test_unknown_signature(book_abi_json) -> None:
    _assert_error(boundary.encode_input(book_abi_json, "nope()", []), "not_found")
    _assert_error(boundary.decode_output(book_abi_json, "nope()", []), "not_found")


def test_bad_description() -> None:
    _assert_error(boundary.decode_input("not json", [1, 2]), "description_error")
    _assert_error(boundary.decode_input('[{"type": "constructor"}]', [1, 2]), "description_error")


@pytest.mark.parametrize("words", [["x"], [-1], [2**64], [True], [1.5]])
def test_bad_words(book_abi_json, words) -> None:
    _assert_error(boundary.decode_input(book_abi_json, words), "structural_mismatch")


def test_bad_params(book_abi_json) -> None:
    sig = "createBook(u32,string)"
    _assert_error(boundary.encode_input(book_abi_json, sig, [60]), "structural_mismatch")
    _assert_error(boundary.encode_input(book_abi_json, sig, ["x", "y"]), "structural_mismatch")
    _assert_error(boundary.encode_input(book_abi_json, sig, "60,olavm"), "structural_mismatch")


def test_truncated_input(book_abi_json) -> None:
    abi = load_description(book_abi_json)
    sel = abi.functions[0].method_id()
    env = boundary.decode_input(book_abi_json, [sel, 3, 60, 5, 111])
    _assert_error(env, "truncated_input")
    assert env["error"]["context"]["type"] == "string"
    _assert_error(boundary.decode_log(book_abi_json, [], []), "truncated_input")


def test_unexpected_failures_are_enveloped(book_abi_json, monkeypatch, caplog) -> None:
    def boom(*_a, **_k):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(boundary, "load_description", boom)
    with caplog.at_level("ERROR", logger="ola_abi.boundary"):
        env = boundary.decode_input(book_abi_json, [1, 2])
    _assert_error(env, "internal_error")
    assert env["error"]["message"] == "kaboom"
    assert any("unexpected failure" in r.getMessage() for r in caplog.records)
