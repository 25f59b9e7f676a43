from __future__ import annotations

import pytest

from ola_abi import Abi, load_description
from ola_abi.errors import AbiLookupError, DescriptionError, TruncatedInputError
from ola_abi.event import Event
from ola_abi.function import ContractError, Function
from ola_abi.params import FixedArray4, Param
from ola_abi.types import AddressType, ArrayType, StringType, U32Type
from ola_abi.values import U32, Address, Array, String, Tuple

U32T = U32Type()


def test_lookup_by_selector_signature_and_name(vote_abi_json) -> None:
    abi = load_description(vote_abi_json)
    fn = abi.function_by_signature("vote_proposal(u32)")
    assert abi.function_by_selector(fn.method_id()) is fn
    assert abi.function_by_name("vote_proposal") == [fn]
    assert len(abi.functions) == 5


def test_lookup_failures_raise(vote_abi_json) -> None:
    abi = load_description(vote_abi_json)
    with pytest.raises(AbiLookupError):
        abi.function_by_signature("vote_proposal(u64)")
    with pytest.raises(AbiLookupError):
        abi.function_by_name("nope")
    with pytest.raises(AbiLookupError):
        abi.event_by_signature("Nope()")
    with pytest.raises(AbiLookupError):
        abi.error_by_selector(1)


def test_decode_input_with_unknown_selector_is_lookup_error(vote_abi_json) -> None:
    abi = load_description(vote_abi_json)
    known = {f.method_id() for f in abi.functions}
    bogus = next(s for s in range(1, 100) if s not in known)
    with pytest.raises(AbiLookupError) as ei:
        abi.decode_input_from_slice([bogus, 1, 5])
    assert ei.value.code == "not_found"


def test_decode_input_requires_selector_and_count(vote_abi_json) -> None:
    abi = load_description(vote_abi_json)
    with pytest.raises(TruncatedInputError):
        abi.decode_input_from_slice([])
    with pytest.raises(TruncatedInputError):
        abi.decode_input_from_slice([abi.functions[0].method_id()])


def test_encode_then_decode_input(vote_abi_json) -> None:
    abi = load_description(vote_abi_json)
    names = Array((U32(1), U32(2), U32(3)), U32T)
    words = abi.encode_input_with_signature("contract_init(u32[])", [names])
    assert words[1:] == [4, 3, 1, 2, 3]

    fn, params = abi.decode_input_from_slice(words)
    assert fn.name == "contract_init"
    assert params.get("proposalNames_") == names


def test_encode_input_values_without_selector() -> None:
    abi = Abi()
    assert abi.encode_input_values([U32(60), String("ab")]) == [4, 60, 2, 97, 98]


def test_decode_output_by_signature(book_abi_json) -> None:
    abi = load_description(book_abi_json)
    params = abi.decode_output_from_slice("createBook(u32,string)", [60, 2, 111, 108])
    assert params.values() == [Tuple((("book_id", U32(60)), ("book_name", String("ol"))))]


def test_decode_log_found_by_topic(book_abi_json) -> None:
    abi = load_description(book_abi_json)
    evt = abi.event_by_signature("BookCreated(u32,string,u32,string)")
    name_commitment = [7, 7, 7, 7]
    topics = [evt.topic(), [0, 0, 0, 60], name_commitment]
    found, params = abi.decode_log_from_slice(topics, [100, 1, 120])
    assert found is evt
    assert params.as_dict()["id"] == U32(60)
    assert params.get("price") == U32(100)
    assert params.get("title") == String("x")
    assert params.get("name").value == FixedArray4(name_commitment)


def test_decode_log_unknown_topic(book_abi_json) -> None:
    abi = load_description(book_abi_json)
    with pytest.raises(AbiLookupError):
        abi.decode_log_from_slice([[1, 2, 3, 4]], [])
    with pytest.raises(TruncatedInputError):
        abi.decode_log_from_slice([], [])


def test_anonymous_events_are_not_indexed_by_topic() -> None:
    anon = Event("Ping", (Param("n", U32T, indexed=True),), anonymous=True)
    abi = Abi(events=[anon])
    with pytest.raises(AbiLookupError):
        abi.event_by_topic(anon.topic())

    found, params = abi.decode_log_with_signature("Ping(u32)", [[0, 0, 0, 3]], [])
    assert found is anon
    assert params.values() == [U32(3)]


def test_decode_error_from_slice(book_abi_json) -> None:
    abi = load_description(book_abi_json)
    err = abi.errors[0]
    words = err.encode([Address("0x01")])
    found, params = abi.decode_error_from_slice(words)
    assert found is err
    assert params.get("caller") == Address(FixedArray4((0, 0, 0, 1)))
    with pytest.raises(TruncatedInputError):
        abi.decode_error_from_slice([err.selector()])


def test_overloads_share_a_name() -> None:
    a = Function("get", (Param("i", U32T),))
    b = Function("get", (Param("key", StringType()),))
    abi = Abi([a, b])
    assert abi.function_by_name("get") == [a, b]
    assert abi.function_by_signature("get(string)") is b


def test_duplicate_signatures_are_rejected() -> None:
    a = Function("get", (Param("i", U32T),))
    b = Function("get", (Param("j", U32T),), (Param("", AddressType()),))
    with pytest.raises(DescriptionError):
        Abi([a, b])
    with pytest.raises(DescriptionError):
        Abi(errors=[ContractError("E"), ContractError("E")])


def test_table_equality_and_json_roundtrip(book_abi_json) -> None:
    abi = load_description(book_abi_json)
    again = Abi.from_json(abi.to_json())
    assert again == abi
    assert Abi.from_description(abi.to_description()) == abi
    assert hash(again) == hash(abi)
    assert "functions=1" in repr(abi)


def test_array_of_addresses_input() -> None:
    fn = Function("batch", (Param("to", ArrayType(AddressType())),))
    abi = Abi([fn])
    value = Array((Address("0x01"), Address("0x02")), AddressType())
    words = abi.encode_input_with_signature("batch(address[])", [value])
    assert words[1] == 9
    _, params = abi.decode_input_from_slice(words)
    assert params.values() == [value]
