from __future__ import annotations

import pytest

from ola_abi.errors import DescriptionError, NestingDepthError
from ola_abi.types import (
    AddressType,
    ArrayType,
    BoolType,
    FieldsType,
    FieldType,
    FixedArrayType,
    HashType,
    StringType,
    TupleType,
    U32Type,
    is_dynamic,
    min_width,
    parse_type,
    split_top_level,
    static_width,
    type_depth,
    type_to_description,
)

U32 = U32Type()


# ---------------------------------------------------------------------------
# Canonical text
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "t, text",
    [
        (U32, "u32"),
        (FieldType(), "field"),
        (HashType(), "hash"),
        (AddressType(), "address"),
        (BoolType(), "bool"),
        (StringType(), "string"),
        (FieldsType(), "fields"),
        (FixedArrayType(U32, 2), "u32[2]"),
        (ArrayType(U32), "u32[]"),
        (ArrayType(FixedArrayType(U32, 2)), "u32[2][]"),
        (TupleType((("a", U32), ("b", StringType()))), "(u32,string)"),
        (TupleType(()), "()"),
    ],
)
def test_canonical_strings(t, text) -> None:
    assert str(t) == text
    assert t.canonical == text


def test_parse_canonical_forms_roundtrip() -> None:
    for text in ["u32", "address", "u32[2]", "u32[2][]", "(u32,(bool,string[]))[3]", "fields"]:
        assert str(parse_type(text)) == text


def test_array_suffixes_apply_left_to_right() -> None:
    t = parse_type("u32[2][]")
    assert t == ArrayType(FixedArrayType(U32, 2))


def test_parse_tuple_with_components() -> None:
    t = parse_type(
        "tuple",
        [{"name": "a", "type": "u32"}, {"name": "b", "type": "string"}],
    )
    assert t == TupleType((("a", U32), ("b", StringType())))
    assert t.names == ("a", "b")
    assert t.types == (U32, StringType())


def test_parse_tuple_array_with_components() -> None:
    t = parse_type("tuple[]", [{"name": "x", "type": "bool"}])
    assert t == ArrayType(TupleType((("x", BoolType()),)))


@pytest.mark.parametrize("bad", ["", "u64", "uint256", "u32[x]", "u32[", "(u32", "tuple"])
def test_parse_rejects_unknown_or_malformed(bad) -> None:
    with pytest.raises(DescriptionError):
        parse_type(bad)


def test_fixed_array_rejects_negative_length() -> None:
    with pytest.raises(DescriptionError):
        FixedArrayType(U32, -1)


def test_split_top_level_respects_nesting() -> None:
    assert split_top_level("u32,(u32,string),bool") == ["u32", "(u32,string)", "bool"]
    with pytest.raises(DescriptionError):
        split_top_level("(u32")


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------


def test_is_dynamic() -> None:
    assert not is_dynamic(U32)
    assert not is_dynamic(AddressType())
    assert not is_dynamic(FixedArrayType(U32, 3))
    assert not is_dynamic(TupleType((("a", U32), ("b", HashType()))))
    assert is_dynamic(StringType())
    assert is_dynamic(FieldsType())
    assert is_dynamic(ArrayType(U32))
    assert is_dynamic(FixedArrayType(StringType(), 2))
    assert is_dynamic(TupleType((("a", U32), ("b", ArrayType(U32)))))
    # method form delegates to the same helper
    assert ArrayType(U32).is_dynamic()


def test_static_and_min_widths() -> None:
    assert static_width(U32) == 1
    assert static_width(HashType()) == 4
    assert static_width(FixedArrayType(AddressType(), 2)) == 8
    assert static_width(TupleType((("a", U32), ("b", HashType())))) == 5
    assert static_width(ArrayType(U32)) is None
    assert min_width(ArrayType(HashType())) == 1
    assert min_width(FixedArrayType(StringType(), 3)) == 3
    assert min_width(TupleType(())) == 0


def test_depth() -> None:
    assert type_depth(U32) == 1
    assert type_depth(ArrayType(ArrayType(U32))) == 3
    assert parse_type("(u32,(u32,u32[]))").depth() == 4


def test_depth_cap_rejects_pathological_nesting() -> None:
    with pytest.raises(NestingDepthError):
        parse_type("u32" + "[]" * 40)
    with pytest.raises(NestingDepthError):
        parse_type("(" * 10 + "u32" + ")" * 10, max_depth=8)
    assert parse_type("u32[][]", max_depth=8) == ArrayType(ArrayType(U32))


def test_type_to_description() -> None:
    t = ArrayType(TupleType((("a", U32), ("b", FixedArrayType(StringType(), 2)))))
    desc = type_to_description(t, "items")
    assert desc == {
        "name": "items",
        "type": "tuple[]",
        "internalType": "tuple[]",
        "components": [
            {"name": "a", "type": "u32", "internalType": "u32"},
            {"name": "b", "type": "string[2]", "internalType": "string[2]"},
        ],
    }
    assert parse_type(desc["type"], desc["components"]) == t
