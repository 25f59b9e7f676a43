"""
Decoded/encodable ABI values.

One frozen dataclass per type variant. Array-like values carry their element
type so the full ``AbiType`` can be recovered with ``type_of()`` even for
empty arrays.

Conversions
-----------
- value_to_json(v)          -> plain JSON-able data (hex for address/hash)
- value_from_json(obj, t)   -> Value, using ``t`` as the shape hint
- check_value(v, t)         -> raises StructuralMismatchError on shape mismatch
- check_shallow(v, t)       -> the same check for the outermost layer only
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .config import load_config
from .errors import NestingDepthError, StructuralMismatchError
from .params import WORD_MAX, FixedArray4, as_fixed_array4
from .types import (
    AbiType,
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
    same_shape,
)

__all__ = [
    "Value",
    "U32",
    "Field",
    "Bool",
    "Address",
    "Hash",
    "FixedArray",
    "String",
    "Fields",
    "Array",
    "Tuple",
    "check_shallow",
    "check_value",
    "value_to_json",
    "value_from_json",
    "values_to_json",
    "values_from_json",
]


def _word(v: Any, what: str) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise StructuralMismatchError(f"{what} value must be an int, got {type(v).__name__}")
    if v < 0 or v > WORD_MAX:
        raise StructuralMismatchError(f"{what} value {v} out of range [0, 2^64)")
    return v


class Value:
    """Base class of all ABI values."""

    __slots__ = ()

    def type_of(self) -> AbiType:
        raise NotImplementedError

    def to_python(self) -> Any:
        return value_to_json(self)


@dataclass(frozen=True)
class U32(Value):
    value: int

    def __post_init__(self) -> None:
        _word(self.value, "u32")

    def type_of(self) -> AbiType:
        return U32Type()


@dataclass(frozen=True)
class Field(Value):
    value: int

    def __post_init__(self) -> None:
        _word(self.value, "field")

    def type_of(self) -> AbiType:
        return FieldType()


@dataclass(frozen=True)
class Bool(Value):
    value: bool

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise StructuralMismatchError(f"bool value must be a bool, got {type(self.value).__name__}")

    def type_of(self) -> AbiType:
        return BoolType()


@dataclass(frozen=True)
class Address(Value):
    value: FixedArray4

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", as_fixed_array4(self.value))

    def type_of(self) -> AbiType:
        return AddressType()


@dataclass(frozen=True)
class Hash(Value):
    value: FixedArray4

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", as_fixed_array4(self.value))

    def type_of(self) -> AbiType:
        return HashType()


@dataclass(frozen=True)
class FixedArray(Value):
    values: tuple
    element_type: AbiType

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    def type_of(self) -> AbiType:
        return FixedArrayType(self.element_type, len(self.values))


@dataclass(frozen=True)
class String(Value):
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise StructuralMismatchError(f"string value must be a str, got {type(self.value).__name__}")

    def type_of(self) -> AbiType:
        return StringType()


@dataclass(frozen=True)
class Fields(Value):
    values: tuple

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(_word(w, "fields") for w in self.values))

    def type_of(self) -> AbiType:
        return FieldsType()


@dataclass(frozen=True)
class Array(Value):
    values: tuple
    element_type: AbiType

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    def type_of(self) -> AbiType:
        return ArrayType(self.element_type)


@dataclass(frozen=True)
class Tuple(Value):
    # (name, value) pairs; names are metadata only
    fields: tuple

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple((str(n), v) for n, v in self.fields))

    @property
    def values(self) -> tuple:
        return tuple(v for _, v in self.fields)

    @classmethod
    def from_mapping(cls, fields: Mapping[str, Value]) -> "Tuple":
        """Build a tuple from an ordered mapping of name to Value."""
        return cls(tuple(fields.items()))

    def type_of(self) -> AbiType:
        return TupleType(tuple((n, v.type_of()) for n, v in self.fields))


# ──────────────────────────────────────────────────────────────────────────────
# Shape checks
# ──────────────────────────────────────────────────────────────────────────────


_VARIANTS: Dict[type, type] = {
    U32Type: U32,
    FieldType: Field,
    BoolType: Bool,
    AddressType: Address,
    HashType: Hash,
    StringType: String,
    FieldsType: Fields,
    FixedArrayType: FixedArray,
    ArrayType: Array,
    TupleType: Tuple,
}


def _mismatch(value: Any, t: AbiType) -> StructuralMismatchError:
    return StructuralMismatchError(
        f"value {type(value).__name__} does not match type {t}",
        context={"type": str(t), "value": type(value).__name__},
    )


def check_shallow(value: Any, t: AbiType, max_depth: Optional[int] = None) -> None:
    """
    Check ``value`` against the outermost layer of ``t`` only: the variant,
    fixed-array length, tuple arity and array element types.
    """
    expected = _VARIANTS.get(type(t))
    if expected is None:
        raise StructuralMismatchError(f"unsupported ABI type: {t!r}")
    if not isinstance(value, expected):
        raise _mismatch(value, t)
    if isinstance(t, (FixedArrayType, ArrayType)):
        if not same_shape(value.element_type, t.element, max_depth):
            raise _mismatch(value, t)
    if isinstance(t, FixedArrayType) and len(value.values) != t.length:
        raise StructuralMismatchError(
            f"fixed array {t} expects {t.length} elements, got {len(value.values)}",
            context={"type": str(t), "len": len(value.values)},
        )
    if isinstance(t, TupleType) and len(value.fields) != len(t.components):
        raise _mismatch(value, t)


def check_value(value: Any, t: AbiType, *, max_depth: Optional[int] = None) -> None:
    """Raise StructuralMismatchError unless ``value`` has the shape of ``t``."""
    cap = load_config().max_depth if max_depth is None else max_depth
    _check(value, t, 1, cap)


def _check(value: Any, t: AbiType, depth: int, cap: int) -> None:
    if depth > cap:
        raise NestingDepthError(
            f"value nesting exceeds {cap} levels",
            context={"value": type(value).__name__, "max_depth": cap},
        )
    check_shallow(value, t, cap)
    if isinstance(t, (FixedArrayType, ArrayType)):
        for item in value.values:
            _check(item, t.element, depth + 1, cap)
    elif isinstance(t, TupleType):
        for (_, item), (_, ct) in zip(value.fields, t.components):
            _check(item, ct, depth + 1, cap)


# ──────────────────────────────────────────────────────────────────────────────
# JSON conversion
# ──────────────────────────────────────────────────────────────────────────────


def value_to_json(v: Value) -> Any:
    if isinstance(v, (U32, Field)):
        return v.value
    if isinstance(v, Bool):
        return v.value
    if isinstance(v, (Address, Hash)):
        return v.value.to_hex()
    if isinstance(v, String):
        return v.value
    if isinstance(v, Fields):
        return list(v.values)
    if isinstance(v, (FixedArray, Array)):
        return [value_to_json(x) for x in v.values]
    if isinstance(v, Tuple):
        return {(n or str(i)): value_to_json(x) for i, (n, x) in enumerate(v.fields)}
    raise StructuralMismatchError(f"not an ABI value: {v!r}")


def _json_word(obj: Any, t: AbiType) -> int:
    if isinstance(obj, str):
        try:
            obj = int(obj, 0)
        except ValueError as e:
            raise StructuralMismatchError(f"cannot parse {obj!r} as {t}") from e
    return _word(obj, str(t))


def _json_list(obj: Any, t: AbiType) -> List[Any]:
    if isinstance(obj, (str, bytes, Mapping)) or not isinstance(obj, Sequence):
        raise StructuralMismatchError(f"expected a list for {t}, got {type(obj).__name__}")
    return list(obj)


def value_from_json(obj: Any, t: AbiType) -> Value:
    """Build a Value of type ``t`` from plain JSON data (or pass a Value through)."""
    if isinstance(obj, Value):
        check_value(obj, t)
        return obj
    if isinstance(t, U32Type):
        return U32(_json_word(obj, t))
    if isinstance(t, FieldType):
        return Field(_json_word(obj, t))
    if isinstance(t, BoolType):
        if isinstance(obj, bool):
            return Bool(obj)
        if isinstance(obj, int) and obj in (0, 1):
            return Bool(bool(obj))
        raise StructuralMismatchError(f"expected a bool, got {obj!r}")
    if isinstance(t, (AddressType, HashType)):
        if not isinstance(obj, (str, list, tuple)):
            raise StructuralMismatchError(f"expected hex string or 4 words for {t}, got {obj!r}")
        fa = as_fixed_array4(obj)
        return Address(fa) if isinstance(t, AddressType) else Hash(fa)
    if isinstance(t, StringType):
        if not isinstance(obj, str):
            raise StructuralMismatchError(f"expected a string, got {type(obj).__name__}")
        return String(obj)
    if isinstance(t, FieldsType):
        return Fields(tuple(_json_word(x, t) for x in _json_list(obj, t)))
    if isinstance(t, FixedArrayType):
        items = _json_list(obj, t)
        if len(items) != t.length:
            raise StructuralMismatchError(
                f"fixed array {t} expects {t.length} elements, got {len(items)}"
            )
        return FixedArray(tuple(value_from_json(x, t.element) for x in items), t.element)
    if isinstance(t, ArrayType):
        return Array(tuple(value_from_json(x, t.element) for x in _json_list(obj, t)), t.element)
    if isinstance(t, TupleType):
        if isinstance(obj, Mapping):
            fields = []
            for i, (name, ct) in enumerate(t.components):
                key = name or str(i)
                if key not in obj:
                    raise StructuralMismatchError(f"missing tuple field {key!r} for {t}")
                fields.append((name, value_from_json(obj[key], ct)))
            return Tuple(tuple(fields))
        items = _json_list(obj, t)
        if len(items) != len(t.components):
            raise StructuralMismatchError(
                f"tuple {t} expects {len(t.components)} fields, got {len(items)}"
            )
        return Tuple(
            tuple((name, value_from_json(x, ct)) for (name, ct), x in zip(t.components, items))
        )
    raise StructuralMismatchError(f"unsupported ABI type: {t!r}")


def values_to_json(values: Sequence[Value]) -> List[Any]:
    return [value_to_json(v) for v in values]


def values_from_json(objs: Sequence[Any], types: Sequence[AbiType]) -> List[Value]:
    if len(objs) != len(types):
        raise StructuralMismatchError(
            f"expected {len(types)} values, got {len(objs)}",
            context={"expected": len(types), "got": len(objs)},
        )
    return [value_from_json(o, t) for o, t in zip(objs, types)]

