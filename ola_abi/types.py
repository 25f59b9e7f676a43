"""
ABI type descriptors for the Ola contract ABI.

The type set is closed:

  - u32, field, bool         one word each
  - address, hash            four words (one 256-bit quantity)
  - string, fields           length-prefixed word sequences
  - T[n]                     fixed-size array, no length prefix
  - T[]                      dynamic array, length-prefixed
  - (T1,T2,...)              tuple, fields packed in declared order

Each variant is a frozen dataclass; structural helpers (``is_dynamic``,
``static_width``, ``min_width``, ``type_depth``) dispatch over every variant
explicitly and fail loudly on anything else.

Textual forms
-------------
``str(t)`` yields the canonical form used in signatures (``u32[2][]``,
``(u32,string)``). ``parse_type`` accepts the canonical form and the
description form (``tuple`` / ``tuple[]`` with ``components``).
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .config import load_config
from .errors import DescriptionError, NestingDepthError, StructuralMismatchError

__all__ = [
    "U32Type",
    "FieldType",
    "HashType",
    "AddressType",
    "BoolType",
    "StringType",
    "FieldsType",
    "FixedArrayType",
    "ArrayType",
    "TupleType",
    "AbiType",
    "is_dynamic",
    "static_width",
    "min_width",
    "type_depth",
    "check_depth",
    "same_shape",
    "parse_type",
    "split_top_level",
    "type_to_description",
]


class _TypeBase:
    """Shared behaviour of all type variants."""

    __slots__ = ()

    def is_dynamic(self) -> bool:
        return is_dynamic(self)  # type: ignore[arg-type]

    def static_width(self) -> Optional[int]:
        return static_width(self)  # type: ignore[arg-type]

    def min_width(self) -> int:
        return min_width(self)  # type: ignore[arg-type]

    def depth(self) -> int:
        return type_depth(self)  # type: ignore[arg-type]

    @property
    def canonical(self) -> str:
        return str(self)


# ──────────────────────────────────────────────────────────────────────────────
# Variants
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class U32Type(_TypeBase):
    def __str__(self) -> str:
        return "u32"


@dataclass(frozen=True)
class FieldType(_TypeBase):
    def __str__(self) -> str:
        return "field"


@dataclass(frozen=True)
class HashType(_TypeBase):
    def __str__(self) -> str:
        return "hash"


@dataclass(frozen=True)
class AddressType(_TypeBase):
    def __str__(self) -> str:
        return "address"


@dataclass(frozen=True)
class BoolType(_TypeBase):
    def __str__(self) -> str:
        return "bool"


@dataclass(frozen=True)
class StringType(_TypeBase):
    def __str__(self) -> str:
        return "string"


@dataclass(frozen=True)
class FieldsType(_TypeBase):
    def __str__(self) -> str:
        return "fields"


@dataclass(frozen=True)
class FixedArrayType(_TypeBase):
    element: "AbiType"
    length: int

    def __post_init__(self) -> None:
        if not isinstance(self.length, int) or isinstance(self.length, bool) or self.length < 0:
            raise DescriptionError(f"fixed array length must be a non-negative int, got {self.length!r}")

    def __str__(self) -> str:
        return f"{self.element}[{self.length}]"


@dataclass(frozen=True)
class ArrayType(_TypeBase):
    element: "AbiType"

    def __str__(self) -> str:
        return f"{self.element}[]"


@dataclass(frozen=True)
class TupleType(_TypeBase):
    components: Tuple[Tuple[str, "AbiType"], ...] = ()

    def __post_init__(self) -> None:
        # accept any iterable of (name, type) pairs; store as a hashable tuple
        object.__setattr__(
            self, "components", tuple((str(name), typ) for name, typ in self.components)
        )

    @property
    def types(self) -> Tuple["AbiType", ...]:
        return tuple(t for _, t in self.components)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(n for n, _ in self.components)

    def __str__(self) -> str:
        return "(" + ",".join(str(t) for _, t in self.components) + ")"


AbiType = Union[
    U32Type,
    FieldType,
    HashType,
    AddressType,
    BoolType,
    StringType,
    FieldsType,
    FixedArrayType,
    ArrayType,
    TupleType,
]

_ONE_WORD = (U32Type, FieldType, BoolType)
_FOUR_WORDS = (AddressType, HashType)


def _unknown(t: Any) -> StructuralMismatchError:
    return StructuralMismatchError(f"unsupported ABI type: {t!r}", context={"type": repr(t)})


# ──────────────────────────────────────────────────────────────────────────────
# Structural helpers
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=4096)
def is_dynamic(t: AbiType) -> bool:
    """True when the encoded width of ``t`` depends on the value."""
    if isinstance(t, _ONE_WORD) or isinstance(t, _FOUR_WORDS):
        return False
    if isinstance(t, (StringType, FieldsType, ArrayType)):
        return True
    if isinstance(t, FixedArrayType):
        return is_dynamic(t.element)
    if isinstance(t, TupleType):
        return any(is_dynamic(c) for _, c in t.components)
    raise _unknown(t)


@lru_cache(maxsize=4096)
def static_width(t: AbiType) -> Optional[int]:
    """Encoded width in words for static types, None for dynamic ones."""
    if isinstance(t, _ONE_WORD):
        return 1
    if isinstance(t, _FOUR_WORDS):
        return 4
    if isinstance(t, (StringType, FieldsType, ArrayType)):
        return None
    if isinstance(t, FixedArrayType):
        w = static_width(t.element)
        return None if w is None else w * t.length
    if isinstance(t, TupleType):
        total = 0
        for _, c in t.components:
            w = static_width(c)
            if w is None:
                return None
            total += w
        return total
    raise _unknown(t)


@lru_cache(maxsize=4096)
def min_width(t: AbiType) -> int:
    """Smallest number of words any value of ``t`` can occupy."""
    if isinstance(t, _ONE_WORD):
        return 1
    if isinstance(t, _FOUR_WORDS):
        return 4
    if isinstance(t, (StringType, FieldsType, ArrayType)):
        return 1  # the length prefix
    if isinstance(t, FixedArrayType):
        return min_width(t.element) * t.length
    if isinstance(t, TupleType):
        return sum(min_width(c) for _, c in t.components)
    raise _unknown(t)


@lru_cache(maxsize=4096)
def type_depth(t: AbiType) -> int:
    """Nesting depth; scalars are depth 1."""
    if isinstance(t, _ONE_WORD) or isinstance(t, _FOUR_WORDS):
        return 1
    if isinstance(t, (StringType, FieldsType)):
        return 1
    if isinstance(t, (FixedArrayType, ArrayType)):
        return 1 + type_depth(t.element)
    if isinstance(t, TupleType):
        return 1 + max((type_depth(c) for _, c in t.components), default=0)
    raise _unknown(t)


def check_depth(t: AbiType, max_depth: Optional[int] = None) -> None:
    """Raise NestingDepthError if ``t`` nests deeper than ``max_depth`` levels."""
    cap = load_config().max_depth if max_depth is None else max_depth
    _check_depth(t, 1, cap)


def _check_depth(t: AbiType, level: int, cap: int) -> None:
    if level > cap:
        raise NestingDepthError(
            f"type nesting exceeds {cap} levels", context={"max_depth": cap}
        )
    if isinstance(t, (ArrayType, FixedArrayType)):
        _check_depth(t.element, level + 1, cap)
    elif isinstance(t, TupleType):
        for _, c in t.components:
            _check_depth(c, level + 1, cap)


def same_shape(a: AbiType, b: AbiType, max_depth: Optional[int] = None) -> bool:
    """
    Structural equality that ignores tuple field names.

    Raises NestingDepthError once the comparison goes deeper than
    ``max_depth`` levels (the configured cap by default).
    """
    cap = load_config().max_depth if max_depth is None else max_depth
    return _same_shape(a, b, 1, cap)


def _same_shape(a: AbiType, b: AbiType, level: int, cap: int) -> bool:
    if level > cap:
        raise NestingDepthError(
            f"type nesting exceeds {cap} levels", context={"max_depth": cap}
        )
    if type(a) is not type(b):
        return False
    if isinstance(a, ArrayType):
        return _same_shape(a.element, b.element, level + 1, cap)
    if isinstance(a, FixedArrayType):
        return a.length == b.length and _same_shape(a.element, b.element, level + 1, cap)
    if isinstance(a, TupleType):
        return len(a.components) == len(b.components) and all(
            _same_shape(x, y, level + 1, cap)
            for (_, x), (_, y) in zip(a.components, b.components)
        )
    return True


# ──────────────────────────────────────────────────────────────────────────────
# Parser for textual type specs
# ──────────────────────────────────────────────────────────────────────────────

_SCALARS: Dict[str, AbiType] = {
    "u32": U32Type(),
    "field": FieldType(),
    "hash": HashType(),
    "address": AddressType(),
    "bool": BoolType(),
    "string": StringType(),
    "fields": FieldsType(),
}


def split_top_level(s: str) -> List[str]:
    """Split ``s`` on commas that are not nested inside parentheses."""
    parts: List[str] = []
    level = 0
    start = 0
    for i, ch in enumerate(s):
        if ch == "(":
            level += 1
        elif ch == ")":
            level -= 1
            if level < 0:
                raise DescriptionError(f"unbalanced parentheses in {s!r}")
        elif ch == "," and level == 0:
            parts.append(s[start:i])
            start = i + 1
    if level != 0:
        raise DescriptionError(f"unbalanced parentheses in {s!r}")
    parts.append(s[start:])
    return parts


def _split_dims(s: str) -> Tuple[str, List[str]]:
    """'u32[2][]' -> ('u32', ['2', ''])"""
    dims: List[str] = []
    while s.endswith("]"):
        i = s.rfind("[")
        if i <= 0:
            raise DescriptionError(f"malformed array suffix in {s!r}")
        dims.insert(0, s[i + 1 : -1].strip())
        s = s[:i].rstrip()
    return s, dims


def _parse(
    spec: str,
    components: Optional[Sequence[Mapping[str, Any]]],
    level: int,
    max_depth: int,
) -> AbiType:
    if level > max_depth:
        raise NestingDepthError(
            f"type nesting exceeds {max_depth} levels", context={"type": spec}
        )
    s = spec.strip()
    if not s:
        raise DescriptionError("type spec must be a non-empty string")

    base, dims = _split_dims(s)
    level += len(dims)
    if level > max_depth:
        raise NestingDepthError(
            f"type nesting exceeds {max_depth} levels", context={"type": spec}
        )

    t: AbiType
    if base == "tuple":
        if components is None:
            raise DescriptionError(f"tuple type {spec!r} requires components")
        fields = []
        for comp in components:
            if not isinstance(comp, Mapping) or "type" not in comp:
                raise DescriptionError(f"tuple component must declare a type: {comp!r}")
            fields.append(
                (
                    str(comp.get("name") or ""),
                    _parse(str(comp["type"]), comp.get("components"), level + 1, max_depth),
                )
            )
        t = TupleType(tuple(fields))
    elif base.startswith("(") and base.endswith(")"):
        inner = base[1:-1].strip()
        items = split_top_level(inner) if inner else []
        t = TupleType(
            tuple(("", _parse(item, None, level + 1, max_depth)) for item in items)
        )
    else:
        scalar = _SCALARS.get(base)
        if scalar is None:
            raise DescriptionError(f"unsupported type spec: {spec!r}", context={"type": spec})
        t = scalar

    for d in dims:
        if d == "":
            t = ArrayType(t)
            continue
        try:
            n = int(d, 10)
        except ValueError as e:
            raise DescriptionError(f"invalid array length {d!r} in {spec!r}") from e
        t = FixedArrayType(t, n)
    return t


def parse_type(
    spec: str,
    components: Optional[Sequence[Mapping[str, Any]]] = None,
    *,
    max_depth: Optional[int] = None,
) -> AbiType:
    """
    Parse a textual type spec into a type descriptor.

    Supported forms:
      - scalars: "u32", "field", "hash", "address", "bool", "string", "fields"
      - arrays:  "T[n]", "T[]" (suffixes apply left to right: "u32[2][]" is a
                 dynamic array of u32[2])
      - tuples:  "(T1,T2,...)" or "tuple" with description ``components``
    """
    if not isinstance(spec, str):
        raise DescriptionError("type spec must be a string")
    depth_cap = max_depth if max_depth is not None else load_config().max_depth
    return _parse(spec, components, 1, depth_cap)


def type_to_description(t: AbiType, name: str = "") -> Dict[str, Any]:
    """Render ``t`` as a description parameter entry (inverse of ``parse_type``)."""
    suffix = ""
    base: AbiType = t
    while isinstance(base, (FixedArrayType, ArrayType)):
        if isinstance(base, FixedArrayType):
            suffix = f"[{base.length}]" + suffix
        else:
            suffix = "[]" + suffix
        base = base.element

    if isinstance(base, TupleType):
        type_str = "tuple" + suffix
        return {
            "name": name,
            "type": type_str,
            "internalType": type_str,
            "components": [type_to_description(c, n) for n, c in base.components],
        }
    return {"name": name, "type": str(t), "internalType": str(t)}
