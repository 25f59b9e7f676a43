"""
Word-stream codec for Ola ABI values.

The wire is a flat sequence of unsigned 64-bit words. Values are packed
sequentially in declared order with no head/tail indirection; only
variable-length constructs carry a length prefix.

Layout
------
- u32, field:          1 word, the raw value
- bool:                1 word, 1 (true) or 0 (false)
- address, hash:       4 words, copied verbatim from the FixedArray4
- string:              len || one word per UTF-8 byte
- fields:              len || the raw words
- T[]:                 len || elem_1 || ... || elem_len
- T[n], (T1,...,Tn):   elem_1 || ... || elem_n   (no prefix)

Decoding
--------
``decode_value(words, t, at)`` returns ``(value, consumed)``. Positions are
threaded explicitly as ``base + offset``; entering a ``T[]`` resets the base
to the word after its length prefix. The consumed count of an array always
includes its own length prefix, so a caller advancing by ``consumed`` lands
on the next value.
"""

from __future__ import annotations

from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple as _Pair

from .config import load_config
from .errors import (
    EncodingError,
    LimitExceededError,
    NestingDepthError,
    StructuralMismatchError,
    TruncatedInputError,
)
from .params import FixedArray4
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
    check_depth,
    min_width,
)
from .values import (
    Address,
    Array,
    Bool,
    Field,
    Fields,
    FixedArray,
    Hash,
    String,
    Tuple,
    U32,
    Value,
    check_shallow,
)

__all__ = [
    "encode",
    "encode_typed",
    "decode_value",
    "decode_from_slice",
]


class _Limits(NamedTuple):
    max_depth: int
    max_array_len: int


def _limits(max_depth: Optional[int], max_array_len: Optional[int]) -> _Limits:
    cfg = load_config()
    return _Limits(
        max_depth if max_depth is not None else cfg.max_depth,
        max_array_len if max_array_len is not None else cfg.max_array_len,
    )


def _too_deep(depth: int, limits: _Limits, what: object) -> NestingDepthError:
    return NestingDepthError(
        f"nesting depth {depth} exceeds cap {limits.max_depth}",
        context={"at": str(what), "max_depth": limits.max_depth},
    )


# ──────────────────────────────────────────────────────────────────────────────
# Encoding
# ──────────────────────────────────────────────────────────────────────────────


def _encode_into(
    out: List[int], v: Value, t: Optional[AbiType], depth: int, limits: _Limits
) -> None:
    # ``t`` is the declared type when one is known; elements of arrays are
    # checked against the array's element type one layer at a time
    if depth > limits.max_depth:
        raise _too_deep(depth, limits, type(v).__name__)
    if not isinstance(v, Value):
        raise StructuralMismatchError(
            f"cannot encode {type(v).__name__}: not an ABI value",
            context={"value": repr(v)},
        )
    if t is not None:
        check_shallow(v, t, limits.max_depth)

    if isinstance(v, (U32, Field)):
        out.append(v.value)
    elif isinstance(v, Bool):
        out.append(1 if v.value else 0)
    elif isinstance(v, (Address, Hash)):
        out.extend(v.value.words)
    elif isinstance(v, String):
        raw = v.value.encode("utf-8")
        out.append(len(raw))
        out.extend(raw)
    elif isinstance(v, Fields):
        out.append(len(v.values))
        out.extend(v.values)
    elif isinstance(v, Array):
        out.append(len(v.values))
        for item in v.values:
            _encode_into(out, item, v.element_type, depth + 1, limits)
    elif isinstance(v, FixedArray):
        for item in v.values:
            _encode_into(out, item, v.element_type, depth + 1, limits)
    elif isinstance(v, Tuple):
        components = t.components if isinstance(t, TupleType) else None
        for i, (_, item) in enumerate(v.fields):
            ct = components[i][1] if components is not None else None
            _encode_into(out, item, ct, depth + 1, limits)
    else:
        raise StructuralMismatchError(
            f"cannot encode {type(v).__name__}: not an ABI value",
            context={"value": repr(v)},
        )


def encode(
    values: Iterable[Value],
    *,
    max_depth: Optional[int] = None,
) -> List[int]:
    """Concatenate the wire encoding of each value, in order."""
    limits = _limits(max_depth, None)
    out: List[int] = []
    for v in values:
        _encode_into(out, v, None, 1, limits)
    return out


def encode_typed(
    values: Sequence[Value],
    types: Sequence[AbiType],
    *,
    max_depth: Optional[int] = None,
) -> List[int]:
    """Encode ``values``, checking each against its declared type on the way down."""
    if len(values) != len(types):
        raise StructuralMismatchError(
            f"expected {len(types)} values, got {len(values)}",
            context={"expected": len(types), "got": len(values)},
        )
    limits = _limits(max_depth, None)
    out: List[int] = []
    for v, t in zip(values, types):
        check_depth(t, limits.max_depth)
        _encode_into(out, v, t, 1, limits)
    return out


# ──────────────────────────────────────────────────────────────────────────────
# Decoding
# ──────────────────────────────────────────────────────────────────────────────


def _take(words: Sequence[int], pos: int, n: int, t: object) -> Sequence[int]:
    end = pos + n
    if pos < 0 or end > len(words):
        raise TruncatedInputError(
            f"reached end of input while decoding {t}",
            context={"type": str(t), "offset": pos, "need": n, "have": max(len(words) - pos, 0)},
        )
    return words[pos:end]


def _decode(
    words: Sequence[int],
    t: AbiType,
    base: int,
    offset: int,
    depth: int,
    limits: _Limits,
) -> _Pair[Value, int]:
    if depth > limits.max_depth:
        raise _too_deep(depth, limits, t)
    pos = base + offset

    if isinstance(t, U32Type):
        return U32(_take(words, pos, 1, t)[0]), 1

    if isinstance(t, FieldType):
        return Field(_take(words, pos, 1, t)[0]), 1

    if isinstance(t, BoolType):
        return Bool(_take(words, pos, 1, t)[0] == 1), 1

    if isinstance(t, AddressType):
        return Address(FixedArray4(_take(words, pos, 4, t))), 4

    if isinstance(t, HashType):
        return Hash(FixedArray4(_take(words, pos, 4, t))), 4

    if isinstance(t, FieldsType):
        n = _take(words, pos, 1, "fields length")[0]
        payload = _take(words, pos + 1, n, t)
        return Fields(tuple(payload)), n + 1

    if isinstance(t, StringType):
        n = _take(words, pos, 1, "string length")[0]
        payload = _take(words, pos + 1, n, t)
        if any(not 0 <= w <= 0xFF for w in payload):
            raise EncodingError(
                "string words must each hold a single byte",
                context={"offset": pos + 1},
            )
        try:
            text = bytes(payload).decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(
                f"string is not valid UTF-8: {e.reason}",
                context={"offset": pos + 1 + e.start},
            ) from e
        return String(text), n + 1

    if isinstance(t, FixedArrayType):
        items: List[Value] = []
        consumed = 0
        for _ in range(t.length):
            item, used = _decode(words, t.element, base, offset + consumed, depth + 1, limits)
            items.append(item)
            consumed += used
        return FixedArray(tuple(items), t.element), consumed

    if isinstance(t, ArrayType):
        n = _take(words, pos, 1, "array length")[0]
        remaining = len(words) - (pos + 1)
        elem_min = min_width(t.element)
        if elem_min > 0 and n * elem_min > remaining:
            raise TruncatedInputError(
                f"array of {n} x {t.element} does not fit in the remaining {remaining} words",
                context={"type": str(t), "offset": pos, "len": n, "have": remaining},
            )
        if elem_min == 0 and n > limits.max_array_len:
            raise LimitExceededError(
                f"array length {n} exceeds cap {limits.max_array_len}",
                context={"type": str(t), "offset": pos, "len": n},
            )
        # elements are addressed relative to the word after the prefix
        elem_base = pos + 1
        items = []
        consumed = 0
        for _ in range(n):
            item, used = _decode(words, t.element, elem_base, consumed, depth + 1, limits)
            items.append(item)
            consumed += used
        return Array(tuple(items), t.element), consumed + 1

    if isinstance(t, TupleType):
        fields = []
        consumed = 0
        for name, ct in t.components:
            item, used = _decode(words, ct, base, offset + consumed, depth + 1, limits)
            fields.append((name, item))
            consumed += used
        return Tuple(tuple(fields)), consumed

    raise StructuralMismatchError(f"unsupported ABI type: {t!r}")


def _as_words(words: Iterable[int]) -> Sequence[int]:
    return words if isinstance(words, (list, tuple)) else list(words)


def decode_value(
    words: Iterable[int],
    t: AbiType,
    at: int = 0,
    *,
    max_depth: Optional[int] = None,
    max_array_len: Optional[int] = None,
) -> _Pair[Value, int]:
    """
    Decode one value of type ``t`` starting at word ``at``.
    Returns (value, consumed_words).
    """
    limits = _limits(max_depth, max_array_len)
    check_depth(t, limits.max_depth)
    return _decode(_as_words(words), t, 0, at, 1, limits)


def decode_from_slice(
    words: Iterable[int],
    types: Sequence[AbiType],
    *,
    max_depth: Optional[int] = None,
    max_array_len: Optional[int] = None,
) -> List[Value]:
    """Decode ``types`` in order against one shared cursor starting at 0."""
    ws = _as_words(words)
    limits = _limits(max_depth, max_array_len)
    out: List[Value] = []
    at = 0
    for t in types:
        check_depth(t, limits.max_depth)
        v, used = _decode(ws, t, 0, at, 1, limits)
        out.append(v)
        at += used
    return out
