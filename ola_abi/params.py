"""
Parameters, decoded parameter lists and the 4-word container.

``FixedArray4`` holds one 256-bit quantity (address, hash or topic slot) as
four 64-bit words, most significant word first. Its hex form is ``0x``
followed by four 16-digit groups, one per word.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .errors import AbiLookupError, StructuralMismatchError
from .types import AbiType

__all__ = [
    "WORD_BITS",
    "WORD_MAX",
    "FixedArray4",
    "Param",
    "DecodedParams",
    "FixedArray4Like",
    "as_fixed_array4",
]

WORD_BITS = 64
WORD_MAX = (1 << WORD_BITS) - 1


def _check_word(w: Any, where: str) -> int:
    if isinstance(w, bool) or not isinstance(w, int):
        raise StructuralMismatchError(f"{where}: word must be an int, got {type(w).__name__}")
    if w < 0 or w > WORD_MAX:
        raise StructuralMismatchError(f"{where}: word {w} out of range [0, 2^64)")
    return w


@dataclass(frozen=True, init=False)
class FixedArray4:
    words: Tuple[int, int, int, int]

    def __init__(self, words: Iterable[int]) -> None:
        ws = tuple(words)
        if len(ws) != 4:
            raise StructuralMismatchError(
                f"FixedArray4 requires exactly 4 words, got {len(ws)}",
                context={"len": len(ws)},
            )
        object.__setattr__(
            self, "words", tuple(_check_word(w, "FixedArray4") for w in ws)
        )

    @classmethod
    def from_hex(cls, s: str) -> "FixedArray4":
        """Parse ``0x``-prefixed (or bare) hex of at most 64 digits, left-padded."""
        if not isinstance(s, str):
            raise StructuralMismatchError("FixedArray4 hex must be a string")
        digits = s.strip()
        if digits[:2].lower() == "0x":
            digits = digits[2:]
        if not digits:
            raise StructuralMismatchError(f"empty hex string {s!r}")
        if any(c not in string.hexdigits for c in digits):
            raise StructuralMismatchError(f"invalid hex string {s!r}")
        if len(digits) > 64:
            raise StructuralMismatchError(
                f"hex value too long for FixedArray4 ({len(digits)} digits > 64)"
            )
        digits = digits.rjust(64, "0")
        try:
            return cls(int(digits[i : i + 16], 16) for i in range(0, 64, 16))
        except ValueError as e:
            raise StructuralMismatchError(f"invalid hex string {s!r}") from e

    def to_hex(self) -> str:
        return "0x" + "".join(f"{w:016x}" for w in self.words)

    def to_int(self) -> int:
        out = 0
        for w in self.words:
            out = (out << WORD_BITS) | w
        return out

    def __iter__(self) -> Iterator[int]:
        return iter(self.words)

    def __len__(self) -> int:
        return 4

    def __getitem__(self, i: int) -> int:
        return self.words[i]

    def __str__(self) -> str:
        return self.to_hex()


@dataclass(frozen=True)
class Param:
    """A named, typed function/event parameter.

    ``indexed`` is only meaningful for event inputs; ``None`` means not indexed.
    """

    name: str
    type: AbiType
    indexed: Optional[bool] = None

    @property
    def is_indexed(self) -> bool:
        return bool(self.indexed)


class DecodedParams(Sequence[Tuple[Param, Any]]):
    """Ordered, immutable list of ``(Param, Value)`` pairs."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[Tuple[Param, Any]] = ()) -> None:
        self._items: Tuple[Tuple[Param, Any], ...] = tuple(items)

    def __getitem__(self, i):  # type: ignore[override]
        return self._items[i]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Tuple[Param, Any]]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DecodedParams):
            return self._items == other._items
        if isinstance(other, (list, tuple)):
            return list(self._items) == [tuple(x) for x in other]
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        inner = ", ".join(f"{p.name or '_'}={v!r}" for p, v in self._items)
        return f"DecodedParams({inner})"

    def names(self) -> List[str]:
        return [p.name for p, _ in self._items]

    def values(self) -> List[Any]:
        return [v for _, v in self._items]

    def get(self, name: str) -> Any:
        for p, v in self._items:
            if p.name == name:
                return v
        raise AbiLookupError(f"no decoded parameter named {name!r}", context={"name": name})

    def as_dict(self) -> Dict[str, Any]:
        """Name → Value; unnamed parameters are keyed by position."""
        return {(p.name or str(i)): v for i, (p, v) in enumerate(self._items)}

    def to_json(self) -> List[Dict[str, Any]]:
        from .values import value_to_json

        return [
            {"name": p.name, "type": str(p.type), "value": value_to_json(v)}
            for p, v in self._items
        ]


FixedArray4Like = Union[FixedArray4, str, Sequence[int]]


def as_fixed_array4(x: FixedArray4Like) -> FixedArray4:
    """Coerce hex strings and 4-int sequences into a FixedArray4."""
    if isinstance(x, FixedArray4):
        return x
    if isinstance(x, str):
        return FixedArray4.from_hex(x)
    return FixedArray4(x)
