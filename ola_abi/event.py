"""
Event descriptors and log decoding.

A log record is split into topics (4-word slots) and data (plain words):

    topics: [topic0 (unless anonymous), one slot per indexed input...]
    data:   encode(non-indexed inputs, in declared order)

topic0 is Poseidon over the UTF-8 signature bytes. How an indexed input is
recovered from its slot depends on its type:

  - fixed arrays, arrays, fields, strings, tuples  -> the slot itself, as a Hash
  - u32, bool, field                               -> decoded from word 3
  - address, hash                                  -> decoded from all 4 words
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from .codec import decode_from_slice, decode_value
from .errors import DescriptionError, StructuralMismatchError, TruncatedInputError
from .function import signature_of
from .params import DecodedParams, FixedArray4, FixedArray4Like, Param, as_fixed_array4
from .poseidon import poseidon_hash_bytes
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
)
from .values import Hash, Value

__all__ = ["Event", "is_encoded_to_hash", "topic_of"]


def is_encoded_to_hash(t: AbiType) -> bool:
    """True when an indexed value of type ``t`` is stored as a hash commitment."""
    if isinstance(t, (FixedArrayType, ArrayType, FieldsType, StringType, TupleType)):
        return True
    if isinstance(t, (U32Type, BoolType, FieldType, AddressType, HashType)):
        return False
    raise StructuralMismatchError(f"unsupported ABI type: {t!r}")


def topic_of(signature: str) -> FixedArray4:
    return FixedArray4(poseidon_hash_bytes(signature.encode("utf-8")))


def _from_slot(slot: FixedArray4, t: AbiType) -> Value:
    if is_encoded_to_hash(t):
        return Hash(slot)
    if isinstance(t, (U32Type, BoolType, FieldType)):
        # narrow scalars are right-aligned in the slot
        value, _ = decode_value((slot[3],), t)
        return value
    value, _ = decode_value(slot.words, t)
    return value


@dataclass(frozen=True)
class Event:
    name: str
    inputs: Tuple[Param, ...] = ()
    anonymous: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise DescriptionError("event name must be a non-empty string")
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "anonymous", bool(self.anonymous))

    def signature(self) -> str:
        return signature_of(self.name, self.inputs)

    def topic(self) -> FixedArray4:
        return topic_of(self.signature())

    def indexed_inputs(self) -> List[Param]:
        return [p for p in self.inputs if p.is_indexed]

    def data_inputs(self) -> List[Param]:
        return [p for p in self.inputs if not p.is_indexed]

    def decode_data_from_slice(
        self,
        topics: Iterable[FixedArray4Like],
        data: Sequence[int],
    ) -> DecodedParams:
        """
        Rebuild the event's inputs, in declared order, from a log record.

        Indexed inputs consume topic slots; the rest are decoded from ``data``.
        Raises TruncatedInputError when either source runs out.
        """
        slots = [as_fixed_array4(t) for t in topics]
        if not self.anonymous:
            if not slots:
                raise TruncatedInputError(
                    "missing event topic", context={"event": self.signature()}
                )
            slots = slots[1:]

        data_values = decode_from_slice(data, [p.type for p in self.data_inputs()])

        out = []
        next_slot = 0
        next_data = 0
        for p in self.inputs:
            if p.is_indexed:
                if next_slot >= len(slots):
                    raise TruncatedInputError(
                        f"not enough topics for indexed input {p.name!r}",
                        context={"event": self.signature(), "topics": len(slots)},
                    )
                out.append((p, _from_slot(slots[next_slot], p.type)))
                next_slot += 1
            else:
                if next_data >= len(data_values):
                    raise TruncatedInputError(
                        f"not enough data for input {p.name!r}",
                        context={"event": self.signature()},
                    )
                out.append((p, data_values[next_data]))
                next_data += 1
        return DecodedParams(out)

    def __str__(self) -> str:
        return self.signature()
