"""
Function and custom-error descriptors.

A function is identified on the wire by its selector: Keccak-256 over the
UTF-8 signature ``name(T1,T2,...)``, first four digest bytes read
little-endian. Parameter names and output types never enter the signature.

Call input layout::

    [selector, param_word_count, param_word...]

Call output layout is the bare encoding of the output values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .codec import decode_from_slice, encode, encode_typed
from .errors import DescriptionError
from .keccak import selector as keccak_selector
from .params import DecodedParams, Param
from .types import AbiType
from .values import Value

__all__ = [
    "signature_of",
    "encode_params",
    "Function",
    "ContractError",
]


def signature_of(name: str, params: Sequence[Param]) -> str:
    """Canonical ``name(T1,T2,...)`` over the parameter types."""
    return f"{name}({','.join(str(p.type) for p in params)})"


def encode_params(values: Sequence[Value]) -> List[int]:
    """``[len, ...encode(values)]``: call input without a selector."""
    words = encode(values)
    return [len(words), *words]


def _pair(params: Sequence[Param], values: Sequence[Value]) -> DecodedParams:
    return DecodedParams(zip(params, values))


def _check_name(name: str, what: str) -> None:
    if not isinstance(name, str) or not name:
        raise DescriptionError(f"{what} name must be a non-empty string")


@dataclass(frozen=True)
class Function:
    name: str
    inputs: Tuple[Param, ...] = ()
    outputs: Tuple[Param, ...] = ()

    def __post_init__(self) -> None:
        _check_name(self.name, "function")
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "outputs", tuple(self.outputs))

    def signature(self) -> str:
        return signature_of(self.name, self.inputs)

    def method_id(self) -> int:
        return keccak_selector(self.signature())

    def input_types(self) -> List[AbiType]:
        return [p.type for p in self.inputs]

    def output_types(self) -> List[AbiType]:
        return [p.type for p in self.outputs]

    def decode_input_from_slice(self, words: Sequence[int]) -> DecodedParams:
        """Decode parameter words (selector and count already stripped)."""
        return _pair(self.inputs, decode_from_slice(words, self.input_types()))

    def decode_output_from_slice(self, words: Sequence[int]) -> DecodedParams:
        return _pair(self.outputs, decode_from_slice(words, self.output_types()))

    def encode_input(self, values: Sequence[Value]) -> List[int]:
        words = encode_typed(values, self.input_types())
        return [self.method_id(), len(words), *words]

    def encode_output(self, values: Sequence[Value]) -> List[int]:
        return encode_typed(values, self.output_types())

    def __str__(self) -> str:
        return self.signature()


@dataclass(frozen=True)
class ContractError:
    """A custom error a contract may revert with; encoded like a call input."""

    name: str
    inputs: Tuple[Param, ...] = ()

    def __post_init__(self) -> None:
        _check_name(self.name, "error")
        object.__setattr__(self, "inputs", tuple(self.inputs))

    def signature(self) -> str:
        return signature_of(self.name, self.inputs)

    def selector(self) -> int:
        return keccak_selector(self.signature())

    def input_types(self) -> List[AbiType]:
        return [p.type for p in self.inputs]

    def decode_from_slice(self, words: Sequence[int]) -> DecodedParams:
        return _pair(self.inputs, decode_from_slice(words, self.input_types()))

    def encode(self, values: Sequence[Value]) -> List[int]:
        words = encode_typed(values, self.input_types())
        return [self.selector(), len(words), *words]

    def __str__(self) -> str:
        return self.signature()
