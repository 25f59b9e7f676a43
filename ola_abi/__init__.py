"""
Ola ABI (ola_abi) — contract ABI codec for the Ola VM.

Given a contract's ABI description this package computes function selectors,
encodes call arguments into the VM's flat 64-bit word stream, decodes call
inputs/outputs back into typed values, and decodes event logs (topics + data)
into named parameters.

Entry points:

- load_description(src) -> Abi
    Parse a JSON description (text, bytes, path or parsed list).
- Abi.decode_input_from_slice(words) -> (Function, DecodedParams)
- Abi.encode_input_with_signature(signature, values) -> [selector, len, ...]
- Abi.decode_output_from_slice(signature, words) -> DecodedParams
- Abi.decode_log_from_slice(topics, data) -> (Event, DecodedParams)
- encode(values) / decode_from_slice(words, types)
    The raw word codec.

Envelope-returning wrappers for host bridges live in ``ola_abi.boundary``.
"""

from __future__ import annotations

import logging

from .abi import Abi
from .codec import decode_from_slice, decode_value, encode, encode_typed
from .config import AbiConfig, load_config
from .description import dump_description, load_description
from .errors import (
    AbiError,
    AbiLookupError,
    DescriptionError,
    EncodingError,
    LimitExceededError,
    NestingDepthError,
    StructuralMismatchError,
    TruncatedInputError,
)
from .event import Event, is_encoded_to_hash
from .function import ContractError, Function, encode_params
from .params import DecodedParams, FixedArray4, Param
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
    parse_type,
)
from .values import (
    U32,
    Address,
    Array,
    Bool,
    Field,
    Fields,
    FixedArray,
    Hash,
    String,
    Tuple,
    Value,
)
from .version import __version__

_pkg_log = logging.getLogger(__name__)
_pkg_log.setLevel(load_config().log_level)
_pkg_log.addHandler(logging.NullHandler())


def version() -> str:
    """Return the ola_abi version string."""
    return __version__


__all__ = [
    "__version__",
    "version",
    # table & descriptors
    "Abi",
    "Function",
    "ContractError",
    "Event",
    "Param",
    "DecodedParams",
    "FixedArray4",
    "load_description",
    "dump_description",
    "encode_params",
    "is_encoded_to_hash",
    # codec
    "encode",
    "encode_typed",
    "decode_value",
    "decode_from_slice",
    # types
    "AbiType",
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
    "parse_type",
    # values
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
    # errors & config
    "AbiError",
    "DescriptionError",
    "AbiLookupError",
    "TruncatedInputError",
    "EncodingError",
    "StructuralMismatchError",
    "NestingDepthError",
    "LimitExceededError",
    "AbiConfig",
    "load_config",
]
