"""
Contract ABI descriptions (JSON) <-> ``Abi`` tables.

A description is an ordered JSON list of entries::

    [
      {"type": "function", "name": "f",
       "inputs":  [{"name": "n", "type": "u32"},
                   {"name": "x", "type": "tuple",
                    "components": [{"name": "a", "type": "u32"},
                                   {"name": "b", "type": "string"}]}],
       "outputs": []},
      {"type": "event", "name": "Transfer", "anonymous": false,
       "inputs": [{"name": "to", "type": "address", "indexed": true}]},
      {"type": "error", "name": "Unauthorized", "inputs": []}
    ]

Any other entry ``type`` is rejected. Descriptions are checked against the
packaged JSON Schema (``ola_abi/schemas/abi.schema.json``) before parsing,
unless disabled with ``OLA_ABI_VALIDATE_SCHEMA=0``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import jsonschema

from .abi import Abi
from .config import load_config
from .errors import DescriptionError
from .event import Event
from .function import ContractError, Function
from .params import Param
from .schemas import validate_json
from .types import parse_type, type_to_description

log = logging.getLogger(__name__)

__all__ = [
    "DescriptionSource",
    "parse_param",
    "parse_entries",
    "abi_from_entries",
    "load_description",
    "dump_description",
    "dumps_description",
]

DescriptionSource = Union[bytes, bytearray, str, Path, Sequence[Mapping[str, Any]]]

ENTRY_KINDS = ("function", "event", "error")


# ──────────────────────────────────────────────────────────────────────────────
# Parsing
# ──────────────────────────────────────────────────────────────────────────────


def parse_param(obj: Mapping[str, Any], *, allow_indexed: bool = False) -> Param:
    if not isinstance(obj, Mapping):
        raise DescriptionError(f"parameter must be an object, got {type(obj).__name__}")
    if "type" not in obj:
        raise DescriptionError("parameter is missing its type", context={"param": dict(obj)})
    name = obj.get("name") or ""
    typ = parse_type(str(obj["type"]), obj.get("components"))
    indexed = obj.get("indexed") if allow_indexed else None
    return Param(name=str(name), type=typ, indexed=None if indexed is None else bool(indexed))


def _params(entry: Mapping[str, Any], key: str, *, allow_indexed: bool = False) -> Tuple[Param, ...]:
    raw = entry.get(key)
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise DescriptionError(f"{key} must be a list", context={"entry": entry.get("name")})
    return tuple(parse_param(p, allow_indexed=allow_indexed) for p in raw)


def parse_entries(
    entries: Sequence[Any],
) -> Tuple[List[Function], List[Event], List[ContractError]]:
    if not isinstance(entries, list):
        raise DescriptionError(
            f"description must be a JSON list, got {type(entries).__name__}"
        )
    functions: List[Function] = []
    events: List[Event] = []
    errors: List[ContractError] = []

    for i, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise DescriptionError(f"entry {i} must be an object", context={"index": i})
        kind = entry.get("type")
        if kind not in ENTRY_KINDS:
            raise DescriptionError(
                f"invalid ABI entry type: {kind}", context={"index": i, "type": kind}
            )
        name = entry.get("name")
        if not isinstance(name, str) or not name:
            raise DescriptionError(f"missing {kind} name", context={"index": i})

        if kind == "function":
            functions.append(
                Function(name, _params(entry, "inputs"), _params(entry, "outputs"))
            )
        elif kind == "event":
            events.append(
                Event(
                    name,
                    _params(entry, "inputs", allow_indexed=True),
                    anonymous=bool(entry.get("anonymous", False)),
                )
            )
        else:
            errors.append(ContractError(name, _params(entry, "inputs")))

    return functions, events, errors


def abi_from_entries(entries: Sequence[Any], *, validate: Optional[bool] = None) -> Abi:
    """Build an ``Abi`` from already-parsed JSON entries."""
    if validate is None:
        validate = load_config().validate_schema
    if validate:
        try:
            validate_json(entries, "abi")
        except jsonschema.ValidationError as e:
            path = "/".join(str(p) for p in e.absolute_path)
            raise DescriptionError(
                f"description does not match schema: {e.message}",
                context={"path": path},
            ) from e
    functions, events, errors = parse_entries(entries)
    abi = Abi(functions, events, errors)
    log.debug(
        "loaded ABI: %d functions, %d events, %d errors",
        len(functions),
        len(events),
        len(errors),
    )
    return abi


def load_description(src: DescriptionSource, *, validate: Optional[bool] = None) -> Abi:
    """
    Load an ``Abi`` from JSON text (``bytes``/``str``), a ``Path`` to a JSON
    file, or an already-parsed list of entries.
    """
    if isinstance(src, Path):
        try:
            src = src.read_bytes()
        except OSError as e:
            raise DescriptionError(f"cannot read description: {e}", context={"path": str(src)}) from e
    if isinstance(src, (bytes, bytearray)):
        try:
            src = bytes(src).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DescriptionError("description is not valid UTF-8") from e
    if isinstance(src, str):
        try:
            entries = json.loads(src)
        except json.JSONDecodeError as e:
            raise DescriptionError(
                f"malformed description JSON: {e.msg}",
                context={"line": e.lineno, "column": e.colno},
            ) from e
    else:
        entries = src
    return abi_from_entries(entries, validate=validate)


# ──────────────────────────────────────────────────────────────────────────────
# Serialization
# ──────────────────────────────────────────────────────────────────────────────


def _param_entry(p: Param) -> Dict[str, Any]:
    out = type_to_description(p.type, p.name)
    if p.indexed is not None:
        out["indexed"] = p.indexed
    return out


def dump_description(abi: Abi) -> List[Dict[str, Any]]:
    """Render ``abi`` as description entries (functions, then events, then errors)."""
    out: List[Dict[str, Any]] = []
    for f in abi.functions:
        out.append(
            {
                "type": "function",
                "name": f.name,
                "inputs": [_param_entry(p) for p in f.inputs],
                "outputs": [_param_entry(p) for p in f.outputs],
            }
        )
    for e in abi.events:
        out.append(
            {
                "type": "event",
                "name": e.name,
                "inputs": [_param_entry(p) for p in e.inputs],
                "anonymous": e.anonymous,
            }
        )
    for err in abi.errors:
        out.append(
            {
                "type": "error",
                "name": err.name,
                "inputs": [_param_entry(p) for p in err.inputs],
            }
        )
    return out


def dumps_description(abi: Abi, *, indent: Optional[int] = None) -> str:
    return json.dumps(dump_description(abi), indent=indent)
