"""
ola_abi.schemas
---------------

Package data loader for the JSON Schemas shipped with ola_abi.

Contents (shipped alongside this module):
- JSON Schema:
    * abi.schema.json    structural shape of a contract ABI description

Resources are read with `importlib.resources`, without assuming any
particular working directory.
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib.resources import files as _files
from typing import Any, Dict, List

import jsonschema

# --- Manifest ----------------------------------------------------------------------

_JSON_SCHEMAS: Dict[str, str] = {
    "abi": "abi.schema.json",
}


def _read_bytes(relpath: str) -> bytes:
    return (_files(__name__) / relpath).read_bytes()


# --- Public helpers ----------------------------------------------------------------


def list_json_schemas() -> List[str]:
    """Return the list of available JSON-Schema logical names."""
    return sorted(_JSON_SCHEMAS.keys())


@lru_cache(maxsize=None)
def load_json_schema(name: str) -> Dict[str, Any]:
    """
    Load and parse a JSON-Schema by logical name.

    Raises
    ------
    KeyError
        If the schema name is unknown.
    FileNotFoundError / JSONDecodeError
        If the packaged resource is missing or invalid.
    """
    try:
        rel = _JSON_SCHEMAS[name]
    except KeyError as e:
        raise KeyError(
            f"Unknown JSON schema {name!r}. Known: {list_json_schemas()}"
        ) from e
    return json.loads(_read_bytes(rel).decode("utf-8"))


def validate_json(instance: object, schema_name: str) -> None:
    """Validate an instance against a packaged JSON-Schema by name.

    Raises ``jsonschema.ValidationError`` on the first violation.
    """
    schema = load_json_schema(schema_name)
    jsonschema.validate(instance=instance, schema=schema)


__all__ = [
    "list_json_schemas",
    "load_json_schema",
    "validate_json",
]
