"""
ola_abi.config — numeric caps, feature flags and parameter locations.

This module has NO third-party deps and is safe to import very early.

Configuration precedence:
  1) Environment variables (OLA_ABI_*)
  2) Hardcoded safe defaults below

Key env vars (case-insensitive where boolean):
  - OLA_ABI_MAX_DEPTH          (int)    default: 32
  - OLA_ABI_MAX_ARRAY_LEN      (int)    default: 1_048_576
  - OLA_ABI_VALIDATE_SCHEMA    (bool)   default: true
  - OLA_ABI_POSEIDON_PARAMS    (path)   default: unset (built-in parameter set)
  - OLA_ABI_LOGLEVEL           (str)    default: WARNING

Usage:
    from ola_abi.config import load_config
    CFG = load_config()
    if CFG.validate_schema: ...
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional


# ----------------------------- helpers ---------------------------------------


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    return val in ("1", "true", "t", "yes", "y", "on")


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_path(name: str) -> Optional[Path]:
    raw = os.getenv(name)
    if not raw:
        return None
    return Path(raw).expanduser().resolve()


def _env_loglevel(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class AbiConfig:
    # Numeric caps (enforced by the type parser and the codec)
    max_depth: int
    max_array_len: int

    # Feature flags
    validate_schema: bool

    # Optional Poseidon parameter file used for event topics
    poseidon_params_path: Optional[Path]

    log_level: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "max_depth": self.max_depth,
            "max_array_len": self.max_array_len,
            "validate_schema": self.validate_schema,
            "poseidon_params_path": str(self.poseidon_params_path) if self.poseidon_params_path else None,
            "log_level": logging.getLevelName(self.log_level),
        }


@lru_cache(maxsize=1)
def load_config() -> AbiConfig:
    """
    Build and cache an AbiConfig from environment + safe defaults.
    """
    return AbiConfig(
        max_depth=_env_int("OLA_ABI_MAX_DEPTH", 32, min_v=8, max_v=256),
        max_array_len=_env_int("OLA_ABI_MAX_ARRAY_LEN", 1_048_576, min_v=1_024, max_v=1 << 32),
        validate_schema=_env_bool("OLA_ABI_VALIDATE_SCHEMA", True),
        poseidon_params_path=_env_path("OLA_ABI_POSEIDON_PARAMS"),
        log_level=_env_loglevel("OLA_ABI_LOGLEVEL", logging.WARNING),
    )


__all__ = ["AbiConfig", "load_config"]
