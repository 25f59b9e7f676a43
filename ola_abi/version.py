"""ola_abi.version — semantic version resolution.

Resolution order:
- OLA_ABI_VERSION environment variable (exact value)
- installed distribution metadata for ``ola-abi``
- BASE_VERSION
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import metadata as importlib_metadata
from typing import Optional

# Bump on changes to selectors, topics or the wire layout.
BASE_VERSION = "0.2.0"


def _pkg_metadata_version(dist_name: str = "ola-abi") -> Optional[str]:
    """Try to read installed package version; None if unavailable."""
    try:
        v = importlib_metadata.version(dist_name)
    except importlib_metadata.PackageNotFoundError:
        return None
    return v if v and v != "0.0.0" else None


@lru_cache(maxsize=1)
def compute_version() -> str:
    val = os.getenv("OLA_ABI_VERSION")
    if val:
        return val
    return _pkg_metadata_version() or BASE_VERSION


__version__ = compute_version()

__all__ = ["__version__", "BASE_VERSION", "compute_version"]
