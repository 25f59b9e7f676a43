"""
Shared pytest fixtures and Hypothesis profiles for ola_abi tests.

- Hypothesis profiles (dev/ci/fast), selected by HYPOTHESIS_PROFILE, otherwise
  "ci" when the CI env var is set and "dev" locally.
- ``fresh_config``: clears the cached AbiConfig around a test so env
  overrides set with monkeypatch take effect.
- ``chain_poseidon``: skips unless the Ola chain Poseidon table is loaded
  (OLA_ABI_POSEIDON_PARAMS), for known-answer hash and topic checks.
- Sample descriptions used across modules.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List

import pytest
from hypothesis import HealthCheck, settings

from ola_abi.config import load_config
from ola_abi.poseidon import get_params

# ---- hypothesis profiles ------------------------------------------------------

settings.register_profile(
    "dev",
    settings(max_examples=100, deadline=None, suppress_health_check=(HealthCheck.too_slow,)),
)
settings.register_profile(
    "ci",
    settings(
        max_examples=300,
        deadline=None,
        derandomize=True,
        suppress_health_check=(HealthCheck.too_slow,),
    ),
)
settings.register_profile("fast", settings(max_examples=25, deadline=None))

_profile = os.getenv("HYPOTHESIS_PROFILE") or ("ci" if os.getenv("CI") else "dev")
settings.load_profile(_profile)


# ---- config -------------------------------------------------------------------


@pytest.fixture
def fresh_config():
    """Drop the cached config before and after the test."""
    load_config.cache_clear()
    yield
    load_config.cache_clear()


# ---- poseidon ------------------------------------------------------------------

# first entry of the published Goldilocks t=12 round-constant table
CHAIN_FIRST_ROUND_CONSTANT = 0xB585F766F2144405


@pytest.fixture
def chain_poseidon():
    if get_params().rc[0][0] != CHAIN_FIRST_ROUND_CONSTANT:
        pytest.skip("chain Poseidon round constants not loaded (set OLA_ABI_POSEIDON_PARAMS)")


# ---- sample descriptions ------------------------------------------------------

VOTE_ABI: List[Dict[str, Any]] = [
    {
        "name": "contract_init",
        "type": "function",
        "inputs": [{"name": "proposalNames_", "type": "u32[]", "internalType": "u32[]"}],
        "outputs": [],
    },
    {
        "name": "winningProposal",
        "type": "function",
        "inputs": [],
        "outputs": [{"name": "winningProposal_", "type": "u32", "internalType": "u32"}],
    },
    {
        "name": "getWinnerName",
        "type": "function",
        "inputs": [],
        "outputs": [{"name": "", "type": "u32", "internalType": "u32"}],
    },
    {
        "name": "vote_proposal",
        "type": "function",
        "inputs": [{"name": "proposal_", "type": "u32", "internalType": "u32"}],
        "outputs": [],
    },
    {
        "name": "get_caller",
        "type": "function",
        "inputs": [],
        "outputs": [{"name": "", "type": "address", "internalType": "address"}],
    },
]

BOOK_ABI: List[Dict[str, Any]] = [
    {
        "name": "createBook",
        "type": "function",
        "inputs": [
            {"name": "id", "type": "u32"},
            {"name": "name", "type": "string"},
        ],
        "outputs": [
            {
                "name": "",
                "type": "tuple",
                "components": [
                    {"name": "book_id", "type": "u32"},
                    {"name": "book_name", "type": "string"},
                ],
            }
        ],
    },
    {
        "name": "BookCreated",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"name": "id", "type": "u32", "indexed": True},
            {"name": "name", "type": "string", "indexed": True},
            {"name": "price", "type": "u32", "indexed": False},
            {"name": "title", "type": "string", "indexed": False},
        ],
    },
    {
        "name": "Unauthorized",
        "type": "error",
        "inputs": [{"name": "caller", "type": "address"}],
    },
]


@pytest.fixture
def vote_abi_json() -> str:
    return json.dumps(VOTE_ABI)


@pytest.fixture
def book_abi_json() -> str:
    return json.dumps(BOOK_ABI)
