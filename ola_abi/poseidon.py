"""
ola_abi.poseidon
================

Poseidon permutation and sponge over the Goldilocks field
(p = 2^64 - 2^32 + 1). This is the field-oriented hash domain used for
event topics; function selectors use Keccak (``ola_abi.keccak``).

Parameters are kept external so that topics match the exact parameter set
of the chain you decode logs from. Register it at startup (programmatically
or from a JSON file); otherwise a default set is derived on first use.

Public API
----------
- PoseidonParams(modulus, t, rate, R_F, R_P, alpha, mds, rc, output_len)
- register_params(name, params)
- load_params_json(path, name=None)
- get_params(name=DEFAULT_PARAMS)
- poseidon_permute(state, params)
- poseidon_hash(elements, *, params_name=DEFAULT_PARAMS) -> tuple of output_len ints
- poseidon_hash_bytes(data, *, params_name=DEFAULT_PARAMS)

JSON schema (example)
---------------------
{
  "field": "goldilocks",
  "modulus": "0xffffffff00000001",
  "t": 12, "rate": 8, "output_len": 4,
  "R_F": 8, "R_P": 22, "alpha": 7,
  "mds": [[...t ints...], ...],            # t x t
  "rc":  [[...t ints...], ...]             # (R_F + R_P) x t
}

Instead of "rc", a flat "round_constants" list of (R_F + R_P) * t entries
may be given (entry i + t*r is lane i of round r). Instead of "mds",
"mds_circ" and "mds_diag" vectors may be given.

Integers may be JSON numbers, decimal strings or 0x-hex strings.

Default parameter set
---------------------
``goldilocks_t12``: width 12, rate 8, 8 full + 22 partial rounds, S-box x^7,
circulant MDS [17, 15, 41, 16, 2, 28, 13, 13, 39, 18, 34, 20] plus diagonal
[8, 0, ..., 0]. Round constants come from the Grain LFSR procedure of the
Poseidon reference (field=prime, sbox=x^alpha, n=64, t, R_F, R_P), with
rejection sampling below p. These are not the constants of the Ola chain,
which uses the published plonky2 Goldilocks table (it starts with
0xb585f766f2144405); topics only match on-chain logs once that table is
loaded through OLA_ABI_POSEIDON_PARAMS or load_params_json.

Sponge
------
Overwrite mode with capacity t - rate: the input is zero-padded to a multiple
of ``rate`` (at least one block), each block overwrites state[0:rate] and is
followed by one permutation; the digest is state[0:output_len].
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .config import load_config

log = logging.getLogger(__name__)

GOLDILOCKS_MODULUS = (1 << 64) - (1 << 32) + 1
DEFAULT_PARAMS = "goldilocks_t12"

_MDS_CIRC = (17, 15, 41, 16, 2, 28, 13, 13, 39, 18, 34, 20)
_MDS_DIAG = (8, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0)


# ---------------------------
# Parameters & registry
# ---------------------------


@dataclass(frozen=True)
class PoseidonParams:
    modulus: int
    t: int  # state width
    rate: int  # absorbed elements per permutation
    R_F: int  # number of full rounds
    R_P: int  # number of partial rounds
    alpha: int  # S-box exponent
    mds: Tuple[Tuple[int, ...], ...]  # t x t
    rc: Tuple[Tuple[int, ...], ...]  # (R_F + R_P) x t
    output_len: int = 4

    def validate(self) -> None:
        if self.modulus < 3:
            raise ValueError("modulus must be an odd prime > 2")
        if self.t < 2:
            raise ValueError("t must be >= 2")
        if not 1 <= self.rate < self.t:
            raise ValueError("rate must be in 1..t-1 (capacity >= 1)")
        if not 1 <= self.output_len <= self.t:
            raise ValueError("output_len must be in 1..t")
        if self.R_F % 2 != 0:
            raise ValueError("R_F must be even (split half-before/after partial rounds)")
        if self.alpha < 3 or self.alpha % 2 == 0:
            raise ValueError("alpha must be an odd integer >= 3")
        if len(self.mds) != self.t or any(len(row) != self.t for row in self.mds):
            raise ValueError("mds must be t x t")
        expected_rounds = self.R_F + self.R_P
        if len(self.rc) != expected_rounds or any(len(row) != self.t for row in self.rc):
            raise ValueError(f"rc must be (R_F+R_P) x t = {expected_rounds} x {self.t}")


_PARAMS_REGISTRY: Dict[str, PoseidonParams] = {}
_REGISTRY_LOCK = threading.Lock()


def register_params(name: str, params: PoseidonParams) -> None:
    """
    Register a Poseidon parameter set under `name`.

    Call this at process startup with the exact params your chain uses.
    """
    if not name or not isinstance(name, str):
        raise ValueError("name must be a non-empty string")
    params.validate()
    with _REGISTRY_LOCK:
        _PARAMS_REGISTRY[name] = params
    log.debug("registered poseidon params %r (t=%d, R_F=%d, R_P=%d)", name, params.t, params.R_F, params.R_P)


def get_params(name: str = DEFAULT_PARAMS) -> PoseidonParams:
    params = _PARAMS_REGISTRY.get(name)
    if params is not None:
        return params
    if name != DEFAULT_PARAMS:
        raise KeyError(
            f"Poseidon params '{name}' are not registered. "
            "Load them with load_params_json(...) or register_params(...)."
        )
    with _REGISTRY_LOCK:
        params = _PARAMS_REGISTRY.get(name)
        if params is None:
            params = _default_params()
            params.validate()
            _PARAMS_REGISTRY[name] = params
    return params


def _to_int(x: Union[int, str], modulus: int) -> int:
    if isinstance(x, int):
        return x % modulus
    s = str(x).strip().lower()
    if s.startswith("0x"):
        return int(s, 16) % modulus
    return int(s) % modulus


def _mds_from_circulant(
    circ: Sequence[int], diag: Sequence[int], modulus: int
) -> Tuple[Tuple[int, ...], ...]:
    t = len(circ)
    if len(diag) != t:
        raise ValueError("mds_diag must have the same length as mds_circ")
    return tuple(
        tuple((circ[(c - r) % t] + (diag[r] if r == c else 0)) % modulus for c in range(t))
        for r in range(t)
    )


def _rows(flat: Sequence[int], t: int) -> Tuple[Tuple[int, ...], ...]:
    if len(flat) % t:
        raise ValueError(f"round_constants length {len(flat)} is not a multiple of t={t}")
    return tuple(tuple(flat[i : i + t]) for i in range(0, len(flat), t))


def params_from_dict(raw: Dict[str, Any]) -> PoseidonParams:
    """
    Build params from a decoded JSON object.

    Round constants are given either as ``rc`` ((R_F + R_P) rows of t) or as a
    flat ``round_constants`` table where entry ``i + t * r`` is lane ``i`` of
    round ``r``. The MDS is given either as a full ``mds`` matrix or as
    ``mds_circ`` plus an optional ``mds_diag``.
    """
    modulus = int(str(raw.get("modulus", GOLDILOCKS_MODULUS)), 0)
    t = int(raw["t"])
    if "rc" in raw:
        rc = tuple(tuple(_to_int(v, modulus) for v in row) for row in raw["rc"])
    else:
        rc = _rows([_to_int(v, modulus) for v in raw["round_constants"]], t)
    if "mds" in raw:
        mds = tuple(tuple(_to_int(v, modulus) for v in row) for row in raw["mds"])
    else:
        circ = [_to_int(v, modulus) for v in raw["mds_circ"]]
        diag = [_to_int(v, modulus) for v in raw.get("mds_diag", [0] * len(circ))]
        mds = _mds_from_circulant(circ, diag, modulus)
    params = PoseidonParams(
        modulus=modulus,
        t=t,
        rate=int(raw.get("rate", t - 1)),
        R_F=int(raw["R_F"]),
        R_P=int(raw["R_P"]),
        alpha=int(raw.get("alpha", 7)),
        mds=mds,
        rc=rc,
        output_len=int(raw.get("output_len", 4)),
    )
    params.validate()
    return params


def load_params_json(path: str, name: Optional[str] = None) -> PoseidonParams:
    """
    Load a Poseidon params JSON file and register it.

    If `name` is None, a name is derived from the filename (without extension).
    Returns the PoseidonParams object.
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    params = params_from_dict(raw)
    reg_name = name or os.path.splitext(os.path.basename(path))[0]
    register_params(reg_name, params)
    log.info("loaded poseidon params %r from %s", reg_name, path)
    return params


# ---------------------------
# Default parameter derivation (Grain LFSR)
# ---------------------------


class _Grain:
    """80-bit Grain LFSR in self-shrinking mode, as in the Poseidon reference."""

    def __init__(self, field: int, sbox: int, n: int, t: int, R_F: int, R_P: int) -> None:
        bits: List[int] = []
        for value, width in ((field, 2), (sbox, 4), (n, 12), (t, 12), (R_F, 10), (R_P, 10)):
            bits.extend(int(b) for b in format(value, f"0{width}b"))
        bits.extend([1] * 30)
        self._buf = bits
        self._head = 0
        for _ in range(160):
            self._clock()

    def _clock(self) -> int:
        b, h = self._buf, self._head
        new = (
            b[(h + 62) % 80]
            ^ b[(h + 51) % 80]
            ^ b[(h + 38) % 80]
            ^ b[(h + 23) % 80]
            ^ b[(h + 13) % 80]
            ^ b[h]
        )
        b[h] = new
        self._head = (h + 1) % 80
        return new

    def bit(self) -> int:
        first = self._clock()
        while first == 0:
            self._clock()
            first = self._clock()
        return self._clock()

    def field_element(self, n: int, modulus: int) -> int:
        while True:
            v = 0
            for _ in range(n):
                v = (v << 1) | self.bit()
            if v < modulus:
                return v


def _default_params() -> PoseidonParams:
    path = load_config().poseidon_params_path
    if path is not None:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        log.info("using poseidon params from %s", path)
        return params_from_dict(raw)

    p, t, rate, R_F, R_P, alpha = GOLDILOCKS_MODULUS, 12, 8, 8, 22, 7
    grain = _Grain(field=1, sbox=0, n=64, t=t, R_F=R_F, R_P=R_P)
    rc = tuple(
        tuple(grain.field_element(64, p) for _ in range(t)) for _ in range(R_F + R_P)
    )
    mds = _mds_from_circulant(_MDS_CIRC, _MDS_DIAG, p)
    log.warning(
        "poseidon params %r use Grain-derived round constants; event topics will not "
        "match on-chain logs until the chain table is loaded (OLA_ABI_POSEIDON_PARAMS)",
        DEFAULT_PARAMS,
    )
    return PoseidonParams(
        modulus=p, t=t, rate=rate, R_F=R_F, R_P=R_P, alpha=alpha, mds=mds, rc=rc, output_len=4
    )


# ---------------------------
# Permutation
# ---------------------------


def _apply_mds(state: List[int], mds: Sequence[Sequence[int]], p: int) -> List[int]:
    return [sum(m * s for m, s in zip(row, state)) % p for row in mds]


def poseidon_permute(state: Sequence[int], params: PoseidonParams) -> List[int]:
    """
    Poseidon permutation.

    Round schedule:
      - First R_F/2 full rounds (S-box on all t elements)
      - R_P partial rounds (S-box on the *first* element only)
      - Last  R_F/2 full rounds

    Returns a new list with the permuted state.
    """
    t, p, alpha = params.t, params.modulus, params.alpha
    if len(state) != t:
        raise ValueError(f"state length {len(state)} != t={t}")

    x = [int(v) % p for v in state]
    r = 0
    half = params.R_F // 2

    for _ in range(half):
        x = [pow((v + c) % p, alpha, p) for v, c in zip(x, params.rc[r])]
        x = _apply_mds(x, params.mds, p)
        r += 1

    for _ in range(params.R_P):
        x = [(v + c) % p for v, c in zip(x, params.rc[r])]
        x[0] = pow(x[0], alpha, p)
        x = _apply_mds(x, params.mds, p)
        r += 1

    for _ in range(half):
        x = [pow((v + c) % p, alpha, p) for v, c in zip(x, params.rc[r])]
        x = _apply_mds(x, params.mds, p)
        r += 1

    return x


# ---------------------------
# Sponge / Hash interface
# ---------------------------


def poseidon_hash(
    elements: Sequence[int],
    *,
    params_name: str = DEFAULT_PARAMS,
) -> Tuple[int, ...]:
    """Overwrite-mode sponge over field elements; returns ``output_len`` elements."""
    params = get_params(params_name)
    p, rate = params.modulus, params.rate

    padded = [int(e) % p for e in elements]
    if not padded or len(padded) % rate:
        padded.extend([0] * (rate - len(padded) % rate))

    state = [0] * params.t
    for i in range(0, len(padded), rate):
        state[:rate] = padded[i : i + rate]
        state = poseidon_permute(state, params)
    return tuple(state[: params.output_len])


def poseidon_hash_bytes(
    data: bytes | bytearray | memoryview,
    *,
    params_name: str = DEFAULT_PARAMS,
) -> Tuple[int, ...]:
    """Hash raw bytes, one field element per byte."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("poseidon_hash_bytes expects bytes-like input")
    return poseidon_hash(list(bytes(data)), params_name=params_name)


__all__ = [
    "GOLDILOCKS_MODULUS",
    "DEFAULT_PARAMS",
    "PoseidonParams",
    "register_params",
    "get_params",
    "params_from_dict",
    "load_params_json",
    "poseidon_permute",
    "poseidon_hash",
    "poseidon_hash_bytes",
]
