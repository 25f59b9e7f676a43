"""
Envelope-returning entry points for hosts (FFI bridges, RPC handlers, CLIs).

Each call takes a raw description (JSON text, bytes, path or parsed list)
plus raw words and returns a plain dict that is always JSON-serializable:

    {"ok": True,  ...result fields...}
    {"ok": False, "error": {"code": ..., "message": ..., "context": {...}}}

Nothing here raises on malformed input. ABI errors are reported with their
own code; anything unexpected is logged and reported as ``internal_error``.
Words may be given as ints or as decimal / 0x-hex strings; output words are
rendered as decimal strings.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Dict, Iterable, List, Sequence

from .description import DescriptionSource, load_description
from .errors import AbiError, StructuralMismatchError
from .params import WORD_MAX
from .values import values_from_json

log = logging.getLogger(__name__)

__all__ = [
    "decode_input",
    "decode_output",
    "encode_input",
    "decode_log",
]

Envelope = Dict[str, Any]


def _words(raw: Iterable[Any], what: str = "words") -> List[int]:
    out: List[int] = []
    for i, w in enumerate(raw):
        if isinstance(w, str):
            try:
                w = int(w, 0)
            except ValueError as e:
                raise StructuralMismatchError(
                    f"{what}[{i}] is not an integer: {w!r}", context={"index": i}
                ) from e
        if isinstance(w, bool) or not isinstance(w, int) or not 0 <= w <= WORD_MAX:
            raise StructuralMismatchError(
                f"{what}[{i}] is not a 64-bit word: {w!r}", context={"index": i}
            )
        out.append(w)
    return out


def _topics(raw: Iterable[Any]) -> List[Any]:
    # hex strings pass through; 4-word lists are normalized like data words
    return [t if isinstance(t, str) else _words(t, "topic") for t in raw]


def _enveloped(fn: Callable[..., Envelope]) -> Callable[..., Envelope]:
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Envelope:
        try:
            return {"ok": True, **fn(*args, **kwargs)}
        except AbiError as e:
            log.debug("%s failed: %s", fn.__name__, e.message)
            return {"ok": False, "error": e.to_dict()}
        except Exception as e:  # noqa: BLE001
            log.exception("%s: unexpected failure", fn.__name__)
            return {
                "ok": False,
                "error": {"code": "internal_error", "message": str(e), "context": {}},
            }

    return wrapper


@_enveloped
def decode_input(description: DescriptionSource, words: Sequence[Any]) -> Envelope:
    """Decode ``[selector, count, params...]`` into the matching function's inputs."""
    abi = load_description(description)
    fn, params = abi.decode_input_from_slice(_words(words))
    return {"function": fn.signature(), "params": params.to_json()}


@_enveloped
def decode_output(
    description: DescriptionSource, signature: str, words: Sequence[Any]
) -> Envelope:
    abi = load_description(description)
    params = abi.decode_output_from_slice(signature, _words(words))
    return {"params": params.to_json()}


@_enveloped
def encode_input(
    description: DescriptionSource, signature: str, params: Sequence[Any]
) -> Envelope:
    """Encode JSON-shaped arguments as ``[selector, count, params...]``."""
    abi = load_description(description)
    fn = abi.function_by_signature(signature)
    if isinstance(params, (str, bytes)) or not isinstance(params, Sequence):
        raise StructuralMismatchError("params must be a list of argument values")
    words = fn.encode_input(values_from_json(params, fn.input_types()))
    return {"words": [str(w) for w in words]}


@_enveloped
def decode_log(
    description: DescriptionSource, topics: Sequence[Any], data: Sequence[Any]
) -> Envelope:
    """Decode a log record; the event is found by its first topic."""
    abi = load_description(description)
    event, params = abi.decode_log_from_slice(_topics(topics), _words(data, "data"))
    return {"event": event.signature(), "params": params.to_json()}
