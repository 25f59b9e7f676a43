"""
ABI table: the immutable set of functions, events and custom errors of one
contract, indexed once at construction.

Lookups
-------
- function_by_selector(selector)     Keccak selector of the signature
- function_by_signature(signature)   exact canonical signature
- function_by_name(name)             every overload of ``name``
- event_by_signature(signature)
- event_by_topic(topic)              topic0 of non-anonymous events
- error_by_selector(selector)

Misses raise ``AbiLookupError``; nothing is ever defaulted.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import AbiLookupError, DescriptionError, TruncatedInputError
from .event import Event
from .function import ContractError, Function, encode_params
from .params import DecodedParams, FixedArray4, FixedArray4Like, as_fixed_array4
from .values import Value

__all__ = ["Abi"]


def _index_unique(items: Iterable[Any], key, what: str) -> Dict[Any, Any]:
    out: Dict[Any, Any] = {}
    for item in items:
        k = key(item)
        if k in out:
            raise DescriptionError(
                f"duplicate {what} {k!r} ({out[k].signature()} and {item.signature()})",
                context={"key": str(k)},
            )
        out[k] = item
    return out


class Abi:
    """Functions, events and errors of one contract."""

    def __init__(
        self,
        functions: Iterable[Function] = (),
        events: Iterable[Event] = (),
        errors: Iterable[ContractError] = (),
    ) -> None:
        self._functions: Tuple[Function, ...] = tuple(functions)
        self._events: Tuple[Event, ...] = tuple(events)
        self._errors: Tuple[ContractError, ...] = tuple(errors)

        self._fn_by_signature: Dict[str, Function] = _index_unique(
            self._functions, lambda f: f.signature(), "function signature"
        )
        self._fn_by_selector: Dict[int, Function] = _index_unique(
            self._functions, lambda f: f.method_id(), "function selector"
        )
        self._fn_by_name: Dict[str, List[Function]] = {}
        for f in self._functions:
            self._fn_by_name.setdefault(f.name, []).append(f)

        self._ev_by_signature: Dict[str, Event] = _index_unique(
            self._events, lambda e: e.signature(), "event signature"
        )
        self._err_by_selector: Dict[int, ContractError] = _index_unique(
            self._errors, lambda e: e.selector(), "error selector"
        )

        # topic0 -> Event, filled on first topic lookup
        self._ev_by_topic: Optional[Dict[FixedArray4, Event]] = None
        self._topic_lock = threading.Lock()

    # ------------------------------------------------------------------ props

    @property
    def functions(self) -> Tuple[Function, ...]:
        return self._functions

    @property
    def events(self) -> Tuple[Event, ...]:
        return self._events

    @property
    def errors(self) -> Tuple[ContractError, ...]:
        return self._errors

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Abi):
            return NotImplemented
        return (self._functions, self._events, self._errors) == (
            other._functions,
            other._events,
            other._errors,
        )

    def __hash__(self) -> int:
        return hash((self._functions, self._events, self._errors))

    def __repr__(self) -> str:
        return (
            f"Abi(functions={len(self._functions)}, events={len(self._events)}, "
            f"errors={len(self._errors)})"
        )

    # ---------------------------------------------------------------- lookups

    def function_by_selector(self, selector: int) -> Function:
        try:
            return self._fn_by_selector[selector]
        except KeyError:
            raise AbiLookupError(
                f"no function with selector {selector!r}",
                context={"selector": selector},
            ) from None

    def function_by_signature(self, signature: str) -> Function:
        try:
            return self._fn_by_signature[signature]
        except KeyError:
            raise AbiLookupError(
                f"no function with signature {signature!r}",
                context={"signature": signature},
            ) from None

    def function_by_name(self, name: str) -> List[Function]:
        fns = self._fn_by_name.get(name)
        if not fns:
            raise AbiLookupError(f"no function named {name!r}", context={"name": name})
        return list(fns)

    def event_by_signature(self, signature: str) -> Event:
        try:
            return self._ev_by_signature[signature]
        except KeyError:
            raise AbiLookupError(
                f"no event with signature {signature!r}",
                context={"signature": signature},
            ) from None

    def _topic_index(self) -> Dict[FixedArray4, Event]:
        index = self._ev_by_topic
        if index is None:
            with self._topic_lock:
                index = self._ev_by_topic
                if index is None:
                    index = {e.topic(): e for e in self._events if not e.anonymous}
                    self._ev_by_topic = index
        return index

    def event_by_topic(self, topic: FixedArray4Like) -> Event:
        key = as_fixed_array4(topic)
        try:
            return self._topic_index()[key]
        except KeyError:
            raise AbiLookupError(
                f"no event with topic {key.to_hex()}", context={"topic": key.to_hex()}
            ) from None

    def error_by_selector(self, selector: int) -> ContractError:
        try:
            return self._err_by_selector[selector]
        except KeyError:
            raise AbiLookupError(
                f"no error with selector {selector!r}", context={"selector": selector}
            ) from None

    # ------------------------------------------------------------ call codec

    def decode_input_from_slice(self, words: Sequence[int]) -> Tuple[Function, DecodedParams]:
        """
        Decode ``[selector, param_word_count, param_word...]``.

        The count word is informational; the parameters are decoded from
        ``words[2:]`` against the matched function's inputs.
        """
        if len(words) < 2:
            raise TruncatedInputError(
                "call input needs a selector and a parameter count",
                context={"have": len(words)},
            )
        fn = self.function_by_selector(words[0])
        return fn, fn.decode_input_from_slice(words[2:])

    def encode_input_with_signature(self, signature: str, values: Sequence[Value]) -> List[int]:
        return self.function_by_signature(signature).encode_input(values)

    def encode_input_values(self, values: Sequence[Value]) -> List[int]:
        return encode_params(values)

    def decode_output_from_slice(self, signature: str, words: Sequence[int]) -> DecodedParams:
        return self.function_by_signature(signature).decode_output_from_slice(words)

    # ------------------------------------------------------------------- logs

    def decode_log_from_slice(
        self,
        topics: Sequence[FixedArray4Like],
        data: Sequence[int],
    ) -> Tuple[Event, DecodedParams]:
        """Find the event by topic0 and decode its inputs."""
        if not topics:
            raise TruncatedInputError("missing event topic")
        event = self.event_by_topic(topics[0])
        return event, event.decode_data_from_slice(topics, data)

    def decode_log_with_signature(
        self,
        signature: str,
        topics: Sequence[FixedArray4Like],
        data: Sequence[int],
    ) -> Tuple[Event, DecodedParams]:
        """Decode a log whose event is known up front (needed for anonymous events)."""
        event = self.event_by_signature(signature)
        return event, event.decode_data_from_slice(topics, data)

    # ----------------------------------------------------------------- errors

    def decode_error_from_slice(self, words: Sequence[int]) -> Tuple[ContractError, DecodedParams]:
        if len(words) < 2:
            raise TruncatedInputError(
                "error data needs a selector and a parameter count",
                context={"have": len(words)},
            )
        err = self.error_by_selector(words[0])
        return err, err.decode_from_slice(words[2:])

    # ---------------------------------------------------------- serialization

    @classmethod
    def from_description(cls, entries: Sequence[Any], *, validate: Optional[bool] = None) -> "Abi":
        from .description import abi_from_entries

        return abi_from_entries(entries, validate=validate)

    @classmethod
    def from_json(cls, src: Any, *, validate: Optional[bool] = None) -> "Abi":
        from .description import load_description

        return load_description(src, validate=validate)

    def to_description(self) -> List[Dict[str, Any]]:
        from .description import dump_description

        return dump_description(self)

    def to_json(self, *, indent: Optional[int] = None) -> str:
        from .description import dumps_description

        return dumps_description(self, indent=indent)
