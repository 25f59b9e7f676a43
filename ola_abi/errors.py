"""
ola_abi.errors — structured exceptions raised by the ABI codec.

Every failure surfaces as an ``AbiError`` subclass carrying:

    code:    short machine-readable code string
    message: human-readable message
    context: optional extra fields (offsets, type names, signatures)

Each subclass also derives from the closest builtin exception so callers
that only catch ``ValueError`` / ``LookupError`` / ``TypeError`` keep working.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class AbiError(Exception):
    """
    Base error for the ABI codec.

    Call patterns:

        AbiError("simple message")
        AbiError("message", code="some_code", context={...})
    """

    default_code = "abi_error"

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code: str = str(code) if code is not None else self.default_code
        self.message: str = str(message)
        self.context: Dict[str, Any] = dict(context) if context else {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class DescriptionError(AbiError, ValueError):
    """Malformed contract description (bad JSON, unknown entry/type, missing name)."""

    default_code = "description_error"


class AbiLookupError(AbiError, LookupError):
    """No function, event or error matches a selector, signature or topic."""

    default_code = "not_found"


class TruncatedInputError(AbiError, ValueError):
    """Word stream (or topic list) is shorter than the decoded type requires."""

    default_code = "truncated_input"


class EncodingError(AbiError, ValueError):
    """Words collected for a string are not valid UTF-8 bytes."""

    default_code = "encoding_error"


class StructuralMismatchError(AbiError, TypeError):
    """A value's runtime shape does not match the type it is checked against."""

    default_code = "structural_mismatch"


class NestingDepthError(StructuralMismatchError):
    """Type nesting exceeds the configured depth cap."""

    default_code = "nesting_too_deep"


class LimitExceededError(AbiError, ValueError):
    """A decoded length exceeds a configured resource cap."""

    default_code = "limit_exceeded"


__all__ = [
    "AbiError",
    "DescriptionError",
    "AbiLookupError",
    "TruncatedInputError",
    "EncodingError",
    "StructuralMismatchError",
    "NestingDepthError",
    "LimitExceededError",
]
