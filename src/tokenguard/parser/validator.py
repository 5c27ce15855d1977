"""Assertions on the current token, raising located ``ParsingError``s.

Every function here is a stateless predicate-or-raise. Location providers are
only called on the failure path, so the success path never pays for
computing a source location.
"""

from __future__ import annotations

from typing import NoReturn

from tokenguard.models.errors import (
    FieldNameMismatchError,
    SourceLocation,
    TokenMismatchError,
    UnknownFieldError,
)
from tokenguard.models.tokens import TokenKind
from tokenguard.parser.source import LocationProvider, TokenSource

_NULL_NAME = "<null>"


def ensure_token_kind(
    expected: TokenKind, current: TokenKind | None, location: LocationProvider
) -> TokenKind:
    """Return ``current`` if it is ``expected``, else raise ``TokenMismatchError``."""
    if current != expected:
        raise TokenMismatchError(
            f"expecting token of type [{expected}] but found [{current}]",
            location(),
        )
    return current


def ensure_field_name(token: TokenKind | None, location: LocationProvider) -> TokenKind:
    """Make sure ``token`` is a FIELD_NAME."""
    return ensure_token_kind(TokenKind.FIELD_NAME, token, location)


def ensure_field_name_equals(
    source: TokenSource, token: TokenKind | None, expected_name: str
) -> TokenKind:
    """Make sure ``token`` is a FIELD_NAME and the source's current name is ``expected_name``.

    The kind check and the name check request the location independently.
    """
    if not expected_name:
        raise ValueError("expected_name must be a non-empty string")
    checked = ensure_field_name(token, source.token_location)

    current = source.current_name()
    if current is None:
        current = _NULL_NAME
    if current != expected_name:
        raise FieldNameMismatchError(
            f"expecting field with name [{expected_name}] but found [{current}]",
            source.token_location(),
        )
    return checked


def report_unknown_field(field_name: str, location: SourceLocation) -> NoReturn:
    """Raise ``UnknownFieldError`` for a field outside the caller's schema."""
    raise UnknownFieldError(f"unknown field [{field_name}] found", location)
