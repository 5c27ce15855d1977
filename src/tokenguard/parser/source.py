"""Protocols for the token sources consumed by the validator and reader."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from tokenguard.models.errors import SourceLocation
from tokenguard.models.tokens import TokenKind

LocationProvider = Callable[[], SourceLocation]


class TokenSource(Protocol):
    """Read-only view of a tokenizer positioned on its current token."""

    def current_token(self) -> TokenKind | None: ...

    def current_name(self) -> str | None:
        """Field name associated with the current token, if any."""
        ...

    def token_location(self) -> SourceLocation:
        """Location of the current token. May be costly; call on demand."""
        ...


class TokenStream(TokenSource, Protocol):
    """A token source that can be advanced."""

    def next_token(self) -> TokenKind: ...

    def scalar_value(self) -> Any:
        """Python value of the current scalar token."""
        ...

    def skip_children(self) -> None:
        """On START_OBJECT/START_ARRAY, advance to the matching end token."""
        ...
