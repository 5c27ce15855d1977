"""Token stream over a YAML document, built on ruamel.yaml parse events."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import MarkedYAMLError, YAMLError
from ruamel.yaml.events import (
    AliasEvent,
    Event,
    MappingEndEvent,
    MappingStartEvent,
    ScalarEvent,
    SequenceEndEvent,
    SequenceStartEvent,
    StreamEndEvent,
)

from tokenguard.models.errors import (
    DocumentSafetyError,
    MalformedDocumentError,
    SourceLocation,
    TokenMismatchError,
)
from tokenguard.models.tokens import TokenKind
from tokenguard.settings import Settings, get_settings

logger = logging.getLogger("tokenguard.parser")

# Regex to detect YAML anchor definitions (&name).
# Matches & at line start or after whitespace/sequence indicators, followed by
# an anchor name, but NOT inside quoted strings (good-enough heuristic).
_ANCHOR_RE = re.compile(r"(?:^|[\s\-:])&(\w+)", re.MULTILINE)

# YAML 1.2 core schema, applied to plain scalars only.
_NULL_RE = re.compile(r"^(?:~|null|Null|NULL)?$")
_BOOL_RE = re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$")
_INT_RE = re.compile(r"^[-+]?[0-9]+$")
_OCT_RE = re.compile(r"^0o[0-7]+$")
_HEX_RE = re.compile(r"^0x[0-9a-fA-F]+$")
_FLOAT_RE = re.compile(r"^[-+]?(?:\.[0-9]+|[0-9]+(?:\.[0-9]*)?)(?:[eE][-+]?[0-9]+)?$")
_INF_RE = re.compile(r"^([-+]?)\.(?:inf|Inf|INF)$")
_NAN_RE = re.compile(r"^\.(?:nan|NaN|NAN)$")


def resolve_scalar(event: ScalarEvent) -> tuple[TokenKind, Any]:
    """Map a scalar event to its token kind and Python value."""
    text = event.value
    plain = event.style is None and event.implicit[0]
    if not plain:
        return TokenKind.VALUE_STRING, text
    if _NULL_RE.match(text):
        return TokenKind.VALUE_NULL, None
    if _BOOL_RE.match(text):
        return TokenKind.VALUE_BOOLEAN, text.lower() == "true"
    if _INT_RE.match(text):
        return TokenKind.VALUE_NUMBER, int(text, 10)
    if _OCT_RE.match(text):
        return TokenKind.VALUE_NUMBER, int(text[2:], 8)
    if _HEX_RE.match(text):
        return TokenKind.VALUE_NUMBER, int(text[2:], 16)
    if _FLOAT_RE.match(text):
        return TokenKind.VALUE_NUMBER, float(text)
    inf = _INF_RE.match(text)
    if inf:
        return TokenKind.VALUE_NUMBER, -math.inf if inf.group(1) == "-" else math.inf
    if _NAN_RE.match(text):
        return TokenKind.VALUE_NUMBER, math.nan
    return TokenKind.VALUE_STRING, text


@dataclass
class _Frame:
    """An open mapping or sequence."""

    container: TokenKind
    name: str | None = None
    expect_key: bool = True

    @property
    def is_object(self) -> bool:
        return self.container is TokenKind.START_OBJECT


class YamlTokenSource:
    """Streams tokens from a YAML document.

    Field names are tracked the way streaming JSON parsers do: on a value or
    on the start of a nested container, ``current_name()`` is the owning
    field; after the container closes it is the enclosing field again.
    Locations are only materialized when ``token_location()`` is called.
    """

    def __init__(
        self,
        content: str,
        source: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._check_yaml_safety(content, self._settings.max_document_size)
        self._source = source
        self._events = YAML().parse(content)
        self._stack: list[_Frame] = []
        self._event: Event | None = None
        self._token: TokenKind | None = None
        self._name: str | None = None
        self._value: Any = None
        logger.debug("Opened YAML token source %s (%d chars)", source or "<string>", len(content))

    @classmethod
    def from_path(cls, path: Path, settings: Settings | None = None) -> YamlTokenSource:
        """Open a YAML file as a token stream."""
        with path.open("r", encoding="utf-8") as handle:
            content = handle.read()
        return cls(content, source=str(path), settings=settings)

    # -- safety checks -------------------------------------------------------

    @staticmethod
    def _check_yaml_safety(content: str, max_size: int) -> None:
        """Pre-parse safety checks on raw YAML text."""
        if len(content) > max_size:
            raise DocumentSafetyError(
                f"YAML document exceeds maximum size "
                f"({len(content):,} chars > {max_size:,} limit)"
            )
        if _ANCHOR_RE.search(content):
            raise DocumentSafetyError("YAML anchors/aliases are not supported")

    # -- TokenSource ---------------------------------------------------------

    def current_token(self) -> TokenKind | None:
        return self._token

    def current_name(self) -> str | None:
        return self._name

    def token_location(self) -> SourceLocation:
        if self._event is None or self._event.start_mark is None:
            return SourceLocation(line=1, column=1, offset=0, source=self._source)
        return self._mark_location(self._event.start_mark)

    # -- TokenStream ---------------------------------------------------------

    def next_token(self) -> TokenKind:
        if self._token is TokenKind.END_OF_STREAM:
            return self._token
        while True:
            event = self._next_event()
            token = self._handle(event) if event is not None else TokenKind.END_OF_STREAM
            if token is not None:
                self._event = event
                self._token = token
                return token

    def scalar_value(self) -> Any:
        if self._token is TokenKind.FIELD_NAME:
            return self._name
        if self._token is None or not self._token.is_scalar:
            raise TokenMismatchError(
                f"expecting a scalar value but found [{self._token}]",
                self.token_location(),
            )
        return self._value

    def skip_children(self) -> None:
        if self._token not in (TokenKind.START_OBJECT, TokenKind.START_ARRAY):
            return
        depth = 1
        while depth:
            token = self.next_token()
            if token in (TokenKind.START_OBJECT, TokenKind.START_ARRAY):
                depth += 1
            elif token in (TokenKind.END_OBJECT, TokenKind.END_ARRAY):
                depth -= 1
            elif token is TokenKind.END_OF_STREAM:
                return

    # -- event handling ------------------------------------------------------

    def _next_event(self) -> Event | None:
        try:
            return next(self._events)
        except StopIteration:
            return None
        except MarkedYAMLError as exc:
            location = self._mark_location(exc.problem_mark) if exc.problem_mark else None
            raise MalformedDocumentError(exc.problem or str(exc), location) from exc
        except YAMLError as exc:
            raise MalformedDocumentError(str(exc)) from exc

    def _handle(self, event: Event) -> TokenKind | None:
        parent = self._stack[-1] if self._stack else None

        if isinstance(event, (MappingStartEvent, SequenceStartEvent)):
            if parent is not None and parent.is_object and parent.expect_key:
                raise MalformedDocumentError(
                    "complex mapping keys are not supported",
                    self._mark_location(event.start_mark),
                )
            if len(self._stack) >= self._settings.max_depth:
                raise DocumentSafetyError(
                    f"YAML document exceeds maximum nesting depth ({self._settings.max_depth})",
                    self._mark_location(event.start_mark),
                )
            kind = (
                TokenKind.START_OBJECT
                if isinstance(event, MappingStartEvent)
                else TokenKind.START_ARRAY
            )
            self._name = self._enter_value(parent)
            self._stack.append(_Frame(kind))
            return kind

        if isinstance(event, (MappingEndEvent, SequenceEndEvent)):
            self._stack.pop()
            parent = self._stack[-1] if self._stack else None
            self._name = parent.name if parent is not None and parent.is_object else None
            if isinstance(event, MappingEndEvent):
                return TokenKind.END_OBJECT
            return TokenKind.END_ARRAY

        if isinstance(event, ScalarEvent):
            if parent is not None and parent.is_object and parent.expect_key:
                parent.name = event.value
                parent.expect_key = False
                self._name = event.value
                return TokenKind.FIELD_NAME
            self._name = self._enter_value(parent)
            kind, self._value = resolve_scalar(event)
            return kind

        if isinstance(event, AliasEvent):
            raise MalformedDocumentError(
                "YAML aliases are not supported", self._mark_location(event.start_mark)
            )

        if isinstance(event, StreamEndEvent):
            self._name = None
            return TokenKind.END_OF_STREAM

        # Stream/document start, document end: transparent.
        return None

    @staticmethod
    def _enter_value(parent: _Frame | None) -> str | None:
        """Consume the pending value slot of ``parent``; return the owning field name."""
        if parent is None or not parent.is_object:
            return None
        parent.expect_key = True
        return parent.name

    def _mark_location(self, mark: Any) -> SourceLocation:
        return SourceLocation(
            line=mark.line + 1,
            column=mark.column + 1,
            offset=getattr(mark, "index", None),
            source=self._source,
        )
