"""Lexical token kinds produced by structured-content tokenizers."""

from __future__ import annotations

from enum import StrEnum


class TokenKind(StrEnum):
    FIELD_NAME = "FIELD_NAME"
    START_OBJECT = "START_OBJECT"
    END_OBJECT = "END_OBJECT"
    START_ARRAY = "START_ARRAY"
    END_ARRAY = "END_ARRAY"
    VALUE_STRING = "VALUE_STRING"
    VALUE_NUMBER = "VALUE_NUMBER"
    VALUE_BOOLEAN = "VALUE_BOOLEAN"
    VALUE_NULL = "VALUE_NULL"
    END_OF_STREAM = "END_OF_STREAM"

    @property
    def is_scalar(self) -> bool:
        return self in _SCALAR_KINDS


_SCALAR_KINDS = frozenset(
    {
        TokenKind.VALUE_STRING,
        TokenKind.VALUE_NUMBER,
        TokenKind.VALUE_BOOLEAN,
        TokenKind.VALUE_NULL,
    }
)
