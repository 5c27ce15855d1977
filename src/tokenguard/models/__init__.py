"""Token kinds and located error types for tokenguard."""

from tokenguard.models.errors import (
    DocumentSafetyError,
    FieldNameMismatchError,
    MalformedDocumentError,
    ParsingDiagnostic,
    ParsingError,
    ParsingErrorKind,
    SourceLocation,
    TokenMismatchError,
    UnknownFieldError,
)
from tokenguard.models.tokens import TokenKind

__all__ = [
    "DocumentSafetyError",
    "FieldNameMismatchError",
    "MalformedDocumentError",
    "ParsingDiagnostic",
    "ParsingError",
    "ParsingErrorKind",
    "SourceLocation",
    "TokenKind",
    "TokenMismatchError",
    "UnknownFieldError",
]
