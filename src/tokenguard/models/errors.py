"""Located parsing errors and their structured diagnostic form."""

from __future__ import annotations

from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class SourceLocation(BaseModel):
    """Points to a position in the parsed input (1-based line and column)."""

    model_config = ConfigDict(frozen=True)

    line: int
    column: int
    offset: int | None = None
    source: str | None = None

    def __str__(self) -> str:
        if self.source:
            return f"{self.source}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


class ParsingErrorKind(StrEnum):
    TOKEN_MISMATCH = "TOKEN_MISMATCH"
    FIELD_NAME_MISMATCH = "FIELD_NAME_MISMATCH"
    UNKNOWN_FIELD = "UNKNOWN_FIELD"
    MALFORMED_DOCUMENT = "MALFORMED_DOCUMENT"
    DOCUMENT_SAFETY = "DOCUMENT_SAFETY"


class ParsingDiagnostic(BaseModel):
    """Serializable form of a ``ParsingError``."""

    model_config = ConfigDict(frozen=True)

    code: ParsingErrorKind
    message: str
    location: SourceLocation | None = None


class ParsingError(Exception):
    """Base class for errors caused by the document being parsed.

    ``str(err)`` is the bare message; the location is kept separately so
    callers can render or serialize it as they see fit.
    """

    kind: ClassVar[ParsingErrorKind]

    def __init__(self, message: str, location: SourceLocation | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self) -> str:
        return self.message

    def describe(self) -> str:
        """Message prefixed with its location, for log lines and CLIs."""
        if self.location is None:
            return self.message
        return f"{self.location}: {self.message}"

    def to_diagnostic(self) -> ParsingDiagnostic:
        return ParsingDiagnostic(code=self.kind, message=self.message, location=self.location)


class TokenMismatchError(ParsingError):
    """Current token kind differs from the expected kind."""

    kind = ParsingErrorKind.TOKEN_MISMATCH


class FieldNameMismatchError(ParsingError):
    """Current token is a field name, but not the expected one."""

    kind = ParsingErrorKind.FIELD_NAME_MISMATCH


class UnknownFieldError(ParsingError):
    """A field the caller's schema does not recognize."""

    kind = ParsingErrorKind.UNKNOWN_FIELD


class MalformedDocumentError(ParsingError):
    kind = ParsingErrorKind.MALFORMED_DOCUMENT


class DocumentSafetyError(ParsingError):
    """Input rejected before parsing (oversized document, anchors/aliases)."""

    kind = ParsingErrorKind.DOCUMENT_SAFETY
