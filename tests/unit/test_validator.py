"""Tests for token kind and field name assertions."""

from __future__ import annotations

import pytest

from tests.conftest import CountingLocation, StubTokenSource
from tokenguard.models.errors import (
    FieldNameMismatchError,
    ParsingErrorKind,
    SourceLocation,
    TokenMismatchError,
    UnknownFieldError,
)
from tokenguard.models.tokens import TokenKind
from tokenguard.parser.validator import (
    ensure_field_name,
    ensure_field_name_equals,
    ensure_token_kind,
    report_unknown_field,
)


class TestEnsureTokenKind:
    @pytest.mark.parametrize("kind", list(TokenKind))
    def test_matching_kind_returned(self, kind: TokenKind) -> None:
        location = CountingLocation()
        assert ensure_token_kind(kind, kind, location) is kind
        assert location.calls == 0

    @pytest.mark.parametrize(
        ("expected", "current"),
        [
            (TokenKind.START_OBJECT, TokenKind.START_ARRAY),
            (TokenKind.FIELD_NAME, TokenKind.VALUE_STRING),
            (TokenKind.END_OBJECT, TokenKind.END_OF_STREAM),
            (TokenKind.VALUE_NUMBER, TokenKind.VALUE_NULL),
        ],
    )
    def test_mismatch_message(self, expected: TokenKind, current: TokenKind) -> None:
        location = CountingLocation()
        with pytest.raises(TokenMismatchError) as exc_info:
            ensure_token_kind(expected, current, location)
        err = exc_info.value
        assert err.message == f"expecting token of type [{expected}] but found [{current}]"
        assert str(err) == err.message
        assert err.kind is ParsingErrorKind.TOKEN_MISMATCH
        assert err.location == location.location
        assert location.calls == 1

    def test_renders_display_names(self, counting_location: CountingLocation) -> None:
        with pytest.raises(
            TokenMismatchError,
            match=r"^expecting token of type \[START_OBJECT\] but found \[END_ARRAY\]$",
        ):
            ensure_token_kind(TokenKind.START_OBJECT, TokenKind.END_ARRAY, counting_location)

    def test_repeated_failures_identical(self) -> None:
        messages = []
        for _ in range(2):
            with pytest.raises(TokenMismatchError) as exc_info:
                ensure_token_kind(TokenKind.END_OBJECT, TokenKind.FIELD_NAME, CountingLocation())
            messages.append((exc_info.value.message, exc_info.value.location))
        assert messages[0] == messages[1]


class TestEnsureFieldName:
    def test_field_name_passes(self, counting_location: CountingLocation) -> None:
        assert ensure_field_name(TokenKind.FIELD_NAME, counting_location) is TokenKind.FIELD_NAME
        assert ensure_field_name(TokenKind.FIELD_NAME, counting_location) is TokenKind.FIELD_NAME
        assert counting_location.calls == 0

    def test_other_kind_rejected(self, counting_location: CountingLocation) -> None:
        with pytest.raises(TokenMismatchError, match=r"type \[FIELD_NAME\] but found \[START_OBJECT\]"):
            ensure_field_name(TokenKind.START_OBJECT, counting_location)
        assert counting_location.calls == 1

    def test_missing_token_rejected(self, counting_location: CountingLocation) -> None:
        with pytest.raises(TokenMismatchError, match=r"\[FIELD_NAME\]"):
            ensure_field_name(None, counting_location)


class TestEnsureFieldNameEquals:
    def test_matching_name(self) -> None:
        source = StubTokenSource(TokenKind.FIELD_NAME, "a")
        assert ensure_field_name_equals(source, TokenKind.FIELD_NAME, "a") is TokenKind.FIELD_NAME
        assert source.location_calls == 0

    def test_different_name(self) -> None:
        source = StubTokenSource(TokenKind.FIELD_NAME, "a")
        with pytest.raises(FieldNameMismatchError) as exc_info:
            ensure_field_name_equals(source, TokenKind.FIELD_NAME, "b")
        err = exc_info.value
        assert err.message == "expecting field with name [b] but found [a]"
        assert err.kind is ParsingErrorKind.FIELD_NAME_MISMATCH
        assert err.location == SourceLocation(line=1, column=1, source="stub.yaml")

    def test_comparison_is_case_sensitive(self) -> None:
        source = StubTokenSource(TokenKind.FIELD_NAME, "Name")
        with pytest.raises(FieldNameMismatchError, match=r"\[name\] but found \[Name\]"):
            ensure_field_name_equals(source, TokenKind.FIELD_NAME, "name")

    def test_absent_name_rendered_as_null(self) -> None:
        source = StubTokenSource(TokenKind.FIELD_NAME, None)
        with pytest.raises(FieldNameMismatchError) as exc_info:
            ensure_field_name_equals(source, TokenKind.FIELD_NAME, "b")
        assert exc_info.value.message == "expecting field with name [b] but found [<null>]"

    def test_kind_checked_before_name(self) -> None:
        source = StubTokenSource(TokenKind.VALUE_STRING, "a")
        with pytest.raises(TokenMismatchError) as exc_info:
            ensure_field_name_equals(source, TokenKind.VALUE_STRING, "a")
        assert exc_info.value.message == (
            "expecting token of type [FIELD_NAME] but found [VALUE_STRING]"
        )
        assert source.location_calls == 1

    def test_name_failure_requests_location_once(self) -> None:
        source = StubTokenSource(TokenKind.FIELD_NAME, "a")
        with pytest.raises(FieldNameMismatchError):
            ensure_field_name_equals(source, TokenKind.FIELD_NAME, "b")
        assert source.location_calls == 1

    def test_empty_expected_name_rejected(self) -> None:
        source = StubTokenSource(TokenKind.FIELD_NAME, "")
        with pytest.raises(ValueError, match="non-empty"):
            ensure_field_name_equals(source, TokenKind.FIELD_NAME, "")


class TestReportUnknownField:
    def test_always_raises(self) -> None:
        location = SourceLocation(line=4, column=2, source="model.yaml")
        with pytest.raises(UnknownFieldError) as exc_info:
            report_unknown_field("x", location)
        err = exc_info.value
        assert err.message == "unknown field [x] found"
        assert err.kind is ParsingErrorKind.UNKNOWN_FIELD
        assert err.location is location

    def test_describe_includes_location(self) -> None:
        location = SourceLocation(line=4, column=2, source="model.yaml")
        with pytest.raises(UnknownFieldError) as exc_info:
            report_unknown_field("colour", location)
        assert exc_info.value.describe() == "model.yaml:4:2: unknown field [colour] found"
