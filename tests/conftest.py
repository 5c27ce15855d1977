"""Shared test fixtures for tokenguard."""

from __future__ import annotations

import pytest

from tokenguard.models.errors import SourceLocation
from tokenguard.models.tokens import TokenKind
from tokenguard.parser.yaml_source import YamlTokenSource
from tokenguard.settings import Settings

SAMPLE_YAML = """\
name: orders
version: 2
enabled: true
owner: ~
ratio: 0.25
tags:
  - sales
  - "42"
source:
  database: WAREHOUSE
  schema: PUBLIC
"""


class CountingLocation:
    """Location provider that records how often it was called."""

    def __init__(self, location: SourceLocation | None = None) -> None:
        self.location = location or SourceLocation(line=3, column=7, offset=21)
        self.calls = 0

    def __call__(self) -> SourceLocation:
        self.calls += 1
        return self.location


class StubTokenSource:
    """Fixed token source; counts location requests."""

    def __init__(self, token: TokenKind | None, name: str | None) -> None:
        self.token = token
        self.name = name
        self.location_calls = 0

    def current_token(self) -> TokenKind | None:
        return self.token

    def current_name(self) -> str | None:
        return self.name

    def token_location(self) -> SourceLocation:
        self.location_calls += 1
        return SourceLocation(line=1, column=self.location_calls, source="stub.yaml")


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def counting_location() -> CountingLocation:
    return CountingLocation()


@pytest.fixture
def sample_source(settings: Settings) -> YamlTokenSource:
    return YamlTokenSource(SAMPLE_YAML, source="sample.yaml", settings=settings)
