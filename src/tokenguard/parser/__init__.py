"""Token assertions and token-stream readers for tokenguard."""

from tokenguard.parser.reader import (
    load_model,
    read_array,
    read_field,
    read_model,
    read_object,
    read_value,
)
from tokenguard.parser.source import LocationProvider, TokenSource, TokenStream
from tokenguard.parser.validator import (
    ensure_field_name,
    ensure_field_name_equals,
    ensure_token_kind,
    report_unknown_field,
)
from tokenguard.parser.yaml_source import YamlTokenSource

__all__ = [
    "LocationProvider",
    "TokenSource",
    "TokenStream",
    "YamlTokenSource",
    "ensure_field_name",
    "ensure_field_name_equals",
    "ensure_token_kind",
    "load_model",
    "read_array",
    "read_field",
    "read_model",
    "read_object",
    "read_value",
    "report_unknown_field",
]
