"""Deserialize token streams into plain values and pydantic models.

These are the usual consumers of the validator: they walk an object's fields,
assert the expected token shapes, and report fields the target schema does
not know about.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Mapping, MutableMapping, MutableSequence, Sequence
from types import UnionType
from typing import Annotated, Any, TypeVar, Union, get_args, get_origin

from pydantic import AliasChoices, AliasPath, BaseModel
from pydantic.fields import FieldInfo

from tokenguard.models.errors import MalformedDocumentError
from tokenguard.models.tokens import TokenKind
from tokenguard.parser.source import TokenStream
from tokenguard.parser.validator import (
    ensure_field_name,
    ensure_field_name_equals,
    ensure_token_kind,
    report_unknown_field,
)
from tokenguard.parser.yaml_source import YamlTokenSource
from tokenguard.settings import Settings, get_settings

logger = logging.getLogger("tokenguard.parser")

ModelT = TypeVar("ModelT", bound=BaseModel)

_SEQUENCE_ORIGINS = frozenset({list, tuple, set, frozenset, Sequence, MutableSequence})
_MAPPING_ORIGINS = frozenset({dict, Mapping, MutableMapping})


def read_value(stream: TokenStream) -> Any:
    """Read the value starting at the current token."""
    token = stream.current_token()
    if token is TokenKind.START_OBJECT:
        return read_object(stream, ignore_unknown_fields=True)
    if token is TokenKind.START_ARRAY:
        return read_array(stream)
    return stream.scalar_value()


def read_array(stream: TokenStream) -> list[Any]:
    ensure_token_kind(TokenKind.START_ARRAY, stream.current_token(), stream.token_location)
    items: list[Any] = []
    while stream.next_token() is not TokenKind.END_ARRAY:
        items.append(read_value(stream))
    return items


def read_object(
    stream: TokenStream,
    known_fields: Collection[str] | None = None,
    *,
    ignore_unknown_fields: bool | None = None,
) -> dict[str, Any]:
    """Read the object starting at the current token into a dict.

    When ``known_fields`` is given, any other field raises ``UnknownFieldError``
    unless unknown fields are ignored, in which case their values are skipped.
    A field repeated within the same object raises ``MalformedDocumentError``.
    """
    if ignore_unknown_fields is None:
        ignore_unknown_fields = get_settings().ignore_unknown_fields
    return _read_members(stream, known_fields, ignore_unknown_fields, _read_member_value)


def _read_member_value(stream: TokenStream, name: str) -> Any:
    return read_value(stream)


def _read_members(
    stream: TokenStream,
    known_fields: Collection[str] | None,
    ignore_unknown_fields: bool,
    read_member: Callable[[TokenStream, str], Any],
) -> dict[str, Any]:
    ensure_token_kind(TokenKind.START_OBJECT, stream.current_token(), stream.token_location)

    result: dict[str, Any] = {}
    seen: set[str] = set()
    token = stream.next_token()
    while token is not TokenKind.END_OBJECT:
        ensure_field_name(token, stream.token_location)
        name = stream.current_name() or ""
        if name in seen:
            raise MalformedDocumentError(
                f"duplicate field [{name}] found", stream.token_location()
            )
        seen.add(name)
        if known_fields is not None and name not in known_fields:
            if not ignore_unknown_fields:
                logger.debug("Rejecting unknown field %r", name)
                report_unknown_field(name, stream.token_location())
            logger.debug("Skipping unknown field %r", name)
            stream.next_token()
            stream.skip_children()
        else:
            stream.next_token()
            result[name] = read_member(stream, name)
        token = stream.next_token()
    return result


def read_field(stream: TokenStream, name: str) -> Any:
    """Advance to the field ``name`` and return its value.

    For formats with a fixed field order, e.g. a ``{"type": ..., "body": ...}``
    envelope.
    """
    ensure_field_name_equals(stream, stream.next_token(), name)
    stream.next_token()
    return read_value(stream)


# -- pydantic models ---------------------------------------------------------


def _validation_keys(info: FieldInfo) -> list[str]:
    """Top-level input keys an aliased field is validated from."""
    alias = info.validation_alias if info.validation_alias is not None else info.alias
    if alias is None:
        return []
    choices = alias.choices if isinstance(alias, AliasChoices) else [alias]
    keys: list[str] = []
    for choice in choices:
        if isinstance(choice, AliasPath):
            if choice.path and isinstance(choice.path[0], str):
                keys.append(choice.path[0])
        else:
            keys.append(choice)
    return keys


def _field_index(model_cls: type[BaseModel]) -> dict[str, FieldInfo | None]:
    """Map each input key ``model_validate`` accepts to the field it populates.

    Keys reached through an ``AliasPath`` map to ``None``: their value is not
    the field's own value, so it is read without a schema.
    """
    config = model_cls.model_config
    by_name = bool(config.get("populate_by_name") or config.get("validate_by_name"))
    index: dict[str, FieldInfo | None] = {}
    for field_name, info in model_cls.model_fields.items():
        keys = _validation_keys(info)
        path_keys = _path_keys(info)
        for key in keys:
            index[key] = None if key in path_keys else info
        if not keys or by_name:
            index[field_name] = info
    return index


def _path_keys(info: FieldInfo) -> set[str]:
    alias = info.validation_alias
    choices = alias.choices if isinstance(alias, AliasChoices) else [alias]
    return {
        choice.path[0]
        for choice in choices
        if isinstance(choice, AliasPath) and choice.path and isinstance(choice.path[0], str)
    }


def model_field_names(model_cls: type[BaseModel]) -> frozenset[str]:
    """Input keys accepted by ``model_cls.model_validate``."""
    return frozenset(_field_index(model_cls))


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Annotated:
        return _unwrap_optional(get_args(annotation)[0])
    if origin is Union or origin is UnionType:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return _unwrap_optional(members[0])
    return annotation


def _as_model(annotation: Any) -> type[BaseModel] | None:
    annotation = _unwrap_optional(annotation)
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    return None


def _read_typed(stream: TokenStream, annotation: Any, ignore_unknown_fields: bool) -> Any:
    """Read a value, checking nested objects against the models in ``annotation``."""
    token = stream.current_token()
    annotation = _unwrap_optional(annotation)

    model_cls = _as_model(annotation)
    if model_cls is not None and token is TokenKind.START_OBJECT:
        return _read_model_data(stream, model_cls, ignore_unknown_fields)

    origin = get_origin(annotation)
    args = get_args(annotation)
    if token is TokenKind.START_ARRAY and origin in _SEQUENCE_ORIGINS and args:
        item_annotation = args[0]
        items: list[Any] = []
        while stream.next_token() is not TokenKind.END_ARRAY:
            items.append(_read_typed(stream, item_annotation, ignore_unknown_fields))
        return items
    if token is TokenKind.START_OBJECT and origin in _MAPPING_ORIGINS and len(args) == 2:
        value_annotation = args[1]
        return _read_members(
            stream,
            None,
            ignore_unknown_fields,
            lambda inner, _name: _read_typed(inner, value_annotation, ignore_unknown_fields),
        )
    return read_value(stream)


def _read_model_data(
    stream: TokenStream, model_cls: type[BaseModel], ignore_unknown_fields: bool
) -> dict[str, Any]:
    index = _field_index(model_cls)
    known_fields = None if model_cls.model_config.get("extra") == "allow" else index

    def read_member(inner: TokenStream, name: str) -> Any:
        info = index.get(name)
        if info is None:
            return read_value(inner)
        return _read_typed(inner, info.annotation, ignore_unknown_fields)

    return _read_members(stream, known_fields, ignore_unknown_fields, read_member)


def read_model(
    stream: TokenStream,
    model_cls: type[ModelT],
    *,
    ignore_unknown_fields: bool | None = None,
) -> ModelT:
    """Read the object at the current token and validate it as ``model_cls``.

    Fields typed as nested models (directly, optionally, or as items of a
    list or values of a dict) are checked against that model's fields too.
    """
    if ignore_unknown_fields is None:
        ignore_unknown_fields = get_settings().ignore_unknown_fields
    data = _read_model_data(stream, model_cls, ignore_unknown_fields)
    return model_cls.model_validate(data)


def load_model(
    content: str,
    model_cls: type[ModelT],
    *,
    source: str | None = None,
    settings: Settings | None = None,
) -> ModelT:
    """Parse a YAML document whose root object is a ``model_cls``."""
    settings = settings or get_settings()
    stream = YamlTokenSource(content, source=source, settings=settings)
    stream.next_token()
    return read_model(
        stream, model_cls, ignore_unknown_fields=settings.ignore_unknown_fields
    )
