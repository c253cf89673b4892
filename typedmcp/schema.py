"""Schema reflection: derive a JSON-Schema-like tree from a Python type."""

import collections.abc
import dataclasses
import typing
from typing import Any, Literal, get_args, get_origin

from pydantic import BaseModel

SchemaType = Literal["string", "boolean", "integer", "number", "array", "object"]

# Container origins rendered as JSON arrays
_SEQUENCE_TYPES = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
)


class Schema(BaseModel):
    """A node of a derived schema tree."""

    type: SchemaType = "object"
    properties: dict[str, "Schema"] | None = None
    items: "Schema | None" = None

    def to_dict(self) -> dict[str, Any]:
        """Wire form with absent members omitted."""
        return self.model_dump(exclude_none=True)


def derive(tp: Any) -> Schema:
    """
    Derive a schema tree from a type annotation.

    Never fails: kinds that carry no usable structure (dicts, unions, Any,
    arbitrary classes) degrade to a bare ``object`` schema.
    """
    return _derive(tp, frozenset())


def _derive(tp: Any, seen: frozenset[type]) -> Schema:
    origin = get_origin(tp)

    if origin is typing.Annotated:
        return _derive(get_args(tp)[0], seen)

    if origin is not None:
        if origin in _SEQUENCE_TYPES:
            args = [arg for arg in get_args(tp) if arg is not Ellipsis]
            item = args[0] if args else Any
            return Schema(type="array", items=_derive(item, seen))
        return Schema(type="object")

    if not isinstance(tp, type):
        return Schema(type="object")

    # bool is an int subclass, so it goes first
    if issubclass(tp, bool):
        return Schema(type="boolean")
    if issubclass(tp, int):
        return Schema(type="integer")
    if issubclass(tp, float):
        return Schema(type="number")
    if issubclass(tp, str):
        return Schema(type="string")
    if tp in _SEQUENCE_TYPES:
        return Schema(type="array", items=Schema(type="object"))

    fields = _record_fields(tp)
    if fields is None or tp in seen:
        return Schema(type="object")

    properties = {
        name: _derive(field_type, seen | {tp})
        for name, field_type in fields.items()
        if not name.startswith("_")
    }
    return Schema(type="object", properties=properties or None)


def _record_fields(tp: type) -> dict[str, Any] | None:
    """Return field name -> annotation for record-like classes, else None."""
    if issubclass(tp, BaseModel):
        return {name: info.annotation for name, info in tp.model_fields.items()}

    if dataclasses.is_dataclass(tp):
        hints = _type_hints(tp)
        return {
            field.name: hints.get(field.name, field.type)
            for field in dataclasses.fields(tp)
        }

    if typing.is_typeddict(tp):
        return _type_hints(tp)

    # NamedTuple
    if issubclass(tp, tuple) and hasattr(tp, "_fields"):
        hints = _type_hints(tp)
        return {name: hints.get(name, Any) for name in tp._fields}

    return None


def _type_hints(tp: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(tp)
    except (NameError, TypeError):
        # Unresolvable forward references
        return dict(getattr(tp, "__annotations__", {}))
