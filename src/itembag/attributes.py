# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Attribute schema for ItemBag entities.

Entity fields are declared with ``Annotated`` metadata describing how they
map to XML:

    XmlAttr: a scalar attribute (int or str) with an optional omit predicate
    XmlChild: a singleton child element
    XmlChildren: an ordered list of child elements

Example:
    >>> @dataclass
    ... class Drop:
    ...     xml_tag = 'Drop'
    ...     rate: Annotated[int, XmlAttr('Rate')] = 10000
    ...     items: Annotated[list[DropItem], XmlChildren(DropItem)] = field(default_factory=list)

The schema of a class is computed once from its type hints and cached.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Any, get_args, get_origin, get_type_hints

# Optional whitespace, optional sign, ASCII digits only
_INT_PATTERN = re.compile(r'\s*[+-]?[0-9]+\s*', re.ASCII)

# Range of the server's 32-bit signed integers
INT_MIN = -2**31
INT_MAX = 2**31 - 1


# --- Omit predicates ---


def omit_not_positive(value: int, owner: Any) -> bool:
    """Omit integer attributes that are zero or negative."""
    return value <= 0


def omit_empty(value: str, owner: Any) -> bool:
    """Omit empty strings."""
    return value == ''


def omit_empty_or_zero(value: str, owner: Any) -> bool:
    """Omit empty strings and the literal ``"0"``."""
    return value in ('', '0')


# --- Field metadata ---


@dataclass(frozen=True)
class XmlAttr:
    """Scalar XML attribute.

    Args:
        name: Attribute name in the XML document.
        omit: Predicate ``(value, owner) -> bool``; when it returns True the
            attribute is not written. None means always written.
        write: If False the attribute is decoded but never encoded.
    """

    name: str
    omit: Callable[[Any, Any], bool] | None = None
    write: bool = True


@dataclass(frozen=True)
class XmlChild:
    """Singleton child element, always present in the model."""

    cls: type


@dataclass(frozen=True)
class XmlChildren:
    """Ordered list of child elements."""

    cls: type


@dataclass(frozen=True)
class AttrSpec:
    """Resolved description of one scalar attribute of an entity."""

    field: str
    xml_name: str
    type: type
    default: Any
    omit: Callable[[Any, Any], bool] | None
    write: bool

    def should_write(self, value: Any, owner: Any) -> bool:
        if not self.write:
            return False
        return self.omit is None or not self.omit(value, owner)


@dataclass(frozen=True)
class ChildSpec:
    """Resolved description of a child element (singleton or list)."""

    field: str
    xml_tag: str
    cls: type
    many: bool


@dataclass(frozen=True)
class EntitySchema:
    """Attribute and child layout of an entity class, in declaration order."""

    tag: str
    attrs: tuple[AttrSpec, ...]
    children: tuple[ChildSpec, ...]

    def attr(self, field: str) -> AttrSpec | None:
        return next((a for a in self.attrs if a.field == field), None)

    def child_by_tag(self, tag: str) -> ChildSpec | None:
        return next((c for c in self.children if c.xml_tag == tag), None)


_SCHEMA_CACHE: dict[type, EntitySchema] = {}


def split_annotated(tp: Any) -> tuple[Any, list]:
    """Split an Annotated type into base type and metadata list."""
    if get_origin(tp) is Annotated:
        base, *meta = get_args(tp)
        return base, meta
    return tp, []


def schema_of(cls: type) -> EntitySchema:
    """Return the (cached) EntitySchema of a dataclass entity.

    Raises:
        TypeError: If cls is not a dataclass, has no ``xml_tag``, or declares
            an XmlAttr on a type other than int or str.
    """
    cached = _SCHEMA_CACHE.get(cls)
    if cached is not None:
        return cached

    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"{cls.__name__} is not a dataclass")
    tag = getattr(cls, 'xml_tag', None)
    if not tag:
        raise TypeError(f"{cls.__name__} has no xml_tag")

    hints = get_type_hints(cls, include_extras=True)
    attrs: list[AttrSpec] = []
    children: list[ChildSpec] = []

    for f in dataclasses.fields(cls):
        base, meta = split_annotated(hints[f.name])
        for m in meta:
            if isinstance(m, XmlAttr):
                if base not in (int, str):
                    raise TypeError(
                        f"{cls.__name__}.{f.name}: XML attributes must be int or str"
                    )
                attrs.append(AttrSpec(
                    field=f.name,
                    xml_name=m.name,
                    type=base,
                    default=f.default,
                    omit=m.omit,
                    write=m.write,
                ))
            elif isinstance(m, (XmlChild, XmlChildren)):
                children.append(ChildSpec(
                    field=f.name,
                    xml_tag=m.cls.xml_tag,
                    cls=m.cls,
                    many=isinstance(m, XmlChildren),
                ))

    schema = EntitySchema(tag=tag, attrs=tuple(attrs), children=tuple(children))
    _SCHEMA_CACHE[cls] = schema
    return schema


# --- Value conversion ---


def parse_value(raw: str, tp: type) -> Any:
    """Convert raw attribute text to the declared type.

    Integers are base-10 with optional sign and surrounding whitespace,
    within the 32-bit signed range.

    Raises:
        ValueError: If an int attribute is not a valid integer or is out of range.
    """
    if tp is int:
        if not _INT_PATTERN.fullmatch(raw):
            raise ValueError(f"invalid integer literal {raw!r}")
        value = int(raw)
        if not INT_MIN <= value <= INT_MAX:
            raise ValueError(f"integer {raw.strip()} out of range [{INT_MIN}, {INT_MAX}]")
        return value
    return raw


def format_value(value: Any, tp: type) -> str:
    """Render a field value as attribute text.

    Raises:
        TypeError: If value does not match the declared type.
    """
    if isinstance(value, bool) or not isinstance(value, tp):
        raise TypeError(f"expected {tp.__name__}, got {type(value).__name__}")
    if tp is int:
        return str(int(value))
    return value


def check_value(value: Any, tp: type) -> bool:
    """True if value can be stored in a field of type tp."""
    return isinstance(value, tp) and not isinstance(value, bool)
