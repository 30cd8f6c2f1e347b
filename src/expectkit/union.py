"""
Tagged unions for expectkit.

A union is declared as a class whose attributes are shape declarations:

    >>> class Foo(TaggedUnion):
    ...     Bar = panic(Named(a=int, b=int))
    ...     Baz = Positional(int, int)
    ...     Qux = Unit()
    >>> Foo.Bar(a=1, b=2)
    Foo.Bar(a=1, b=2)
    >>> Foo.Qux
    Foo.Qux

Every declaration is replaced by a subclass of the union (unit shapes by
the single instance of theirs). Shape instances are immutable, compare
by shape and values, and expose the ``_tag``/``_values`` pair the
generated extractors read.
"""

from __future__ import annotations

import types
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from expectkit.core.contracts import ShapeKind
from expectkit.core.utils import is_identifier, type_repr
from expectkit.models.type_description import FieldDescription, ShapeDescription, positional_field_name


class ShapeDeclaration:
    """Declared layout of one shape, consumed when the union class is created."""

    kind: ClassVar[ShapeKind]

    def __init__(self, fields: Optional[List[Tuple[str, Any]]] = None, *, is_fatal: bool = False):
        self.fields: List[Tuple[str, Any]] = list(fields or [])
        self.is_fatal = is_fatal

    def marked_fatal(self) -> "ShapeDeclaration":
        clone = object.__new__(type(self))
        clone.fields = list(self.fields)
        clone.is_fatal = True
        return clone

    def describe(self, name: str) -> ShapeDescription:
        fields = [FieldDescription(name=n, type=t) for n, t in self.fields]
        return ShapeDescription(name=name, kind=self.kind, fields=fields, is_fatal=self.is_fatal)

    def __repr__(self) -> str:
        marker = "panic " if self.is_fatal else ""
        inner = ", ".join(f"{n}: {type_repr(t)}" for n, t in self.fields)
        return f"<{marker}{type(self).__name__}({inner})>"


class Named(ShapeDeclaration):
    kind = "named"

    def __init__(self, /, **fields: Any):
        for name in fields:
            if name.startswith("_"):
                raise TypeError(f"named field {name!r} must not start with an underscore")
        super().__init__(list(fields.items()))


class Positional(ShapeDeclaration):
    kind = "positional"

    def __init__(self, *field_types: Any):
        super().__init__([(positional_field_name(i), t) for i, t in enumerate(field_types)])


class Unit(ShapeDeclaration):
    kind = "unit"

    def __init__(self):
        super().__init__()


def panic(declaration: ShapeDeclaration) -> ShapeDeclaration:
    """Mark a shape so its extractor raises instead of returning None."""
    if not isinstance(declaration, ShapeDeclaration):
        raise TypeError(f"panic() expects a shape declaration, got {declaration!r}")
    return declaration.marked_fatal()


class TaggedUnion:
    """Base class for tagged unions; subclass it and declare shapes as attributes."""

    __shapes__: ClassVar[Dict[str, ShapeDeclaration]] = {}
    _tag: ClassVar[Optional[str]] = None
    _kind: ClassVar[Optional[ShapeKind]] = None
    _fields: ClassVar[Tuple[str, ...]] = ()

    def __init_subclass__(cls, *, shape_of: Optional[type] = None, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        if shape_of is not None:
            # shape classes are configured by _make_shape
            return

        declarations = {
            name: value for name, value in cls.__dict__.items() if isinstance(value, ShapeDeclaration)
        }
        cls.__shapes__ = declarations
        for name, declaration in declarations.items():
            if not is_identifier(name):
                raise TypeError(f"shape name {name!r} is not a valid identifier")
            if name.startswith("_") or hasattr(TaggedUnion, name):
                raise TypeError(f"shape name {name!r} would replace a TaggedUnion attribute")
            shape_cls = _make_shape(cls, name, declaration)
            setattr(cls, name, shape_cls() if declaration.kind == "unit" else shape_cls)

    def __init__(self, *args: Any, **kwargs: Any):
        raise TypeError(f"{type(self).__name__} is a tagged union; construct one of its shapes instead")

    @classmethod
    def shape_names(cls) -> Tuple[str, ...]:
        return tuple(cls.__shapes__)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{self!r} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{self!r} is immutable")

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TaggedUnion):
            return NotImplemented
        return type(self) is type(other) and self._values == other._values

    def __hash__(self) -> int:
        return hash((type(self), self._values))

    def __repr__(self) -> str:
        union = self._union_name()
        if self._kind == "unit":
            return f"{union}.{self._tag}"
        if self._kind == "named":
            inner = ", ".join(f"{n}={v!r}" for n, v in zip(self._fields, self._values))
        else:
            inner = ", ".join(repr(v) for v in self._values)
        return f"{union}.{self._tag}({inner})"

    def _union_name(self) -> str:
        return type(self).__bases__[0].__name__


def _field_property(index: int, name: str) -> property:
    return property(lambda self: self._values[index], doc=f"Field {name!r}")


def _make_shape(union: type, name: str, declaration: ShapeDeclaration) -> type:
    field_names = tuple(n for n, _ in declaration.fields)
    kind = declaration.kind

    def __init__(self, /, *args: Any, **kwargs: Any) -> None:
        if kind == "named":
            values = _bind_named(union.__name__, name, field_names, args, kwargs)
        else:
            if kwargs:
                raise TypeError(f"{union.__name__}.{name}() takes no keyword arguments")
            if len(args) != len(field_names):
                raise TypeError(
                    f"{union.__name__}.{name}() takes {len(field_names)} positional argument(s) but {len(args)} were given"
                )
            values = tuple(args)
        object.__setattr__(self, "_values", values)

    def exec_body(ns: Dict[str, Any]) -> None:
        ns["__init__"] = __init__
        ns["__qualname__"] = f"{union.__qualname__}.{name}"
        ns["__module__"] = union.__module__
        ns["_tag"] = name
        ns["_kind"] = kind
        ns["_fields"] = field_names
        ns["__match_args__"] = field_names
        for index, field_name in enumerate(field_names):
            ns[field_name] = _field_property(index, field_name)

    return types.new_class(name, (union,), {"shape_of": union}, exec_body)


def _bind_named(
    union_name: str,
    shape_name: str,
    field_names: Tuple[str, ...],
    args: Tuple[Any, ...],
    kwargs: Dict[str, Any],
) -> Tuple[Any, ...]:
    label = f"{union_name}.{shape_name}()"
    if len(args) > len(field_names):
        raise TypeError(f"{label} takes {len(field_names)} argument(s) but {len(args)} were given")

    bound = dict(zip(field_names, args))
    for key, value in kwargs.items():
        if key not in field_names:
            raise TypeError(f"{label} got an unexpected keyword argument {key!r}")
        if key in bound:
            raise TypeError(f"{label} got multiple values for argument {key!r}")
        bound[key] = value

    missing = [n for n in field_names if n not in bound]
    if missing:
        raise TypeError(f"{label} missing required argument(s): {', '.join(missing)}")
    return tuple(bound[n] for n in field_names)
