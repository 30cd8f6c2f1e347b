from __future__ import annotations

import keyword
import typing
from typing import Any, Tuple

_TYPING_PREFIX = "typing."


def is_identifier(name: str) -> bool:
    return isinstance(name, str) and name.isidentifier() and not keyword.iskeyword(name)


def type_repr(tp: Any) -> str:
    """Render a type reference the way it would be written in an annotation."""
    if isinstance(tp, str):
        return tp
    if tp is None or tp is type(None):
        return "None"
    if tp is Ellipsis:
        return "..."
    if isinstance(tp, typing.ForwardRef):
        return tp.__forward_arg__
    # Parameterized generics must be checked before plain classes: some
    # interpreters report list[int] as an instance of type.
    if typing.get_origin(tp) is None and isinstance(tp, type):
        return tp.__qualname__
    return repr(tp).replace(_TYPING_PREFIX, "")


def supports_equality(tp: Any) -> bool:
    """False only for classes that explicitly opt out of ``==`` (``__eq__ = None``)."""
    if typing.get_origin(tp) is None and isinstance(tp, type):
        return getattr(tp, "__eq__", None) is not None
    return True


def tuple_type(types: Tuple[Any, ...]) -> Any:
    """``Tuple[t1, ..., tn]``; ``Tuple[()]`` for no types."""
    if not types:
        return Tuple[()]
    return Tuple[types]


def tuple_type_text(types: Tuple[Any, ...]) -> str:
    if not types:
        return "Tuple[()]"
    return f"Tuple[{', '.join(type_repr(t) for t in types)}]"
