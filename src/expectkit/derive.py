"""
Attach generated extractors to a class.

``describe`` turns a class into a ``TypeDescription``; ``derive_expect``
runs the extractor generator over it, compiles every method and installs
the whole bundle at once, so a failure leaves the class untouched.

Example:
    >>> @derive_expect
    ... class Foo(TaggedUnion):
    ...     Bar = panic(Named(a=int, b=int))
    ...     Baz = Positional(int, int)
    ...     Qux = Unit()
    >>> Foo.Bar(a=1, b=2).expect_bar(1, 2)
    (1, 2)
    >>> Foo.Baz(1, 2).expect_baz(1, 3) is None
    True
    >>> Foo.Qux.expect_qux()
    ()
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Dict, Optional, Union

from pydantic import ValidationError

from expectkit.core.exceptions import GenerationError
from expectkit.core.logger import get_logger, push_type_name, reset_type_name
from expectkit.generator.extractor import ExtractorGenerator
from expectkit.generator.render import compile_method
from expectkit.models.generator_config import GeneratorConfig
from expectkit.models.type_description import FieldDescription, ShapeDescription, TypeDescription
from expectkit.union import TaggedUnion

logger = get_logger(__name__)

ConfigLike = Optional[Union[Dict[str, Any], GeneratorConfig]]


def describe(cls: Any) -> TypeDescription:
    """
    Build the static description of ``cls``.

    Tagged unions describe each declared shape. Dataclasses are described as
    records (a single fixed shape) so that generation can reject them with a
    proper error; any other object cannot be described at all.

    Raises:
        GenerationError: If ``cls`` cannot be described or its description is invalid.
    """
    type_name = getattr(cls, "__name__", repr(cls))
    try:
        if isinstance(cls, type) and issubclass(cls, TaggedUnion) and cls is not TaggedUnion:
            if cls._tag is not None:
                raise GenerationError("Cannot derive on a shape; derive on its union", type_name=type_name)
            shapes = [declaration.describe(name) for name, declaration in cls.__shapes__.items()]
            return TypeDescription(name=type_name, kind="union", shapes=shapes)

        if isinstance(cls, type) and dataclasses.is_dataclass(cls):
            fields = [FieldDescription(name=f.name, type=f.type) for f in dataclasses.fields(cls)]
            shape = ShapeDescription(name=type_name, kind="named" if fields else "unit", fields=fields)
            return TypeDescription(name=type_name, kind="record", shapes=[shape])
    except ValidationError as exc:
        raise GenerationError(f"Invalid type description: {exc}", type_name=type_name) from exc

    raise GenerationError("Expect can only be derived for tagged unions", type_name=type_name)


def derive_expect(cls: Optional[type] = None, *, config: ConfigLike = None) -> Any:
    """
    Class decorator generating ``expect_<shape>`` for every shape of a union.

    Usable bare (``@derive_expect``) or with options
    (``@derive_expect(config={"method_prefix": "assert_"})``).
    """

    def wrap(target: type) -> type:
        return _derive(target, ExtractorGenerator(config))

    if cls is None:
        return wrap
    return wrap(cls)


def _derive(cls: type, generator: ExtractorGenerator) -> type:
    description = describe(cls)
    methods = generator.generate(description)

    token = push_type_name(cls.__name__)
    try:
        # Field accessors live on the shape classes and would hide a method of the same name.
        method_names = {m.name for m in methods}
        for shape in description.shapes:
            for field_name in shape.field_names:
                if field_name in method_names:
                    raise GenerationError(
                        f"Field {shape.name}.{field_name} would hide the generated method {field_name!r}",
                        type_name=cls.__name__,
                    )

        compiled: Dict[str, Callable[..., Any]] = {}
        for method in methods:
            if method.name in cls.__dict__ and not generator.config.overwrite:
                raise GenerationError(
                    f"{cls.__name__} already defines {method.name!r}; set overwrite to replace it",
                    type_name=cls.__name__,
                )
            shape = getattr(cls, method.shape_name)
            compiled[method.name] = compile_method(method, shape, module=cls.__module__)

        for name, fn in compiled.items():
            setattr(cls, name, fn)
        cls.__expect_methods__ = tuple(methods)
        logger.debug(f"Attached {', '.join(compiled)} to {cls.__qualname__}")
    finally:
        reset_type_name(token)
    return cls
