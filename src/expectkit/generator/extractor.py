from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from expectkit.core.contracts import Binding, GeneratedMethod, MatchExpression, Parameter, bound_name
from expectkit.core.exceptions import GenerationError, SchemaValidationError
from expectkit.core.logger import get_logger, push_type_name, reset_type_name
from expectkit.core.utils import supports_equality, tuple_type, tuple_type_text, type_repr
from expectkit.models.generator_config import GeneratorConfig
from expectkit.models.type_description import ShapeDescription, TypeDescription

logger = get_logger(__name__)


class ExtractorGenerator:
    """
    Produces one ``expect_<shape>`` extractor per shape of a tagged union.

    Each extractor confirms that the value is the given shape *and* holds
    exactly the caller's expected field values, then hands those values back:

    - shapes without the ``panic`` marker return ``Optional[Tuple[...]]`` and
      collapse every mismatch (wrong shape or wrong values) to ``None``;
    - shapes with it return ``Tuple[...]`` and raise ``ExpectationError``.

    Results are always tuples: a single-field shape yields ``(value,)`` and a
    unit shape yields ``()``. Since ``()`` is falsy, test non-fatal results
    with ``is not None`` rather than truthiness.

    Example:
        >>> generator = ExtractorGenerator()
        >>> methods = generator.generate({
        ...     "name": "Foo",
        ...     "shapes": [
        ...         {"name": "Baz", "kind": "positional", "fields": [{"type": int}, {"type": int}]},
        ...         {"name": "Qux", "kind": "unit"},
        ...     ],
        ... })
        >>> [m.name for m in methods]
        ['expect_baz', 'expect_qux']
    """

    def __init__(self, config: Optional[Union[Dict[str, Any], GeneratorConfig]] = None):
        if config is None:
            config = GeneratorConfig()
        elif isinstance(config, dict):
            config = GeneratorConfig.model_validate(config)
        self.config = config

    def generate(self, description: Union[Dict[str, Any], TypeDescription]) -> List[GeneratedMethod]:
        """
        Generate the extractor bundle for a type, preserving shape order.

        Raises:
            GenerationError: If the description is invalid, is not a tagged
                union, or two shapes map to the same method name.
            SchemaValidationError: If a field type does not support equality.
        """
        desc = self._coerce(description)

        token = push_type_name(desc.name)
        try:
            if not desc.is_tagged_union:
                raise GenerationError("Expect can only be derived for tagged unions", type_name=desc.name)

            self._check_field_equality(desc)

            methods = [self.generate_shape(desc.name, shape) for shape in desc.shapes]
            self._check_unique_names(desc.name, methods)

            fatal = sum(1 for m in methods if m.is_fatal)
            logger.info(f"Generated {len(methods)} extractor(s) for {desc.name} ({fatal} with panic)")
            return methods
        finally:
            reset_type_name(token)

    def method_name(self, shape: ShapeDescription) -> str:
        # Case folding applies to the method name only, never to the shape tag.
        return f"{self.config.method_prefix}{shape.name.lower()}"

    def generate_shape(self, type_name: str, shape: ShapeDescription) -> GeneratedMethod:
        """Build the extractor for a single shape, independently of the others."""
        parameters = tuple(
            Parameter(name=f.name, type=f.type, type_text=type_repr(f.type))
            for f in shape.fields
        )
        bindings = tuple(
            Binding(field=f.name, bound_name=bound_name(index), parameter=f.name)
            for index, f in enumerate(shape.fields)
        )
        body = MatchExpression(
            type_name=type_name,
            shape_name=shape.name,
            shape_kind=shape.kind,
            bindings=bindings,
            on_mismatch="raise" if shape.is_fatal else "empty",
        )

        field_types = tuple(shape.field_types)
        if shape.is_fatal:
            return_type = tuple_type(field_types)
            return_type_text = tuple_type_text(field_types)
        else:
            return_type = Optional[tuple_type(field_types)]
            return_type_text = f"Optional[{tuple_type_text(field_types)}]"

        method = GeneratedMethod(
            name=self.method_name(shape),
            type_name=type_name,
            shape_name=shape.name,
            parameters=parameters,
            return_type=return_type,
            return_type_text=return_type_text,
            body=body,
            is_fatal=shape.is_fatal,
        )
        logger.debug(
            f"{method.name}({', '.join(method.parameter_names)}) -> {return_type_text} [{shape.kind}]"
        )
        return method

    @staticmethod
    def _coerce(description: Union[Dict[str, Any], TypeDescription]) -> TypeDescription:
        if isinstance(description, TypeDescription):
            return description
        try:
            return TypeDescription.model_validate(description)
        except ValidationError as exc:
            type_name = description.get("name") if isinstance(description, dict) else None
            raise GenerationError(f"Invalid type description: {exc}", type_name=type_name) from exc

    @staticmethod
    def _check_field_equality(desc: TypeDescription) -> None:
        for shape in desc.shapes:
            for f in shape.fields:
                if not supports_equality(f.type):
                    raise SchemaValidationError(
                        f"Field {shape.name}.{f.name} has type {type_repr(f.type)} which does not support equality",
                        type_name=desc.name,
                    )

    @staticmethod
    def _check_unique_names(type_name: str, methods: List[GeneratedMethod]) -> None:
        seen: Dict[str, str] = {}
        for m in methods:
            if m.name in seen:
                raise GenerationError(
                    f"Shapes {seen[m.name]!r} and {m.shape_name!r} both generate {m.name!r}",
                    type_name=type_name,
                )
            seen[m.name] = m.shape_name


def generate(
    description: Union[Dict[str, Any], TypeDescription],
    config: Optional[Union[Dict[str, Any], GeneratorConfig]] = None,
) -> List[GeneratedMethod]:
    """Convenience wrapper around ``ExtractorGenerator(config).generate(description)``."""
    return ExtractorGenerator(config).generate(description)
