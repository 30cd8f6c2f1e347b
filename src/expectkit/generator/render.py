from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence

from expectkit.core.contracts import (
    ERROR_NAME,
    RECEIVER_NAME,
    SHAPE_NAME,
    TAG_ATTR,
    VALUES_ATTR,
    GeneratedMethod,
    MatchExpression,
)
from expectkit.core.exceptions import ExpectationError

_INDENT = "    "


def _signature(method: GeneratedMethod, annotate: bool) -> str:
    params = [RECEIVER_NAME]
    for p in method.parameters:
        params.append(f"{p.name}: {p.type_text}" if annotate else p.name)
    returns = f" -> {method.return_type_text}" if annotate else ""
    return f"def {method.name}({', '.join(params)}){returns}:"


def _docstring(method: GeneratedMethod) -> str:
    target = f"{method.type_name}.{method.shape_name}"
    if method.is_fatal:
        return f"Return the fields of {target} if they equal the arguments, else raise ExpectationError."
    return f"Return the fields of {target} if they equal the arguments, else None."


def _expected_value(body: MatchExpression) -> str:
    """Expression rebuilding the asserted value from the caller's arguments."""
    if body.shape_kind == "unit":
        return SHAPE_NAME
    if body.shape_kind == "named":
        args = ", ".join(f"{b.parameter}={b.parameter}" for b in body.bindings)
    else:
        args = ", ".join(b.parameter for b in body.bindings)
    return f"{SHAPE_NAME}({args})"


def _result(body: MatchExpression) -> str:
    names = [b.bound_name for b in body.bindings]
    if len(names) == 1:
        return f"({names[0]},)"
    return f"({', '.join(names)})"


def render_lines(method: GeneratedMethod, *, annotate: bool = True, shape_ref: Optional[str] = None) -> List[str]:
    """
    Source lines of one extractor.

    ``shape_ref`` is an expression naming the shape; when given, a method
    that raises binds it locally instead of expecting it in its globals.
    """
    body = method.body
    lines = [_signature(method, annotate), f'{_INDENT}"""{_docstring(method)}"""']

    # 1. shape discriminator
    lines.append(f"{_INDENT}if {RECEIVER_NAME}.{TAG_ATTR} == {body.shape_name!r}:")
    inner = _INDENT * 2
    if body.is_vacuous:
        lines.append(f"{inner}return ()")
    else:
        for index, b in enumerate(body.bindings):
            lines.append(f"{inner}{b.bound_name} = {RECEIVER_NAME}.{VALUES_ATTR}[{index}]")
        # 2. field equality, in declaration order
        checks = " and ".join(f"{b.bound_name} == {b.parameter}" for b in body.bindings)
        lines.append(f"{inner}if {checks}:")
        lines.append(f"{inner}{_INDENT}return {_result(body)}")

    if body.on_mismatch == "raise":
        if shape_ref is not None:
            lines.append(f"{_INDENT}{SHAPE_NAME} = {shape_ref}")
        lines.append(f"{_INDENT}raise {ERROR_NAME}({_expected_value(body)}, {RECEIVER_NAME})")
    else:
        lines.append(f"{_INDENT}return None")
    return lines


def render_source(method: GeneratedMethod, *, annotate: bool = True) -> str:
    """Python source of one extractor; identical for identical input."""
    return "\n".join(render_lines(method, annotate=annotate)) + "\n"


def _declaration(method: GeneratedMethod) -> str:
    kind = method.body.shape_kind
    if kind == "unit":
        declaration = "Unit()"
    elif kind == "named":
        declaration = f"Named({', '.join(f'{p.name}={p.type_text}' for p in method.parameters)})"
    else:
        declaration = f"Positional({', '.join(p.type_text for p in method.parameters)})"
    if method.is_fatal:
        declaration = f"panic({declaration})"
    return f"{method.shape_name} = {declaration}"


def render_module(type_name: str, methods: Sequence[GeneratedMethod]) -> str:
    """
    A standalone module defining the union and all its extractors, in shape order.

    The shapes are declared on a ``TaggedUnion`` and the extractors written
    into its body, so the module runs without ``derive_expect``.
    """
    lines = [
        "from __future__ import annotations",
        "",
        "from typing import Optional, Tuple",
        "",
        "from expectkit import Named, Positional, TaggedUnion, Unit, panic",
        f"from expectkit.core.exceptions import ExpectationError as {ERROR_NAME}",
        "",
        "",
        f"class {type_name}(TaggedUnion):",
    ]
    lines.extend(f"{_INDENT}{_declaration(method)}" for method in methods)
    for method in methods:
        lines.append("")
        shape_ref = f"{type_name}.{method.shape_name}"
        lines.extend(f"{_INDENT}{line}" for line in render_lines(method, shape_ref=shape_ref))
    return "\n".join(lines) + "\n"


def compile_method(method: GeneratedMethod, shape: Any = None, *, module: str = __name__) -> Callable[..., Any]:
    """
    Turn a generated method into a function ready to be set on the union class.

    The source is compiled without annotations; the real type references are
    attached afterwards so they need not be importable by name.

    Args:
        method: Output of the extractor generator.
        shape: Shape class (or unit singleton) used to rebuild the expected
            value in the mismatch message. Only fatal methods need it.
        module: Value for the function's ``__module__``.
    """
    if method.is_fatal and shape is None:
        raise ValueError(f"{method.qualname} raises on mismatch and needs its shape")

    namespace: Dict[str, Any] = {SHAPE_NAME: shape, ERROR_NAME: ExpectationError}
    code = compile(render_source(method, annotate=False), f"<expectkit {method.qualname}>", "exec")
    exec(code, namespace)

    fn = namespace[method.name]
    fn.__qualname__ = method.qualname
    fn.__module__ = module
    annotations: Dict[str, Any] = {p.name: p.type for p in method.parameters}
    annotations["return"] = method.return_type
    fn.__annotations__ = annotations
    return fn
