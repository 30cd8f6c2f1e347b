from __future__ import annotations

from typing import Optional, Tuple

import pytest
from pydantic import ValidationError

from expectkit.core.exceptions import GenerationError, SchemaValidationError
from expectkit.generator.extractor import ExtractorGenerator, generate
from expectkit.generator.render import render_source
from expectkit.models.type_description import ShapeDescription, TypeDescription


def _foo() -> dict:
    return {
        "name": "Foo",
        "shapes": [
            {
                "name": "Bar",
                "kind": "named",
                "is_fatal": True,
                "fields": [{"name": "a", "type": int}, {"name": "b", "type": int}],
            },
            {"name": "Baz", "kind": "positional", "fields": [{"type": int}, {"type": int}]},
            {"name": "Qux", "kind": "unit"},
        ],
    }


def test_one_method_per_shape_in_declaration_order():
    methods = ExtractorGenerator().generate(_foo())

    assert [m.name for m in methods] == ["expect_bar", "expect_baz", "expect_qux"]
    assert [m.shape_name for m in methods] == ["Bar", "Baz", "Qux"]
    assert all(m.type_name == "Foo" for m in methods)


def test_parameters_mirror_fields():
    bar, baz, qux = generate(_foo())

    assert bar.parameter_names == ("a", "b")
    assert [p.type for p in bar.parameters] == [int, int]
    assert baz.parameter_names == ("value_0", "value_1")
    assert qux.parameter_names == ()


def test_return_type_follows_panic_marker():
    bar, baz, qux = generate(_foo())

    assert bar.is_fatal
    assert bar.return_type == Tuple[int, int]
    assert bar.return_type_text == "Tuple[int, int]"
    assert bar.body.on_mismatch == "raise"

    assert not baz.is_fatal
    assert baz.return_type == Optional[Tuple[int, int]]
    assert baz.return_type_text == "Optional[Tuple[int, int]]"
    assert baz.body.on_mismatch == "empty"

    assert qux.return_type_text == "Optional[Tuple[()]]"


def test_bound_names_never_equal_parameter_names():
    bar, baz, qux = generate(_foo())

    for method in (bar, baz):
        for binding in method.body.bindings:
            assert binding.bound_name.startswith("_expect_attr_")
            assert binding.bound_name not in method.parameter_names
    assert [b.parameter for b in bar.body.bindings] == ["a", "b"]
    assert qux.body.is_vacuous


def test_shape_name_is_lowercased_for_method_name_only():
    methods = generate({"name": "Foo", "shapes": [{"name": "BazQux", "kind": "unit"}]})

    assert methods[0].name == "expect_bazqux"
    assert methods[0].body.shape_name == "BazQux"


def test_record_description_is_rejected():
    record = {
        "name": "Point",
        "kind": "record",
        "shapes": [{"name": "Point", "fields": [{"name": "x", "type": int}]}],
    }

    with pytest.raises(GenerationError, match="only be derived for tagged unions") as exc_info:
        generate(record)
    assert exc_info.value.type_name == "Point"


def test_invalid_description_is_reported_as_generation_error():
    with pytest.raises(GenerationError, match="Invalid type description") as exc_info:
        generate({"name": "Foo", "shapes": []})
    assert exc_info.value.type_name == "Foo"


def test_shapes_colliding_after_lowercasing_fail_the_whole_pass():
    desc = {"name": "Foo", "shapes": [{"name": "Bar", "kind": "unit"}, {"name": "BAR", "kind": "unit"}]}

    with pytest.raises(GenerationError, match="both generate 'expect_bar'"):
        generate(desc)


def test_field_type_without_equality_is_rejected():
    class Opaque:
        __eq__ = None

    desc = {"name": "Foo", "shapes": [{"name": "Bar", "fields": [{"name": "x", "type": Opaque}]}]}

    with pytest.raises(SchemaValidationError, match="does not support equality"):
        generate(desc)


def test_generation_is_deterministic():
    desc = TypeDescription.model_validate(_foo())

    first = generate(desc)
    second = generate(desc)

    assert first == second
    assert [render_source(m) for m in first] == [render_source(m) for m in second]


def test_custom_method_prefix():
    methods = ExtractorGenerator({"method_prefix": "assert_"}).generate(_foo())
    assert [m.name for m in methods] == ["assert_bar", "assert_baz", "assert_qux"]


def test_invalid_method_prefix_is_rejected():
    with pytest.raises(ValidationError, match="method_prefix"):
        ExtractorGenerator({"method_prefix": "1-"})

    with pytest.raises(ValidationError, match="reserved prefix"):
        ExtractorGenerator({"method_prefix": "_expect_"})


def test_generate_shape_works_on_a_single_shape():
    shape = ShapeDescription(name="Only", kind="positional", fields=[{"type": str}], is_fatal=True)

    method = ExtractorGenerator().generate_shape("Wrapper", shape)

    assert method.name == "expect_only"
    assert method.qualname == "Wrapper.expect_only"
    assert method.return_type == Tuple[str]
