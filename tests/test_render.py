from __future__ import annotations

import re
from types import SimpleNamespace
from typing import Optional, Tuple

import pytest

from expectkit.core.exceptions import ExpectationError
from expectkit.generator.extractor import generate
from expectkit.generator.render import compile_method, render_module, render_source

FOO = {
    "name": "Foo",
    "shapes": [
        {
            "name": "Bar",
            "is_fatal": True,
            "fields": [{"name": "a", "type": int}, {"name": "b", "type": int}],
        },
        {"name": "Baz", "kind": "positional", "fields": [{"type": int}, {"type": int}]},
        {"name": "Qux", "kind": "unit"},
    ],
}


def test_render_non_fatal_positional():
    _, baz, _ = generate(FOO)

    assert render_source(baz) == (
        "def expect_baz(_expect_self, value_0: int, value_1: int) -> Optional[Tuple[int, int]]:\n"
        '    """Return the fields of Foo.Baz if they equal the arguments, else None."""\n'
        "    if _expect_self._tag == 'Baz':\n"
        "        _expect_attr_0 = _expect_self._values[0]\n"
        "        _expect_attr_1 = _expect_self._values[1]\n"
        "        if _expect_attr_0 == value_0 and _expect_attr_1 == value_1:\n"
        "            return (_expect_attr_0, _expect_attr_1)\n"
        "    return None\n"
    )


def test_render_fatal_named_rebuilds_expected_value():
    bar, _, _ = generate(FOO)

    source = render_source(bar)

    assert source.startswith("def expect_bar(_expect_self, a: int, b: int) -> Tuple[int, int]:\n")
    assert "raise _expect_error(_expect_shape(a=a, b=b), _expect_self)" in source
    assert "return None" not in source


def test_render_unit_matches_on_tag_alone():
    _, _, qux = generate(FOO)

    source = render_source(qux)

    assert "if _expect_self._tag == 'Qux':\n        return ()\n" in source
    assert "_expect_attr_" not in source


def test_render_without_annotations():
    _, baz, _ = generate(FOO)

    assert render_source(baz, annotate=False).startswith("def expect_baz(_expect_self, value_0, value_1):\n")


def test_render_module_declares_union_and_extractors():
    methods = generate(FOO)

    source = render_module("Foo", methods)

    assert source.startswith("from __future__ import annotations\n")
    assert "from expectkit.core.exceptions import ExpectationError as _expect_error\n" in source
    assert (
        "class Foo(TaggedUnion):\n"
        "    Bar = panic(Named(a=int, b=int))\n"
        "    Baz = Positional(int, int)\n"
        "    Qux = Unit()\n"
    ) in source
    assert "        _expect_shape = Foo.Bar\n" in source
    compile(source, "<rendered>", "exec")


def test_rendered_module_runs_standalone():
    namespace: dict = {}
    exec(render_module("Foo", generate(FOO)), namespace)
    Foo = namespace["Foo"]

    assert Foo.Bar(a=1, b=2).expect_bar(1, 2) == (1, 2)
    assert Foo.Baz(1, 2).expect_baz(1, 3) is None
    assert Foo.Qux.expect_qux() == ()

    with pytest.raises(ExpectationError, match=re.escape("Expected Foo.Bar(a=1, b=2) but got Foo.Qux")):
        Foo.Qux.expect_bar(1, 2)
    with pytest.raises(ExpectationError, match=re.escape("Expected Foo.Bar(a=9, b=9) but got Foo.Bar(a=1, b=2)")):
        Foo.Bar(a=1, b=2).expect_bar(9, 9)


def test_rendered_fatal_unit_reports_singleton():
    desc = {"name": "Signal", "shapes": [{"name": "Go", "kind": "unit"}, {"name": "Stop", "kind": "unit", "is_fatal": True}]}
    namespace: dict = {}
    exec(render_module("Signal", generate(desc)), namespace)
    Signal = namespace["Signal"]

    assert Signal.Stop.expect_stop() == ()
    with pytest.raises(ExpectationError, match=re.escape("Expected Signal.Stop but got Signal.Go")):
        Signal.Go.expect_stop()


def test_compiled_non_fatal_method_on_plain_object():
    _, baz, _ = generate(FOO)
    fn = compile_method(baz)

    value = SimpleNamespace(_tag="Baz", _values=(1, 2))

    assert fn(value, 1, 2) == (1, 2)
    assert fn(value, 1, 3) is None
    assert fn(SimpleNamespace(_tag="Qux", _values=()), 1, 2) is None
    assert fn.__qualname__ == "Foo.expect_baz"
    assert fn.__annotations__ == {
        "value_0": int,
        "value_1": int,
        "return": Optional[Tuple[int, int]],
    }


def test_single_field_result_is_a_one_tuple():
    (only,) = generate({"name": "Box", "shapes": [{"name": "Full", "kind": "positional", "fields": [{"type": int}]}]})
    fn = compile_method(only)

    assert fn(SimpleNamespace(_tag="Full", _values=(7,)), 7) == (7,)


def test_fatal_method_needs_its_shape():
    bar, _, _ = generate(FOO)

    with pytest.raises(ValueError, match="needs its shape"):
        compile_method(bar)
