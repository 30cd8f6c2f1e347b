"""
Example: Deriving extractors on a tagged union.

Shows both flavours of generated method:
- plain shapes return Optional[Tuple[...]] and collapse any mismatch to None
- shapes marked with panic() return the tuple directly and raise on mismatch

The same union can be rendered without importing this module:
    expectkit render examples/foo.json
"""

from expectkit import ExpectationError, Named, Positional, TaggedUnion, Unit, derive_expect, panic


@derive_expect
class Foo(TaggedUnion):
    Bar = panic(Named(a=int, b=int))
    Baz = Positional(int, int)
    Qux = Unit()


bar = Foo.Bar(a=1, b=2)
baz = Foo.Baz(1, 2)
qux = Foo.Qux

# =============================================================================
# Shape marked with panic(): values come back unwrapped
# =============================================================================
a, b = bar.expect_bar(1, 2)
print(f"Bar holds a={a}, b={b}")

try:
    bar.expect_bar(9, 9)
except ExpectationError as e:
    print(f"Mismatch: {e}")

# =============================================================================
# Plain shapes: None on mismatch, unit shapes give ()
# =============================================================================
print(f"baz.expect_baz(1, 2) -> {baz.expect_baz(1, 2)}")
print(f"baz.expect_baz(1, 3) -> {baz.expect_baz(1, 3)}")
print(f"qux.expect_qux()     -> {qux.expect_qux()}")
print(f"qux.expect_baz(1, 2) -> {qux.expect_baz(1, 2)}")
