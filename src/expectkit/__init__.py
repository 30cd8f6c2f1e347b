"""expectkit.

Generates ``expect_<shape>`` extractor methods for tagged unions: one call
that asserts "this value is shape X holding exactly these field values"
and hands the values back.

Public API for clients declaring unions in Python code.
"""

from expectkit.core.exceptions import ExpectationError, ExpectkitException, GenerationError, SchemaValidationError
from expectkit.derive import derive_expect, describe
from expectkit.generator.extractor import ExtractorGenerator, generate
from expectkit.union import Named, Positional, TaggedUnion, Unit, panic

__version__ = "0.1.0"

__all__ = [
    "ExpectationError",
    "ExpectkitException",
    "ExtractorGenerator",
    "GenerationError",
    "Named",
    "Positional",
    "SchemaValidationError",
    "TaggedUnion",
    "Unit",
    "derive_expect",
    "describe",
    "generate",
    "panic",
]
