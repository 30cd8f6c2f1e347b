from dataclasses import dataclass
from typing import Any, Literal, Tuple

ShapeKind = Literal["named", "positional", "unit"]
MismatchAction = Literal["empty", "raise"]

# Internal identifiers in generated code all start with this prefix; field
# names starting with it are rejected so parameters are never shadowed.
RESERVED_PREFIX = "_expect_"
RECEIVER_NAME = f"{RESERVED_PREFIX}self"
SHAPE_NAME = f"{RESERVED_PREFIX}shape"
ERROR_NAME = f"{RESERVED_PREFIX}error"

# Attributes every shape instance exposes to generated code.
TAG_ATTR = "_tag"
VALUES_ATTR = "_values"


def bound_name(index: int) -> str:
    return f"{RESERVED_PREFIX}attr_{index}"


@dataclass(frozen=True)
class Parameter:
    """Caller-facing parameter of a generated extractor."""
    name: str
    type: Any
    type_text: str


@dataclass(frozen=True)
class Binding:
    """Links a field of the shape to the name it is bound to and the parameter it must equal."""
    field: str            # declared field name (or value_<i> for positional shapes)
    bound_name: str       # identifier holding the stored value inside the method
    parameter: str        # caller-facing parameter compared against the stored value


@dataclass(frozen=True)
class MatchExpression:
    """Shape check followed by per-field equality, short-circuiting on the first failure."""
    type_name: str
    shape_name: str
    shape_kind: ShapeKind
    bindings: Tuple[Binding, ...] = ()
    on_mismatch: MismatchAction = "empty"

    @property
    def is_vacuous(self) -> bool:
        """True when matching the shape alone is enough (unit shapes)."""
        return not self.bindings


@dataclass(frozen=True)
class GeneratedMethod:
    name: str
    type_name: str
    shape_name: str
    parameters: Tuple[Parameter, ...]
    return_type: Any
    return_type_text: str
    body: MatchExpression
    is_fatal: bool = False

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.parameters)

    @property
    def qualname(self) -> str:
        return f"{self.type_name}.{self.name}"
