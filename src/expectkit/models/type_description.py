from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from expectkit.core.contracts import RESERVED_PREFIX, ShapeKind
from expectkit.core.utils import is_identifier

TypeKind = Literal["union", "record"]


def positional_field_name(index: int) -> str:
    return f"value_{index}"


class FieldDescription(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    # Required for named shapes; synthesized as value_<index> for positional ones.
    name: Optional[str] = None
    type: Any


class ShapeDescription(BaseModel):
    name: str
    kind: ShapeKind = "named"
    fields: List[FieldDescription] = Field(default_factory=list)

    # Set when the shape carries the ``panic`` marker.
    is_fatal: bool = False

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if not is_identifier(value):
            raise ValueError(f"shape name must be an identifier, got {value!r}")
        return value

    @field_validator("fields")
    @classmethod
    def _bind_field_names(cls, fields: List[FieldDescription], info: ValidationInfo) -> List[FieldDescription]:
        kind = info.data.get("kind")
        if kind is None:
            # kind itself failed validation; that error is reported on its own
            return fields

        if kind == "unit":
            if fields:
                raise ValueError("unit shapes cannot declare fields")
            return fields

        if kind == "positional":
            bound: List[FieldDescription] = []
            for index, f in enumerate(fields):
                expected = positional_field_name(index)
                if f.name is None:
                    f = f.model_copy(update={"name": expected})
                elif f.name != expected:
                    raise ValueError(f"positional field {index} must be named {expected!r}, got {f.name!r}")
                bound.append(f)
            return bound

        seen = set()
        for f in fields:
            if f.name is None:
                raise ValueError("named shapes require a name on every field")
            if not is_identifier(f.name):
                raise ValueError(f"field name must be an identifier, got {f.name!r}")
            if f.name.startswith(RESERVED_PREFIX):
                raise ValueError(f"field name {f.name!r} uses the reserved prefix {RESERVED_PREFIX!r}")
            if f.name in seen:
                raise ValueError(f"duplicate field name {f.name!r}")
            seen.add(f.name)
        return fields

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @property
    def field_types(self) -> List[Any]:
        return [f.type for f in self.fields]


class TypeDescription(BaseModel):
    name: str
    kind: TypeKind = "union"
    shapes: List[ShapeDescription]

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if not is_identifier(value):
            raise ValueError(f"type name must be an identifier, got {value!r}")
        return value

    @model_validator(mode="after")
    def _validate_shapes(self) -> "TypeDescription":
        if not self.shapes:
            raise ValueError(f"type {self.name!r} must declare at least one shape")
        names = [s.name for s in self.shapes]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate shape names in {self.name!r}: {duplicates}")
        return self

    @property
    def is_tagged_union(self) -> bool:
        return self.kind == "union"

    def shape(self, name: str) -> ShapeDescription:
        for s in self.shapes:
            if s.name == name:
                return s
        raise KeyError(name)
