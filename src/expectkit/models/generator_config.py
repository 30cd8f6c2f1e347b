from __future__ import annotations

from pydantic import BaseModel, field_validator

from expectkit.core.contracts import RESERVED_PREFIX


class GeneratorConfig(BaseModel):
    """Settings for one generation pass.

    The defaults produce ``expect_<shape>`` methods and never replace an
    attribute the target class already defines.
    """
    method_prefix: str = "expect_"
    overwrite: bool = False

    @field_validator("method_prefix")
    @classmethod
    def _validate_prefix(cls, value: str) -> str:
        # The prefix is followed by a lowercased shape name.
        if not f"{value}x".isidentifier():
            raise ValueError(f"method_prefix must start a valid identifier, got {value!r}")
        if value.startswith(RESERVED_PREFIX):
            raise ValueError(f"method_prefix may not use the reserved prefix {RESERVED_PREFIX!r}")
        return value
