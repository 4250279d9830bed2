"""Shared helpers for formpulse models."""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def generate_id(prefix: str) -> str:
    """Generate a unique ID with the given prefix.

    Examples:
        generate_id("whk") -> "whk_a1b2c3d4e5f6"
        generate_id("dlv") -> "dlv_a1b2c3d4e5f6"
    """
    return f"{prefix}_{uuid4().hex[:12]}"


class CamelModel(BaseModel):
    """Base model whose JSON form uses camelCase keys.

    Python code reads and writes snake_case attributes; either spelling
    is accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )
