"""Pydantic model for the outcome of schema resolution."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

InputSource = Literal["input-schema", "build", "last-run", "generated"]


class ResolvedInput(BaseModel):
    source: InputSource
    input: dict[str, Any] = Field(default_factory=dict)
    # Raw declared schema, kept only when it came from the input-schema endpoint.
    input_schema: dict[str, Any] | None = Field(default=None, serialization_alias="schema")
    missing_required: list[str] = Field(default_factory=list, serialization_alias="missingRequired")
