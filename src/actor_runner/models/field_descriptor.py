"""Pydantic model for one property of an actor input schema."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class FieldDescriptor(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    editor: Optional[str] = None
    default: Any = None
    prefill: Any = None
    required: Optional[bool] = None

    # An explicit null default still counts as a value.
    @property
    def has_prefill(self) -> bool:
        return "prefill" in self.model_fields_set

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set
