"""Pydantic model for an actor input schema."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from actor_runner.models.field_descriptor import FieldDescriptor


class InputSchema(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str | None = None
    type: str | None = None
    description: str | None = None
    properties: dict[str, FieldDescriptor] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)

    def field_names(self) -> list[str]:
        return list(self.properties.keys())

    def required_fields(self) -> list[str]:
        names = list(self.required)
        for name, descriptor in self.properties.items():
            if descriptor.required and name not in names:
                names.append(name)
        return names

    def is_empty(self) -> bool:
        return not self.properties
