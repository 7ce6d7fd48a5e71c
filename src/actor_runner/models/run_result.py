"""Pydantic model for a completed run and its dataset items."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from actor_runner.models.run_record import RunRecord


class RunResult(BaseModel):
    run: RunRecord
    items: list[Any] = Field(default_factory=list)
