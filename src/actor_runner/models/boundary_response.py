"""Pydantic model for a response crossing the request boundary."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class BoundaryResponse(BaseModel):
    status_code: int = 200
    body: Any = None

    @property
    def ok(self) -> bool:
        return self.status_code < 400
