"""Pydantic model for a platform run record."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RunRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str
    status: str
    actor_id: Optional[str] = Field(default=None, alias="actId")
    default_dataset_id: Optional[str] = Field(default=None, alias="defaultDatasetId")
    default_key_value_store_id: Optional[str] = Field(default=None, alias="defaultKeyValueStoreId")
    input: Optional[dict[str, Any]] = None
