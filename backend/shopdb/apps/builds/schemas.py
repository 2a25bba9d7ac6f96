from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class BuildRecordCreate(BaseModel):
    work_order: str
    sales_order: str
    customer: str
    assembly_sku: str
    # Not range-checked: zero and negative builds are the caller's business.
    quantity_built: float
    operator: Optional[str] = None
    notes: Optional[str] = None


class BuildHistoryRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: str
    work_order: str
    sales_order: str
    customer: str
    assembly_sku: str
    quantity_built: float
    operator: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("operator", "notes", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value
