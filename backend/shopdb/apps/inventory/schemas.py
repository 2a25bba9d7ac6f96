from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, field_validator


class InventoryItem(BaseModel):
    sku: str
    name: str
    uom: str
    on_hand_qty: float = 0.0
    reserved_qty: float = 0.0
    available_qty: float = 0.0
    # Only the main inventory file fills these in.
    reorder_point: Optional[float] = None
    supplier: Optional[str] = None

    @field_validator("reorder_point", "supplier", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ComponentRequirement(BaseModel):
    sku: str
    available: float
    req_per_unit: float
    candidate_builds: int


class Buildability(BaseModel):
    assembly_sku: Optional[str] = None
    max_buildable: int
    limiting_components: List[ComponentRequirement]
    components: List[ComponentRequirement] = []
