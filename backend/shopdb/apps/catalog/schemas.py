from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel

from shopdb.apps.builds.schemas import BuildHistoryRecord
from shopdb.apps.inventory.schemas import InventoryItem


class Assembly(BaseModel):
    assembly_sku: str
    name: str
    uom: str


class Part(BaseModel):
    part_sku: str
    name: str
    uom: str


class BomItem(BaseModel):
    parent_assembly_sku: str
    component_sku: str
    qty_per: float
    # Loaded and carried, never applied by explosion.
    scrap_rate: float
    yield_pct: float
    is_phantom: bool

    def adjustment_factors(self) -> Tuple[float, float, bool]:
        """
        (scrap_rate, yield_pct, is_phantom) for this row.

        Consumption math does not use these yet; anything that wants
        scrap/yield-adjusted quantities has to ask for them here explicitly.
        """
        return self.scrap_rate, self.yield_pct, self.is_phantom


class StockRow(BaseModel):
    sku: str
    on_hand_qty: float
    reserved_qty: float


class DataSnapshot(BaseModel):
    """Everything loaded from one data directory at one instant."""

    assemblies: List[Assembly]
    parts: List[Part]
    bom_items: List[BomItem]
    stock: List[StockRow]
    build_history: Optional[List[BuildHistoryRecord]] = None
    inventory: Optional[List[InventoryItem]] = None
