"""
Table layouts of the data directory.

Each table is one delimiter-separated text file named ``<stem>.<ext>`` with a
header row. ``columns`` is the declared schema: the header must name exactly
these columns, and the stock writer and history appenders write them in this
order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Type

from pydantic import BaseModel

from shopdb.apps.builds.schemas import BuildHistoryRecord
from shopdb.apps.inventory.schemas import InventoryItem

from .schemas import Assembly, BomItem, Part, StockRow


@dataclass(frozen=True)
class TableSpec:
    stem: str
    columns: Tuple[str, ...]
    record: Type[BaseModel]
    required: bool = True


ASSEMBLIES = TableSpec(
    stem="assemblies",
    columns=("assembly_sku", "name", "uom"),
    record=Assembly,
)

PARTS = TableSpec(
    stem="parts",
    columns=("part_sku", "name", "uom"),
    record=Part,
)

BOM_ITEMS = TableSpec(
    stem="bom_items",
    columns=("parent_assembly_sku", "component_sku", "qty_per", "scrap_rate", "yield_pct", "is_phantom"),
    record=BomItem,
)

STOCK = TableSpec(
    stem="stock",
    columns=("sku", "on_hand_qty", "reserved_qty"),
    record=StockRow,
)

_HISTORY_COLUMNS = (
    "id",
    "timestamp",
    "work_order",
    "sales_order",
    "customer",
    "assembly_sku",
    "quantity_built",
    "operator",
    "notes",
)

BUILD_HISTORY = TableSpec(
    stem="build_history",
    columns=_HISTORY_COLUMNS,
    record=BuildHistoryRecord,
    required=False,
)

PANEL_HISTORY = TableSpec(
    stem="panel_history",
    columns=_HISTORY_COLUMNS,
    record=BuildHistoryRecord,
    required=False,
)

# Required, but only by the main inventory load path.
MAIN_INVENTORY = TableSpec(
    stem="main_inventory",
    columns=(
        "sku",
        "name",
        "uom",
        "on_hand_qty",
        "reserved_qty",
        "available_qty",
        "reorder_point",
        "supplier",
    ),
    record=InventoryItem,
)

SNAPSHOT_TABLES = (ASSEMBLIES, PARTS, BOM_ITEMS, STOCK)
