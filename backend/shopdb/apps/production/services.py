"""
BOM explosion and stock consumption.

Explosion is single level: an assembly's bill is the set of BOM rows whose
parent is that assembly, and sub-assemblies appearing as components are
consumed as stocked items, not exploded further.

record_build stages and commits stock itself; update_stock_after_build is
the one-call version for callers that do not need a history record.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Union

from shopdb.apps.catalog import schemas as catalog_schemas
from shopdb.apps.catalog import services as catalog_services

logger = logging.getLogger(__name__)


def index_bom_by_parent(bom_items: Iterable[catalog_schemas.BomItem]) -> Dict[str, List[catalog_schemas.BomItem]]:
    index: Dict[str, List[catalog_schemas.BomItem]] = defaultdict(list)
    for row in bom_items:
        index[row.parent_assembly_sku].append(row)
    return dict(index)


def explode_bom(
    bom_items: Iterable[catalog_schemas.BomItem],
    assembly_sku: str,
    quantity_built: float,
) -> Dict[str, float]:
    """
    Total quantity of each component consumed by ``quantity_built`` units.

    Rows for the same component add up. scrap_rate, yield_pct and is_phantom
    are not applied.
    """
    totals: Dict[str, float] = {}
    for row in index_bom_by_parent(bom_items).get(assembly_sku, []):
        totals[row.component_sku] = totals.get(row.component_sku, 0.0) + row.qty_per * quantity_built
    return totals


def requirements_per_unit(bom_items: Iterable[catalog_schemas.BomItem], assembly_sku: str) -> Dict[str, float]:
    return explode_bom(bom_items, assembly_sku, 1.0)


def apply_consumption(
    stock: Iterable[catalog_schemas.StockRow],
    consumption: Mapping[str, float],
) -> List[catalog_schemas.StockRow]:
    """
    New stock rows with ``consumption`` taken off on hand, clamped at zero.

    Reserved quantities are untouched. Components without a stock row are
    skipped; no row is created for them.
    """
    updated: List[catalog_schemas.StockRow] = []
    matched = set()
    for row in stock:
        needed = consumption.get(row.sku)
        if needed is None:
            updated.append(row.model_copy())
            continue
        matched.add(row.sku)
        updated.append(row.model_copy(update={"on_hand_qty": max(0.0, row.on_hand_qty - needed)}))

    unmatched = [sku for sku in consumption if sku not in matched]
    if unmatched:
        logger.warning("Consumed components have no stock row", extra={"skus": unmatched})
    return updated


def apply_build(
    snapshot: catalog_schemas.DataSnapshot,
    assembly_sku: str,
    quantity_built: float,
) -> List[catalog_schemas.StockRow]:
    consumption = explode_bom(snapshot.bom_items, assembly_sku, quantity_built)
    if not consumption:
        logger.warning("Assembly has no BOM rows", extra={"assembly_sku": assembly_sku})
    return apply_consumption(snapshot.stock, consumption)


def update_stock_after_build(
    directory: Union[str, Path],
    snapshot: catalog_schemas.DataSnapshot,
    assembly_sku: str,
    quantity_built: float,
) -> List[catalog_schemas.StockRow]:
    stock = apply_build(snapshot, assembly_sku, quantity_built)
    catalog_services.write_stock(directory, stock)
    return stock
