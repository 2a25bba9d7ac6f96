from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Union

from shopdb import datadir
from shopdb.apps.catalog import models as catalog_models
from shopdb.apps.catalog import services as catalog_services
from shopdb.apps.production import services as production_services

from . import schemas

logger = logging.getLogger(__name__)


def _stock_by_sku(stock: Iterable) -> Dict[str, object]:
    by_sku: Dict[str, object] = {}
    for row in stock:
        # First row wins when a SKU is listed twice.
        by_sku.setdefault(row.sku, row)
    return by_sku


def unify_inventory(parts: Iterable, stock: Iterable) -> List[schemas.InventoryItem]:
    """
    One inventory item per part, in part order.

    A part with no stock row has zero on hand and zero reserved.
    available_qty is always recomputed here, never read from input.
    """
    by_sku = _stock_by_sku(stock)
    items: List[schemas.InventoryItem] = []
    for part in parts:
        row = by_sku.get(part.part_sku)
        on_hand = row.on_hand_qty if row is not None else 0.0
        reserved = row.reserved_qty if row is not None else 0.0
        items.append(
            schemas.InventoryItem(
                sku=part.part_sku,
                name=part.name,
                uom=part.uom,
                on_hand_qty=on_hand,
                reserved_qty=reserved,
                available_qty=on_hand - reserved,
            )
        )
    return items


def load_main_inventory(directory: Union[str, Path]) -> List[schemas.InventoryItem]:
    """
    Read the pre-populated main inventory table.

    Unlike build history, a missing main inventory file is an error: it is the
    only place reorder points and suppliers live.
    """
    path = datadir.ensure_directory(directory)
    rows = catalog_services.load_table(path, catalog_models.MAIN_INVENTORY)
    items = [
        row.model_copy(update={"available_qty": row.on_hand_qty - row.reserved_qty})
        for row in rows
    ]
    logger.info("Main inventory loaded", extra={"data_dir": str(path), "items": len(items)})
    return items


def compute_max_buildable(
    req_per_unit: Mapping[str, float],
    stock: Iterable,
    respect_reservations: bool = True,
) -> schemas.Buildability:
    """
    How many whole units the current stock supports.

    Availability per SKU is on hand (minus reserved when respecting
    reservations), floored at zero. Components with a non-positive requirement
    never limit the build.
    """
    avail: Dict[str, float] = {}
    for row in stock:
        qty = row.on_hand_qty - (row.reserved_qty if respect_reservations else 0.0)
        avail[row.sku] = max(0.0, qty)

    candidates: List[schemas.ComponentRequirement] = []
    for sku, req in req_per_unit.items():
        if req <= 0:
            continue
        available = avail.get(sku, 0.0)
        candidates.append(
            schemas.ComponentRequirement(
                sku=sku,
                available=available,
                req_per_unit=req,
                candidate_builds=math.floor(available / req),
            )
        )

    if not candidates:
        return schemas.Buildability(max_buildable=0, limiting_components=[], components=[])

    max_buildable = min(c.candidate_builds for c in candidates)
    limiting = [c for c in candidates if c.candidate_builds == max_buildable]
    return schemas.Buildability(
        max_buildable=max_buildable,
        limiting_components=limiting,
        components=candidates,
    )


def assembly_buildability(snapshot, assembly_sku: str, respect_reservations: bool = True) -> schemas.Buildability:
    req = production_services.requirements_per_unit(snapshot.bom_items, assembly_sku)
    result = compute_max_buildable(req, snapshot.stock, respect_reservations=respect_reservations)
    return result.model_copy(update={"assembly_sku": assembly_sku})
