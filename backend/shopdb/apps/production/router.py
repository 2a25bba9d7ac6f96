from __future__ import annotations

from pathlib import Path
from typing import Dict

from fastapi import APIRouter, Depends, Query

from shopdb.apps.catalog import services as catalog_services
from shopdb.dependencies import get_data_dir, to_http_exception
from shopdb.errors import ShopDataError

from . import services

router = APIRouter(prefix="/production", tags=["production"])


@router.get("/requirements/{assembly_sku}", response_model=Dict[str, float])
def get_requirements(
    assembly_sku: str,
    quantity: float = Query(1.0),
    data_dir: Path = Depends(get_data_dir),
):
    """Component consumption for building ``quantity`` units, without touching stock."""
    try:
        snapshot = catalog_services.load_data(data_dir)
    except ShopDataError as exc:
        raise to_http_exception(exc)
    return services.explode_bom(snapshot.bom_items, assembly_sku, quantity)
