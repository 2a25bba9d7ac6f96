from __future__ import annotations

from pathlib import Path
from typing import List

from fastapi import APIRouter, Depends, Query

from shopdb.apps.catalog import services as catalog_services
from shopdb.dependencies import get_data_dir, to_http_exception
from shopdb.errors import ShopDataError

from . import schemas, services

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("", response_model=List[schemas.InventoryItem])
def list_inventory(data_dir: Path = Depends(get_data_dir)):
    try:
        snapshot = catalog_services.load_data(data_dir)
    except ShopDataError as exc:
        raise to_http_exception(exc)
    return snapshot.inventory


@router.get("/main", response_model=List[schemas.InventoryItem])
def load_main_inventory(data_dir: Path = Depends(get_data_dir)):
    try:
        return services.load_main_inventory(data_dir)
    except ShopDataError as exc:
        raise to_http_exception(exc)


@router.get("/buildability/{assembly_sku}", response_model=schemas.Buildability)
def get_buildability(
    assembly_sku: str,
    respect_reservations: bool = Query(True),
    data_dir: Path = Depends(get_data_dir),
):
    try:
        snapshot = catalog_services.load_data(data_dir)
    except ShopDataError as exc:
        raise to_http_exception(exc)
    return services.assembly_buildability(snapshot, assembly_sku, respect_reservations=respect_reservations)
