from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from shopdb.apps.catalog import schemas as catalog_schemas
from shopdb.dependencies import get_data_dir, to_http_exception
from shopdb.errors import ShopDataError

from . import schemas, services

router = APIRouter(prefix="/builds", tags=["builds"])


@router.get("/panel-history", response_model=List[schemas.BuildHistoryRecord])
def load_panel_history(data_dir: Path = Depends(get_data_dir)):
    try:
        return services.load_panel_history(data_dir)
    except ShopDataError as exc:
        raise to_http_exception(exc)


@router.get("/history", response_model=List[schemas.BuildHistoryRecord])
def load_build_history(data_dir: Path = Depends(get_data_dir)):
    try:
        return services.load_build_history(data_dir)
    except ShopDataError as exc:
        raise to_http_exception(exc)


@router.post(
    "",
    response_model=catalog_schemas.DataSnapshot,
    status_code=status.HTTP_201_CREATED,
)
def record_build(
    payload: schemas.BuildRecordCreate,
    data_dir: Path = Depends(get_data_dir),
):
    try:
        return services.record_build(data_dir, **payload.model_dump())
    except ShopDataError as exc:
        raise to_http_exception(exc)


@router.post("/recover", response_model=Optional[schemas.BuildHistoryRecord])
def recover_pending_build(data_dir: Path = Depends(get_data_dir)):
    try:
        return services.recover_pending_build(data_dir)
    except ShopDataError as exc:
        raise to_http_exception(exc)
