from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends

from shopdb.dependencies import get_data_dir, to_http_exception
from shopdb.errors import ShopDataError

from . import schemas, services

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/snapshot", response_model=schemas.DataSnapshot)
def load_data(data_dir: Path = Depends(get_data_dir)):
    try:
        return services.load_data(data_dir)
    except ShopDataError as exc:
        raise to_http_exception(exc)
