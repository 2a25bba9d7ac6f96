"""
Request helpers shared by the app routers.

Every route works against one data directory, taken from the ``data_dir``
query parameter or, when that is omitted, from SHOPDB_DATA_DIR.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import HTTPException, Query, status

from shopdb import config
from shopdb.errors import DataParseError, MissingSourceError, ShopDataError

logger = logging.getLogger(__name__)


def get_data_dir(data_dir: Optional[str] = Query(None, description="Data directory; defaults to SHOPDB_DATA_DIR")) -> Path:
    if data_dir and data_dir.strip():
        return Path(data_dir.strip())
    return config.data_dir()


def to_http_exception(exc: ShopDataError) -> HTTPException:
    """Map a data error to the HTTP error carrying its message as ``detail``."""
    if isinstance(exc, DataParseError):
        code = 422
    elif isinstance(exc, MissingSourceError) or (exc.path is not None and not exc.path.exists()):
        code = status.HTTP_404_NOT_FOUND
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    logger.error("Data directory request failed", extra={"error": str(exc), "status_code": code})
    return HTTPException(status_code=code, detail=str(exc))
