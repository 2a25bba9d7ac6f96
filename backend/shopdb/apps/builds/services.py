from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from pydantic import ValidationError

from shopdb import config, datadir
from shopdb.apps.catalog import models as catalog_models
from shopdb.apps.catalog import schemas as catalog_schemas
from shopdb.apps.catalog import services as catalog_services
from shopdb.apps.production import services as production_services
from shopdb.errors import DataIOError, DataParseError
from shopdb.utils.identifiers import generate_uuid7, utc_timestamp

from . import schemas

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

PENDING_BUILD_FILENAME = "pending_build.json"


# ---------------------------------------------------------------------------
# History sinks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HistorySink:
    name: str
    table: catalog_models.TableSpec

    def path(self, directory: PathLike) -> Path:
        return datadir.table_path(directory, self.table.stem)


BUILD_HISTORY = HistorySink(name="build_history", table=catalog_models.BUILD_HISTORY)
PANEL_HISTORY = HistorySink(name="panel_history", table=catalog_models.PANEL_HISTORY)

# Every recorded build goes to each of these, in this order.
HISTORY_SINKS = (BUILD_HISTORY, PANEL_HISTORY)


def new_build_record(
    *,
    work_order: str,
    sales_order: str,
    customer: str,
    assembly_sku: str,
    quantity_built: float,
    operator: Optional[str] = None,
    notes: Optional[str] = None,
) -> schemas.BuildHistoryRecord:
    return schemas.BuildHistoryRecord(
        id=generate_uuid7(),
        timestamp=utc_timestamp(),
        work_order=work_order,
        sales_order=sales_order,
        customer=customer,
        assembly_sku=assembly_sku,
        quantity_built=quantity_built,
        operator=operator,
        notes=notes,
    )


def append_record(directory: PathLike, sink: HistorySink, record: schemas.BuildHistoryRecord) -> Path:
    """Append ``record`` as one line to ``sink``; the file gets a header when it is new."""
    target = sink.path(directory)
    datadir.append_text(
        target,
        catalog_services.format_header(sink.table),
        catalog_services.format_rows(sink.table, [record]),
    )
    return target


def _log_contains(directory: PathLike, sink: HistorySink, record_id: str) -> bool:
    """
    True if one of the last records in ``sink`` has id ``record_id``.

    A staged build is always the newest write to each log, so only the tail
    is checked.
    """
    tail = datadir.read_tail(sink.path(directory))
    try:
        rows = list(csv.reader(io.StringIO(tail, newline=""), delimiter=config.delimiter()))
    except csv.Error:
        return False
    return any(cell.strip() == record_id for row in rows for cell in row)


def load_history(directory: PathLike, sink: HistorySink) -> List[schemas.BuildHistoryRecord]:
    path = datadir.ensure_directory(directory)
    target = sink.path(path)
    records = catalog_services.read_table_optional(target, sink.table)
    if records is None:
        logger.info("No history yet, returning empty list", extra={"path": str(target)})
        return []
    return records


def load_panel_history(directory: PathLike) -> List[schemas.BuildHistoryRecord]:
    return load_history(directory, PANEL_HISTORY)


def load_build_history(directory: PathLike) -> List[schemas.BuildHistoryRecord]:
    return load_history(directory, BUILD_HISTORY)


# ---------------------------------------------------------------------------
# Staged build: intent file, commit, replay
# ---------------------------------------------------------------------------


def _pending_path(directory: PathLike) -> Path:
    return Path(directory) / PENDING_BUILD_FILENAME


def stage_build(
    directory: PathLike,
    record: schemas.BuildHistoryRecord,
    stock: Sequence[catalog_schemas.StockRow],
) -> Path:
    """Durably write what a build is about to change, before changing anything."""
    target = _pending_path(directory)
    payload = {
        "record": record.model_dump(),
        "stock": [row.model_dump() for row in stock],
    }
    datadir.replace_file(target, json.dumps(payload, indent=2))
    return target


def _read_pending(directory: PathLike):
    target = _pending_path(directory)
    try:
        payload = json.loads(target.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as exc:
        raise DataIOError(f"Failed to read {target}", path=target, cause=exc) from exc
    except ValueError as exc:
        raise DataParseError(f"Malformed staged build {target}", path=target, cause=exc) from exc
    try:
        record = schemas.BuildHistoryRecord.model_validate(payload["record"])
        stock = [catalog_schemas.StockRow.model_validate(row) for row in payload["stock"]]
    except (KeyError, TypeError, ValidationError) as exc:
        raise DataParseError(f"Malformed staged build {target}", path=target, cause=exc) from exc
    return record, stock


def commit_build(
    directory: PathLike,
    record: schemas.BuildHistoryRecord,
    stock: Sequence[catalog_schemas.StockRow],
) -> None:
    """
    Apply a staged build. Safe to repeat: a sink that already holds the
    record's id is not appended to again, and the stock rewrite is a full
    replace with the staged rows.
    """
    for sink in HISTORY_SINKS:
        if _log_contains(directory, sink, record.id):
            continue
        append_record(directory, sink, record)
    catalog_services.write_stock(directory, stock)
    try:
        _pending_path(directory).unlink()
    except FileNotFoundError:
        pass


def recover_pending_build(directory: PathLike) -> Optional[schemas.BuildHistoryRecord]:
    """Finish a build that was staged but not fully committed. Returns the replayed record."""
    path = datadir.ensure_directory(directory)
    with datadir.directory_lock(path):
        pending = _read_pending(path)
        if pending is None:
            return None
        record, stock = pending
        logger.warning(
            "Replaying staged build",
            extra={"data_dir": str(path), "build_id": record.id, "assembly_sku": record.assembly_sku},
        )
        commit_build(path, record, stock)
        return record


def record_build(
    directory: PathLike,
    work_order: str,
    sales_order: str,
    customer: str,
    assembly_sku: str,
    quantity_built: float,
    operator: Optional[str] = None,
    notes: Optional[str] = None,
) -> catalog_schemas.DataSnapshot:
    """
    Record a production build and consume its components from stock.

    Runs under the data directory's write lock:
    - finish any build left staged by an earlier failure,
    - load the snapshot and explode the assembly's BOM,
    - stage the history record and post-build stock in one intent file,
    - append to both history logs and rewrite stock,
    - reload and return the fresh snapshot.

    If committing fails the intent stays on disk and the next build (or the
    recovery job) completes it.
    """
    path = datadir.ensure_directory(directory)
    with datadir.directory_lock(path):
        recover_pending_build(path)

        snapshot = catalog_services.load_data(path)
        record = new_build_record(
            work_order=work_order,
            sales_order=sales_order,
            customer=customer,
            assembly_sku=assembly_sku,
            quantity_built=quantity_built,
            operator=operator,
            notes=notes,
        )
        stock = production_services.apply_build(snapshot, assembly_sku, quantity_built)

        stage_build(path, record, stock)
        try:
            commit_build(path, record, stock)
        except Exception:
            logger.error(
                "Build staged but not committed",
                extra={"data_dir": str(path), "build_id": record.id, "assembly_sku": assembly_sku},
            )
            raise

        logger.info(
            "Build recorded",
            extra={
                "data_dir": str(path),
                "build_id": record.id,
                "assembly_sku": assembly_sku,
                "quantity_built": quantity_built,
            },
        )
        return catalog_services.load_data(path)
