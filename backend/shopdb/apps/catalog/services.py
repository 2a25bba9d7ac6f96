from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from pydantic import BaseModel, ValidationError

from shopdb import config, datadir
from shopdb.apps.inventory import services as inventory_services
from shopdb.errors import DataIOError, DataParseError, MissingSourceError, ShopDataError

from . import models, schemas

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def _check_header(path: Path, table: models.TableSpec, header: List[str], line: int) -> None:
    expected = set(table.columns)
    if len(header) != len(table.columns) or set(header) != expected:
        missing = [c for c in table.columns if c not in header]
        unexpected = [c for c in header if c not in expected]
        raise DataParseError(
            f"Header of {path} does not match {table.stem} columns "
            f"(missing: {missing or '-'}, unexpected: {unexpected or '-'})",
            path=path,
            line=line,
        )


def parse_table(text: str, table: models.TableSpec, *, path: PathLike) -> List[BaseModel]:
    """
    Parse delimiter-separated ``text`` into ``table.record`` instances.

    Strict: the header is mandatory, every row has exactly as many fields as
    the header, every field is trimmed before conversion.
    """
    path = Path(path)
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=config.delimiter())
    header: Optional[List[str]] = None
    records: List[BaseModel] = []
    try:
        for row in reader:
            if not row:
                continue
            cells = [cell.strip() for cell in row]
            if header is None:
                _check_header(path, table, cells, reader.line_num)
                header = cells
                continue
            if len(cells) != len(header):
                raise DataParseError(
                    f"Failed to parse row in {path}: expected {len(header)} fields, found {len(cells)}",
                    path=path,
                    line=reader.line_num,
                )
            try:
                records.append(table.record.model_validate(dict(zip(header, cells))))
            except ValidationError as exc:
                raise DataParseError(
                    f"Failed to parse row in {path}",
                    path=path,
                    line=reader.line_num,
                    cause=exc,
                ) from exc
    except csv.Error as exc:
        raise DataParseError(f"Malformed text in {path}", path=path, line=reader.line_num, cause=exc) from exc
    if header is None:
        raise DataParseError(f"Missing header row in {path}", path=path)
    return records


def read_table(path: PathLike, table: models.TableSpec) -> List[BaseModel]:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as exc:
        raise MissingSourceError(f"Failed to open {path}", path=path, cause=exc) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise DataIOError(f"Failed to open {path}", path=path, cause=exc) from exc
    return parse_table(text, table, path=path)


def read_table_optional(path: PathLike, table: models.TableSpec) -> Optional[List[BaseModel]]:
    """Like read_table, but a missing or unreadable file gives None instead of an error."""
    path = Path(path)
    if not path.exists():
        return None
    try:
        return read_table(path, table)
    except ShopDataError as exc:
        logger.warning(
            "Skipping optional source",
            extra={"path": str(path), "table": table.stem, "error": str(exc)},
        )
        return None


def load_table(directory: PathLike, table: models.TableSpec) -> List[BaseModel]:
    return read_table(datadir.table_path(directory, table.stem), table)


def load_data(directory: PathLike) -> schemas.DataSnapshot:
    """
    Load a full snapshot of ``directory``.

    Any required table that is missing or malformed aborts the load.
    Build history is optional and comes back empty when absent.
    """
    path = datadir.ensure_directory(directory)

    assemblies = load_table(path, models.ASSEMBLIES)
    parts = load_table(path, models.PARTS)
    bom_items = load_table(path, models.BOM_ITEMS)
    stock = load_table(path, models.STOCK)
    build_history = read_table_optional(datadir.table_path(path, models.BUILD_HISTORY.stem), models.BUILD_HISTORY) or []

    snapshot = schemas.DataSnapshot(
        assemblies=assemblies,
        parts=parts,
        bom_items=bom_items,
        stock=stock,
        build_history=build_history,
        inventory=inventory_services.unify_inventory(parts, stock),
    )
    logger.info(
        "Data loaded",
        extra={
            "data_dir": str(path),
            "assemblies": len(assemblies),
            "parts": len(parts),
            "bom_items": len(bom_items),
            "stock": len(stock),
            "build_history": len(build_history),
        },
    )
    return snapshot


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return str(value)


def format_header(table: models.TableSpec) -> str:
    return format_rows(table, [], header=True)


def format_rows(table: models.TableSpec, rows: Iterable[BaseModel], *, header: bool = False) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=config.delimiter(), lineterminator="\n")
    if header:
        writer.writerow(table.columns)
    for row in rows:
        writer.writerow([_cell(getattr(row, column)) for column in table.columns])
    return buffer.getvalue()


def write_stock(directory: PathLike, stock: Sequence[schemas.StockRow]) -> Path:
    """
    Rewrite the whole stock table: fixed header, then one line per row in order.

    The file is swapped in atomically; a reader never sees a partial table.
    """
    path = datadir.ensure_directory(directory)
    target = datadir.table_path(path, models.STOCK.stem)
    datadir.replace_file(target, format_rows(models.STOCK, stock, header=True))
    logger.info("Stock table rewritten", extra={"path": str(target), "rows": len(stock)})
    return target
