from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict

import pytest

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

ASSEMBLIES_CSV = """assembly_sku,name,uom
ASM-1,Panel one,ea
ASM-2,Panel two,ea
"""

PARTS_CSV = """part_sku,name,uom
P-1,Stud,ea
P-2,Sheet,ea
P-3,Nails,lb
"""

BOM_ITEMS_CSV = """parent_assembly_sku,component_sku,qty_per,scrap_rate,yield_pct,is_phantom
ASM-1,P-1,2,0.0,1.0,false
ASM-1,P-2,1,0.0,1.0,false
ASM-2,P-1,4,0.05,0.95,false
ASM-2,P-3,0.5,0.0,1.0,true
"""

STOCK_CSV = """sku,on_hand_qty,reserved_qty
P-1,10,0
P-2,3,1
"""

MAIN_INVENTORY_CSV = """sku,name,uom,on_hand_qty,reserved_qty,available_qty,reorder_point,supplier
P-1,Stud,ea,10,2,999,5,North Lumber
P-3,Nails,lb,4,0,0,,
"""

DEFAULT_TABLES: Dict[str, str] = {
    "assemblies": ASSEMBLIES_CSV,
    "parts": PARTS_CSV,
    "bom_items": BOM_ITEMS_CSV,
    "stock": STOCK_CSV,
}


@pytest.fixture(autouse=True)
def _clean_shopdb_env(monkeypatch):
    for name in ("SHOPDB_DATA_DIR", "SHOPDB_FILE_EXT", "SHOPDB_DELIMITER"):
        monkeypatch.delenv(name, raising=False)
    yield


def write_table(directory: Path, stem: str, text: str, ext: str = "csv") -> Path:
    path = directory / f"{stem}.{ext}"
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture()
def data_dir(tmp_path) -> Path:
    """A data directory holding the four required tables, no history yet."""
    directory = tmp_path / "data"
    directory.mkdir()
    for stem, text in DEFAULT_TABLES.items():
        write_table(directory, stem, text)
    return directory


@pytest.fixture()
def write():
    return write_table


@pytest.fixture()
def main_inventory_csv() -> str:
    return MAIN_INVENTORY_CSV
