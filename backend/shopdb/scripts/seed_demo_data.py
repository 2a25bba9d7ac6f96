"""
Write a small demo data directory.

Usage:
    python -m shopdb.scripts.seed_demo_data [target_dir]

Existing tables in the target are left alone unless --force is given.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from shopdb import config, datadir
from shopdb.apps.catalog import models as catalog_models
from shopdb.apps.catalog import schemas as catalog_schemas
from shopdb.apps.catalog import services as catalog_services
from shopdb.apps.inventory import schemas as inventory_schemas

ASSEMBLIES = [
    catalog_schemas.Assembly(assembly_sku="PNL-4X8", name="Wall panel 4x8", uom="ea"),
    catalog_schemas.Assembly(assembly_sku="PNL-4X10", name="Wall panel 4x10", uom="ea"),
]

PARTS = [
    catalog_schemas.Part(part_sku="STUD-2X4-8", name="Stud 2x4 8ft", uom="ea"),
    catalog_schemas.Part(part_sku="STUD-2X4-10", name="Stud 2x4 10ft", uom="ea"),
    catalog_schemas.Part(part_sku="OSB-4X8", name="OSB sheet 4x8", uom="ea"),
    catalog_schemas.Part(part_sku="NAIL-16D", name="16d nails", uom="lb"),
]

BOM_ITEMS = [
    catalog_schemas.BomItem(parent_assembly_sku="PNL-4X8", component_sku="STUD-2X4-8", qty_per=5, scrap_rate=0.0, yield_pct=1.0, is_phantom=False),
    catalog_schemas.BomItem(parent_assembly_sku="PNL-4X8", component_sku="OSB-4X8", qty_per=1, scrap_rate=0.0, yield_pct=1.0, is_phantom=False),
    catalog_schemas.BomItem(parent_assembly_sku="PNL-4X8", component_sku="NAIL-16D", qty_per=0.5, scrap_rate=0.0, yield_pct=1.0, is_phantom=False),
    catalog_schemas.BomItem(parent_assembly_sku="PNL-4X10", component_sku="STUD-2X4-10", qty_per=5, scrap_rate=0.0, yield_pct=1.0, is_phantom=False),
    catalog_schemas.BomItem(parent_assembly_sku="PNL-4X10", component_sku="OSB-4X8", qty_per=1.25, scrap_rate=0.0, yield_pct=1.0, is_phantom=False),
    catalog_schemas.BomItem(parent_assembly_sku="PNL-4X10", component_sku="NAIL-16D", qty_per=0.6, scrap_rate=0.0, yield_pct=1.0, is_phantom=False),
]

STOCK = [
    catalog_schemas.StockRow(sku="STUD-2X4-8", on_hand_qty=120, reserved_qty=20),
    catalog_schemas.StockRow(sku="STUD-2X4-10", on_hand_qty=60, reserved_qty=0),
    catalog_schemas.StockRow(sku="OSB-4X8", on_hand_qty=40, reserved_qty=5),
    catalog_schemas.StockRow(sku="NAIL-16D", on_hand_qty=25, reserved_qty=0),
]

MAIN_INVENTORY = [
    inventory_schemas.InventoryItem(sku="STUD-2X4-8", name="Stud 2x4 8ft", uom="ea", on_hand_qty=120, reserved_qty=20, reorder_point=50, supplier="North Lumber"),
    inventory_schemas.InventoryItem(sku="OSB-4X8", name="OSB sheet 4x8", uom="ea", on_hand_qty=40, reserved_qty=5, reorder_point=15, supplier="North Lumber"),
    inventory_schemas.InventoryItem(sku="NAIL-16D", name="16d nails", uom="lb", on_hand_qty=25, reserved_qty=0, reorder_point=None, supplier=None),
]

TABLES = (
    (catalog_models.ASSEMBLIES, ASSEMBLIES),
    (catalog_models.PARTS, PARTS),
    (catalog_models.BOM_ITEMS, BOM_ITEMS),
    (catalog_models.STOCK, STOCK),
    (catalog_models.MAIN_INVENTORY, MAIN_INVENTORY),
)


def seed(target: Path, force: bool = False) -> list[Path]:
    target.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for table, rows in TABLES:
        path = datadir.table_path(target, table.stem)
        if path.exists() and not force:
            continue
        datadir.replace_file(path, catalog_services.format_rows(table, rows, header=True))
        written.append(path)
    return written


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a demo shop data directory.")
    parser.add_argument("target", nargs="?", default=None, help="Target directory (default: SHOPDB_DATA_DIR)")
    parser.add_argument("--force", action="store_true", help="Overwrite existing tables")
    args = parser.parse_args()

    target = Path(args.target) if args.target else config.data_dir()
    written = seed(target, force=args.force)
    print(f"Seeded {len(written)} table(s) in {target}")


if __name__ == "__main__":
    main()
