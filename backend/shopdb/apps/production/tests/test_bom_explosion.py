from __future__ import annotations

import logging

import pytest

from shopdb.apps.catalog import models as catalog_models
from shopdb.apps.catalog import services as catalog_services
from shopdb.apps.catalog.schemas import BomItem, DataSnapshot, StockRow
from shopdb.apps.production import services as production_services


def _bom(parent, component, qty_per, **kwargs):
    return BomItem(
        parent_assembly_sku=parent,
        component_sku=component,
        qty_per=qty_per,
        scrap_rate=kwargs.get("scrap_rate", 0.0),
        yield_pct=kwargs.get("yield_pct", 1.0),
        is_phantom=kwargs.get("is_phantom", False),
    )


def _snapshot(bom_items, stock):
    return DataSnapshot(assemblies=[], parts=[], bom_items=bom_items, stock=stock)


def test_explosion_is_single_level():
    bom = [
        _bom("ASM-1", "SUB-1", 2),
        _bom("SUB-1", "P-1", 10),
        _bom("ASM-2", "P-1", 1),
    ]

    assert production_services.explode_bom(bom, "ASM-1", 3) == {"SUB-1": 6.0}


def test_rows_for_same_component_add_up():
    bom = [_bom("ASM-1", "P-1", 2.0), _bom("ASM-1", "P-1", 3.0)]
    stock = [StockRow(sku="P-1", on_hand_qty=100, reserved_qty=0)]

    updated = production_services.apply_build(_snapshot(bom, stock), "ASM-1", 4)

    assert updated[0].on_hand_qty == 80.0


def test_scrap_yield_and_phantom_do_not_change_consumption():
    bom = [_bom("ASM-1", "P-1", 2.0, scrap_rate=0.5, yield_pct=0.5, is_phantom=True)]

    assert production_services.explode_bom(bom, "ASM-1", 1) == {"P-1": 2.0}
    assert bom[0].adjustment_factors() == (0.5, 0.5, True)


@pytest.mark.parametrize("on_hand,needed", [(0.0, 1.0), (3.0, 3.5), (5.0, 500.0)])
def test_consumption_clamps_at_zero(on_hand, needed):
    stock = [StockRow(sku="P-1", on_hand_qty=on_hand, reserved_qty=2.0)]

    updated = production_services.apply_consumption(stock, {"P-1": needed})

    assert updated[0].on_hand_qty == 0.0
    assert updated[0].reserved_qty == 2.0


def test_component_without_stock_row_is_skipped(caplog):
    stock = [StockRow(sku="P-1", on_hand_qty=5, reserved_qty=0)]

    with caplog.at_level(logging.WARNING, logger="shopdb.apps.production.services"):
        updated = production_services.apply_consumption(stock, {"P-1": 1.0, "P-404": 2.0})

    assert [(r.sku, r.on_hand_qty) for r in updated] == [("P-1", 4.0)]
    assert "no stock row" in caplog.text


def test_apply_consumption_does_not_touch_input():
    stock = [StockRow(sku="P-1", on_hand_qty=5, reserved_qty=0)]
    production_services.apply_consumption(stock, {"P-1": 1.0})
    assert stock[0].on_hand_qty == 5.0


def test_unrelated_stock_rows_keep_their_order_and_values():
    stock = [
        StockRow(sku="Z", on_hand_qty=1, reserved_qty=0),
        StockRow(sku="P-1", on_hand_qty=5, reserved_qty=0),
        StockRow(sku="A", on_hand_qty=2, reserved_qty=1),
    ]
    updated = production_services.apply_consumption(stock, {"P-1": 1.0})
    assert [(r.sku, r.on_hand_qty, r.reserved_qty) for r in updated] == [
        ("Z", 1.0, 0.0),
        ("P-1", 4.0, 0.0),
        ("A", 2.0, 1.0),
    ]


def test_zero_and_negative_quantities_are_not_rejected():
    bom = [_bom("ASM-1", "P-1", 2.0)]
    stock = [StockRow(sku="P-1", on_hand_qty=5, reserved_qty=0)]

    assert production_services.apply_build(_snapshot(bom, stock), "ASM-1", 0)[0].on_hand_qty == 5.0
    assert production_services.apply_build(_snapshot(bom, stock), "ASM-1", -1)[0].on_hand_qty == 7.0


def test_unknown_assembly_leaves_stock_unchanged():
    stock = [StockRow(sku="P-1", on_hand_qty=5, reserved_qty=0)]
    updated = production_services.apply_build(_snapshot([_bom("ASM-1", "P-1", 1)], stock), "NOPE", 3)
    assert updated[0].on_hand_qty == 5.0


def test_index_bom_by_parent_groups_rows():
    bom = [_bom("A", "P-1", 1), _bom("B", "P-2", 1), _bom("A", "P-3", 1)]

    index = production_services.index_bom_by_parent(bom)

    assert list(index) == ["A", "B"]
    assert [row.component_sku for row in index["A"]] == ["P-1", "P-3"]


def test_requirements_per_unit():
    bom = [_bom("A", "P-1", 2.5), _bom("A", "P-2", 1)]
    assert production_services.requirements_per_unit(bom, "A") == {"P-1": 2.5, "P-2": 1.0}


def test_update_stock_after_build_persists(data_dir):
    snapshot = catalog_services.load_data(data_dir)

    production_services.update_stock_after_build(data_dir, snapshot, "ASM-1", 2)

    stock = {r.sku: r for r in catalog_services.load_table(data_dir, catalog_models.STOCK)}
    assert stock["P-1"].on_hand_qty == 6.0
    assert stock["P-2"].on_hand_qty == 1.0
    assert stock["P-2"].reserved_qty == 1.0


def test_explode_accepts_a_single_pass_iterable():
    rows = (row for row in [_bom("ASM-1", "P-1", 2), _bom("ASM-2", "P-1", 5), _bom("ASM-1", "P-2", 1)])

    assert production_services.explode_bom(rows, "ASM-1", 3) == {"P-1": 6.0, "P-2": 3.0}
