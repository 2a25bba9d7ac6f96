from __future__ import annotations

import threading

import pytest

from shopdb.apps.builds import services as build_services
from shopdb.apps.catalog import services as catalog_services
from shopdb.errors import DataIOError, MissingSourceError


def _record_asm1(data_dir, quantity=2.0, **kwargs):
    return build_services.record_build(
        data_dir,
        work_order=kwargs.get("work_order", "WO-7"),
        sales_order="SO-7",
        customer="Acme",
        assembly_sku="ASM-1",
        quantity_built=quantity,
        operator=kwargs.get("operator"),
        notes=kwargs.get("notes"),
    )


def _on_hand(snapshot):
    return {row.sku: row.on_hand_qty for row in snapshot.stock}


def test_record_build_end_to_end(data_dir):
    snapshot = _record_asm1(data_dir, 2.0, operator="Kim", notes="first run")

    assert _on_hand(snapshot) == {"P-1": 6.0, "P-2": 1.0}
    assert len(snapshot.build_history) == 1
    record = snapshot.build_history[0]
    assert record.assembly_sku == "ASM-1"
    assert record.quantity_built == 2.0
    assert record.operator == "Kim"

    panel = build_services.load_panel_history(data_dir)
    assert [r.id for r in panel] == [record.id]


def test_both_logs_get_identical_latest_entry(data_dir):
    _record_asm1(data_dir, 1.0)
    _record_asm1(data_dir, 1.0, work_order="WO-8")

    build_log = build_services.load_build_history(data_dir)
    panel_log = build_services.load_panel_history(data_dir)

    assert build_log[-1] == panel_log[-1]
    assert build_log[-1].work_order == "WO-8"
    build_lines = (data_dir / "build_history.csv").read_text(encoding="utf-8").splitlines()
    panel_lines = (data_dir / "panel_history.csv").read_text(encoding="utf-8").splitlines()
    assert build_lines == panel_lines


def test_returned_snapshot_reflects_derived_inventory(data_dir):
    snapshot = _record_asm1(data_dir, 2.0)
    inventory = {item.sku: item.available_qty for item in snapshot.inventory}
    assert inventory == {"P-1": 6.0, "P-2": 0.0, "P-3": 0.0}


def test_build_larger_than_stock_clamps(data_dir):
    snapshot = _record_asm1(data_dir, 100.0)
    assert _on_hand(snapshot) == {"P-1": 0.0, "P-2": 0.0}


def test_failed_load_writes_nothing(data_dir):
    (data_dir / "bom_items.csv").unlink()

    with pytest.raises(MissingSourceError):
        _record_asm1(data_dir)

    assert not (data_dir / "build_history.csv").exists()
    assert not (data_dir / "panel_history.csv").exists()
    assert not (data_dir / build_services.PENDING_BUILD_FILENAME).exists()


def test_missing_directory_is_error(tmp_path):
    with pytest.raises(DataIOError):
        _record_asm1(tmp_path / "missing")


def test_commit_failure_is_replayed_by_next_build(data_dir, monkeypatch):
    real_write_stock = catalog_services.write_stock

    def _fail(directory, stock):
        raise DataIOError("Failed to write stock", path=directory)

    monkeypatch.setattr(catalog_services, "write_stock", _fail)
    with pytest.raises(DataIOError):
        _record_asm1(data_dir, 1.0)

    # History went out, stock did not: the intent is still staged.
    assert len(build_services.load_build_history(data_dir)) == 1
    assert (data_dir / build_services.PENDING_BUILD_FILENAME).exists()
    assert _on_hand(catalog_services.load_data(data_dir)) == {"P-1": 10.0, "P-2": 3.0}

    monkeypatch.setattr(catalog_services, "write_stock", real_write_stock)
    snapshot = _record_asm1(data_dir, 1.0)

    assert _on_hand(snapshot) == {"P-1": 6.0, "P-2": 1.0}
    assert len(build_services.load_build_history(data_dir)) == 2
    assert len(build_services.load_panel_history(data_dir)) == 2
    assert not (data_dir / build_services.PENDING_BUILD_FILENAME).exists()


def test_failure_between_logs_does_not_duplicate_on_replay(data_dir, monkeypatch):
    real_append = build_services.append_record

    def _fail_panel(directory, sink, record):
        if sink is build_services.PANEL_HISTORY:
            raise DataIOError("Failed to append", path=sink.path(directory))
        return real_append(directory, sink, record)

    monkeypatch.setattr(build_services, "append_record", _fail_panel)
    with pytest.raises(DataIOError):
        _record_asm1(data_dir, 1.0)
    monkeypatch.setattr(build_services, "append_record", real_append)

    replayed = build_services.recover_pending_build(data_dir)

    assert replayed is not None
    assert [r.id for r in build_services.load_build_history(data_dir)] == [replayed.id]
    assert [r.id for r in build_services.load_panel_history(data_dir)] == [replayed.id]
    assert _on_hand(catalog_services.load_data(data_dir)) == {"P-1": 8.0, "P-2": 2.0}


def test_recover_with_nothing_staged(data_dir):
    assert build_services.recover_pending_build(data_dir) is None


def test_concurrent_builds_do_not_lose_updates(data_dir):
    errors = []

    def _build():
        try:
            _record_asm1(data_dir, 1.0)
        except Exception as exc:  # noqa: BLE001 - surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=_build) for _ in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert _on_hand(catalog_services.load_data(data_dir)) == {"P-1": 4.0, "P-2": 0.0}
    assert len(build_services.load_build_history(data_dir)) == 3
    assert len(build_services.load_panel_history(data_dir)) == 3
