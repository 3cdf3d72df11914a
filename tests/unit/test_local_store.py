from __future__ import annotations

import json

import pytest

from clinic_import.store import LocalJsonStore, StoreError


def test_list_missing_file_is_empty(tmp_path):
    assert LocalJsonStore(tmp_path / "store").list("patients") == []


def test_save_then_list(tmp_path):
    store = LocalJsonStore(tmp_path / "store")
    store.save("patients", {"id": "P-1", "lastName": "MARTIN"})
    store.save("patients", {"id": "P-2", "lastName": "DUPONT"})
    assert [r["id"] for r in store.list("patients")] == ["P-1", "P-2"]

    path = tmp_path / "store" / "cmhe_patients.json"
    assert json.loads(path.read_text(encoding="utf-8"))[0]["lastName"] == "MARTIN"
    assert list((tmp_path / "store").glob("*.tmp")) == []


def test_save_replaces_same_id(tmp_path):
    store = LocalJsonStore(tmp_path)
    store.save("expenses", {"id": "E-1", "amount": 10})
    store.save("expenses", {"id": "E-1", "amount": 12})
    assert store.list("expenses") == [{"id": "E-1", "amount": 12}]


def test_save_without_id(tmp_path):
    with pytest.raises(StoreError):
        LocalJsonStore(tmp_path).save("expenses", {"amount": 10})


def test_unknown_entity(tmp_path):
    with pytest.raises(StoreError, match="unknown entity"):
        LocalJsonStore(tmp_path).list("appointments")


def test_delete_and_delete_bulk(tmp_path):
    store = LocalJsonStore(tmp_path)
    for i in range(4):
        store.save("invoices", {"id": f"I-{i}"})
    store.delete("invoices", "I-0")
    store.delete_bulk("invoices", ["I-1", "I-3", "absent"])
    assert store.list("invoices") == [{"id": "I-2"}]


def test_corrupt_file(tmp_path):
    (tmp_path / "cmhe_patients.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreError):
        LocalJsonStore(tmp_path).list("patients")


def test_file_not_a_list(tmp_path):
    (tmp_path / "cmhe_patients.json").write_text('{"id": "P-1"}', encoding="utf-8")
    with pytest.raises(StoreError, match="record list"):
        LocalJsonStore(tmp_path).list("patients")


def test_non_ascii_kept(tmp_path):
    store = LocalJsonStore(tmp_path)
    store.save("expenses", {"id": "E-1", "description": "Dépense importée"})
    assert "Dépense importée" in (tmp_path / "cmhe_expenses.json").read_text(encoding="utf-8")
