from __future__ import annotations

import pytest

import config
from actions import AssetActions, EmployeeActions, Snapshot, blank_asset, blank_employee
from database import Database, TransportError, ValidationError
from history import HistoryRecorder
from navigation import View


@pytest.fixture
def actions(db: Database) -> AssetActions:
    return AssetActions(db)


def _form(asset: dict, **changes) -> dict:
    form = dict(asset)
    form.update(changes)
    return form


def test_deploy_then_return(db: Database, actions: AssetActions, make_asset, jane):
    laptop = make_asset(type="Laptop", status="Available")

    deployed = actions.save(_form(laptop, status="In Use", assigned_to="Jane Doe"), [jane])
    assert deployed["assigned_to"] == "Jane Doe"
    assert db.select_all("assets")[0]["assigned_to"] == "Jane Doe"

    returned = actions.check_in(deployed)
    assert returned["status"] == "Available"
    assert returned["assigned_to"] is None

    events = HistoryRecorder(db).timeline(laptop["id"])
    assert [e["action"] for e in events] == ["Returned"]
    assert "Jane Doe" in events[0]["details"]


def test_accessory_never_keeps_assignee(db: Database, actions: AssetActions, make_asset, jane):
    keyboard = make_asset(name="K380", type="Keyboard")
    for status in config.STATUSES:
        row = actions.save(_form(keyboard, status=status, assigned_to="Jane Doe"), [jane])
        assert row["assigned_to"] is None
        assert row["employee_id"] is None


@pytest.mark.parametrize("status", config.STATUSES)
@pytest.mark.parametrize("asset_type", ["Laptop", "Phone", "Monitor", "Cable"])
def test_persisted_assignee_requires_main_asset_in_use(db, actions, make_asset, jane, status, asset_type):
    asset = make_asset(type=asset_type)
    actions.save(_form(asset, type=asset_type, status=status, assigned_to="Jane Doe"), [jane])
    row = db.select_all("assets", filters={"id": asset["id"]})[0]
    expected = status == "In Use" and asset_type in config.MAIN_ASSET_TYPES
    assert bool(row["assigned_to"]) is expected


def test_maintenance_clears_assignee_and_logs(db: Database, actions: AssetActions, make_asset, jane):
    phone = make_asset(name="iPhone 15", type="Phone", status="In Use", employee_id=jane["id"])
    row = actions.mark_maintenance(phone)
    assert row["status"] == "Maintenance"
    assert row["assigned_to"] is None
    events = HistoryRecorder(db).timeline(phone["id"])
    assert events[0]["action"] == "Maintenance"
    assert events[0]["details"] == config.MAINTENANCE_DETAILS


def test_timeline_is_newest_first(db: Database, actions: AssetActions, make_asset, jane):
    laptop = make_asset(status="In Use", employee_id=jane["id"])
    actions.check_in(db.select_all("assets")[0])
    actions.mark_maintenance(laptop)
    assert [e["action"] for e in HistoryRecorder(db).timeline(laptop["id"])] == ["Maintenance", "Returned"]


def test_create_inserts_new_row(db: Database, actions: AssetActions):
    form = _form(blank_asset(View.ALL_ASSETS), name="Dell XPS", serial_number="DX-1")
    row = actions.save(form, [])
    assert row["id"] > 0
    assert row["type"] == "Laptop"
    assert db.select_all("assets") == [row]
    # Creation is not a history trigger
    assert HistoryRecorder(db).timeline(row["id"]) == []


def test_save_rejects_missing_name(db: Database, actions: AssetActions):
    with pytest.raises(ValidationError):
        actions.save(blank_asset(), [])
    assert db.select_all("assets") == []


def test_save_rejects_unknown_assignee(db: Database, actions: AssetActions, make_asset, jane):
    laptop = make_asset()
    with pytest.raises(ValidationError):
        actions.save(_form(laptop, status="In Use", assigned_to="Nobody"), [jane])
    assert db.select_all("assets")[0]["status"] == "Available"


def test_history_failure_does_not_block_check_in(db: Database, actions: AssetActions, make_asset, jane):
    laptop = make_asset(status="In Use", employee_id=jane["id"])
    with db.engine.begin() as conn:
        conn.exec_driver_sql("DROP TABLE asset_history")
    row = actions.check_in(db.select_all("assets")[0])
    assert row["status"] == "Available"
    assert db.select_all("assets", filters={"id": laptop["id"]})[0]["status"] == "Available"


def test_failed_update_leaves_row_untouched(db: Database, actions: AssetActions, make_asset):
    laptop = make_asset()
    with pytest.raises(ValidationError):
        actions.check_in({"id": laptop["id"] + 100, "assigned_to": None})
    assert db.select_all("assets") == [laptop]


def test_delete(db: Database, actions: AssetActions, make_asset):
    laptop = make_asset()
    assert actions.delete(laptop["id"]) is True
    assert db.select_all("assets") == []


def test_blank_forms():
    assert blank_asset(View.ACCESSORIES)["type"] == "Keyboard"
    assert blank_asset(View.DASHBOARD)["type"] == "Laptop"
    assert blank_asset()["id"] == 0
    assert blank_asset()["status"] == "Available"
    assert blank_employee() == {"id": 0, "full_name": "", "role": "", "department": ""}


def test_employee_save_and_update(db: Database):
    employees = EmployeeActions(db)
    created = employees.save(dict(blank_employee(), full_name=" Raj Patel ", role="Designer", department="Product"))
    assert created["full_name"] == "Raj Patel"
    updated = employees.save(dict(created, role="Lead Designer"))
    assert updated["id"] == created["id"]
    assert db.select_all("employees")[0]["role"] == "Lead Designer"


def test_employee_save_requires_name(db: Database):
    with pytest.raises(ValidationError):
        EmployeeActions(db).save(dict(blank_employee(), role="Designer", department="Product"))


def test_employee_delete_unassigns(db: Database, make_asset, jane):
    make_asset(status="In Use", employee_id=jane["id"])
    assert EmployeeActions(db).delete(jane["id"]) is True
    assert db.select_all("assets")[0]["assigned_to"] is None


# --- Snapshot ---
def test_snapshot_refresh_apply_discard(db: Database, make_asset):
    first = make_asset(name="A")
    snap = Snapshot(db, "assets")
    assert snap.ensure_loaded() == [first]

    second = make_asset(name="B")
    assert snap.rows == [first]
    snap.apply(second)
    renamed = dict(first, name="A2")
    snap.apply(renamed)
    assert [r["name"] for r in snap.rows] == ["A2", "B"]

    snap.discard(first["id"])
    assert snap.rows == [second]


class _BrokenStore:
    def select_all(self, table, **kwargs):
        raise TransportError("connection refused")


def test_snapshot_recover_keeps_rows_when_refetch_fails():
    snap = Snapshot(_BrokenStore(), "assets")
    snap.rows = [{"id": 1, "name": "A"}]
    snap.recover()
    assert snap.rows == [{"id": 1, "name": "A"}]
    with pytest.raises(TransportError):
        snap.refresh()
