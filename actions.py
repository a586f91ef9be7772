"""
User actions against the store.

Each action performs one remote mutation, appends a history event where the
action is status-changing, and returns the row the store confirmed so the
caller can patch its snapshot instead of refetching everything.
"""

import logging

import config
from assignment import build_asset_patch
from database import DataClientError
from history import HistoryRecorder
from navigation import View

logger = logging.getLogger(__name__)


def blank_asset(view=None):
    """A new, unsaved asset (id 0) for the create form."""
    default_type = "Keyboard" if view == View.ACCESSORIES else "Laptop"
    return {
        "id": 0,
        "name": "",
        "type": default_type,
        "status": config.STATUS_AVAILABLE,
        "serial_number": "",
        "employee_id": None,
        "assigned_to": None,
    }


def blank_employee():
    return {"id": 0, "full_name": "", "role": "", "department": ""}


class Snapshot:
    """The view's local copy of one table, ordered by id."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.rows = []
        self.loaded = False

    def refresh(self):
        self.rows = self.db.select_all(self.table, order_by="id")
        self.loaded = True
        return self.rows

    def ensure_loaded(self):
        if not self.loaded:
            self.refresh()
        return self.rows

    def apply(self, row):
        rows = [r for r in self.rows if r["id"] != row["id"]]
        rows.append(row)
        self.rows = sorted(rows, key=lambda r: r["id"])
        return row

    def discard(self, row_id):
        self.rows = [r for r in self.rows if r["id"] != row_id]

    def recover(self):
        """Fallback after a failed mutation: refetch, keeping the old copy if that fails too."""
        try:
            self.refresh()
        except DataClientError as e:
            logger.error("Refetch of %s failed: %s", self.table, e)


class AssetActions:
    def __init__(self, db, history=None):
        self.db = db
        self.history = history or HistoryRecorder(db)

    def save(self, form, employees):
        patch = build_asset_patch(form, employees)
        if not form.get("id"):
            return self.db.insert(config.TABLE_ASSETS, patch)
        return self.db.update_by_id(config.TABLE_ASSETS, form["id"], patch)

    def delete(self, asset_id):
        return self.db.delete_by_id(config.TABLE_ASSETS, asset_id)

    def check_in(self, asset):
        row = self.db.update_by_id(
            config.TABLE_ASSETS, asset["id"], {"status": config.STATUS_AVAILABLE, "employee_id": None}
        )
        self.history.record(asset["id"], config.ACTION_RETURNED, f"Returned from {asset.get('assigned_to')}")
        return row

    def mark_maintenance(self, asset):
        row = self.db.update_by_id(
            config.TABLE_ASSETS, asset["id"], {"status": config.STATUS_MAINTENANCE, "employee_id": None}
        )
        self.history.record(asset["id"], config.ACTION_MAINTENANCE, config.MAINTENANCE_DETAILS)
        return row


class EmployeeActions:
    def __init__(self, db):
        self.db = db

    def save(self, form):
        row = {
            "full_name": (form.get("full_name") or "").strip(),
            "role": (form.get("role") or "").strip(),
            "department": (form.get("department") or "").strip(),
        }
        if not form.get("id"):
            return self.db.insert(config.TABLE_EMPLOYEES, row)
        return self.db.update_by_id(config.TABLE_EMPLOYEES, form["id"], row)

    def delete(self, employee_id):
        # Assets held by the employee fall back to unassigned (ON DELETE SET NULL)
        return self.db.delete_by_id(config.TABLE_EMPLOYEES, employee_id)
