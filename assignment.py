"""
Rules for the "assigned to" field of an asset.

Only a main asset that is In Use may carry an assignee. The form uses
``assignment_locked`` to disable the field as status or type change, and
``build_asset_patch`` recomputes the value at save time so a stale form can
never persist an assignee the rules forbid.
"""

from typing import Iterable, Optional

import config
from database import ValidationError
from inventory import is_accessory


def assignment_locked(status: str, asset_type: str) -> bool:
    return is_accessory(asset_type) or status != config.STATUS_IN_USE


def coerce_assigned_to(status: str, asset_type: str, assigned_to: Optional[str]) -> Optional[str]:
    """The assignee to persist: the given name when editable, otherwise None."""
    if assignment_locked(status, asset_type):
        return None
    return (assigned_to or "").strip() or None


def status_options(asset_type: str):
    if is_accessory(asset_type):
        return [s for s in config.STATUSES if s != config.STATUS_IN_USE]
    return list(config.STATUSES)


def resolve_employee_id(full_name: Optional[str], employees: Iterable[dict]) -> Optional[int]:
    if not full_name:
        return None
    for employee in employees:
        if employee.get("full_name") == full_name:
            return employee["id"]
    raise ValidationError(f"Unknown employee: {full_name}")


def build_asset_patch(form: dict, employees: Iterable[dict]) -> dict:
    """
    Turn the asset form into the row written to the store.

    Args:
        form: name, type, status, serial_number and assigned_to as entered
        employees: the currently known employee rows

    Raises:
        ValidationError: the form names an assignee who is not a known employee
    """
    status = form.get("status") or config.STATUS_AVAILABLE
    asset_type = form.get("type")
    assigned_to = coerce_assigned_to(status, asset_type, form.get("assigned_to"))
    return {
        "name": (form.get("name") or "").strip(),
        "type": asset_type,
        "status": status,
        "serial_number": (form.get("serial_number") or "").strip(),
        "employee_id": resolve_employee_id(assigned_to, employees),
    }
