"""
Derived view state over the fetched asset list.

Everything here is pure: it takes the rows the data client returned and
hands back new lists, never touching the store.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import config


def is_accessory(asset_type: Optional[str]) -> bool:
    return asset_type in config.ACCESSORY_TYPES


def classify(assets: Iterable[dict]) -> Tuple[List[dict], List[dict]]:
    """Split assets into (main_assets, accessories), keeping input order."""
    main_assets, accessories = [], []
    for asset in assets:
        if is_accessory(asset.get("type")):
            accessories.append(asset)
        else:
            main_assets.append(asset)
    return main_assets, accessories


def _matches(asset: dict, needle: str, status: str) -> bool:
    if status != config.STATUS_FILTER_ALL and asset.get("status") != status:
        return False
    if not needle:
        return True
    name = (asset.get("name") or "").lower()
    serial = (asset.get("serial_number") or "").lower()
    return needle in name or needle in serial


def filter_assets(assets: Iterable[dict], query: str = "", status: str = config.STATUS_FILTER_ALL) -> List[dict]:
    """
    Free-text and status filter.

    The query is matched case-insensitively as a substring of the name or the
    serial number; a missing serial counts as an empty string. ``All`` lets
    every status through.
    """
    needle = (query or "").lower()
    return [a for a in assets if _matches(a, needle, status)]


# --- GROUPING ---
@dataclass
class AssetGroup:
    type: str
    assets: List[dict]
    expanded: bool

    @property
    def count(self) -> int:
        return len(self.assets)


@dataclass
class GroupState:
    """Which type groups are expanded. One flag per type, toggled independently."""

    open_types: set = field(default_factory=lambda: set(config.DEFAULT_OPEN_GROUPS))

    def is_open(self, asset_type: str) -> bool:
        return asset_type in self.open_types

    def toggle(self, asset_type: str) -> bool:
        if asset_type in self.open_types:
            self.open_types.discard(asset_type)
        else:
            self.open_types.add(asset_type)
        return self.is_open(asset_type)


def group_by_type(assets: Iterable[dict], state: Optional[GroupState] = None) -> List[AssetGroup]:
    """One group per type present, sorted by type name. Types with no members never appear."""
    state = state or GroupState()
    members = {}
    for asset in assets:
        members.setdefault(asset.get("type") or "", []).append(asset)
    return [AssetGroup(t, members[t], state.is_open(t)) for t in sorted(members)]


# --- COUNTERS ---
@dataclass(frozen=True)
class StatusCounts:
    total: int = 0
    available: int = 0
    in_use: int = 0
    maintenance: int = 0


def count_statuses(assets: Iterable[dict]) -> StatusCounts:
    # Accessories are not counted on the dashboard
    main_assets, _ = classify(assets)
    statuses = [a.get("status") for a in main_assets]
    return StatusCounts(
        total=len(main_assets),
        available=statuses.count(config.STATUS_AVAILABLE),
        in_use=statuses.count(config.STATUS_IN_USE),
        maintenance=statuses.count(config.STATUS_MAINTENANCE),
    )


def assets_for_employee(assets: Iterable[dict], employee: dict) -> List[dict]:
    return [a for a in assets if a.get("employee_id") is not None and a.get("employee_id") == employee.get("id")]
