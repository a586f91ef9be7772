from __future__ import annotations

from pathlib import Path

import pytest

from database import Database


@pytest.fixture
def db(tmp_path: Path):
    database = Database(f"sqlite:///{tmp_path / 'equip_track.db'}", echo=False)
    yield database
    database.dispose()


@pytest.fixture
def jane(db: Database) -> dict:
    return db.insert("employees", {"full_name": "Jane Doe", "role": "Developer", "department": "Engineering"})


@pytest.fixture
def make_asset(db: Database):
    def _make(name="ThinkPad X1", type="Laptop", status="Available", serial_number="SN-1", **extra) -> dict:
        row = {"name": name, "type": type, "status": status, "serial_number": serial_number}
        row.update(extra)
        return db.insert("assets", row)

    return _make
