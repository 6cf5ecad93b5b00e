from __future__ import annotations

import app.database.db as db_module
from app.database.init_db import init_db
from app.database.models import ActivityLog, Base


def test_model_metadata_contains_conversion_tables():
    expected = {"leads", "customers", "properties", "proposals", "activity_logs"}
    assert expected.issubset(set(Base.metadata.tables.keys()))


def test_activity_metadata_column_keeps_original_name():
    assert "metadata" in ActivityLog.__table__.columns
    assert ActivityLog.__table__.columns["metadata"] is ActivityLog.details.property.columns[0]


def test_init_db_creates_tables_on_given_url(tmp_path):
    original_url = db_module.get_active_database_url()
    try:
        tables = init_db(f"sqlite:///{tmp_path / 'init.db'}")
    finally:
        db_module.reset_engine(original_url)
    assert "proposals" in tables
    assert (tmp_path / "init.db").exists()
