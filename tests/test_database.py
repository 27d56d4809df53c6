"""
Tests for table creation used at startup and by migrate.py.
"""

from unittest.mock import patch

import pytest
from sqlalchemy import create_engine, inspect

import migrate
from database import verify_tables_exist


def test_creates_missing_tables_once():
    engine = create_engine("sqlite://")

    created = verify_tables_exist(engine)

    assert set(created) == {"users", "student_profiles", "saved_programs", "public_programs"}
    assert set(inspect(engine).get_table_names()) >= set(created)
    assert verify_tables_exist(engine) == []


def test_migration_creates_tables_and_disposes_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'migrate.db'}")

    with patch("migrate.get_engine", return_value=engine), \
            patch.object(engine, "dispose", wraps=engine.dispose) as dispose:
        migrate.create_tables()

    dispose.assert_called_once()
    assert {"users", "student_profiles", "saved_programs", "public_programs"} <= set(
        inspect(engine).get_table_names()
    )


def test_migration_disposes_engine_on_failure():
    engine = create_engine("sqlite://")

    with patch("migrate.get_engine", return_value=engine), \
            patch("migrate.verify_tables_exist", side_effect=RuntimeError("db down")), \
            patch.object(engine, "dispose") as dispose:
        with pytest.raises(RuntimeError):
            migrate.create_tables()

    dispose.assert_called_once()
