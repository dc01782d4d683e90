from argparse import Namespace
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from queuewise.core.db import Base
import queuewise.models  # noqa: F401

ROOT = Path(__file__).resolve().parents[1]


def _alembic_config(db_path) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    cfg.cmd_opts = Namespace(x=[f"db_url=sqlite+aiosqlite:///{db_path}"])
    return cfg


def test_initial_revision_matches_models(tmp_path):
    db_path = tmp_path / "migrated.db"
    cfg = _alembic_config(db_path)

    command.upgrade(cfg, "head")
    engine = create_engine(f"sqlite:///{db_path}")
    try:
        tables = set(inspect(engine).get_table_names()) - {"alembic_version"}
        assert tables == set(Base.metadata.tables)

        patient_uniques = inspect(engine).get_unique_constraints("patients")
        assert any(
            set(u["column_names"]) == {"clinic_id", "doctor_id", "booking_day", "queue_number"}
            for u in patient_uniques
        )
    finally:
        engine.dispose()

    command.downgrade(cfg, "base")
    engine = create_engine(f"sqlite:///{db_path}")
    try:
        assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
    finally:
        engine.dispose()
