"""The Alembic migration produces the schema the models declare."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from campus_threads.db.session import Base

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def test_upgrade_head_builds_model_schema(tmp_path, monkeypatch) -> None:
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    monkeypatch.setenv("ALEMBIC_URL", url)
    config = Config()
    config.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))

    command.upgrade(config, "head")

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        assert set(inspector.get_table_names()) - {"alembic_version"} == set(Base.metadata.tables)
        parent_fk = next(
            fk for fk in inspector.get_foreign_keys("post") if fk["constrained_columns"] == ["parent_post_id"]
        )
        assert parent_fk["options"].get("ondelete") == "CASCADE"
    finally:
        engine.dispose()
