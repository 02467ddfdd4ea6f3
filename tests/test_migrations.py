from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect, text


def _make_alembic_config(db_url: str) -> Config:
    repo_root = Path(__file__).resolve().parents[1]
    config = Config(str(repo_root / "alembic.ini"))
    config.set_main_option("sqlalchemy.url", db_url)
    return config


def test_alembic_upgrade_and_downgrade(tmp_path) -> None:
    db_url = f"sqlite:///{tmp_path / 'migrations.db'}"
    config = _make_alembic_config(db_url)
    script = ScriptDirectory.from_config(config)
    head_revision = script.get_current_head()
    assert head_revision is not None

    migration_engine = create_engine(db_url)
    try:
        with migration_engine.begin() as connection:
            config.attributes["connection"] = connection
            command.upgrade(config, "head")

            inspector = inspect(connection)
            assert {"users", "galleries", "images"} <= set(inspector.get_table_names())
            image_columns = {column["name"] for column in inspector.get_columns("images")}
            assert {"filename", "thumbnail_filename", "original_filename", "mime_type", "file_size", "width", "height", "uploaded_at"} <= image_columns
            version = connection.execute(text("SELECT version_num FROM alembic_version")).scalar_one()
            assert version == head_revision

            command.downgrade(config, "base")

            inspector = inspect(connection)
            assert not inspector.has_table("images")
            if inspector.has_table("alembic_version"):
                remaining = connection.execute(text("SELECT COUNT(*) FROM alembic_version")).scalar_one()
                assert remaining == 0
    finally:
        migration_engine.dispose()
