"""Run Alembic migrations for the PostgreSQL remote store programmatically."""

import io
import logging
from pathlib import Path

from alembic.config import Config as AlembicConfig
from sqlalchemy.engine import URL

from alembic import command
from tripsync.config import Config, get_config
from tripsync.remote.postgres import load_credentials

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[3]


def database_url(config: Config) -> str:
    creds = load_credentials(config)
    url = URL.create(
        "postgresql+psycopg",
        username=creds.get("username", creds.get("user", config.postgres_user)),
        password=creds.get("password", config.postgres_password),
        host=creds.get("host", config.postgres_host),
        port=int(creds.get("port", config.postgres_port)),
        database=creds.get("dbname", config.postgres_database),
    )
    return url.render_as_string(hide_password=False)


def run_schema_migrations(
    config: Config | None = None,
    revision: str = "head",
    alembic_ini: Path | None = None,
) -> dict[str, str]:
    config = config or get_config()
    ini_path = alembic_ini or _PROJECT_ROOT / "alembic.ini"

    cfg = AlembicConfig(str(ini_path))
    cfg.set_main_option("script_location", str(ini_path.parent / "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url(config).replace("%", "%%"))

    stderr_buf = io.StringIO()
    stream_handler = logging.StreamHandler(stderr_buf)
    alembic_logger = logging.getLogger("alembic")
    alembic_logger.addHandler(stream_handler)

    try:
        command.upgrade(cfg, revision)
        output = stderr_buf.getvalue()
        logger.info("Schema migration complete: %s", output)
        return {"status": "success", "output": output}
    except Exception as e:
        logger.error("Schema migration failed: %s", e)
        raise
    finally:
        alembic_logger.removeHandler(stream_handler)
