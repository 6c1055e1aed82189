from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src" / "self_attendance"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config import get_settings_module

from self_attendance.database.bootstrap import apply_schema, list_tables
from self_attendance.main import configure_logging

logger = logging.getLogger("init_db")


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    tables = list_tables(db_config)
    logger.info(
        "Applied schema.sql -> %s@%s:%s/%s (tables=%d)",
        db_config.get("user"), db_config.get("host"), db_config.get("port", 3306),
        db_config.get("database"), len(tables),
    )


if __name__ == "__main__":
    main()
