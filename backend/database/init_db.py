"""
Apply schema.sql to the configured database and check the result.

Run once before starting the gateway:
    python -m backend.database.init_db
"""

import logging
import sys
from pathlib import Path

from backend.database.db_connection import get_db

SCHEMA_PATH = Path(__file__).with_name("schema.sql")
TABLES = ["users", "events"]


def init_db() -> None:
    """
    Create tables and indexes (idempotent), then verify every table exists.

    Raises:
        RuntimeError: If a table is still missing after applying the schema.
    """
    schema = SCHEMA_PATH.read_text(encoding="utf-8")

    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(schema)

            missing = []
            for t in TABLES:
                cur.execute("SELECT to_regclass(%s) AS found;", (t,))
                if cur.fetchone()["found"] is None:
                    missing.append(t)

    if missing:
        raise RuntimeError(f"Tables missing after applying schema: {', '.join(missing)}")

    logging.info(f"Schema applied. Tables present: {', '.join(TABLES)}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")
    try:
        init_db()
    except Exception as e:
        logging.error(f"Database initialization FAILED: {e}")
        sys.exit(1)
