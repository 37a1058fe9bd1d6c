"""
PostgreSQL connection helper.
Provides get_db() for use by services.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

import psycopg2
from psycopg2.extras import RealDictCursor

from backend import config


@contextmanager
def get_db() -> Iterator["psycopg2.extensions.connection"]:
    """
    Open a psycopg2 connection with dictionary-based row access.

    The block runs inside one transaction: it is committed when the block
    exits normally and rolled back if it raises. The connection is always
    closed afterwards.

    Usage:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(...)

    Raises:
        RuntimeError: If DATABASE_URL is not configured.
        psycopg2.Error: If the connection or the transaction fails.
    """
    if not config.DATABASE_URL:
        raise RuntimeError("DATABASE_URL is not set. Please set the environment variable.")

    try:
        # Rows come back as plain dicts (e.g., {"user_id": 1, "email": "..."})
        conn = psycopg2.connect(config.DATABASE_URL, cursor_factory=RealDictCursor)
    except psycopg2.Error as e:
        logging.error(f"Error connecting to database: {e}")
        raise

    try:
        with conn:
            yield conn
    finally:
        conn.close()
