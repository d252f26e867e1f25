"""Per-request SQLite connection for route handlers."""

from fastapi import Request

from db.models import get_db


def get_conn(request: Request):
    """Scoped DB connection on the database the app was built with."""
    conn = get_db(request.app.state.db_path)
    try:
        yield conn
    finally:
        conn.close()
