from __future__ import annotations
import logging
from contextlib import contextmanager

import mysql.connector

from dbscript.config import ConnectionSettings

log = logging.getLogger(__name__)


@contextmanager
def connection(settings: ConnectionSettings):
    """
    Context‑manager that yields an open connection for *settings*.

    The connection runs in autocommit mode: every statement (or batch) is
    applied as soon as the server accepts it, so a failure part way
    through leaves everything before it in place.
    """
    log.info(
        "Connecting to %s:%s as %r (%s)",
        settings.host, settings.port, settings.user, settings.role,
    )
    conn = mysql.connector.connect(**settings.dsn(), autocommit=True)
    try:
        yield conn
    finally:
        conn.close()
