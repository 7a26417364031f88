import copy
import json
import logging
import os
import sqlite3
import time
from datetime import datetime

logger = logging.getLogger(__name__)

# Use a DB file located next to this module so the terminal keeps its data
# regardless of the current working directory when launched.
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DB_NAME = os.environ.get('POS_DB_PATH') or os.path.join(BASE_DIR, "pos_terminal.db")


def commit_with_retry(conn, retries=6, initial_delay=0.5):
    """Attempt to commit, retrying on `sqlite3.OperationalError: database is locked`.

    Retries use exponential backoff (initial_delay * 2**attempt).
    """
    last_exc = None
    for attempt in range(retries):
        try:
            conn.commit()
            return
        except sqlite3.OperationalError as e:
            last_exc = e
            msg = str(e).lower()
            if 'locked' in msg or 'busy' in msg:
                time.sleep(initial_delay * (2 ** attempt))
                continue
            raise
    raise last_exc


class DatabaseManager:
    def __init__(self, db_name=DB_NAME):
        self.db_name = db_name
        self.check_schema()

    def connect(self):
        conn = sqlite3.connect(self.db_name, timeout=30)
        conn.row_factory = sqlite3.Row
        return conn

    def check_schema(self):
        conn = self.connect()
        try:
            c = conn.cursor()
            try:
                c.execute('PRAGMA journal_mode=WAL')
                c.execute('PRAGMA busy_timeout = 30000')
            except sqlite3.DatabaseError:
                logger.warning("Could not enable WAL mode on %s", self.db_name)

            # One row per named record; value holds the JSON text
            c.execute('''CREATE TABLE IF NOT EXISTS local_storage (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )''')
            conn.commit()
        finally:
            conn.close()


class LocalStore:
    """Key/value records persisted as JSON text.

    Reads fall back to the supplied default when a record is missing or
    unreadable; writes report failure instead of raising. Callers keep
    their in-memory state either way.
    """

    def __init__(self, db):
        self.db = db

    def read(self, key, default):
        return self.read_checked(key, default)[0]

    def read_checked(self, key, default):
        """Like read(), but returns (value, ok).

        ok is False when a stored record exists but could not be read, so the
        caller knows the default stands in for data that is still on disk.
        A missing record is not an error.
        """
        try:
            conn = self.db.connect()
            try:
                row = conn.execute("SELECT value FROM local_storage WHERE key=?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error:
            logger.exception("Failed to read %r from local storage; using default", key)
            return copy.deepcopy(default), False

        if row is None:
            return copy.deepcopy(default), True
        try:
            return json.loads(row['value']), True
        except ValueError:
            logger.warning("Stored value for %r is corrupt; using default", key)
            return copy.deepcopy(default), False

    def write(self, key, value):
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError):
            logger.exception("Value for %r is not serializable; not saved", key)
            return False

        try:
            conn = self.db.connect()
            try:
                conn.execute(
                    "INSERT OR REPLACE INTO local_storage (key, value, updated_at) VALUES (?, ?, ?)",
                    (key, payload, datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
                )
                commit_with_retry(conn)
            finally:
                conn.close()
        except sqlite3.Error:
            logger.exception("Failed to write %r to local storage", key)
            return False
        return True
