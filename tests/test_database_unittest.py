import os
import sqlite3
import tempfile
import unittest
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import database
from database import DatabaseManager, LocalStore


class _BrokenDb:
    def connect(self):
        raise sqlite3.OperationalError('disk I/O error')


class DatabaseTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.tmpdir.name, 'pos.db')
        self.mgr = DatabaseManager(db_name=self.db_path)
        self.store = LocalStore(self.mgr)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_check_schema_creates_tables(self):
        conn = self.mgr.connect()
        cur = conn.cursor()
        cur.execute("SELECT name FROM sqlite_master WHERE type='table'")
        names = {r[0] for r in cur.fetchall()}
        conn.close()
        self.assertIn('local_storage', names)

    def test_missing_key_returns_default_copy(self):
        default = [{'a': 1}]
        value = self.store.read('missing', default)
        self.assertEqual(value, default)
        value[0]['a'] = 2
        self.assertEqual(default, [{'a': 1}])

    def test_write_then_read(self):
        self.assertTrue(self.store.write('pos_lang', 'ar'))
        self.assertEqual(self.store.read('pos_lang', 'en'), 'ar')
        self.assertTrue(self.store.write('pos_lang', 'en'))
        self.assertEqual(LocalStore(DatabaseManager(db_name=self.db_path)).read('pos_lang', 'x'), 'en')

    def test_unicode_survives(self):
        self.store.write('names', ['حليب 1 لتر'])
        self.assertEqual(self.store.read('names', []), ['حليب 1 لتر'])

    def test_corrupt_value_falls_back_to_default(self):
        conn = self.mgr.connect()
        conn.execute("INSERT INTO local_storage (key, value, updated_at) VALUES (?, ?, ?)",
                     ('pos_products', '{not json', '2026-01-01 00:00:00'))
        conn.commit()
        conn.close()
        with self.assertLogs(database.logger, level='WARNING'):
            self.assertEqual(self.store.read('pos_products', []), [])

    def test_read_checked_reports_unreadable_records(self):
        self.assertEqual(self.store.read_checked('missing', 1), (1, True))
        self.store.write('ok', [1, 2])
        self.assertEqual(self.store.read_checked('ok', []), ([1, 2], True))
        conn = self.mgr.connect()
        conn.execute("INSERT INTO local_storage (key, value, updated_at) VALUES (?, ?, ?)",
                     ('bad', 'not json', '2026-01-01 00:00:00'))
        conn.commit()
        conn.close()
        with self.assertLogs(database.logger, level='WARNING'):
            self.assertEqual(self.store.read_checked('bad', []), ([], False))
        with self.assertLogs(database.logger, level='ERROR'):
            self.assertEqual(LocalStore(_BrokenDb()).read_checked('ok', []), ([], False))

    def test_unreadable_store_degrades_to_default(self):
        store = LocalStore(_BrokenDb())
        with self.assertLogs(database.logger, level='ERROR'):
            self.assertEqual(store.read('pos_lang', 'en'), 'en')
        with self.assertLogs(database.logger, level='ERROR'):
            self.assertFalse(store.write('pos_lang', 'ar'))


class CommitRetryTests(unittest.TestCase):
    def test_commit_with_retry_raises_after_retries(self):
        class LockedConn:
            calls = 0

            def commit(self):
                LockedConn.calls += 1
                raise sqlite3.OperationalError('database is locked')

        with self.assertRaises(sqlite3.OperationalError):
            database.commit_with_retry(LockedConn(), retries=2, initial_delay=0)
        self.assertEqual(LockedConn.calls, 2)

    def test_commit_with_retry_reraises_other_errors(self):
        class BadConn:
            def commit(self):
                raise sqlite3.OperationalError('no such table')

        with self.assertRaises(sqlite3.OperationalError):
            database.commit_with_retry(BadConn(), retries=3, initial_delay=0)


if __name__ == '__main__':
    unittest.main()
