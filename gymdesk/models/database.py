import json
import logging
import sqlite3
import threading
from contextlib import contextmanager

logger = logging.getLogger(__name__)

# Storage keys (one JSON array per key)
USERS_KEY = 'users'
MEMBERS_KEY = 'gymMembers'
TRAINERS_KEY = 'gymTrainers'
PLANS_KEY = 'gymPlans'
SCHEDULES_KEY = 'gymSchedules'
INVENTORY_KEY = 'gymInventory'

COLLECTION_KEYS = (
    USERS_KEY, MEMBERS_KEY, TRAINERS_KEY, PLANS_KEY, SCHEDULES_KEY, INVENTORY_KEY,
)


def get_db_connection(db_path='gymdesk.db'):
    """Get database connection with row factory"""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def execute_query(query, params=(), db_path='gymdesk.db', fetch=False):
    """Execute a database query with optional parameters"""
    conn = get_db_connection(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute(query, params)
        if fetch:
            return cursor.fetchall()
        conn.commit()
        return cursor.lastrowid
    except sqlite3.Error as e:
        logger.error("DB Error: %s | Query: %s | Params: %s", e, query, params)
        raise
    finally:
        conn.close()


def init_db(db_path='gymdesk.db'):
    """Create the key-value table if it does not exist yet"""
    execute_query('''
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''', db_path=db_path)


class KeyValueStore:
    """
    Flat key -> JSON array storage.

    Subclasses provide raw ``read``/``write``. Everything above that (JSON
    decoding, corruption handling, per-key locking) lives here so every
    backend behaves the same way.

    Locks are per store instance. Two instances over the same backing file
    behave like two browser tabs: each one serialises its own writers, but
    the last writer across instances still wins.
    """

    def __init__(self):
        self._locks = {}
        self._locks_guard = threading.Lock()

    # ---------------------------
    # Raw access (backend specific)
    # ---------------------------
    def read(self, key):
        raise NotImplementedError

    def write(self, key, raw):
        raise NotImplementedError

    # ---------------------------
    # Collections
    # ---------------------------
    def get_collection(self, key):
        """Return the list stored under key; corrupt or missing data reads as []."""
        raw = self.read(key)
        if raw is None or raw == '':
            return []
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding corrupt JSON under key %r", key)
            return []
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            logger.warning("Unexpected shape under key %r; treating as empty", key)
            return []
        return data

    def set_collection(self, key, items):
        self.write(key, json.dumps(list(items)))

    @contextmanager
    def transaction(self, key):
        """Hold the in-process mutex for key for the duration of the block."""
        lock = self._lock_for(key)
        with lock:
            yield

    def update_collection(self, key, fn):
        """Read-modify-write under the key lock. fn receives the list and returns the new one."""
        with self.transaction(key):
            items = fn(self.get_collection(key))
            self.set_collection(key, items)
            return items

    def _lock_for(self, key):
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store (tests and throwaway runs)."""

    def __init__(self, initial=None):
        super().__init__()
        self._data = {}
        for key, items in (initial or {}).items():
            self._data[key] = items if isinstance(items, str) else json.dumps(items)

    def read(self, key):
        return self._data.get(key)

    def write(self, key, raw):
        self._data[key] = raw


class SqliteKeyValueStore(KeyValueStore):
    """Store backed by a single sqlite table."""

    def __init__(self, db_path='gymdesk.db'):
        super().__init__()
        self.db_path = db_path
        init_db(db_path)

    def read(self, key):
        rows = execute_query('SELECT value FROM kv_store WHERE key = ?', (key,), self.db_path, fetch=True)
        return rows[0]['value'] if rows else None

    def write(self, key, raw):
        execute_query('''
            INSERT INTO kv_store (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
        ''', (key, raw), self.db_path)


def insert_default_data(store):
    """Seed each empty collection with the default gym data"""

    if not store.get_collection(PLANS_KEY):
        store.set_collection(PLANS_KEY, [
            {'id': '1', 'name': '1 Month', 'price': 50, 'duration': 30},
            {'id': '2', 'name': '3 Months', 'price': 120, 'duration': 90},
            {'id': '3', 'name': '6 Months', 'price': 200, 'duration': 180},
            {'id': '4', 'name': '9 months', 'price': 230, 'duration': 270},
            {'id': '5', 'name': '1 Year', 'price': 300, 'duration': 365},
        ])
        logger.info("Default plans seeded")

    people = [
        ('101', 'Alice Smith', 'alice@example.com', 'alice', 'password123', '1 Year', '2025-05-15T00:00:00', 'member'),
        ('102', 'Bob Johnson', 'bob@example.com', 'bob', 'password123', '1 Month', '2025-06-20T00:00:00', 'member'),
        ('103', 'Charlie Brown', 'charlie@example.com', 'charlie', 'password123', '3 Months', '2025-07-05T00:00:00', 'member'),
        ('104', 'David Lee', 'david@example.com', 'david', 'password123', '1 Year', '2025-08-12T00:00:00', 'member'),
        ('105', 'Eva Green', 'eva@example.com', 'eva', 'password123', '6 Months', '2025-08-28T00:00:00', 'member'),
        ('106', 'Frank White', 'frank@example.com', 'frank', 'password123', '3 Months', '2025-09-19T00:00:00', 'member'),
        ('107', 'Admin User', 'admin@gym.com', 'admin', 'admin', '1 Year', '2025-01-01T00:00:00', 'admin'),
    ]
    trainers = [
        ('t1', 'Alex Costa', 'alex@gym.com', 'alex', 'trainer123', 'Weightlifting', 50000),
        ('t2', 'Maria Fiori', 'maria@gym.com', 'maria', 'trainer123', 'Yoga & Pilates', 55000),
        ('t3', 'David G.', 'davidg@gym.com', 'davidg', 'trainer123', 'Cardio & HIIT', 48000),
    ]

    if not store.get_collection(USERS_KEY):
        logins = [
            {'id': p[0], 'email': p[2], 'username': p[3], 'password': p[4], 'role': p[7]}
            for p in people
        ]
        logins += [
            {'id': t[0], 'email': t[2], 'username': t[3], 'password': t[4], 'role': 'trainer'}
            for t in trainers
        ]
        store.set_collection(USERS_KEY, logins)
        logger.info("Default user logins seeded")

    if not store.get_collection(MEMBERS_KEY):
        store.set_collection(MEMBERS_KEY, [
            {'id': p[0], 'name': p[1], 'email': p[2], 'plan': p[5],
             'joinDate': p[6], 'planStatus': 'Active'}
            for p in people
        ])
        logger.info("Default member profiles seeded")

    if not store.get_collection(TRAINERS_KEY):
        store.set_collection(TRAINERS_KEY, [
            {'id': t[0], 'name': t[1], 'specialty': t[5], 'salary': t[6]}
            for t in trainers
        ])
        logger.info("Default trainer profiles seeded")

    if not store.get_collection(SCHEDULES_KEY):
        sessions = [
            ('s1', '101', 't1', '2025-11-03', '09:00', '10:00'),
            ('s2', '104', 't1', '2025-11-03', '10:00', '11:00'),
            ('s3', '101', 't1', '2025-11-05', '09:00', '10:00'),
            ('s4', '102', 't2', '2025-11-04', '14:00', '15:00'),
            ('s5', '105', 't2', '2025-11-06', '15:00', '16:00'),
            ('s6', '103', 't3', '2025-11-03', '11:00', '12:00'),
            ('s7', '106', 't3', '2025-11-07', '11:00', '12:00'),
        ]
        store.set_collection(SCHEDULES_KEY, [
            {'id': s[0], 'memberId': s[1], 'trainerId': s[2], 'date': s[3],
             'startTime': s[4], 'endTime': s[5], 'status': 'Confirmed'}
            for s in sessions
        ])
        logger.info("Default schedules seeded")

    if not store.get_collection(INVENTORY_KEY):
        store.set_collection(INVENTORY_KEY, [
            {'id': 'eq1', 'name': 'Treadmill - Model T-1000', 'category': 'Equipment', 'quantity': 5, 'status': 'Operational'},
            {'id': 'eq2', 'name': 'Dumbbell Set (5-50 lbs)', 'category': 'Equipment', 'quantity': 10, 'status': 'Operational'},
            {'id': 'sp1', 'name': 'Protein Bars (Box)', 'category': 'Supplies', 'quantity': 50, 'status': 'In Stock'},
            {'id': 'sp2', 'name': 'Hand Sanitizer (1L)', 'category': 'Supplies', 'quantity': 10, 'status': 'In Stock'},
            {'id': 'eq3', 'name': 'Elliptical Machine', 'category': 'Equipment', 'quantity': 1, 'status': 'Needs Maintenance'},
        ])
        logger.info("Default inventory seeded")
