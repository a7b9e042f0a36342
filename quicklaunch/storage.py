"""
Persistent usage weights of launched desktop entries.

Records live in a single SQLite file. Each kind of record has its own
collection tag, so that different kinds can share the file without their
keys colliding. Records are stored as JSON text.
"""
# Stdlib
import json
import os
import sqlite3

# Quicklaunch package
from . import logger

# Largest weight a record can hold (unsigned 8-bit counter)
WEIGHT_MAX = 255

SCHEMA = """
    CREATE TABLE IF NOT EXISTS records (
        collection TEXT NOT NULL,
        key BLOB NOT NULL,
        value TEXT NOT NULL,
        PRIMARY KEY (collection, key)
    )
"""

class StorageError(Exception):
    """
    Used to indicate that the usage store could not be read or written.
    """
    pass

class UsageRecord(object):
    """
    The persisted part of a desktop entry together with its usage `weight`.
    """
    COLLECTION = 'desktop_entry'

    def __init__(self, name, icon, path, weight=0):
        if not 0 <= weight <= WEIGHT_MAX:
            raise ValueError('weight must be in range 0..{0}'.format(WEIGHT_MAX))
        self.name = name
        self.icon = icon
        self.path = path
        self.weight = weight

    def __repr__(self):
        return 'UsageRecord({0!r}, {1!r}, {2!r}, {3!r})'.format(
            self.name, self.icon, self.path, self.weight)

    def __eq__(self, other):
        if not isinstance(other, UsageRecord):
            return NotImplemented
        return vars(self) == vars(other)

    @staticmethod
    def make_key(name):
        return name.encode('utf-8')

    def get_key(self):
        return self.make_key(self.name)

    def to_dict(self):
        return {'name': self.name, 'icon': self.icon,
                'path': self.path, 'weight': self.weight}

    @classmethod
    def from_dict(cls, data):
        return cls(data['name'], data['icon'], data['path'], data['weight'])

def next_weight(record):
    """
    Return the weight for the next launch of an entry whose current record
    is `record`. An entry without a record starts with weight 0. The result
    saturates at `WEIGHT_MAX`.
    """
    if record is None:
        return 0
    return min(record.weight + 1, WEIGHT_MAX)

def persist_usage(store, entry):
    """
    Record a launch of the given desktop `entry` inside `store` and return
    the record that was written.
    """
    current = store.get(UsageRecord, UsageRecord.make_key(entry.name))
    record = UsageRecord(entry.name, entry.icon or '',
                         entry.source_path, next_weight(current))
    logger.debug('Inserting {0!r} in {1}'.format(record, UsageRecord.COLLECTION))
    store.put(record)
    return record

class UsageStore(object):
    """
    A small key-value store on top of a SQLite database file.

    The file is not created before the first write, so that looking up a
    key on a missing file just means that nothing is stored yet. Any
    failure to access the file is raised as `StorageError`.
    """
    def __init__(self, path):
        self.path = path
        self._conn = None

    def _connect(self, create):
        if self._conn is not None:
            return self._conn
        if not create and not os.path.exists(self.path):
            return None
        conn = None
        try:
            dirname = os.path.dirname(self.path)
            if dirname and not os.path.isdir(dirname):
                os.makedirs(dirname)
            conn = sqlite3.connect(self.path)
            conn.execute('PRAGMA journal_mode=WAL')
            with conn:
                conn.execute(SCHEMA)
        except (sqlite3.Error, OSError) as error:
            if conn is not None:
                conn.close()
            raise StorageError('Unable to open {0!r}: {1}'.format(self.path, error))
        logger.debug('Opened usage store {0!r}'.format(self.path))
        self._conn = conn
        return conn

    def get(self, record_type, key):
        """
        Return the record of `record_type` stored under the given `key` or
        `None` if there is no such record.
        """
        conn = self._connect(create=False)
        if conn is None:
            return None
        try:
            row = conn.execute(
                'SELECT value FROM records WHERE collection = ? AND key = ?',
                (record_type.COLLECTION, key)).fetchone()
        except sqlite3.Error as error:
            raise StorageError('Unable to read {0!r}: {1}'.format(self.path, error))
        if row is None:
            return None
        return self._decode(record_type, row[0])

    def put(self, record):
        """
        Insert `record` or replace the record with the same key. The write
        is done inside a transaction, so it either happens completely or
        not at all.
        """
        value = json.dumps(record.to_dict())
        conn = self._connect(create=True)
        try:
            with conn:
                conn.execute(
                    'INSERT OR REPLACE INTO records (collection, key, value) '
                    'VALUES (?, ?, ?)',
                    (record.COLLECTION, record.get_key(), value))
        except sqlite3.Error as error:
            raise StorageError('Unable to write {0!r}: {1}'.format(self.path, error))

    def iter_records(self, record_type):
        """
        Iterate over all records of `record_type` in the store.
        """
        conn = self._connect(create=False)
        if conn is None:
            return
        try:
            rows = conn.execute(
                'SELECT value FROM records WHERE collection = ? ORDER BY key',
                (record_type.COLLECTION,)).fetchall()
        except sqlite3.Error as error:
            raise StorageError('Unable to read {0!r}: {1}'.format(self.path, error))
        for row in rows:
            yield self._decode(record_type, row[0])

    def load_weights(self):
        """
        Return a dictionary mapping each stored desktop entry's name to its
        usage weight.
        """
        return dict((record.name, record.weight)
                    for record in self.iter_records(UsageRecord))

    def _decode(self, record_type, value):
        try:
            return record_type.from_dict(json.loads(value))
        except (ValueError, KeyError, TypeError) as error:
            msg = 'Corrupt {0} record in {1!r}: {2}'
            raise StorageError(msg.format(record_type.COLLECTION, self.path, error))

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None
