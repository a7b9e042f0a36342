import pytest

from quicklaunch import storage
from quicklaunch.entries import DesktopEntry
from quicklaunch.storage import (WEIGHT_MAX, StorageError, UsageRecord,
                                 UsageStore, next_weight, persist_usage)


class NoteRecord(object):
    COLLECTION = 'note'

    def __init__(self, name, text):
        self.name = name
        self.text = text

    def get_key(self):
        return self.name.encode('utf-8')

    def to_dict(self):
        return {'name': self.name, 'text': self.text}

    @classmethod
    def from_dict(cls, data):
        return cls(data['name'], data['text'])


@pytest.fixture
def store(tmp_path):
    store = UsageStore(str(tmp_path / 'data' / 'usage.db'))
    yield store
    store.close()


def make_entry(name):
    return DesktopEntry(name, '/icons/{0}.png'.format(name), name.lower(),
                        '/apps/{0}.desktop'.format(name))


def test_missing_file_is_an_empty_store(store, tmp_path):
    assert store.get(UsageRecord, b'Firefox') is None
    assert list(store.iter_records(UsageRecord)) == []
    assert store.load_weights() == {}
    assert not (tmp_path / 'data' / 'usage.db').exists()


def test_first_put_creates_the_file(store, tmp_path):
    record = UsageRecord('Firefox', 'firefox.png', '/apps/firefox.desktop', 3)
    store.put(record)
    assert (tmp_path / 'data' / 'usage.db').exists()
    assert store.get(UsageRecord, b'Firefox') == record


def test_records_survive_reopening(tmp_path):
    path = str(tmp_path / 'usage.db')
    first = UsageStore(path)
    first.put(UsageRecord('Files', '', '/apps/files.desktop', 7))
    first.close()
    second = UsageStore(path)
    assert second.load_weights() == {'Files': 7}
    second.close()


def test_put_overwrites_record_with_same_name(store):
    store.put(UsageRecord('Files', '', '/a.desktop', 1))
    store.put(UsageRecord('Files', '', '/b.desktop', 2))
    records = list(store.iter_records(UsageRecord))
    assert records == [UsageRecord('Files', '', '/b.desktop', 2)]


def test_collections_do_not_collide(store):
    store.put(UsageRecord('Files', '', '/apps/files.desktop', 4))
    store.put(NoteRecord('Files', 'hello'))
    assert store.get(UsageRecord, b'Files').weight == 4
    assert store.get(NoteRecord, b'Files').text == 'hello'
    assert store.load_weights() == {'Files': 4}


def test_first_launch_starts_with_zero_then_counts_up(store):
    entry = make_entry('Firefox')
    assert persist_usage(store, entry).weight == 0
    assert persist_usage(store, entry).weight == 1
    record = store.get(UsageRecord, b'Firefox')
    assert record == UsageRecord('Firefox', '/icons/Firefox.png',
                                 '/apps/Firefox.desktop', 1)


def test_weight_saturates(store):
    entry = make_entry('Firefox')
    store.put(UsageRecord('Firefox', '', '/apps/Firefox.desktop', WEIGHT_MAX - 1))
    weights = [persist_usage(store, entry).weight for _ in range(3)]
    assert weights == [WEIGHT_MAX, WEIGHT_MAX, WEIGHT_MAX]


def test_weight_is_monotonic():
    record = None
    previous = -1
    for _ in range(WEIGHT_MAX + 10):
        weight = next_weight(record)
        assert previous <= weight <= WEIGHT_MAX
        previous = weight
        record = UsageRecord('x', '', '/x.desktop', weight)


def test_entry_without_icon_is_stored_with_empty_icon(store):
    entry = DesktopEntry('Terminal', None, 'xterm', '/apps/xterm.desktop')
    assert persist_usage(store, entry).icon == ''


def test_weight_out_of_range():
    with pytest.raises(ValueError):
        UsageRecord('x', '', '/x.desktop', WEIGHT_MAX + 1)
    with pytest.raises(ValueError):
        UsageRecord('x', '', '/x.desktop', -1)


def test_corrupt_file_raises_storage_error(tmp_path):
    path = tmp_path / 'usage.db'
    path.write_bytes(b'this is not a database' * 100)
    store = UsageStore(str(path))
    with pytest.raises(StorageError):
        store.get(UsageRecord, b'Firefox')


def test_failed_open_closes_the_connection(tmp_path, monkeypatch):
    opened = []
    connect = storage.sqlite3.connect

    class TrackedConnection(object):
        def __init__(self, *args):
            self.conn = connect(*args)
            self.closed = False
            opened.append(self)

        def execute(self, *args):
            return self.conn.execute(*args)

        def __enter__(self):
            return self.conn.__enter__()

        def __exit__(self, *exc_info):
            return self.conn.__exit__(*exc_info)

        def close(self):
            self.closed = True
            self.conn.close()

    monkeypatch.setattr(storage.sqlite3, 'connect', TrackedConnection)
    path = tmp_path / 'usage.db'
    path.write_bytes(b'this is not a database' * 100)
    store = UsageStore(str(path))
    for _ in range(2):
        with pytest.raises(StorageError):
            store.get(UsageRecord, b'Firefox')
    assert len(opened) == 2
    assert all(conn.closed for conn in opened)
    assert store._conn is None


def test_corrupt_record_raises_storage_error(store):
    class MisplacedRecord(NoteRecord):
        COLLECTION = UsageRecord.COLLECTION

    store.put(MisplacedRecord('Broken', 'no weight here'))
    with pytest.raises(StorageError):
        store.get(UsageRecord, b'Broken')


def test_unwritable_location_raises_storage_error(tmp_path):
    blocker = tmp_path / 'blocker'
    blocker.write_text('file, not a directory')
    store = UsageStore(str(blocker / 'usage.db'))
    with pytest.raises(StorageError):
        store.put(UsageRecord('Files', '', '/apps/files.desktop'))
