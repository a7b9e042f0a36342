import pytest

from quicklaunch.entries import (Catalog, CustomModeEvent, DesktopEntry,
                                 DesktopEntryEvent, FeedFinished, MatchedView,
                                 Mode, UnknownModeError)


def make_entry(name):
    return DesktopEntry(name, None, name, '/apps/{0}.desktop'.format(name))


def test_modes():
    assert Mode.desktop().is_desktop
    assert not Mode.custom('files').is_desktop
    assert str(Mode.custom('files')) == 'files'
    assert Mode.custom('files') == Mode.custom('files')
    assert Mode.custom('files') != Mode.custom('urls')


def test_empty_query_takes_first_50_in_arrival_order():
    catalog = Catalog()
    entries = [make_entry('app{0:03d}'.format(i)) for i in range(200)]
    for entry in entries:
        catalog.add_desktop_entry(entry)
    assert catalog.take_50_desktop_entries() == entries[:50]


def test_empty_query_skips_duplicate_names():
    catalog = Catalog()
    catalog.add_desktop_entry(make_entry('a'))
    catalog.add_desktop_entry(DesktopEntry('a', None, 'other', '/other/a.desktop'))
    catalog.add_desktop_entry(make_entry('b'))
    assert [e.exec_command for e in catalog.take_50_desktop_entries()] == ['a', 'b']


def test_custom_entries_keep_arrival_order():
    catalog = Catalog([Mode.desktop(), Mode.custom('files')])
    assert catalog.take_50_custom_entries('files') == []
    catalog.apply(CustomModeEvent('files', ['b.txt']))
    catalog.apply(CustomModeEvent('files', ['a.txt']))
    assert catalog.take_50_custom_entries('files') == ['b.txt', 'a.txt']


def test_pools_are_created_lazily():
    catalog = Catalog()
    catalog.add_custom_entries('late', ['x'])
    assert catalog.pool(Mode.custom('late')) == ['x']


def test_unknown_mode():
    catalog = Catalog([Mode.desktop()])
    with pytest.raises(UnknownModeError):
        catalog.pool(Mode.custom('nope'))
    assert catalog.take_50_custom_entries('nope') == []


def test_apply_events():
    catalog = Catalog([Mode.desktop(), Mode.custom('files')])
    assert catalog.apply(DesktopEntryEvent(make_entry('Firefox')))
    assert catalog.apply(CustomModeEvent('files', ['a.txt']))
    assert not catalog.apply(FeedFinished(Mode.desktop()))
    assert [e.name for e in catalog.desktop_entries] == ['Firefox']
    assert catalog.custom_entries['files'] == ['a.txt']
    assert 'Firefox' not in catalog.custom_entries['files']


def test_matched_view():
    view = MatchedView()
    assert view.get(Mode.custom('files')) == []
    view.set(Mode.custom('files'), ['a'])
    view.set(Mode.desktop(), [make_entry('x')])
    assert view.get(Mode.custom('files')) == ['a']
    assert view.get(Mode.custom('other')) == []
    assert [e.name for e in view.get(Mode.desktop())] == ['x']
