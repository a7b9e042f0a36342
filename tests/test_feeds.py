import asyncio

import pytest

from quicklaunch.entries import (CustomModeEvent, DesktopEntry,
                                 DesktopEntryEvent, FeedFinished, Mode)
from quicklaunch.feeds import (AcquisitionError, DesktopEntryWalker,
                               ExternalCommandFeed, iter_desktop_files,
                               load_desktop_entry)

APP_TEMPLATE = """[Desktop Entry]
Type=Application
Name={name}
Exec={exec_}
{extra}
"""


def write_app(directory, filename, name, exec_='app', extra=''):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(APP_TEMPLATE.format(name=name, exec_=exec_, extra=extra))
    return str(path)


async def collect(feed):
    queue = asyncio.Queue()
    feed.queue = queue
    await feed.run()
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events


def test_load_desktop_entry(tmp_path):
    path = write_app(tmp_path, 'firefox.desktop', 'Firefox', 'firefox %u')
    assert load_desktop_entry(path) == DesktopEntry('Firefox', None, 'firefox %u', path)


def test_absolute_icon_path_is_kept(tmp_path):
    icon = tmp_path / 'icon.png'
    icon.write_bytes(b'png')
    path = write_app(tmp_path, 'a.desktop', 'A', extra='Icon={0}'.format(icon))
    assert load_desktop_entry(path).icon == str(icon)


@pytest.mark.parametrize('extra', ['NoDisplay=true', 'Hidden=true'])
def test_hidden_entries_are_ignored(tmp_path, extra):
    path = write_app(tmp_path, 'a.desktop', 'A', extra=extra)
    assert load_desktop_entry(path) is None


def test_links_are_ignored(tmp_path):
    path = tmp_path / 'link.desktop'
    path.write_text('[Desktop Entry]\nType=Link\nName=Site\nURL=http://example.org\n')
    assert load_desktop_entry(str(path)) is None


@pytest.mark.parametrize('content', [
    'Name=No header\nExec=app\n',
    '[Desktop Entry]\nthis line is invalid\n',
    '[Desktop Entry]\nType=Application\nName=No command\n',
])
def test_malformed_entries(tmp_path, content):
    path = tmp_path / 'broken.desktop'
    path.write_text(content)
    with pytest.raises(AcquisitionError):
        load_desktop_entry(str(path))


def test_desktop_file_ids(tmp_path):
    write_app(tmp_path, 'a.desktop', 'A')
    write_app(tmp_path / 'kde', 'b.desktop', 'B')
    (tmp_path / 'notes.txt').write_text('not an entry')
    ids = [desktop_id for desktop_id, _ in iter_desktop_files(str(tmp_path))]
    assert ids == ['a.desktop', 'kde-b.desktop']
    assert list(iter_desktop_files(str(tmp_path / 'missing'))) == []


def test_walker_emits_entries_in_discovery_order(tmp_path):
    user, system = tmp_path / 'user', tmp_path / 'system'
    write_app(user, 'a.desktop', 'A')
    write_app(user / 'sub', 'c.desktop', 'C')
    write_app(system, 'a.desktop', 'A (system)')
    write_app(system, 'b.desktop', 'B')
    (system / 'broken.desktop').write_text('garbage')
    walker = DesktopEntryWalker([str(user), str(system), str(tmp_path / 'none')], None)
    events = asyncio.run(collect(walker))
    entries = [event.entry.name for event in events
               if isinstance(event, DesktopEntryEvent)]
    assert entries == ['A', 'C', 'B']
    assert events[-1] == FeedFinished(Mode.desktop())


def test_custom_feed_emits_each_line():
    feed = ExternalCommandFeed('files', "printf 'a.txt\\n\\nb.txt\\n'", None)
    events = asyncio.run(collect(feed))
    assert events == [
        CustomModeEvent('files', ['a.txt']),
        CustomModeEvent('files', ['b.txt']),
        FeedFinished(Mode.custom('files')),
    ]


def test_failing_custom_source_finishes_without_entries():
    feed = ExternalCommandFeed('files', 'exit 3', None)
    assert asyncio.run(collect(feed)) == [FeedFinished(Mode.custom('files'))]


def test_stopping_long_running_source():
    async def scenario():
        queue = asyncio.Queue()
        feed = ExternalCommandFeed('clock', 'echo tick; sleep 30', queue)
        task = asyncio.ensure_future(feed.run())
        first = await asyncio.wait_for(queue.get(), 5)
        await feed.stop()
        await asyncio.wait_for(task, 5)
        return first, feed.process.returncode

    first, returncode = asyncio.run(scenario())
    assert first == CustomModeEvent('clock', ['tick'])
    assert returncode is not None
