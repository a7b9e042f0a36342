"""
The session controller, which ties catalog, feeds, ranking and usage store
together and reacts to the user's input.

All catalog changes happen inside the event loop running the session: the
feeds only put events into the session's queue, which are then applied by
`handle_event()`.
"""
# Stdlib
import asyncio

# Quicklaunch package
from . import core, logger
from .entries import (Catalog, CustomEntry, CustomModeEvent, DesktopEntryEvent,
                      FeedFinished, MatchedView, Mode)
from .feeds import DesktopEntryWalker, ExternalCommandFeed
from .matching import get_matches, get_matches_custom_mode
from .storage import StorageError, persist_usage

class Session(object):
    """
    Holds the state of one launcher session: the known entries, the active
    mode, the current query and the ranked entries to display for it.

    `launcher` is a callable taking an argument list, which is used to start
    the selected entry. It is expected to raise `core.LaunchError` if that
    failed.
    """
    def __init__(self, settings, store, launcher=core.launch):
        self.settings = settings
        self.store = store
        self.launcher = launcher
        self.modes = [Mode.desktop()]
        self.modes.extend(Mode.custom(name) for name in settings.modes)
        self.catalog = Catalog(self.modes)
        self.matches = MatchedView()
        self.weights = {}
        self.mode_index = 0
        self.selected = 0
        self.query = ''
        self.queue = asyncio.Queue()
        self.loading = set()
        self._feeds = {}
        self._tasks = []

    @property
    def current_mode(self):
        return self.modes[self.mode_index]

    @property
    def current_matches(self):
        return self.matches.get(self.current_mode)

    def start(self):
        """
        Start the desktop entry walker and the feed of the active mode. This
        must be called from inside a running event loop.
        """
        walker = DesktopEntryWalker(
            self.settings.desktop_dirs, self.queue,
            self.settings.icon_theme, self.settings.icon_size)
        self._spawn(walker.mode, walker.run())
        self.activate_mode(self.current_mode)

    def _spawn(self, mode, coro):
        self.loading.add(mode)
        self._tasks.append(asyncio.ensure_future(coro))

    def _start_custom_feed(self, mode):
        if mode.name in self._feeds:
            return
        feed = ExternalCommandFeed(
            mode.name, self.settings.modes[mode.name].source, self.queue)
        self._feeds[mode.name] = feed
        self._spawn(mode, feed.run())

    def load_weights(self):
        """
        Take a snapshot of the persisted usage weights. If the store can't
        be read, ranking goes on without any weights.
        """
        try:
            self.weights = self.store.load_weights()
        except StorageError as error:
            logger.error('Usage weights unavailable: {0}'.format(error))
            self.weights = {}

    def find_mode(self, name):
        """
        Return the mode called `name` or `None` if there is no such mode.
        """
        for mode in self.modes:
            if mode.name == name:
                return mode
        return None

    def activate_mode(self, mode):
        """
        Make `mode` the active mode and return `True`. Its feed is started if
        it isn't running yet. Feeds of previously active modes keep running.
        A mode that was not configured for this session is ignored and gives
        `False`.
        """
        if mode not in self.modes:
            logger.warning('Ignoring unknown mode {0!r}'.format(mode.name))
            return False
        self.mode_index = self.modes.index(mode)
        if mode.is_desktop:
            self.load_weights()
        else:
            self._start_custom_feed(mode)
        self.refresh()
        return True

    def cycle_mode(self):
        """
        Switch to the next mode, wrapping around after the last one.
        """
        index = (self.mode_index + 1) % len(self.modes)
        logger.debug('Changing mode {0} -> {1}'.format(self.mode_index, index))
        self.activate_mode(self.modes[index])

    def set_query(self, query):
        self.query = query
        self.refresh()

    def refresh(self, reset_selection=True):
        """
        Recompute the ranked entries of the active mode for the current
        query. The selection moves back to the first entry, unless
        `reset_selection` is `False`. In that case it is only moved if it
        would be out of range otherwise.
        """
        mode = self.current_mode
        if mode.is_desktop:
            if self.query:
                matches = get_matches(
                    self.query, self.catalog.desktop_entries, self.weights)
            else:
                matches = self.catalog.take_50_desktop_entries()
        else:
            if self.query:
                matches = get_matches_custom_mode(
                    self.catalog, mode.name, self.query)
            else:
                matches = self.catalog.take_50_custom_entries(mode.name)
        self.matches.set(mode, matches)
        if reset_selection:
            self.selected = 0
        else:
            self.selected = max(0, min(self.selected, len(matches) - 1))

    def handle_event(self, event):
        """
        Apply a feed `event` to the catalog and update the displayed entries
        if the event concerns the active mode.
        """
        if isinstance(event, FeedFinished):
            self.loading.discard(event.feed)
            return
        self.catalog.apply(event)
        mode = self.current_mode
        if isinstance(event, DesktopEntryEvent):
            concerned = mode.is_desktop
        elif isinstance(event, CustomModeEvent):
            concerned = not mode.is_desktop and event.mode_name == mode.name
        else:
            concerned = False
        if concerned:
            self.refresh(reset_selection=False)

    def process_pending_events(self):
        """
        Handle all events that are already queued without waiting for more.
        Return the number of handled events.
        """
        count = 0
        while not self.queue.empty():
            self.handle_event(self.queue.get_nowait())
            count += 1
        return count

    async def wait_until_loaded(self, mode=None, timeout=None):
        """
        Handle incoming events until the feed of `mode` (default: the active
        mode) has finished or until `timeout` seconds have passed. Return
        `True` if the feed has finished.
        """
        if mode is None:
            mode = self.current_mode

        async def consume():
            while mode in self.loading:
                self.handle_event(await self.queue.get())

        try:
            await asyncio.wait_for(consume(), timeout)
        except asyncio.TimeoutError:
            logger.warning('Still loading entries for mode {0!r}'.format(mode.name))
        self.process_pending_events()
        return mode not in self.loading

    def select_next(self):
        if self.selected < len(self.current_matches) - 1:
            self.selected += 1

    def select_previous(self):
        if self.selected > 0:
            self.selected -= 1

    def get_selected_entry(self):
        """
        Return the selected entry of the displayed matches, which is a
        `DesktopEntry` or a `CustomEntry`, depending on the active mode.
        Return `None` if nothing is displayed.
        """
        matches = self.current_matches
        if not 0 <= self.selected < len(matches):
            return None
        mode = self.current_mode
        if mode.is_desktop:
            return matches[self.selected]
        return CustomEntry(mode.name, matches[self.selected])

    def confirm(self):
        """
        Launch the selected entry and return it.

        A launched desktop entry gets its usage recorded. Custom entries are
        not recorded. A `core.LaunchError` is raised if nothing is selected
        or if the launch failed. After a successful launch, `SystemExit` is
        raised if the settings ask for exiting after a launch.
        """
        entry = self.get_selected_entry()
        if entry is None:
            raise core.LaunchError('No entry selected')
        try:
            if isinstance(entry, CustomEntry):
                mode_settings = self.settings.modes[entry.mode_name]
                args = core.get_custom_args(
                    mode_settings.target, entry.text, self.settings.placeholder)
                self.launcher(args)
            else:
                self.launcher(core.get_desktop_args(entry.exec_command))
                self.record_usage(entry)
        except core.LaunchError as error:
            logger.error(str(error))
            raise
        if self.settings.exit_after_launch:
            raise SystemExit(0)
        return entry

    def record_usage(self, entry):
        """
        Persist a launch of the desktop `entry`. A storage failure is logged
        and otherwise ignored.
        """
        try:
            return persist_usage(self.store, entry)
        except StorageError as error:
            logger.error('Unable to record usage of {0!r}: {1}'.format(
                entry.name, error))
            return None

    async def close(self):
        """
        Terminate running source processes and stop all feeds.
        """
        for feed in self._feeds.values():
            await feed.stop()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
