"""
Entries, modes and the in-memory catalog holding everything discovered so far.
"""
# Stdlib
from collections import namedtuple, OrderedDict

# Number of entries shown when no query was typed
EMPTY_QUERY_LIMIT = 50

DESKTOP = 'desktop'
CUSTOM = 'custom'

# Name shown for the desktop applications mode
DESKTOP_MODE_NAME = 'Drun'

class UnknownModeError(Exception):
    """
    Used to indicate that a mode has no registered pool of entries.
    """
    pass

class Mode(namedtuple('Mode', 'kind name')):
    """
    A named partition of the candidate space. There is exactly one mode of
    kind `DESKTOP` and any number of `CUSTOM` modes, each identified by the
    name it was configured with.
    """
    __slots__ = ()

    @classmethod
    def desktop(cls):
        return cls(DESKTOP, DESKTOP_MODE_NAME)

    @classmethod
    def custom(cls, name):
        return cls(CUSTOM, name)

    @property
    def is_desktop(self):
        return self.kind == DESKTOP

    def __str__(self):
        return self.name

class DesktopEntry(namedtuple('DesktopEntry', 'name icon exec_command source_path')):
    """
    An application taken from a desktop entry file. `icon` refers to an
    icon file or is `None`. The entry's `name` is its identity.
    """
    __slots__ = ()

class CustomEntry(namedtuple('CustomEntry', 'mode_name text')):
    """
    A candidate string produced by a custom mode's source command.
    """
    __slots__ = ()

# Events delivered by the acquisition feeds
DesktopEntryEvent = namedtuple('DesktopEntryEvent', 'entry')
CustomModeEvent = namedtuple('CustomModeEvent', 'mode_name lines')
FeedFinished = namedtuple('FeedFinished', 'feed')

class Catalog(object):
    """
    All entries known so far. Desktop entries and the candidate strings of
    each custom mode are kept in separate pools, in order of their arrival.
    Pools only grow: nothing is reordered or removed once it was added.
    """
    def __init__(self, modes=()):
        self.desktop_entries = []
        self.custom_entries = OrderedDict()
        for mode in modes:
            if not mode.is_desktop:
                self.custom_entries[mode.name] = []

    def add_desktop_entry(self, entry):
        self.desktop_entries.append(entry)

    def add_custom_entries(self, mode_name, lines):
        """
        Append the given candidate `lines` to the pool of the custom mode
        called `mode_name`. The pool is created if it doesn't exist yet.
        """
        self.custom_entries.setdefault(mode_name, []).extend(lines)

    def apply(self, event):
        """
        Put the contents of a feed event into the catalog. Return `True` if
        the catalog was changed by that.
        """
        if isinstance(event, DesktopEntryEvent):
            self.add_desktop_entry(event.entry)
            return True
        if isinstance(event, CustomModeEvent):
            self.add_custom_entries(event.mode_name, event.lines)
            return True
        return False

    def pool(self, mode):
        """
        Return the list of entries for the given `mode`. Raise
        `UnknownModeError` if there is no pool for a custom mode of
        that name.
        """
        if mode.is_desktop:
            return self.desktop_entries
        try:
            return self.custom_entries[mode.name]
        except KeyError:
            raise UnknownModeError('No entries for mode {0!r}'.format(mode.name))

    def take_50_desktop_entries(self):
        """
        Return up to `EMPTY_QUERY_LIMIT` desktop entries in order of their
        arrival. Only the first entry of a given name is taken.
        """
        return take_unique(self.desktop_entries, lambda entry: entry.name)

    def take_50_custom_entries(self, mode_name):
        """
        Return up to `EMPTY_QUERY_LIMIT` candidate strings of the custom mode
        called `mode_name` in order of their arrival. An unknown mode gives
        an empty list.
        """
        try:
            lines = self.pool(Mode.custom(mode_name))
        except UnknownModeError:
            return []
        return take_unique(lines, lambda line: line)

def take_unique(items, get_key, limit=EMPTY_QUERY_LIMIT):
    result = []
    seen = set()
    for item in items:
        if len(result) >= limit:
            break
        key = get_key(item)
        if key not in seen:
            seen.add(key)
            result.append(item)
    return result

class MatchedView(object):
    """
    The ranked entries currently on display. It is recomputed whenever the
    query or the active mode changes.
    """
    def __init__(self):
        self.desktop_entries = []
        self.custom_entries = {}

    def get(self, mode):
        """
        Return the ranked list for `mode`, which is empty when nothing was
        matched for that mode yet.
        """
        if mode.is_desktop:
            return self.desktop_entries
        return self.custom_entries.get(mode.name, [])

    def set(self, mode, matches):
        if mode.is_desktop:
            self.desktop_entries = matches
        else:
            self.custom_entries[mode.name] = matches
