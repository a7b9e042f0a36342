"""
Configuration stuff.

A `Settings` instance is created once at startup and handed to everything
that needs to know about the user's preferences. There is no process-wide
configuration object.
"""
# Stdlib
from collections import OrderedDict
import os

# 3rd party
from xdg.BaseDirectory import xdg_config_home, xdg_data_dirs, xdg_data_home

# Quicklaunch package
from . import logger
from .entries import DESKTOP_MODE_NAME

# Default configuration
DEFAULTS = {
    'icon-theme': None,
    'icon-size': '48',
    'exit-after-launch': 'yes',
    'placeholder': '%',
    'database': None,
    'desktop-dirs': None,
    'log-level': 'info',
    'log-format': logger.DEFAULT_FORMAT,
}

CONFIG_FILENAME = 'quicklaunch.conf'
DATABASE_FILENAME = 'usage.db'

MODE_PREFIX = 'mode.'

TRUE_VALUES = ('yes', 'true', 'on', '1')
FALSE_VALUES = ('no', 'false', 'off', '0')

class ModeSettings(object):
    """
    Configuration of a custom mode. `source` is the command whose output
    lines become the mode's candidates. `target` is the command template,
    which is run with the selected candidate put in place of the placeholder.
    """
    def __init__(self, name, source, target):
        self.name = name
        self.source = source
        self.target = target

    def __repr__(self):
        return 'ModeSettings({0!r}, {1!r}, {2!r})'.format(
            self.name, self.source, self.target)

    def __eq__(self, other):
        if not isinstance(other, ModeSettings):
            return NotImplemented
        return ((self.name, self.source, self.target) ==
                (other.name, other.source, other.target))

class Settings(object):
    """
    Holds the launcher's configuration. Values are taken from a dictionary
    of raw string entries (as read from a configuration file), falling back
    to `DEFAULTS` for anything not given there.
    """
    def __init__(self, config=None):
        entries = dict(DEFAULTS)
        entries.update(config or {})
        self.config = entries
        self.icon_theme = entries['icon-theme'] or None
        self.icon_size = parse_int(entries['icon-size'], 'icon-size')
        self.exit_after_launch = parse_bool(
            entries['exit-after-launch'], 'exit-after-launch')
        self.placeholder = entries['placeholder']
        if not self.placeholder:
            raise ValueError('placeholder may not be empty')
        self.database = entries['database'] or get_default_database_path()
        if entries['desktop-dirs']:
            self.desktop_dirs = [
                os.path.expanduser(d)
                for d in entries['desktop-dirs'].split(os.pathsep) if d
            ]
        else:
            self.desktop_dirs = get_default_desktop_dirs()
        self.log_level = logger.get_level(entries['log-level'])
        self.log_format = entries['log-format'] or logger.DEFAULT_FORMAT
        self.modes = get_mode_settings(config or {})

    @classmethod
    def load(cls, filename=None, overrides=None):
        """
        Return a new instance based on the user's configuration file (see
        `get_user_config()`) updated with the given `overrides`-dictionary.
        """
        config = get_user_config(filename)
        config.update(overrides or {})
        return cls(config)

def parse_int(value, key):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError('{0} must be an integer, got {1!r}'.format(key, value))

def parse_bool(value, key):
    """
    Interpret a configuration value as a boolean. Accepted spellings are
    listed in `TRUE_VALUES` and `FALSE_VALUES` (case does not matter).
    """
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError('{0} must be a boolean, got {1!r}'.format(key, value))

def get_mode_settings(config):
    """
    Collect the custom modes defined by `mode.<name>.source` and
    `mode.<name>.target` entries of the given `config` and return them as
    an ordered dictionary mapping each mode's name to its `ModeSettings`.
    Modes keep the order in which they first appear inside `config`. A
    mode lacking one of both commands is an error.
    """
    parts = OrderedDict()
    for key, value in config.items():
        if not key.startswith(MODE_PREFIX):
            continue
        name, _, field = key[len(MODE_PREFIX):].rpartition('.')
        if not name or field not in ('source', 'target'):
            raise ValueError('Invalid mode key: {0!r}'.format(key))
        if name == DESKTOP_MODE_NAME:
            msg = 'Mode name {0!r} is reserved for desktop applications'
            raise ValueError(msg.format(name))
        parts.setdefault(name, {})[field] = value
    modes = OrderedDict()
    for name, fields in parts.items():
        for field in ('source', 'target'):
            if not fields.get(field):
                msg = 'Mode {0!r} has no {1} command'
                raise ValueError(msg.format(name, field))
        modes[name] = ModeSettings(name, fields['source'], fields['target'])
    return modes

def get_default_database_path():
    return os.path.join(xdg_data_home, 'quicklaunch', DATABASE_FILENAME)

def get_default_desktop_dirs():
    """
    Return the `applications` subdirectory of each XDG data directory in
    order of precedence (the user's own data directory comes first).
    """
    return [os.path.join(d, 'applications') for d in xdg_data_dirs]

def get_user_config(filename=None):
    """
    Return the parsed contents of a configuration file, which is named with
    `filename`, as a dictionary, where the file is assumed to exist inside
    the user's "standard" configuration directory. In case that no such file
    could be found, an empty dictionary will be returned. If `filename` is
    `None`, the `CONFIG_FILENAME` is used.
    """
    path = get_config_path(filename)
    if not os.path.exists(path):
        return OrderedDict()
    logger.info('Found config file {0!r}'.format(path))
    return get_config_entries(path)

def get_config_path(filename=None):
    """
    Return a XDG-compliant path based on given `filename`. If `filename` is
    `None`, the `CONFIG_FILENAME` will be used.
    """
    if filename is None:
        filename = CONFIG_FILENAME
    if os.path.dirname(filename):
        raise ValueError('filename may not contain any path separator')
    return os.path.join(xdg_config_home, filename)

def get_config_entries(path):
    """
    Read a configuration file from the given path and return an ordered
    dictionary, which contains the file's entries.
    """
    with open(path) as config_file:
        return OrderedDict(iter_config_entries(config_file))

def iter_config_entries(lines):
    """
    Iterate over the given configuration lines, which may be either a file-like
    object or a list of strings and return a `(key, value)`-pair for each line.
    Parsing is done according to the following rules:

    Each line must use the scheme `key: value` to define an item. If a line
    contains multiple `:`-chars, then the first one disappears, as it is used
    as the separator, while the other ones will remain inside the value entry,
    which consequently means that only one item per line can be defined. Lines
    are read until a `#` appears, since that is interpreted as the beginning of
    a comment. Whitespace at the beginning or at the end of a line is ignored.
    The same goes for whitespace between key/value and separator. Empty lines
    are just ignored, while a line with non-whitespaced contents, which doesn't
    contain the separator, is an error. Note that keys and values will always
    be strings.
    """
    for index, line in enumerate(lines):
        code = line.split('#')[0].strip()
        if code:
            if ':' not in code:
                msg = 'Syntax error in line {0}: Expected a separator (`:`)'
                raise ValueError(msg.format(index + 1))
            key, value = code.split(':', 1)
            yield (key.strip(), value.strip())
