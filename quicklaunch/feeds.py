"""
Asynchronous producers, which discover entries and report them as events.

Each feed puts its events into an `asyncio.Queue` as soon as a single entry
is ready. The consumer of that queue is the only one touching the catalog.
When a feed has nothing more to deliver, it puts a `FeedFinished` event.
"""
# Stdlib
import asyncio
import os
import signal

# 3rd party
import xdg.DesktopEntry
import xdg.Exceptions

# Quicklaunch package
from . import logger
from .entries import (CustomModeEvent, DesktopEntry, DesktopEntryEvent,
                      FeedFinished, Mode)
from .icongetter import get_icon_path

DESKTOP_FILE_SUFFIX = '.desktop'

class AcquisitionError(Exception):
    """
    Used to indicate that a source of entries is malformed or unreachable.
    """
    pass

def iter_desktop_files(directory):
    """
    Walk through `directory` and its subdirectories and yield a tuple of
    `(desktop_id, path)` for each desktop entry file. The desktop file id
    is the path relative to `directory` with `/` replaced by `-`, as the
    freedesktop menu specification defines it. Files are yielded in sorted
    order per directory. A missing `directory` yields nothing.
    """
    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames.sort()
        for filename in sorted(filenames):
            if not filename.endswith(DESKTOP_FILE_SUFFIX):
                continue
            path = os.path.join(dirpath, filename)
            relpath = os.path.relpath(path, directory)
            yield (relpath.replace(os.sep, '-'), path)

def load_desktop_entry(path, icon_theme=None, icon_size=48):
    """
    Parse the desktop entry file at `path` and return a `DesktopEntry`.
    Return `None` for entries which are not meant to be shown (hidden ones
    or those of a type other than `Application`). Raise `AcquisitionError`
    if the file can't be parsed or lacks a name or a command.
    """
    try:
        parsed = xdg.DesktopEntry.DesktopEntry(path)
    except (xdg.Exceptions.Error, OSError, UnicodeDecodeError) as error:
        raise AcquisitionError('Unable to parse {0!r}: {1}'.format(path, error))
    if parsed.getType() != 'Application':
        return None
    if parsed.getHidden() or parsed.getNoDisplay():
        return None
    name = parsed.getName()
    exec_command = parsed.getExec()
    if not name or not exec_command:
        raise AcquisitionError('Missing Name or Exec in {0!r}'.format(path))
    icon = get_icon_path(parsed.getIcon(), icon_size, icon_theme)
    return DesktopEntry(name, icon, exec_command, path)

class DesktopEntryWalker(object):
    """
    Scans directories for desktop entry files and emits one
    `DesktopEntryEvent` per usable file.

    Directories are given in order of precedence: a desktop file id found
    in an earlier directory shadows files of the same id in later ones.
    Malformed files are skipped.
    """
    def __init__(self, directories, queue, icon_theme=None, icon_size=48):
        self.directories = directories
        self.queue = queue
        self.icon_theme = icon_theme
        self.icon_size = icon_size
        self.mode = Mode.desktop()

    async def run(self):
        seen = set()
        for directory in self.directories:
            files = await asyncio.to_thread(list, iter_desktop_files(directory))
            for desktop_id, path in files:
                if desktop_id in seen:
                    logger.debug('Skipping shadowed entry {0!r}'.format(path))
                    continue
                seen.add(desktop_id)
                try:
                    entry = await asyncio.to_thread(
                        load_desktop_entry, path,
                        self.icon_theme, self.icon_size)
                except AcquisitionError as error:
                    logger.warning(str(error))
                    continue
                if entry is not None:
                    self.queue.put_nowait(DesktopEntryEvent(entry))
        self.queue.put_nowait(FeedFinished(self.mode))

class ExternalCommandFeed(object):
    """
    Runs a custom mode's source command and emits one `CustomModeEvent`
    per non-empty line of its standard output, as soon as it was read.

    The command is run by the shell. The process keeps running until it
    exits on its own or until `stop()` is called.
    """
    def __init__(self, mode_name, command, queue):
        self.mode = Mode.custom(mode_name)
        self.command = command
        self.queue = queue
        self.process = None

    async def run(self):
        logger.info('Starting source of mode {0!r}: {1}'.format(
            self.mode.name, self.command))
        try:
            self.process = await asyncio.create_subprocess_shell(
                self.command, stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE, start_new_session=True)
        except OSError as error:
            msg = 'Unable to run source of mode {0!r}: {1}'
            logger.error(msg.format(self.mode.name, error))
            self.queue.put_nowait(FeedFinished(self.mode))
            return
        try:
            await self._read_lines(self.process.stdout)
            returncode = await self.process.wait()
            logger.debug('Source of mode {0!r} exited with {1}'.format(
                self.mode.name, returncode))
        finally:
            self.queue.put_nowait(FeedFinished(self.mode))

    async def _read_lines(self, stream):
        while True:
            try:
                raw = await stream.readline()
            except ValueError:
                # Line exceeds the stream's buffer limit
                logger.warning('Skipping overlong line from mode {0!r}'.format(
                    self.mode.name))
                continue
            if not raw:
                break
            line = raw.decode('utf-8', 'replace').rstrip('\r\n')
            if line:
                self.queue.put_nowait(CustomModeEvent(self.mode.name, [line]))

    def terminate(self):
        """
        Send SIGTERM to the source process and everything it started, if
        it is still running.
        """
        if self.process is not None and self.process.returncode is None:
            try:
                os.killpg(self.process.pid, signal.SIGTERM)
            except ProcessLookupError:
                pass

    async def stop(self, timeout=1.0):
        """
        Terminate the source process and wait for it to exit. It is killed
        if it didn't exit after `timeout` seconds.
        """
        self.terminate()
        if self.process is None:
            return
        try:
            await asyncio.wait_for(self.process.wait(), timeout)
        except asyncio.TimeoutError:
            if self.process.returncode is None:
                self.process.kill()
            await self.process.wait()
