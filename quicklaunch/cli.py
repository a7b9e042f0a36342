#!/usr/bin/env python
"""
Commandline interface.

Loads the entries of a mode, prints the ranked matches for a query and
launches one of them.
"""
# Stdlib
import argparse
import asyncio
import logging
import sys

# Quicklaunch package
from . import __version__, logger
from .core import LaunchError
from .session import Session
from .settings import Settings
from .storage import UsageStore

def make_parser():
    parser = argparse.ArgumentParser(
        prog='quicklaunch',
        description='Find an application or custom mode entry and launch it.')
    parser.add_argument('query', nargs='?', default='',
                        help='text to match against the entries')
    parser.add_argument('-m', '--mode', help='name of the mode to search in')
    parser.add_argument('-l', '--list', action='store_true',
                        help='only print the matches, launch nothing')
    parser.add_argument('-n', '--index', type=int, default=0,
                        help='position of the match to launch (default: 0)')
    parser.add_argument('-t', '--timeout', type=float, default=10.0,
                        help='seconds to wait for entries (default: 10)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('-v', '--verbose', action='store_true',
                       help='show debug messages')
    group.add_argument('-q', '--quiet', action='store_true',
                       help='show no log messages')
    parser.add_argument('--version', action='version',
                        version='%(prog)s ' + __version__)
    return parser

def format_match(index, match):
    name = getattr(match, 'name', match)
    return '{0:3d}  {1}'.format(index, name)

async def run_session(session, args, out=None):
    """
    Drive `session` according to the parsed commandline `args` and write
    the matches to `out` (default: `sys.stdout`). Return the exit code.
    """
    if out is None:
        out = sys.stdout
    session.start()
    try:
        if args.mode is not None:
            mode = session.find_mode(args.mode)
            if mode is None:
                names = ', '.join(known.name for known in session.modes)
                sys.stderr.write('quicklaunch: no mode {0!r} (known: {1})\n'.format(
                    args.mode, names))
                return 2
            session.activate_mode(mode)
        await session.wait_until_loaded(timeout=args.timeout)
        session.set_query(args.query)
        for index, match in enumerate(session.current_matches):
            out.write(format_match(index, match) + '\n')
        if args.list:
            return 0
        for _ in range(args.index):
            session.select_next()
        try:
            session.confirm()
        except LaunchError as error:
            sys.stderr.write('quicklaunch: {0}\n'.format(error))
            return 1
        return 0
    finally:
        await session.close()
        session.store.close()

def run(argv=None):
    """
    Run the launcher based on the commandline arguments in `argv` and return
    its exit code. A successful launch may also end the interpreter directly,
    if the configuration asks for that.
    """
    args = make_parser().parse_args(argv)
    if args.quiet:
        logger.disable()
    else:
        logger.enable(level=logging.DEBUG if args.verbose else logging.INFO)
    try:
        settings = Settings.load()
    except (OSError, ValueError) as error:
        sys.stderr.write('quicklaunch: bad configuration: {0}\n'.format(error))
        return 2
    if not args.quiet:
        level = logging.DEBUG if args.verbose else settings.log_level
        logger.enable(level=level, format=settings.log_format)
    session = Session(settings, UsageStore(settings.database))
    return asyncio.run(run_session(session, args))

def main():
    """
    This function is intended to be used as an entry point, when Quicklaunch
    was invoked from the commandline. It exits the interpreter using the
    launcher's return value as the exit code.
    """
    sys.exit(run())

if __name__ == '__main__':
    main()
