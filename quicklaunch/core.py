"""
Basic functionality to turn entries into command lines and launch them.
"""
# Stdlib
import os
import shlex
import subprocess

# Quicklaunch package
from . import logger

class LaunchError(Exception):
    """
    Used to indicate that a given command could not be launched.
    """
    pass

# Field codes of desktop entry commands start with this
FIELD_CODE_PREFIX = '%'

### High-level functions

def get_desktop_args(exec_command):
    """
    Return the argument list for a desktop entry's `exec_command`.

    Field codes like `%f` or `%U` are dropped instead of being expanded,
    since there are no files or URLs to pass at this point. Note that
    this also drops any other argument starting with `%`.
    """
    return strip_field_codes(parse_commandline(exec_command))

def get_custom_args(target, text, placeholder='%'):
    """
    Return the argument list for a custom mode's `target` command template
    after replacing each occurrence of `placeholder` with the selected
    candidate's `text`. Splitting happens after the replacement.
    """
    return parse_commandline(target.replace(placeholder, text))

def launch(args):
    """
    Start a detached process for the given argument list. Neither its exit
    code nor its output are observed.

    The first argument must either be a command found in one of the
    directories defined by the PATH environment variable or an existing
    executable file. Otherwise a `LaunchError` is raised. The same goes
    for a failure to create the process.
    """
    if not args:
        raise LaunchError('Got no arguments, so nothing is launched')
    if not (is_command(args[0]) or is_executable_file(args[0])):
        raise LaunchError('Command not found: {0}'.format(args[0]))
    logger.info('Launching {0}'.format(' '.join(args)))
    try:
        with open(os.devnull, 'r+b') as null:
            subprocess.Popen(args, stdin=null, stdout=null, stderr=null,
                             start_new_session=True)
    except OSError as error:
        raise LaunchError('Unable to launch {0}: {1}'.format(' '.join(args), error))

### Low-level functions

def strip_field_codes(args):
    return [arg for arg in args if not arg.startswith(FIELD_CODE_PREFIX)]

def splitenv(varname):
    """
    Get the environment variable `varname`s contents and split them at their
    platform-dependent path separator (`:` on POSIX, `;` on Windows). Return
    the result as a list, which may be empty if there is no content.
    """
    return [name for name in os.getenv(varname, '').split(os.pathsep) if name]

def get_path_dirs():
    """
    Parse the environment variable PATH and return a list of all names
    that refer to an existing directory. An empty list will be returned
    if no suitable name could be obtained.
    """
    return [name for name in splitenv('PATH') if os.path.isdir(name)]

def parse_commandline(cmdline):
    """
    Split given cmdline string into a list of arguments matching Unix-like
    shell behavior. Return an empty list if no arguments remain after that.
    Syntax errors (e.g. an unclosed quote) are raised as `LaunchError`.

    Note that each "~" or "~home" at the start of an argument is understood
    and expanded to the user's home directory. Any other type of expansion
    is not supported.
    """
    try:
        args = shlex.split(cmdline)
    except ValueError as error:
        raise LaunchError('Unable to parse {0!r}: {1}'.format(cmdline, error))
    return [os.path.expanduser(arg) for arg in args]

def is_command(name):
    """
    Return True if given name refers to an existing file in one of the
    directories defined inside the environment variable PATH, otherwise
    False. The given name may be a filename or an absolute path.
    """
    dirname, basename = os.path.split(name)
    if not basename:
        return False
    path_dirs = get_path_dirs()
    if dirname:
        return dirname in path_dirs and os.path.isfile(name)
    for path_dir in path_dirs:
        if os.path.isfile(os.path.join(path_dir, basename)):
            return True
    return False

def is_executable_file(path):
    """
    Return True if given path refers to a non-empty executable file,
    otherwise False.
    """
    return (os.access(path, os.X_OK) and
            os.path.isfile(path) and
            os.path.getsize(path) > 0)
