"""
Common interface for propagating logable messages.
"""
import logging

DEFAULT_FORMAT = '%(name)s: %(message)s'

def set_console_handler(logger, format):
    """
    Create a `logging.StreamHandler()`, which is able to write to `stderr` and 
    pass given `format` to that handler for output messages. Add the handler to 
    `logger` and return the logger.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format))
    logger.addHandler(handler)
    return logger

def get_logger(name, level=logging.INFO, format=DEFAULT_FORMAT):
    """
    Request a logger from Python's `logging`-module by using the given `name`.
    If the resulting logger object has no handler yet, a console handler is
    added to it. Otherwise the formatter of each existing handler is replaced,
    so that a logger enabled early on can be reconfigured once the settings
    are known. In both cases `format` is used for output messages and the
    logger's level is set to `level`.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger = set_console_handler(logger, format)
    else:
        for handler in logger.handlers:
            handler.setFormatter(logging.Formatter(format))
    logger.setLevel(level)
    return logger

# Used for access on module-level by `debug()`, `info()`, `warning()` and 
# `error()`, so that other modules have a simple way to report status. When
# this is `None`, it is assumed that no logging is desired.
LOGGER = None

def enable(name='Quicklaunch', level=logging.INFO, format=DEFAULT_FORMAT):
    """
    Enable logging by setting a logger with the given `name`, `level` and
    `format` as `LOGGER`. Calling this again reconfigures that logger.
    """
    global LOGGER
    LOGGER = get_logger(name, level, format)

def get_level(name):
    """
    Return the numeric `logging` level for a level `name` like `debug` or
    `WARNING`. Unknown names are an error.
    """
    level = logging.getLevelName(str(name).upper())
    if not isinstance(level, int):
        raise ValueError('Unknown log level: {0!r}'.format(name))
    return level

def disable():
    """
    Disable logging. This is setting `LOGGER` to `None`.
    """
    global LOGGER
    LOGGER = None

def _log(level, message):
    if LOGGER is not None:
        LOGGER.log(level, message)

def debug(message):
    _log(logging.DEBUG, message)

def info(message):
    """
    Log a `message` with logging level `INFO` on the `LOGGER`.
    """
    _log(logging.INFO, message)

def warning(message):
    """
    Log a `message` with logging level `WARNING` on the `LOGGER`.
    """
    _log(logging.WARNING, message)

def error(message):
    """
    Log a `message` with logging level `ERROR` on the `LOGGER`.
    """
    _log(logging.ERROR, message)
