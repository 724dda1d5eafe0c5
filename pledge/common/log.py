# -*- coding: utf-8 -*-

"""Configuration module of the logs.

pledge never configures the ``logging`` module by itself: as any library,
it only sends its entries to the loggers named after its modules
(``pledge.deferred``, ``pledge.scheduler``, ...).

This module contains the helpers to display these logs, useful when
debugging a chain of Deferreds: a ``Context`` who displays the logs in the
console, colorized if the terminal supports it, and functions to set the log
levels.
"""

import logging
import sys


def _support_color_output(stream):
    """Try to guess if the stream supports color term code.

    Returns:
        boolean: True if we are sure the output supports color; False otherwise
    """
    if hasattr(stream, 'isatty') and stream.isatty():
        if not sys.platform.startswith('win'):
            return True
    return False


class ColoredFormatter(logging.Formatter):
    """Formatter who display colored messages using ANSI escape codes."""

    _colors = {
        'RESET': '\033[0m',
        'DEBUG': '\033[34m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[31m',
        'NAME': '\033[36m',
        'DATE': '\033[30;1m',
        'EXCEPTION_NAME': '\033[31;1m',
        'EXCEPTION_STR': '\033[37;1m'
    }

    def _colorize(self, msg, color):
        return self._colors.get(color, '') + msg + self._colors.get('RESET')

    def formatTime(self, record, datefmt=None):
        result = logging.Formatter.formatTime(self, record, datefmt)
        return self._colorize(result, 'DATE')

    def formatException(self, ei):
        msg = logging.Formatter.formatException(self, ei)
        msg_lines = msg.split('\n')
        last_line = msg_lines[-1]
        result = '\n'.join(msg_lines[:-1]) + '\n'
        result += self._colorize(last_line.split(':')[0], 'EXCEPTION_NAME')
        result += ':' + self._colorize(':'.join(last_line.split(':')[1:]),
                                       'EXCEPTION_STR')
        return result

    def format(self, record):
        # The record is shared by all handlers: it must not be modified.
        record = logging.makeLogRecord(record.__dict__)
        record.name = self._colorize(record.name, 'NAME')
        record.levelname = self._colorize(record.levelname, record.levelname)
        return logging.Formatter.format(self, record)


class Context(object):
    """Context class used to display the logs in the console."""

    date_format = '%Y-%m-%d %H:%M:%S'
    string_format = '%(asctime)s %(levelname)-7s %(name)s - %(message)s'

    def __init__(self, stream=None, debug=None):
        """Prepare a new log context.

        Args:
            stream (file, optional): output of the logs. Default to stderr.
            debug (boolean, optional): debug mode set when entering the
                context. If None, the log levels are left unchanged.
        """
        self._stream = stream
        self._debug = debug
        self._handler = None
        self._previous_level = None

    def __enter__(self):
        """Add the console handler to the root logger."""
        root_logger = logging.getLogger()
        stream = self._stream if self._stream is not None else sys.stderr

        self._handler = logging.StreamHandler(stream)
        if _support_color_output(stream):
            formatter = ColoredFormatter(fmt=self.string_format,
                                         datefmt=self.date_format)
        else:
            formatter = logging.Formatter(fmt=self.string_format,
                                          datefmt=self.date_format)
        self._handler.setFormatter(formatter)
        root_logger.addHandler(self._handler)

        self._previous_level = logging.getLogger('pledge').level
        if self._debug is not None:
            set_debug_mode(self._debug)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Remove the handler and restore the previous log levels."""
        logging.getLogger(__name__).debug('Stop logger ...')
        root_logger = logging.getLogger()
        root_logger.removeHandler(self._handler)
        self._handler.close()
        self._handler = None

        logging.getLogger('pledge').setLevel(self._previous_level)


def set_logs_level(levels):
    """Configure a fine-grained log levels for the different modules.

    Args:
        levels (dict): A dict associating a module name and a log level. A
            log level can be a number or a str representing one of the
            logging levels (DEBUG, WARNING, ...). The level name will be
            converted to uppercase.
            Invalids values will be ignored.

    Example:

        >>> # Accept DEBUG logs only for the scheduler module
        >>> set_logs_level({'pledge':'info', 'pledge.scheduler': 'debug'})

        >>> # Accept DEBUG log in general, but only ERROR logs (and above) for
        >>> # the Deferred engine.
        >>> set_logs_level({'pledge': 10, 'pledge.deferred': 40})
    """
    for (module, level) in levels.items():
        try:
            if isinstance(level, str):
                level = level.upper()
                if level.isdigit():
                    level = int(level)
            logging.getLogger(module).setLevel(level)
        except (ValueError, TypeError):
            logger = logging.getLogger(__name__)
            logger.warning('Invalid log level "%s" for logger "%s". '
                           'Will be ignored.',
                           level, module)


def set_debug_mode(debug):
    """Set, or unset the debug log level.

    Note: only the 'pledge' logger is changed. Modules of other libraries
    keep their level; if needed, it can be set by ``set_logs_level()``.

    Args:
        debug (boolean): if True, the pledge log level will be set to DEBUG.
            If False, it will be set to INFO.
    """
    if debug:
        logging.getLogger('pledge').setLevel(logging.DEBUG)
    else:
        logging.getLogger('pledge').setLevel(logging.INFO)


def reset():
    """Reset the root logger (remove handlers and filters)."""
    logger = logging.getLogger()

    for h in logger.handlers[:]:
        logger.removeHandler(h)
    for f in logger.filters[:]:
        logger.removeFilter(f)
