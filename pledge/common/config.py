# -*- coding: utf-8 -*-

"""Manages settings and config file.

Settings are loaded from a configuration file. If they don't exists, default
values are provided. The config file is an INI file with a single section
named ``[config]``:

    [config]
    scheduler = trampoline
    propagate_callback_errors = false
    debug_mode = true
    log_levels = pledge.deferred=warning;pledge.scheduler=info

Loading the settings has no effect on the Deferreds until ``apply()`` is
called.
"""

import configparser
import logging
import os.path
from . import path as pledge_path

_logger = logging.getLogger(__name__)


# Default config dict. Values not present in this dict are not valid.
# Each entry contains the type expected, and the default value.
_default_config = {
    'scheduler': {'type': str, 'default': 'sync'},
    'propagate_callback_errors': {'type': bool, 'default': False},
    'debug_mode': {'type': bool, 'default': False},
    'log_levels': {'type': dict, 'default': {}}
}

# Actual config parser
_config_parser = configparser.ConfigParser()
_config_parser.add_section('config')


def _get_config_file_path():
    return os.path.join(pledge_path.get_config_dir(), 'pledge.ini')


def load(config_file_path=None):
    """Find and load the config file.

    Values previously loaded or set are replaced.

    Args:
        config_file_path (str, optional): path of the file to read. Default to
            'pledge.ini' in the user config directory.
    Returns:
        boolean: True if the file has been read, False if it was not found.
    """
    global _config_parser

    if config_file_path is None:
        config_file_path = _get_config_file_path()

    _config_parser = configparser.ConfigParser()
    _config_parser.add_section('config')
    if not _config_parser.read(config_file_path):
        _logger.warning('Unable to load config file: %s', config_file_path)
        return False
    _logger.debug('Config file loaded: %s', config_file_path)
    return True


def get(key):
    """Find and return a configuration entry

    If the entry is not specified in the config file, a default value is
    returned.

    Args:
        key (string): the entry key.
    Returns:
        The corresponding value found.
    Raises:
        KeyError: if the config entry doesn't exists.
    """
    if key not in _default_config:
        raise KeyError(key)
    try:
        if _default_config[key]['type'] is bool:
            return _config_parser.getboolean('config', key)
        elif _default_config[key]['type'] is int:
            return _config_parser.getint('config', key)
        elif _default_config[key]['type'] is dict:
            # Dict entries are in the form 'key=value;key2=value2'
            dict_str = _config_parser.get('config', key)
            result = {}
            for pair in filter(None, dict_str.split(';')):
                try:
                    (k, v) = pair.split('=')
                    result[k.strip()] = v.strip()
                except ValueError:
                    _logger.warning('Unable to parse pair key=value: "%s"'
                                    % pair)
            return result
        else:
            return _config_parser.get('config', key)
    except configparser.NoOptionError:
        return _default_config[key]['default']


def set(key, value):
    """Set a configuration entry.

    The change is kept in memory only.

    Args:
        key (string): the entry key.
        value: the new value to set. It will be converted to string. Dict
            values are converted in the form 'key=value;key2=value2'.
    Raises:
        KeyError: if the config entry is not valid.
    """
    if key not in _default_config:
        raise KeyError(key)
    if isinstance(value, dict):
        value = ';'.join('%s=%s' % item for item in value.items())
    _config_parser.set('config', key, str(value))


def apply():
    """Push the current settings into the Deferred engine and the logs.

    Raises:
        ValueError: if the scheduler name is unknown.
    """
    from . import log
    from ..deferred import Deferred
    from ..scheduler import scheduler_from_name, set_default_scheduler

    set_default_scheduler(scheduler_from_name(get('scheduler')))
    Deferred.propagate_callback_errors = get('propagate_callback_errors')
    log.set_debug_mode(get('debug_mode'))
    log.set_logs_level(get('log_levels'))
