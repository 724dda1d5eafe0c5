# -*- coding: utf-8 -*-

from .__version__ import __version__  # noqa

from .common import config
from .decorators import wrap_deferred
from .deferred import Deferred
from .errors import DeferredError, PendingError, RejectionError
from .reduce_coroutine import reduce_coroutine
from .scheduler import (QueuedScheduler, SynchronousScheduler,
                        get_default_scheduler, set_default_scheduler)
from .source import DeferredSource
from .util import is_thenable

__all__ = ['Deferred', 'DeferredSource', 'DeferredError', 'PendingError',
           'RejectionError', 'QueuedScheduler', 'SynchronousScheduler',
           'get_default_scheduler', 'set_default_scheduler', 'is_thenable',
           'reduce_coroutine', 'wrap_deferred', 'configure']


def configure(config_file_path=None):
    """Load the config file and apply it to the Deferreds and the logs.

    Args:
        config_file_path (str, optional): path of the INI file. Default to
            'pledge.ini' in the user config directory.
    """
    config.load(config_file_path)
    config.apply()
