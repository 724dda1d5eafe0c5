# -*- coding: utf-8 -*-

import logging
import pytest

from pledge import Deferred, scheduler
from pledge.common import config


@pytest.fixture(autouse=True)
def restore_engine_settings(request, tmpdir):
    """Restore the global settings of the Deferred engine after each test.

    Default scheduler, callback error policy, config values and log levels
    can be changed by a test; they are reset to their initial value.
    """
    default_scheduler = scheduler.get_default_scheduler()
    propagate = Deferred.propagate_callback_errors
    pledge_loggers = [name for name in logging.root.manager.loggerDict
                      if name == 'pledge' or name.startswith('pledge.')]
    levels = dict((name, logging.getLogger(name).level)
                  for name in pledge_loggers)

    def _restore():
        scheduler.set_default_scheduler(default_scheduler)
        Deferred.propagate_callback_errors = propagate
        config.load(str(tmpdir.join('no-config.ini')))
        for name in logging.root.manager.loggerDict:
            if name == 'pledge' or name.startswith('pledge.'):
                logging.getLogger(name).setLevel(levels.get(name,
                                                            logging.NOTSET))

    request.addfinalizer(_restore)


@pytest.fixture
def propagate_callback_errors():
    """Let the exceptions raised by callbacks escape the drains."""
    Deferred.propagate_callback_errors = True
