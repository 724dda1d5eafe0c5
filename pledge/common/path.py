# -*- coding: utf-8 -*-
"""Helpers function to find pledge path folders."""

import logging
import appdirs

_logger = logging.getLogger(__name__)


_appdirs = appdirs.AppDirs(appname='pledge', appauthor=False, roaming=True)


def get_config_dir():
    """Returns the directory path containing pledge config files.

    The folder is not created: pledge only reads it.
    """
    return _appdirs.user_config_dir
