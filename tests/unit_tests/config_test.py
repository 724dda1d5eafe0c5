# -*- coding: utf-8 -*-

import logging
import pytest

import pledge
from pledge import Deferred
from pledge.common import config
from pledge.scheduler import (QueuedScheduler, SynchronousScheduler,
                              get_default_scheduler)


@pytest.fixture
def config_file(tmpdir):
    path = tmpdir.join('pledge.ini')
    path.write('[config]\n'
               'scheduler = queued\n'
               'propagate_callback_errors = true\n'
               'debug_mode = false\n'
               'log_levels = pledge.deferred=warning;pledge.scheduler=10\n')
    return str(path)


class TestConfig(object):

    def test_default_values(self, tmpdir):
        assert not config.load(str(tmpdir.join('missing.ini')))
        assert config.get('scheduler') == 'sync'
        assert config.get('propagate_callback_errors') is False
        assert config.get('debug_mode') is False
        assert config.get('log_levels') == {}

    def test_missing_file_logged(self, tmpdir, caplog):
        path = str(tmpdir.join('missing.ini'))
        with caplog.at_level(logging.WARNING, logger='pledge'):
            config.load(path)
        records = [r for r in caplog.records
                   if r.name == 'pledge.common.config']
        assert records[0].args == (path,)
        assert path in records[0].getMessage()

    def test_load_file(self, config_file):
        assert config.load(config_file)
        assert config.get('scheduler') == 'queued'
        assert config.get('propagate_callback_errors') is True
        assert config.get('log_levels') == {'pledge.deferred': 'warning',
                                             'pledge.scheduler': '10'}

    def test_load_default_path(self, monkeypatch, tmpdir, config_file):
        monkeypatch.setattr(config.pledge_path, 'get_config_dir',
                            lambda: str(tmpdir))
        assert config.load()
        assert config.get('scheduler') == 'queued'

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            config.get('foo')
        with pytest.raises(KeyError):
            config.set('foo', 'bar')

    def test_set_value(self):
        config.set('debug_mode', True)
        assert config.get('debug_mode') is True
        config.set('log_levels', {'pledge': 'info'})
        assert config.get('log_levels') == {'pledge': 'info'}

    def test_invalid_dict_pair(self):
        config.set('log_levels', 'pledge=info;garbage')
        assert config.get('log_levels') == {'pledge': 'info'}

    def test_apply(self, config_file):
        config.load(config_file)
        config.apply()

        scheduler = get_default_scheduler()
        assert isinstance(scheduler, QueuedScheduler)
        assert not scheduler.autoflush
        assert Deferred.propagate_callback_errors is True
        assert logging.getLogger('pledge').level == logging.INFO
        assert logging.getLogger('pledge.deferred').level == logging.WARNING
        assert logging.getLogger('pledge.scheduler').level == logging.DEBUG

    def test_apply_unknown_scheduler(self):
        config.set('scheduler', 'threads')
        with pytest.raises(ValueError):
            config.apply()

    def test_configure(self, config_file):
        pledge.configure(config_file)
        assert isinstance(get_default_scheduler(), QueuedScheduler)

    def test_configure_without_file(self, tmpdir):
        pledge.configure(str(tmpdir.join('missing.ini')))
        assert isinstance(get_default_scheduler(), SynchronousScheduler)
        assert Deferred.propagate_callback_errors is False
