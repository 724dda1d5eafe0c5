# -*- coding: utf-8 -*-

"""Strategies deciding when the queued handlers of a Deferred are run.

Each time a Deferred must drain its queues (at settlement, or when a handler
is registered on an already settled Deferred), the drain is passed as a
no-argument task to the ``schedule()`` method of its scheduler. Any object
having this method can be used.

The default strategy runs the drain immediately, inside the settlement call.
"""

from collections import deque
import logging

_logger = logging.getLogger(__name__)


class SynchronousScheduler(object):
    """Run each task immediately, in the calling context."""

    def schedule(self, task):
        task()

    def __repr__(self):
        return 'SynchronousScheduler()'


class QueuedScheduler(object):
    """Run the tasks later, in the order they have been scheduled.

    By default, the tasks wait in the queue until someone calls
    ``run_pending()``, the same way a host event loop would run its pending
    callbacks at the next turn.

    With ``autoflush`` set, the queue is flushed by the outermost call to
    ``schedule()``. The drains are still done before the settlement call
    returns, but never inside another drain: the stack stays flat whatever
    the length of the chain.
    """

    def __init__(self, autoflush=False):
        self.autoflush = autoflush
        self._tasks = deque()
        self._running = False

    def schedule(self, task):
        self._tasks.append(task)
        if self.autoflush:
            self.run_pending()

    def run_pending(self):
        """Run the queued tasks, including the ones added in the meantime.

        Calls made while the queue is already being run do nothing.
        If a task raises, the exception is propagated and the remaining tasks
        are kept for the next call.

        Returns:
            int: number of tasks executed.
        """
        if self._running:
            return 0

        count = 0
        self._running = True
        try:
            while self._tasks:
                task = self._tasks.popleft()
                count += 1
                task()
        finally:
            self._running = False
        return count

    def __len__(self):
        return len(self._tasks)

    def __repr__(self):
        return 'QueuedScheduler(autoflush=%s, pending=%s)' % (self.autoflush,
                                                              len(self))


_schedulers_by_name = {
    'sync': SynchronousScheduler,
    'queued': QueuedScheduler,
    'trampoline': lambda: QueuedScheduler(autoflush=True)
}

_default_scheduler = SynchronousScheduler()


def scheduler_from_name(name):
    """Build a new scheduler from its configuration name.

    Args:
        name (str): one of 'sync', 'queued' or 'trampoline'.
    Returns:
        a new scheduler instance.
    Raises:
        ValueError: if the name is unknown.
    """
    try:
        factory = _schedulers_by_name[name.lower()]
    except KeyError:
        raise ValueError('Unknown scheduler "%s". Expected one of: %s'
                         % (name, ', '.join(sorted(_schedulers_by_name))))
    return factory()


def get_default_scheduler():
    """Returns the scheduler used by Deferreds created without one."""
    return _default_scheduler


def set_default_scheduler(scheduler):
    """Replace the scheduler used by Deferreds created without one.

    Deferreds already created keep their scheduler.

    Args:
        scheduler: object with a ``schedule(task)`` method.
    Returns:
        the previous default scheduler.
    """
    global _default_scheduler

    if not callable(getattr(scheduler, 'schedule', None)):
        raise TypeError('%r has no schedule() method' % (scheduler,))

    previous = _default_scheduler
    _default_scheduler = scheduler
    _logger.debug('Default scheduler set to %r', scheduler)
    return previous
