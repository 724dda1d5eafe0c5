# -*- coding: utf-8 -*-

from collections import deque
import logging
import threading
import weakref

from .errors import PendingError, as_exception
from .scheduler import get_default_scheduler
from .util import Thenable, classify, is_thenable

_logger = logging.getLogger(__name__)

# Deferreds settled while a drain is running on this thread, waiting for
# their own drain.
_settling = threading.local()


def _callable_name(f):
    return getattr(f, '__name__', '???')


class Deferred(object):
    """It represents an operation expected to be completed in the future.

    A Deferred contains a value not yet known when it's created. The value
    is set exactly once: either the operation succeeds and the Deferred is
    fulfilled with a value, or it fails and the Deferred is rejected with a
    reason. Callbacks can be chained with ``then()``; they are called as soon
    as the outcome is known.

    The Deferred never blocks: callbacks registered before the settlement are
    queued, then run in registration order when the Deferred settles. The
    moment they run is decided by the scheduler (see ``pledge.scheduler``).
    With the default scheduler, they run synchronously, inside the call to
    ``fulfill()`` or ``reject()``. The Deferreds settled by these callbacks
    are drained by the same call, one after the other, not recursively:
    a chain can be of any length.

    A Deferred is not thread-safe. All calls to a Deferred (and to the
    capabilities given to its start routine) must be done from the same
    thread.
    """

    PENDING = 'pending'
    FULFILLED = 'fulfilled'
    REJECTED = 'rejected'

    # If True, exceptions raised by the callbacks are propagated to the
    # caller of the drain instead of rejecting the chained Deferred.
    propagate_callback_errors = False

    def __init__(self, start=None, scheduler=None, _name=None,
                 _previous=None):
        """Constructor of the Deferred.

        If a start routine is given, it's called with the two settlement
        capabilities before the constructor returns.
        If the start routine raises an exception, it's caught and the
        Deferred is rejected with this exception (unless the routine had
        already settled it).

        Args:
            start (callable, optional): Takes 2 callable arguments:
                The first one, `fulfill()`, should be called when the task is
                done and accepts the result's value as its only argument.
                The second, `reject()`, should be called when an error occurs.
                Its argument is the reason of the failure, usually an
                instance of `Exception`.
                If not set, the Deferred stays pending until it's settled
                by its owner.
            scheduler (optional): object deciding when the callbacks are run.
                Default to the scheduler returned by
                ``pledge.scheduler.get_default_scheduler()``.
            _name (str): if set, name used when converted to text.
            _previous (Deferred): Deferred this one has been chained to.
        """
        self._state = self.PENDING
        self._payload = None
        if scheduler is None:
            scheduler = get_default_scheduler()
        self._scheduler = scheduler
        self._name = _name or _callable_name(start)
        self._previous = (weakref.ref(_previous)
                          if _previous is not None else None)

        self._continuations = []
        self._finalizers = []

        if start is not None:
            try:
                start(self._fulfill, self._reject)
            except Exception as error:
                self._reject(error)

    @property
    def state(self):
        """One of PENDING, FULFILLED or REJECTED."""
        return self._state

    @property
    def payload(self):
        """Value if fulfilled, reason if rejected, None while pending."""
        return self._payload

    @property
    def scheduler(self):
        return self._scheduler

    def is_pending(self):
        return self._state == self.PENDING

    def is_fulfilled(self):
        return self._state == self.FULFILLED

    def is_rejected(self):
        return self._state == self.REJECTED

    def result(self):
        """Returns the value of the fulfilled Deferred.

        This method never waits.

        Returns:
            *: value encapsulated, defined by the operation.
        Raises:
            PendingError: if the Deferred is not settled yet.
            *: If the Deferred is rejected, the rejection reason is raised.
                If the reason is not an exception, a `RejectionError`
                wrapping it is raised instead.
        """
        if self._state == self.PENDING:
            raise PendingError('%r is not settled yet' % self)
        elif self._state == self.REJECTED:
            raise as_exception(self._payload)
        return self._payload

    def exception(self):
        """Returns the rejection reason of the Deferred.

        Returns:
            the reason of the rejection, or None if the Deferred is fulfilled.
        Raises:
            PendingError: if the Deferred is not settled yet.
        """
        if self._state == self.PENDING:
            raise PendingError('%r is not settled yet' % self)
        elif self._state == self.REJECTED:
            return self._payload
        return None

    def then(self, on_fulfilled=None, on_rejected=None):
        """Create a new Deferred from callbacks called when this one settles.

        If this Deferred is fulfilled, the `on_fulfilled` callback will be
        called. Otherwise (it has been rejected), the `on_rejected` callback
        is called.
        In any case, the callback will define the state of the returned
        Deferred. If the callback raises an exception, the new Deferred is
        rejected. The callback can returns:
        - A value: the new Deferred will be fulfilled with this value.
        - Another Deferred, or any object with a `then` method: when fulfilled
            or rejected, will transfer its status (state and value/reason)
            to the Deferred returned by this method.

        If a callback is not defined, the state of this Deferred is
        transferred to the new one (the state and the value/reason).

        If this Deferred is already settled, the callback is scheduled
        immediately.

        Args:
            on_fulfilled (callable, optional): This callback will receive the
                value of this Deferred as argument.
            on_rejected (callable, optional): This callback will receive the
                rejection reason of this Deferred as argument.
        Returns:
            Deferred<*>: new Deferred depending of self.
        """
        for callback in (on_fulfilled, on_rejected):
            if callback is not None and not callable(callback):
                raise TypeError('Deferred callback must be callable, not %r'
                                % (callback,))

        if on_rejected is None:
            name = _callable_name(on_fulfilled)
        elif on_fulfilled is None:
            name = '<None, %s>' % _callable_name(on_rejected)
        else:
            name = '<%s, %s>' % (_callable_name(on_fulfilled),
                                 _callable_name(on_rejected))

        target = Deferred(scheduler=self._scheduler, _name=name,
                          _previous=self)
        self._continuations.append((target, on_fulfilled, on_rejected))
        if self._state != self.PENDING:
            self._schedule_drain()
        return target

    def catch(self, on_rejected):
        """Create a new Deferred with a callback called when an error occurs.

        Alias of `self.then(None, on_rejected)`

        Args:
            on_rejected (callable): Takes the rejection reason as argument.
                Will be called if `self` is rejected.
        Returns:
            Deferred<*>: new Deferred chained to `self`. If `self` is
                fulfilled, the value will be the same as `self`. Otherwise,
                the value returned by the `on_rejected()` callback.
        """
        return self.then(None, on_rejected)

    def finally_(self, on_finally):
        """Register a callback called when this Deferred settles, in any case.

        The callback takes no argument, and its return value is ignored: it
        can neither see nor change the outcome. The returned Deferred settles
        the same way as `self`, after the callback has been called.
        If the callback raises, the returned Deferred is rejected with the
        exception raised.

        Args:
            on_finally (callable): callback without argument.
        Returns:
            Deferred<*>: new Deferred with the same outcome as `self`.
        """
        if not callable(on_finally):
            raise TypeError('Deferred callback must be callable, not %r'
                            % (on_finally,))

        target = Deferred(scheduler=self._scheduler,
                          _name='FINALLY %s' % _callable_name(on_finally),
                          _previous=self)
        self._finalizers.append((target, on_finally))
        if self._state != self.PENDING:
            self._schedule_drain()
        return target

    def safeguard(self):
        """Catch all errors and log them with the most details possible.

        This method is aimed to protect the program from uncaught rejected
        Deferred. If no error handler has been set (via then() or catch()),
        the default behavior is to do nothing, and thus, errors are silently
        ignored.
        Calling `safeguard()` after all chains are set will catch these
        errors, and log them as ERROR with the maximum of details possible.
        """
        def guard(reason):
            if isinstance(reason, BaseException):
                _logger.error('[SAFEGUARD] %r', self,
                              exc_info=(type(reason), reason,
                                        reason.__traceback__))
            else:
                _logger.error('[SAFEGUARD] %r rejected with: %r', self, reason)

        self.then(None, guard)

    def __repr__(self):
        chain = []
        deferred = self
        while deferred is not None:
            chain.append('%s %s' % (deferred._name,
                                    deferred._state[0].upper()))
            previous = deferred._previous
            deferred = previous() if previous else None
        return 'Deferred(%s)' % ' -> '.join(reversed(chain))

    @classmethod
    def resolve(cls, value, scheduler=None):
        """Create a Deferred already fulfilled with the selected value.

        The value is kept as is, even if it's a thenable: the result is a
        Deferred fulfilled with the thenable itself. Use ``adopt()`` to follow
        the outcome of a thenable.

        Args:
            value: value of the Deferred.
            scheduler (optional): scheduler of the new Deferred.
        Returns:
            Deferred: new Deferred already fulfilled.
        """
        deferred = cls(scheduler=scheduler, _name='RESOLVE')
        deferred._fulfill(value)
        return deferred

    @classmethod
    def reject(cls, reason, scheduler=None):
        """Create a Deferred rejected for the reason specified.

        Args:
            reason: reason of the rejection, usually an Exception.
            scheduler (optional): scheduler of the new Deferred.
        Returns:
            Deferred: new Deferred already rejected.
        """
        deferred = cls(scheduler=scheduler, _name='REJECT')
        deferred._reject(reason)
        return deferred

    @classmethod
    def adopt(cls, value, scheduler=None):
        """Convert any value into a Deferred, flattening thenables.

        Args:
            value: a Deferred is returned as is. Any other thenable is
                followed: the new Deferred settles the same way when the
                thenable settles. Other values are wrapped by ``resolve()``.
            scheduler (optional): scheduler of the new Deferred, when one is
                created.
        Returns:
            Deferred
        """
        if isinstance(value, cls):
            return value
        if is_thenable(value):
            def follow(fulfill, reject):
                value.then(fulfill, reject)

            return cls(follow, scheduler=scheduler, _name='ADOPT')
        return cls.resolve(value, scheduler=scheduler)

    def _fulfill(self, value=None):
        if self._state != self.PENDING:
            _logger.warning('Try to fulfill %r already settled. New value '
                            'will be ignored: %r', self, value)
            return
        self._state = self.FULFILLED
        self._payload = value
        self._schedule_settlement_drain()

    def _reject(self, reason):
        if self._state != self.PENDING:
            _logger.warning('Try to reject %r already settled. New reason '
                            'will be ignored: %r', self, reason)
            return
        if not isinstance(reason, BaseException):
            _logger.debug('%r rejected with non-exception value: %r',
                          self, reason)
        self._state = self.REJECTED
        self._payload = reason
        self._schedule_settlement_drain()

    def _schedule_drain(self):
        self._scheduler.schedule(self._drain)

    def _schedule_settlement_drain(self):
        # Only the outermost settlement runs the loop: a settlement made by a
        # drain is queued, so the stack depth doesn't grow with the chain.
        pending = getattr(_settling, 'pending', None)
        if pending is not None:
            pending.append(self)
            return

        pending = _settling.pending = deque([self])
        try:
            while pending:
                pending.popleft()._schedule_drain()
        finally:
            _settling.pending = None

    def _drain(self):
        # Queues are swapped before iteration: callbacks registering new
        # handlers on self are drained by their own scheduled drain.
        continuations, self._continuations = self._continuations, []
        finalizers, self._finalizers = self._finalizers, []

        is_fulfilled = self._state == self.FULFILLED
        for target, on_fulfilled, on_rejected in continuations:
            handler = on_fulfilled if is_fulfilled else on_rejected
            if handler is None:
                self._transfer(target)
            else:
                self._run_handler(target, handler, self._payload)

        for target, on_finally in finalizers:
            if self._run_finalizer(target, on_finally):
                self._transfer(target)

    def _transfer(self, target):
        """Settle the target with the same outcome as self."""
        if self._state == self.FULFILLED:
            target._fulfill(self._payload)
        else:
            target._reject(self._payload)

    def _run_handler(self, target, handler, payload):
        try:
            outcome = classify(handler(payload))
            if isinstance(outcome, Thenable):
                if outcome.value is target:
                    raise TypeError('Chaining cycle: a callback of %r '
                                    'returned its own Deferred' % self)
                outcome.value.then(target._fulfill, target._reject)
                return
        except Exception as error:
            self._handle_callback_error(target, handler, error)
            return
        target._fulfill(outcome.value)

    def _run_finalizer(self, target, on_finally):
        try:
            on_finally()
        except Exception as error:
            self._handle_callback_error(target, on_finally, error)
            return False
        return True

    def _handle_callback_error(self, target, callback, error):
        if self.propagate_callback_errors:
            raise error
        _logger.debug('Callback %s of %r raised an exception: %r',
                      _callable_name(callback), self, error)
        target._reject(error)
