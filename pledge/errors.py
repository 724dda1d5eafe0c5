# -*- coding: utf-8 -*-


class DeferredError(Exception):
    """Base class of all errors raised by the pledge package."""
    pass


class PendingError(DeferredError):
    """The value of a Deferred has been requested before its settlement."""
    pass


class RejectionError(DeferredError):
    """A Deferred has been rejected with a value who is not an Exception.

    Python can only raise exceptions. When such a rejection reason must be
    raised (by ``Deferred.result()``, or in a coroutine), it's wrapped in a
    RejectionError.

    Attributes:
        reason: the original rejection reason, as given to ``reject()``.
    """

    def __init__(self, reason):
        DeferredError.__init__(self, 'Deferred rejected with %r' % (reason,))
        self.reason = reason


def as_exception(reason):
    """Returns an exception who can be raised for this rejection reason."""
    if isinstance(reason, BaseException):
        return reason
    return RejectionError(reason)
