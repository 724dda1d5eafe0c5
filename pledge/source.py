# -*- coding: utf-8 -*-

from .deferred import Deferred


class DeferredSource(object):
    """Creator side of a Deferred.

    The start routine of a Deferred is the only place where its settlement
    capabilities are available. A DeferredSource keeps them, so the code
    producing the value can settle the Deferred later, while the Deferred
    itself is given to the consumers.

    Attributes:
        deferred (Deferred): the Deferred associated to the source.
        fulfill (function)
        reject (function)
    """

    def __init__(self, *args, **kwargs):
        """Args and kwargs are passed to the Deferred constructor."""
        self.deferred = Deferred(self._start, *args, **kwargs)

    def _start(self, fulfill, reject):
        self.fulfill = fulfill
        self.reject = reject
