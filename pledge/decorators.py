# -*- coding: utf-8 -*-

import functools

from .deferred import Deferred


def wrap_deferred(f):
    """Decorator who converts the result in a Deferred object.

    If the function decorated returns a Deferred, it's transmitted as is. Any
    other thenable is adopted. Else, a new Deferred is created with the
    returned value as result. If the function raises, the exception is
    returned as a rejected Deferred.
    """
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return Deferred.adopt(f(*args, **kwargs))
        except Exception as error:
            return Deferred.reject(error)

    return wrapper
