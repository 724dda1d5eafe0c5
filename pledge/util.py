# -*- coding: utf-8 -*-

from collections import namedtuple
import inspect


PlainValue = namedtuple('PlainValue', ['value'])
"""Result of a callback who must be used as is."""

Thenable = namedtuple('Thenable', ['value'])
"""Result of a callback whose outcome must be adopted."""


def _accepts_two_callbacks(method):
    try:
        signature = inspect.signature(method)
    except (TypeError, ValueError):
        # Builtins and some C extensions don't expose a signature.
        return True
    try:
        signature.bind(None, None)
    except TypeError:
        return False
    return True


def is_thenable(value):
    """Check if an object can be chained, like a Deferred, or is a "result".

    The deferred module uses this function to differentiate "chainable"
    objects and direct return values, when using a callback who can returns
    both.
    Classes are never thenables, even if they define a `then` method: only
    their instances are.

    Returns:
        boolean: True if the value has an attribute 'then' who is callable
            with two positional callbacks. False if not.
    """
    if inspect.isclass(value):
        return False
    then = getattr(value, 'then', None)
    if not callable(then):
        return False
    return _accepts_two_callbacks(then)


def classify(value):
    """Tag a callback result as a `Thenable` or a `PlainValue`."""
    if is_thenable(value):
        return Thenable(value)
    return PlainValue(value)
