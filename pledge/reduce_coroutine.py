# -*- coding: utf-8 -*-

import functools

from .errors import as_exception
from .source import DeferredSource
from .util import is_thenable


def reduce_coroutine(safeguard=False):
    """Decorator who converts a coroutine of deferreds into a single Deferred.

    The greatest interest is the ability to write a function in an
    synchronous-like style, using many asynchronous Deferreds.
    Whatever is the number of Deferreds or async calls used, the result will
    always be an unique Deferred wrapping the whole process.

    The generator yields thenables. The value of each one is sent back into
    the generator; a rejection is thrown into it (reasons who are not
    exceptions are wrapped in a `RejectionError`). The first value yielded
    who is not a thenable is the result. If the generator ends before that,
    the value returned by the generator is the result, or, if it returns
    None, the value of the last thenable yielded. A generator who catches a
    rejection then returns is fulfilled with the value returned.

    Args:
        safeguard (boolean): if true, use `Deferred.safeguard()` on the
            resulting Deferred.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            """
            Args:
                *args
                **kwargs
            Returns:
                Deferred<*>
            """
            src = DeferredSource(_name='COROUTINE %s' % func.__name__)
            if safeguard:
                src.deferred.safeguard()

            try:
                # Create generator; Initialization phase
                gen = func(*args, **kwargs)
            except Exception as error:
                src.reject(error)
                return src.deferred

            # Thenables already settled call back inside `then()`: their step
            # is stored, and run by the loop of the outermost `_resume()`.
            context = {'step': None, 'running': False}

            def _resume(step, value):
                context['step'] = (step, value)
                if context['running']:
                    return
                context['running'] = True
                try:
                    while context['step']:
                        step, value = context['step']
                        context['step'] = None
                        step(value)
                finally:
                    context['running'] = False

            def _call_next_or_set_result(value):
                if is_thenable(value):
                    value.then(functools.partial(_resume, iter_next),
                               functools.partial(_resume, iter_error))
                else:
                    gen.close()
                    src.fulfill(value)

            def iter_next(yielded_value):
                try:
                    next_value = gen.send(yielded_value)
                except StopIteration as stop:
                    # A `return` statement takes precedence.
                    if stop.value is not None:
                        return src.fulfill(stop.value)
                    return src.fulfill(yielded_value)
                except Exception as error:
                    return src.reject(error)
                _call_next_or_set_result(next_value)

            def iter_error(reason):
                error = as_exception(reason)
                try:
                    next_value = gen.throw(error)
                except StopIteration as stop:
                    # The generator caught the error, then returned.
                    return src.fulfill(stop.value)
                except Exception as raised_error:
                    if raised_error is error:
                        return src.reject(reason)
                    return src.reject(raised_error)
                _call_next_or_set_result(next_value)

            # Start and resolve loop.
            try:
                first_value = next(gen)
            except StopIteration:
                src.fulfill(None)
                return src.deferred
            except Exception as error:
                src.reject(error)
                return src.deferred
            _call_next_or_set_result(first_value)

            return src.deferred

        return wrapper
    return decorator
