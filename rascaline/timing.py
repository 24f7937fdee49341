"""
A timing decorator for profiling and debugging purposes.

Use it like this:

    from rascaline.timing import timings

    @timings.instrument("my_function")
    def my_function(...):
        ....

    timings.enable()
    my_function(...)
    timings.report()

Instrumented functions only pay for a boolean check when timing is
disabled.  The module-level `timings` instance is enabled if the
`timing.enabled` setting is true, unless `enable()` or `disable()` is
called first.

"""

import functools
import sys
import threading
import timeit

from . import config

__author__ = "The rascaline developers"
__date__ = "2021-03-02"


class Timing(object):

    def __init__(self, enabled=False):
        """
        Arguments:
          enabled   True or False, or None to use the `timing.enabled`
                    setting, read on the first call of an instrumented
                    function

        """
        self._enabled = enabled
        self.frmt = "{:<40} {:>8} {:>14.6f} {:>14.6f}\n"
        self._lock = threading.Lock()
        self._records = {}

    @property
    def enabled(self):
        if self._enabled is None:
            self._enabled = config.timing_enabled()
        return self._enabled

    @enabled.setter
    def enabled(self, value):
        self._enabled = value

    def __call__(self, func):
        return self.instrument()(func)

    def instrument(self, name=None):
        """
        Decorator recording the number of calls and the elapsed time of
        the decorated function under `name` (defaults to the qualified
        name of the function).

        """
        def decorator(func):
            label = name if name is not None else func.__qualname__

            @functools.wraps(func)
            def wrap(*args, **kwargs):
                if not self.enabled:
                    return func(*args, **kwargs)
                t0 = timeit.default_timer()
                try:
                    return func(*args, **kwargs)
                finally:
                    self.record(label, timeit.default_timer() - t0)
            return wrap
        return decorator

    def record(self, label, elapsed):
        with self._lock:
            calls, total = self._records.get(label, (0, 0.0))
            self._records[label] = (calls + 1, total + elapsed)

    def enable(self):
        self.enabled = True

    def disable(self):
        self.enabled = False

    def reset(self):
        with self._lock:
            self._records = {}

    @property
    def records(self):
        """
        Dictionary {name: (calls, total elapsed time in s)}.
        """
        with self._lock:
            return dict(self._records)

    def report(self, outfile=sys.stdout):
        if hasattr(outfile, 'write'):
            fp = outfile
            close = False
        else:
            fp = open(outfile, 'w')
            close = True
        try:
            fp.write("{:<40} {:>8} {:>14} {:>14}\n".format(
                "function", "calls", "total (s)", "mean (s)"))
            for label, (calls, total) in sorted(self.records.items()):
                fp.write(self.frmt.format(label, calls, total, total/calls))
        finally:
            if close:
                fp.close()


timings = Timing(enabled=None)
