"""
Duplex utilities shared by the command, commander and inspector layers.

- Unset: "argument not given" marker, distinct from None (which callers use to
  clear a handler slot).
- coalesce(value, default): Unset becomes default; every other value, None
  included, is returned unchanged.
- rename(name): decorator giving generated accessors a readable __name__.
- ReadWriteLock: shared/exclusive lock guarding registries and handler slots.

    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
"""
import functools
import threading
from contextlib import contextmanager
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker.

    There is exactly one instance; it is falsey, prints as "Unset" and can take
    part in isinstance unions (isinstance(value, str | Unset)).
    """

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """Return default when object is Unset, object otherwise."""
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator setting __name__ and __qualname__, so accessors built in a loop or a
    factory show up under their real name in tracebacks and reprs.
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("@rename() must be applied to a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


class ReadWriteLock:
    """
    Many readers or one writer.

        with lock.reading(): ...   # lookups, resolution, snapshots
        with lock.writing(): ...   # registration, default and hook updates

    Writers are preferred: while a writer waits, new readers queue behind it.

    Not reentrant: a thread holding one side must not take either side again.
    """
    __slots__ = ("_condition", "_readers", "_writing", "_waiting")

    def __init__(self):
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False
        self._waiting = 0

    @contextmanager
    def reading(self):
        with self._condition:
            while self._writing or self._waiting:
                self._condition.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._condition:
                self._readers -= 1
                if not self._readers:
                    self._condition.notify_all()

    @contextmanager
    def writing(self):
        with self._condition:
            self._waiting += 1
            try:
                while self._writing or self._readers:
                    self._condition.wait()
            finally:
                self._waiting -= 1
            self._writing = True
        try:
            yield
        finally:
            with self._condition:
                self._writing = False
                self._condition.notify_all()


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "UnsetType",
    "ReadWriteLock",
    "Unset",
)
