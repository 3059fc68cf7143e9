import os
import time
from contextlib import contextmanager
from typing import Iterator

from civiltime import system_timezone


class AlwaysEqual:
    def __eq__(self, other):
        return True


class NeverEqual:
    def __eq__(self, other):
        return False


class AlwaysLarger:
    def __lt__(self, other):
        return False

    def __le__(self, other):
        return False

    def __gt__(self, other):
        return True

    def __ge__(self, other):
        return True


class AlwaysSmaller:
    def __lt__(self, other):
        return True

    def __le__(self, other):
        return True

    def __gt__(self, other):
        return False

    def __ge__(self, other):
        return False


@contextmanager
def system_tz(name: str) -> Iterator[None]:
    """Temporarily set the ``TZ`` of the process"""
    try:
        tzset = time.tzset
    except AttributeError:  # pragma: no cover
        import pytest

        pytest.skip("time.tzset() not available on this platform")
    old = os.environ.get("TZ")
    os.environ["TZ"] = name
    tzset()
    system_timezone().reset()
    try:
        yield
    finally:
        if old is None:
            del os.environ["TZ"]
        else:
            os.environ["TZ"] = old
        tzset()
        system_timezone().reset()


@contextmanager
def system_tz_ams() -> Iterator[None]:
    with system_tz("CET-1CEST,M3.5.0,M10.5.0/3"):
        yield


@contextmanager
def system_tz_nyc() -> Iterator[None]:
    with system_tz("EST5EDT,M3.2.0,M11.1.0"):
        yield
