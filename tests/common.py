import os
import time
from contextlib import contextmanager

import pytest


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


# POSIX TZ strings don't need the timezone database
NEW_YORK_POSIX = "EST+05EDT,M3.2.0,M11.1.0"
AMSTERDAM_POSIX = "CET-01CEST,M3.5.0,M10.5.0/3"

requires_tzset = pytest.mark.skipif(
    not hasattr(time, "tzset"), reason="time.tzset() is not available"
)


@contextmanager
def local_timezone(tz: str):
    """Temporarily set the system timezone"""
    previous = os.environ.get("TZ")
    os.environ["TZ"] = tz
    time.tzset()
    try:
        yield
    finally:
        if previous is None:
            del os.environ["TZ"]
        else:
            os.environ["TZ"] = previous
        time.tzset()
