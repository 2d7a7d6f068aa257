"""Identifier generation for players and matches.

Components that create entities take an ``id_factory`` callable instead
of reaching for a global, so tests can supply predictable ids.
"""

import itertools
import uuid
from typing import Callable

IdFactory = Callable[[], str]


def generate_id() -> str:
    """Return a short random identifier (8 hex chars)."""
    return uuid.uuid4().hex[:8]


def sequential_ids(prefix: str = "") -> IdFactory:
    """Return a factory producing ``prefix1``, ``prefix2``, ...

    Examples:
        >>> next_id = sequential_ids("m")
        >>> next_id(), next_id()
        ('m1', 'm2')
    """
    counter = itertools.count(1)
    return lambda: f"{prefix}{next(counter)}"
