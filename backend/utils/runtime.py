"""Clock and identifier sources injected into the services."""

from __future__ import annotations

import time
from typing import Callable
from uuid import uuid4


Clock = Callable[[], int]
IdFactory = Callable[[], str]


def now_ns() -> int:
    return time.time_ns()


def new_record_id() -> str:
    return str(uuid4())
