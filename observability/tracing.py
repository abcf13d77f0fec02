"""Simple span helper for recording request timings."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Dict, Iterator

from .logger import log_event


@contextmanager
def span(name: str, room_name: str) -> Iterator[Dict[str, int]]:
    timing = {"ms": 0}
    start = time.time()
    try:
        yield timing
    finally:
        timing["ms"] = int((time.time() - start) * 1000)
        log_event("span", room_name, node=name, ms=timing["ms"])


__all__ = ["span"]
