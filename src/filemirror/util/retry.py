from __future__ import annotations

from collections.abc import Callable
import time
from typing import TypeVar

T = TypeVar("T")


def retry(
    func: Callable[[], T],
    attempts: int = 3,
    delay_seconds: float = 1.0,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    on_error: Callable[[Exception, int], None] | None = None,
) -> T:
    """Call `func` until it succeeds; the final failure is re-raised unchanged."""
    if attempts < 1:
        raise ValueError("attempts must be >= 1")
    attempt = 1
    while True:
        try:
            return func()
        except retry_on as exc:
            if on_error:
                on_error(exc, attempt)
            if attempt >= attempts:
                raise
        if delay_seconds > 0:
            time.sleep(delay_seconds)
        attempt += 1
