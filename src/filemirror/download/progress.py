from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import threading
import time


@dataclass(frozen=True)
class ProgressSample:
    downloaded_bytes: int
    total_bytes: int | None
    bytes_per_second: float

    @property
    def percent(self) -> float | None:
        if not self.total_bytes:
            return None
        return min(100.0, self.downloaded_bytes * 100.0 / self.total_bytes)

    @property
    def eta_seconds(self) -> float | None:
        if self.total_bytes is None or self.bytes_per_second <= 0:
            return None
        remaining = max(0, self.total_bytes - self.downloaded_bytes)
        return remaining / self.bytes_per_second

    def describe(self) -> str:
        done = format_bytes(self.downloaded_bytes)
        rate = f"{format_bytes(self.bytes_per_second)}/s"
        if self.percent is None:
            return f"{done} at {rate}"
        eta = self.eta_seconds
        eta_text = format_duration(eta) if eta is not None else "--"
        total = format_bytes(self.total_bytes or 0)
        return f"{self.percent:5.1f}% {done} / {total} at {rate}, ETA {eta_text}"


ProgressObserver = Callable[[ProgressSample], None]


class ProgressTracker:
    """Accumulates transferred bytes and turns them into samples.

    Throughput is measured over the interval since the previous sample, not
    since the start of the transfer.
    """

    def __init__(
        self,
        total_bytes: int | None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.total_bytes = total_bytes
        self.downloaded_bytes = 0
        self._clock = clock
        self._last_time = clock()
        self._last_bytes = 0

    def add(self, count: int) -> None:
        self.downloaded_bytes += count

    def sample(self) -> ProgressSample:
        now = self._clock()
        elapsed = now - self._last_time
        delta = self.downloaded_bytes - self._last_bytes
        rate = delta / elapsed if elapsed > 0 else 0.0
        self._last_time = now
        self._last_bytes = self.downloaded_bytes
        return ProgressSample(
            downloaded_bytes=self.downloaded_bytes,
            total_bytes=self.total_bytes,
            bytes_per_second=rate,
        )


class TickTimer:
    """Background timer that raises a flag every `interval` seconds.

    The transfer loop polls `consume()`; the timer never interrupts it.
    """

    def __init__(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.interval = interval
        self._tick = threading.Event()
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="progress-ticker", daemon=True)

    def __enter__(self) -> TickTimer:
        self._thread.start()
        return self

    def __exit__(self, *_exc: object) -> None:
        self._stop.set()
        self._thread.join()

    def consume(self) -> bool:
        if self._tick.is_set():
            self._tick.clear()
            return True
        return False

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self._tick.set()


def format_bytes(value: float) -> str:
    units = ("B", "KiB", "MiB", "GiB", "TiB")
    size = float(value)
    for unit in units:
        if size < 1024 or unit == units[-1]:
            if unit == "B":
                return f"{int(size)} B"
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} {units[-1]}"


def format_duration(seconds: float) -> str:
    total = int(round(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes:02d}m{secs:02d}s"
    if minutes:
        return f"{minutes}m{secs:02d}s"
    return f"{secs}s"
