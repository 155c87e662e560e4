import time

import pytest

from filemirror.download.progress import (
    ProgressSample,
    ProgressTracker,
    TickTimer,
    format_bytes,
    format_duration,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_tracker_reports_rate_since_previous_sample() -> None:
    clock = FakeClock()
    tracker = ProgressTracker(total_bytes=10_000, clock=clock)

    tracker.add(4_000)
    clock.now += 1.0
    first = tracker.sample()

    tracker.add(1_000)
    clock.now += 2.0
    second = tracker.sample()

    assert first.bytes_per_second == 4_000
    assert first.percent == 40.0
    assert first.eta_seconds == 1.5
    assert second.downloaded_bytes == 5_000
    assert second.bytes_per_second == 500
    assert second.eta_seconds == 10.0


def test_unknown_total_has_no_percent_or_eta() -> None:
    sample = ProgressSample(downloaded_bytes=2048, total_bytes=None, bytes_per_second=1024.0)
    assert sample.percent is None
    assert sample.eta_seconds is None
    assert sample.describe() == "2.0 KiB at 1.0 KiB/s"


def test_stalled_transfer_has_no_eta() -> None:
    sample = ProgressSample(downloaded_bytes=10, total_bytes=100, bytes_per_second=0.0)
    assert sample.percent == 10.0
    assert sample.eta_seconds is None
    assert "ETA --" in sample.describe()


def test_describe_with_known_total() -> None:
    sample = ProgressSample(downloaded_bytes=512 * 1024, total_bytes=1024 * 1024, bytes_per_second=256 * 1024)
    assert sample.describe() == " 50.0% 512.0 KiB / 1.0 MiB at 256.0 KiB/s, ETA 2s"


def test_format_helpers() -> None:
    assert format_bytes(0) == "0 B"
    assert format_bytes(1536) == "1.5 KiB"
    assert format_bytes(3 * 1024**3) == "3.0 GiB"
    assert format_duration(42) == "42s"
    assert format_duration(125) == "2m05s"
    assert format_duration(3725) == "1h02m05s"


def test_tick_timer_sets_flag_cooperatively() -> None:
    with TickTimer(0.01) as ticks:
        deadline = time.monotonic() + 2.0
        while not ticks.consume():
            assert time.monotonic() < deadline, "timer never ticked"
            time.sleep(0.005)


def test_tick_timer_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        TickTimer(0)
