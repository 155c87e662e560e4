from __future__ import annotations

from pathlib import Path

import requests

from filemirror.config import Config
from filemirror.download.progress import (
    ProgressObserver,
    ProgressSample,
    ProgressTracker,
    TickTimer,
)
from filemirror.errors import DownloadError
from filemirror.util.logging import get_logger

LOG = get_logger(__name__)
PART_SUFFIX = ".part"


class StreamingDownloader:
    def __init__(
        self,
        session: requests.Session,
        cfg: Config,
        observer: ProgressObserver | None = None,
    ) -> None:
        self.session = session
        self.cfg = cfg
        self.observer = observer

    def download(self, url: str, destination: Path) -> int:
        """Fetch `url` into `destination` and return the number of bytes written.

        The body is streamed into a sibling `.part` file which replaces
        `destination` only once the stream has ended, so an interrupted
        transfer never leaves a truncated file behind and never clobbers a
        previously complete one.
        """
        part_path = destination.with_name(destination.name + PART_SUFFIX)
        try:
            written = self._transfer(url, part_path)
            part_path.replace(destination)
        except (requests.RequestException, OSError) as exc:
            raise DownloadError(url, str(exc)) from exc
        finally:
            part_path.unlink(missing_ok=True)
        LOG.info("Downloaded %s (%s bytes) to %s", url, written, destination)
        return written

    def _transfer(self, url: str, part_path: Path) -> int:
        timeout = (self.cfg.http.connect_timeout_seconds, self.cfg.http.read_timeout_seconds)
        chunk_size = self.cfg.download.chunk_size

        LOG.info("Fetching: %s", url)
        with self.session.get(url, stream=True, timeout=timeout) as resp:
            resp.raise_for_status()
            tracker = ProgressTracker(_content_length(resp))
            with TickTimer(self.cfg.download.sample_interval_seconds) as ticks:
                with part_path.open("wb") as fh:
                    for chunk in resp.iter_content(chunk_size=chunk_size):
                        if not chunk:
                            continue
                        fh.write(chunk)
                        tracker.add(len(chunk))
                        if ticks.consume():
                            self._emit(tracker.sample())

        total = tracker.total_bytes
        if total is not None and tracker.downloaded_bytes < total:
            raise DownloadError(
                url, f"stream ended after {tracker.downloaded_bytes} of {total} bytes"
            )
        self._emit(tracker.sample())
        return tracker.downloaded_bytes

    def _emit(self, sample: ProgressSample) -> None:
        if self.observer is None:
            LOG.debug("Progress: %s", sample.describe())
            return
        try:
            self.observer(sample)
        except Exception as exc:  # noqa: BLE001
            LOG.warning("Progress observer failed: %s", exc)


def _content_length(resp: requests.Response) -> int | None:
    # With a content coding the header counts encoded bytes, not what we write.
    encoding = resp.headers.get("Content-Encoding", "identity").strip().lower()
    if encoding not in ("", "identity"):
        return None
    raw = resp.headers.get("Content-Length")
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value >= 0 else None
