from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import requests

from filemirror.cache.metadata import CacheMetadata, read_metadata, write_metadata
from filemirror.config import Config
from filemirror.download.downloader import StreamingDownloader
from filemirror.download.progress import ProgressObserver
from filemirror.errors import (
    DirectoryCreateError,
    DownloadError,
    LocalMetadataError,
    RemoteProbeError,
)
from filemirror.session import build_session
from filemirror.util.logging import get_logger
from filemirror.util.retry import retry
from filemirror.util.timestamps import (
    MAX_TIMESTAMP,
    MIN_TIMESTAMP,
    is_sentinel,
    parse_http_date,
)

LOG = get_logger(__name__)
METADATA_SUFFIX = "-CacheData.json"


@dataclass(frozen=True)
class CachedFile:
    path: Path
    size_bytes: int
    last_modified: datetime | None
    refreshed: bool = False
    stale: bool = False


@dataclass(frozen=True)
class CacheStatus:
    artifact_exists: bool
    local_last_modified: datetime | None
    remote_last_modified: datetime | None
    needs_refresh: bool


@dataclass(frozen=True)
class CacheEntry:
    """One remote file mirrored into `base_dir`, kept fresh by Last-Modified."""

    file_name: str
    source_url: str
    base_dir: Path
    cfg: Config = field(default_factory=Config, repr=False, compare=False)
    session: requests.Session | None = field(default=None, repr=False, compare=False)
    on_progress: ProgressObserver | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        _check_file_name(self.file_name)
        base_dir = Path(self.base_dir)
        object.__setattr__(self, "base_dir", base_dir)
        if self.session is None:
            object.__setattr__(self, "session", build_session(self.cfg))
        try:
            base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryCreateError(base_dir, str(exc)) from exc

    @property
    def artifact_path(self) -> Path:
        return self.base_dir / self.file_name

    @property
    def metadata_path(self) -> Path:
        return self.base_dir / f"{self.file_name}{METADATA_SUFFIX}"

    def remote_last_modified(self) -> datetime:
        """Server timestamp, or MAX_TIMESTAMP when it cannot be determined."""
        try:
            return self._probe_remote()
        except RemoteProbeError as exc:
            LOG.warning("%s; assuming the remote copy is newer", exc)
            return MAX_TIMESTAMP

    def local_last_modified(self) -> datetime:
        """Recorded timestamp, or MIN_TIMESTAMP when none is usable."""
        try:
            metadata = read_metadata(self.metadata_path)
        except LocalMetadataError as exc:
            LOG.warning("%s; discarding it", exc)
            self._drop_metadata()
            return MIN_TIMESTAMP
        if metadata is None:
            return MIN_TIMESTAMP
        return metadata.last_modified

    def set_local_last_modified(self, timestamp: datetime) -> None:
        write_metadata(self.metadata_path, CacheMetadata(last_modified=timestamp))

    def refresh(self) -> datetime | None:
        """Download the artifact and record the server timestamp seen afterwards.

        Returns the recorded timestamp, or None when no timestamp could be
        recorded (post-download probe failed, or the metadata write failed).
        Either way the metadata file is absent afterwards, so the next get()
        downloads again.
        """
        LOG.info("Refreshing %s from %s", self.file_name, self.source_url)
        downloader = StreamingDownloader(self.session, self.cfg, observer=self.on_progress)

        def _on_error(exc: Exception, attempt: int) -> None:
            LOG.warning("Download attempt %s/%s failed: %s", attempt, self.cfg.download.attempts, exc)

        retry(
            lambda: downloader.download(self.source_url, self.artifact_path),
            attempts=self.cfg.download.attempts,
            delay_seconds=self.cfg.download.retry_delay_seconds,
            retry_on=(DownloadError,),
            on_error=_on_error,
        )

        remote = self.remote_last_modified()
        if is_sentinel(remote):
            # A failed probe is never recorded as a timestamp.
            self._drop_metadata()
            return None
        try:
            self.set_local_last_modified(remote)
        except OSError as exc:
            LOG.warning("Could not record timestamp in %s: %s", self.metadata_path, exc)
            self._drop_metadata()
            return None
        return remote

    def get(self) -> CachedFile:
        local = self.local_last_modified()
        remote = self.remote_last_modified()
        if local >= remote and self.artifact_path.exists():
            LOG.info("Cache hit: %s", self.artifact_path)
            return self._handle(local)

        try:
            recorded = self.refresh()
        except DownloadError as exc:
            if not self.artifact_path.exists():
                LOG.error("%s; no cached copy to fall back on", exc)
                raise
            LOG.warning("%s; serving stale copy %s", exc, self.artifact_path)
            return self._handle(self.local_last_modified(), stale=True)
        return self._handle(recorded, refreshed=True)

    def status(self) -> CacheStatus:
        local = self.local_last_modified()
        remote = self.remote_last_modified()
        exists = self.artifact_path.exists()
        return CacheStatus(
            artifact_exists=exists,
            local_last_modified=None if is_sentinel(local) else local,
            remote_last_modified=None if is_sentinel(remote) else remote,
            needs_refresh=not (local >= remote and exists),
        )

    def invalidate(self) -> None:
        self._drop_metadata()
        LOG.info("Invalidated %s", self.metadata_path)

    def _probe_remote(self) -> datetime:
        try:
            resp = self.session.head(
                self.source_url,
                timeout=self.cfg.http.probe_timeout_seconds,
                allow_redirects=True,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise RemoteProbeError(self.source_url, str(exc)) from exc

        header = resp.headers.get("Last-Modified")
        if not header:
            raise RemoteProbeError(self.source_url, "no Last-Modified header")
        try:
            return parse_http_date(header)
        except ValueError as exc:
            raise RemoteProbeError(self.source_url, str(exc)) from exc

    def _drop_metadata(self) -> None:
        try:
            self.metadata_path.unlink(missing_ok=True)
        except OSError as exc:
            LOG.warning("Could not remove %s: %s", self.metadata_path, exc)

    def _handle(
        self,
        last_modified: datetime | None,
        refreshed: bool = False,
        stale: bool = False,
    ) -> CachedFile:
        if last_modified is not None and is_sentinel(last_modified):
            last_modified = None
        return CachedFile(
            path=self.artifact_path,
            size_bytes=self.artifact_path.stat().st_size,
            last_modified=last_modified,
            refreshed=refreshed,
            stale=stale,
        )


def fetch_current(
    file_name: str,
    source_url: str,
    base_dir: Path | str,
    cfg: Config | None = None,
    on_progress: ProgressObserver | None = None,
) -> CachedFile:
    entry = CacheEntry(
        file_name,
        source_url,
        Path(base_dir),
        cfg=cfg or Config(),
        on_progress=on_progress,
    )
    return entry.get()


def _check_file_name(name: str) -> None:
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise ValueError(f"file_name must be a plain file name, got {name!r}")
