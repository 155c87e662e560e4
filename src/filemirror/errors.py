from __future__ import annotations

from pathlib import Path


class MirrorError(RuntimeError):
    """Base class for every error raised by filemirror."""


class DirectoryCreateError(MirrorError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot create cache directory {path}: {reason}")
        self.path = path


class RemoteProbeError(MirrorError):
    """The HEAD probe did not yield a usable Last-Modified timestamp."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Remote probe failed for {url}: {reason}")
        self.url = url


class LocalMetadataError(MirrorError):
    """The metadata file exists but cannot be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Unreadable cache metadata {path}: {reason}")
        self.path = path


class DownloadError(MirrorError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to download {url}: {reason}")
        self.url = url
