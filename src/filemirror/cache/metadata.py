from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import json
from pathlib import Path

from filemirror.errors import LocalMetadataError
from filemirror.util.timestamps import format_iso, normalize, parse_iso

LAST_MODIFIED_KEY = "LastModified"


@dataclass(frozen=True)
class CacheMetadata:
    last_modified: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "last_modified", normalize(self.last_modified))

    def to_payload(self) -> dict[str, str]:
        return {LAST_MODIFIED_KEY: format_iso(self.last_modified)}

    @classmethod
    def from_payload(cls, payload: object) -> CacheMetadata:
        if not isinstance(payload, dict):
            raise ValueError("metadata payload is not an object")
        value = payload[LAST_MODIFIED_KEY]
        if not isinstance(value, str):
            raise ValueError(f"{LAST_MODIFIED_KEY} is not a string")
        return cls(last_modified=parse_iso(value))


def read_metadata(path: Path) -> CacheMetadata | None:
    """Return the stored metadata, or None when the file does not exist."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as exc:
        raise LocalMetadataError(path, str(exc)) from exc

    try:
        return CacheMetadata.from_payload(json.loads(text))
    except (KeyError, ValueError) as exc:
        raise LocalMetadataError(path, str(exc)) from exc


def write_metadata(path: Path, metadata: CacheMetadata) -> None:
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp_path.write_text(json.dumps(metadata.to_payload(), indent=2), encoding="utf-8")
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
