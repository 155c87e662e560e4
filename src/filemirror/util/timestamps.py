"""UTC timestamp helpers shared by the freshness check and the metadata file."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Sentinels for when the real value is unknown: MIN always loses the freshness
# comparison, MAX always wins it.
MIN_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)
MAX_TIMESTAMP = datetime.max.replace(microsecond=0, tzinfo=timezone.utc)


def normalize(value: datetime) -> datetime:
    """Convert to UTC and drop sub-second precision. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(microsecond=0)


def parse_http_date(value: str) -> datetime:
    """Parse a `Last-Modified` style HTTP-date (RFC 1123, RFC 850 or asctime)."""
    try:
        parsed = parsedate_to_datetime(value)
        if parsed is None:
            raise ValueError("no date found")
        return normalize(parsed)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValueError(f"Unparsable HTTP date: {value!r}") from exc


def format_iso(value: datetime) -> str:
    return normalize(value).replace(tzinfo=None).isoformat() + "Z"


def parse_iso(value: str) -> datetime:
    return datetime.strptime(value, ISO_FORMAT).replace(tzinfo=timezone.utc)


def is_sentinel(value: datetime) -> bool:
    return value in (MIN_TIMESTAMP, MAX_TIMESTAMP)
