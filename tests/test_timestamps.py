from datetime import datetime, timedelta, timezone

import pytest

from filemirror.util.timestamps import (
    MAX_TIMESTAMP,
    MIN_TIMESTAMP,
    format_iso,
    is_sentinel,
    normalize,
    parse_http_date,
    parse_iso,
)


def test_parse_http_date_rfc1123() -> None:
    parsed = parse_http_date("Tue, 15 Nov 1994 08:12:31 GMT")
    assert parsed == datetime(1994, 11, 15, 8, 12, 31, tzinfo=timezone.utc)


def test_parse_http_date_converts_offsets_to_utc() -> None:
    parsed = parse_http_date("Tue, 15 Nov 1994 10:12:31 +0200")
    assert parsed == datetime(1994, 11, 15, 8, 12, 31, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "value",
    [
        "",
        "yesterday",
        "Tue, 99 Nov 1994 08:12:31 GMT",
        "Fri, 31 Dec 9999 23:30:00 -0100",
    ],
)
def test_parse_http_date_rejects_garbage(value: str) -> None:
    with pytest.raises(ValueError):
        parse_http_date(value)


def test_iso_format_has_z_suffix_and_second_precision() -> None:
    value = datetime(2024, 3, 1, 12, 0, 0, 987654, tzinfo=timezone.utc)
    assert format_iso(value) == "2024-03-01T12:00:00Z"
    assert parse_iso("2024-03-01T12:00:00Z") == value.replace(microsecond=0)


def test_iso_format_pads_early_years() -> None:
    assert format_iso(MIN_TIMESTAMP) == "0001-01-01T00:00:00Z"
    assert parse_iso(format_iso(MIN_TIMESTAMP)) == MIN_TIMESTAMP


def test_normalize_treats_naive_values_as_utc() -> None:
    naive = datetime(2024, 3, 1, 12, 0, 0, 500)
    aware = datetime(2024, 3, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert normalize(naive) == datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
    assert normalize(aware) == datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_sentinels_bracket_real_timestamps() -> None:
    now = normalize(datetime.now(timezone.utc))
    assert MIN_TIMESTAMP < now < MAX_TIMESTAMP
    assert is_sentinel(MIN_TIMESTAMP)
    assert is_sentinel(MAX_TIMESTAMP)
    assert not is_sentinel(now)
