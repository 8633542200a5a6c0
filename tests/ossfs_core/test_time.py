from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from ossfs_core.io.time import to_timestamp


@pytest.mark.parametrize(
    "value",
    [
        datetime(2024, 1, 1, tzinfo=timezone.utc),
        datetime(2024, 1, 1),
        datetime(2024, 1, 1, 8, tzinfo=timezone(timedelta(hours=8))),
        date(2024, 1, 1),
        "Mon, 01 Jan 2024 00:00:00 GMT",
        "2024-01-01T00:00:00.000Z",
        "2024-01-01T00:00:00+00:00",
        1704067200,
        1704067200.9,
        "1704067200",
    ],
)
def test_to_timestamp_supported_inputs(value) -> None:
    assert to_timestamp(value) == 1704067200


@pytest.mark.parametrize(
    "value",
    [None, "", "   ", "yesterday", object(), True, float("nan"), float("inf"), float("-inf")],
)
def test_to_timestamp_unparseable_is_none(value) -> None:
    assert to_timestamp(value) is None
