from datetime import datetime, timezone

import pytest

from coursehub.services.store import normalize_document
from coursehub.utils.timestamps import to_datetime


EXPECTED = datetime(2025, 1, 31, 10, 0, tzinfo=timezone.utc)


class FirestoreTimestamp:
    def toDate(self):
        return datetime(2025, 1, 31, 10, 0)


@pytest.mark.parametrize("value", [
    EXPECTED,
    datetime(2025, 1, 31, 10, 0),
    "2025-01-31T10:00:00Z",
    "2025-01-31T12:00:00+02:00",
    {"_seconds": int(EXPECTED.timestamp()), "_nanoseconds": 0},
    {"seconds": int(EXPECTED.timestamp())},
    EXPECTED.timestamp(),
    FirestoreTimestamp(),
])
def test_every_shape_normalizes_to_aware_utc(value) -> None:
    result = to_datetime(value)

    assert result == EXPECTED
    assert result.tzinfo is not None


def test_none_passes_through() -> None:
    assert to_datetime(None) is None


@pytest.mark.parametrize("value", ["not a date", {"foo": 1}, object(), True])
def test_unrecognized_values_raise(value) -> None:
    with pytest.raises(ValueError):
        to_datetime(value)


def test_normalize_document_maps_id_and_timestamps() -> None:
    doc = normalize_document({"_id": 42, "applied_date": "2025-01-31T10:00:00Z", "status": "pending"})

    assert doc["id"] == "42"
    assert "_id" not in doc
    assert doc["applied_date"] == EXPECTED
    assert doc["status"] == "pending"
