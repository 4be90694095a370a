"""
test_normalizer.py
------------------
Unit tests for waytrack.services.normalizer.

Covers timestamp resolution across representations, rating coercion and
display formatting, and document → Entry / User defaults.
"""
from datetime import date, datetime, timezone

from waytrack.clients.base import StoredDocument, StoreTimestamp
from waytrack.models.archive import EPOCH, Entry
from waytrack.services.normalizer import (
    coerce_rating,
    entry_payload,
    format_rating,
    normalize_entry,
    normalize_user,
    sort_newest_first,
    to_datetime,
)

MARCH = datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc)


class _ProtoTimestamp:
    """Mimics a protobuf Timestamp exposing ToDatetime()."""

    def ToDatetime(self):
        return datetime(2024, 3, 5, 10, 0)


class TestToDatetime:
    """Test to_datetime across supported shapes."""

    def test_aware_datetime_passthrough(self):
        assert to_datetime(MARCH) == MARCH

    def test_naive_datetime_is_utc(self):
        assert to_datetime(datetime(2024, 3, 5, 10, 0)) == MARCH

    def test_date(self):
        assert to_datetime(date(2024, 3, 5)) == datetime(2024, 3, 5, tzinfo=timezone.utc)

    def test_store_wrapper(self):
        wrapper = StoreTimestamp(seconds=int(MARCH.timestamp()))
        assert to_datetime(wrapper) == MARCH

    def test_protobuf_style_wrapper(self):
        assert to_datetime(_ProtoTimestamp()) == MARCH

    def test_seconds_mapping(self):
        assert to_datetime({"seconds": int(MARCH.timestamp()), "nanoseconds": 0}) == MARCH
        assert to_datetime({"_seconds": int(MARCH.timestamp()), "_nanoseconds": 0}) == MARCH

    def test_iso_string_with_z(self):
        assert to_datetime("2024-03-05T10:00:00Z") == MARCH

    def test_epoch_milliseconds(self):
        assert to_datetime(int(MARCH.timestamp() * 1000)) == MARCH

    def test_unusable_values(self):
        for value in (None, "", "not a date", True, {"foo": 1}, object(), float("nan")):
            assert to_datetime(value) is None

    def test_out_of_range_seconds_mapping(self):
        assert to_datetime({"seconds": 10**20}) is None
        assert to_datetime({"seconds": 10**400}) is None
        assert to_datetime({"seconds": 0, "nanoseconds": "x"}) is None

    def test_out_of_range_epoch_milliseconds(self):
        assert to_datetime(10**20) is None
        assert to_datetime(10**400) is None


class TestRating:
    """Test rating coercion and one-decimal display."""

    def test_numeric_and_string(self):
        assert coerce_rating(4) == 4.0
        assert coerce_rating("4.5") == 4.5
        assert coerce_rating(" 5.0 ") == 5.0

    def test_invalid(self):
        for value in (None, "", "five", True, [5], float("inf")):
            assert coerce_rating(value) is None

    def test_int_too_large_for_float(self):
        assert coerce_rating(10**400) is None

    def test_string_rating_displays_one_decimal(self):
        assert format_rating(coerce_rating("4.5")) == "4.5"

    def test_format(self):
        assert format_rating(4) == "4.0"
        assert format_rating(3.25) == "3.2"
        assert format_rating(None) is None


class TestNormalizeEntry:
    """Test document → Entry conversion."""

    def test_full_document(self):
        doc = StoredDocument("e1", {
            "userId": "u1", "category": "book", "format": "novel", "title": "Dune",
            "creator": "Herbert", "thumbnailUrl": "https://img/dune.jpg", "rating": "4.5",
            "status": "completed", "createdAt": "2024-03-05T10:00:00Z",
            "updatedAt": StoreTimestamp(seconds=int(MARCH.timestamp()) + 60),
        })
        entry = normalize_entry(doc)
        assert entry.id == "e1"
        assert entry.user_id == "u1"
        assert entry.rating == 4.5
        assert entry.created_at == MARCH
        assert entry.updated_at > entry.created_at
        assert entry.sort_date == entry.updated_at

    def test_missing_fields(self):
        entry = normalize_entry(StoredDocument("e2", {}))
        assert entry.status is None
        assert entry.rating is None
        assert entry.sort_date == EPOCH

    def test_payload_defaults(self):
        payload = entry_payload(normalize_entry(StoredDocument("e3", {"title": "  "})))
        assert payload["title"] == "Untitled Entry"
        assert payload["creator"] == "Unknown Creator"
        assert payload["rating"] is None
        assert payload["created_at"] is None

    def test_unrepresentable_values_degrade_to_defaults(self):
        entry = normalize_entry(StoredDocument("e4", {
            "createdAt": {"seconds": 10**20}, "rating": 10**400,
        }))
        assert entry.created_at is None
        assert entry.rating is None
        assert entry.sort_date == EPOCH
        assert entry_payload(entry)["rating"] is None


class TestNormalizeUser:
    def test_fields(self):
        user = normalize_user(StoredDocument("u1", {"username": "ada", "name": "Ada", "photoURL": "x"}))
        assert user.username == "ada"
        assert user.avatar_url == "x"
        assert user.display_name == "Ada"

    def test_missing_username(self):
        user = normalize_user(StoredDocument("u2", {"fullName": "Nameless"}))
        assert user.username == ""
        assert user.display_name == "Nameless"


class TestSort:
    def test_updated_at_preferred_and_undated_last(self):
        a = Entry("a", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        b = Entry("b", created_at=datetime(2023, 1, 1, tzinfo=timezone.utc),
                  updated_at=datetime(2024, 6, 1, tzinfo=timezone.utc))
        c = Entry("c")
        assert [e.id for e in sort_newest_first([c, a, b])] == ["b", "a", "c"]
