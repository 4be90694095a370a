"""
test_selectors.py
-----------------
Unit tests for the completion filter, favorites selector and category
classifier.
"""
import pytest

from waytrack.exceptions import UnknownCategoryError
from waytrack.models.archive import Entry, UNCLASSIFIED
from waytrack.services.classifier import (
    classify,
    is_aggregate,
    lookup_category,
    resolve_category,
    split_aggregates,
    stored_key,
)
from waytrack.services.normalizer import coerce_rating
from waytrack.services.selectors import completed_only, favorites, is_completed


class TestCompletionFilter:
    """Missing/empty status and "completed" pass; every other status is rejected."""

    @pytest.mark.parametrize("status", [None, "", "completed"])
    def test_included(self, status):
        assert is_completed(Entry("e", status=status))

    @pytest.mark.parametrize("status", ["in-progress", "planned", "Completed", "dropped"])
    def test_excluded(self, status):
        assert not is_completed(Entry("e", status=status))

    def test_completed_only_keeps_order(self):
        entries = [Entry("a"), Entry("b", status="planned"), Entry("c", status="completed")]
        assert [e.id for e in completed_only(entries)] == ["a", "c"]


class TestFavorites:
    def test_exactly_five(self):
        entries = [
            Entry("string", rating=coerce_rating("5.0")),
            Entry("almost", rating=coerce_rating(4.9)),
            Entry("int", rating=coerce_rating(5)),
            Entry("none"),
            Entry("garbage", rating=coerce_rating("five")),
        ]
        assert [e.id for e in favorites(entries)] == ["string", "int"]


class TestCategoryTable:
    def test_stored_keys(self):
        assert stored_key("Books") == "book"
        assert stored_key("Podcasts") == "podcast"
        assert stored_key("TV") == "tv"
        assert stored_key("music") == "music"

    def test_unknown_ui_name(self):
        with pytest.raises(UnknownCategoryError):
            resolve_category("games")

    def test_lookup_blank(self):
        assert lookup_category(None) is None
        assert lookup_category("") is None


class TestClassify:
    def test_singular_plural_and_case(self):
        entries = [
            Entry("b1", category="book"),
            Entry("b2", category="Books"),
            Entry("p1", category="podcast"),
            Entry("p2", category="PODCASTS"),
            Entry("t1", category="TV"),
            Entry("m1", category="Music"),
            Entry("x1", category="games"),
            Entry("x2"),
        ]
        buckets = classify(entries)
        assert [e.id for e in buckets["books"]] == ["b1", "b2"]
        assert [e.id for e in buckets["podcasts"]] == ["p1", "p2"]
        assert [e.id for e in buckets["tv"]] == ["t1"]
        assert [e.id for e in buckets["music"]] == ["m1"]
        assert [e.id for e in buckets[UNCLASSIFIED]] == ["x1", "x2"]

    def test_always_has_every_bucket(self):
        assert set(classify([])) == {"tv", "music", "podcasts", "books", UNCLASSIFIED}


class TestAggregates:
    def test_artist_and_show(self):
        assert is_aggregate(Entry("a", category="music", format="artist"))
        assert is_aggregate(Entry("a", category="music", format="Artist"))
        assert is_aggregate(Entry("s", category="podcasts", format="show"))
        assert not is_aggregate(Entry("t", category="music", format="album"))
        assert not is_aggregate(Entry("t", category="music"))
        # "show" only aggregates podcasts
        assert not is_aggregate(Entry("tv", category="tv", format="show"))

    def test_artist_scenario(self):
        """An undated, unstatused 5-star artist is completed but only shown in the rail."""
        artist = Entry("bach", category="music", format="artist", rating=5.0, status=None)
        track = Entry("track", category="music", format="track", rating=5.0)

        included = completed_only([artist, track])
        assert artist in included

        split = split_aggregates(resolve_category("music"), included)
        assert split.aggregates == [artist]
        assert split.items == [track]
        assert favorites(split.items) == [track]
