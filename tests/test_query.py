"""Tests for filtering and sorting the contact view."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from contactpro.contacts import Contact, FilterCriteria, SortBy, view

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def _iso(delta: timedelta) -> str:
    return (NOW - delta).isoformat()


@pytest.fixture
def contacts():
    return [
        Contact(
            id="1", name="charlie", email="c@corp.com", tags=["work"],
            created=_iso(timedelta(days=30)), updated=_iso(timedelta(days=1)),
        ),
        Contact(
            id="2", name="Alice", email="alice@home.org", tags=["family", "vip"],
            created=_iso(timedelta(days=2)), updated=_iso(timedelta(days=2)),
        ),
        Contact(
            id="3", name="Bob", email="b@x.com", tags=["work", "vip"],
            created=_iso(timedelta(days=8)), updated=_iso(timedelta(hours=1)),
        ),
    ]


class TestDefaults:
    def test_default_view_sorts_all_by_name(self, contacts):
        result = view(contacts, FilterCriteria(), now=NOW)
        assert [c.name for c in result] == ["Alice", "Bob", "charlie"]

    def test_view_does_not_mutate_input(self, contacts):
        original = [c.id for c in contacts]
        view(contacts, FilterCriteria(search="a", sort_by="recent"), now=NOW)
        assert [c.id for c in contacts] == original


class TestFilters:
    def test_search_is_case_insensitive_substring(self):
        bob = Contact(id="b", name="Bob", email="b@x.com", created=NOW.isoformat())
        result = view([bob], FilterCriteria(search="bob"), now=NOW)
        assert result == [bob]

    def test_search_matches_email(self, contacts):
        result = view(contacts, FilterCriteria(search="HOME.ORG"), now=NOW)
        assert [c.id for c in result] == ["2"]

    def test_tag_requires_exact_match(self, contacts):
        assert [c.id for c in view(contacts, FilterCriteria(tag="vip"), now=NOW)] == ["2", "3"]
        assert view(contacts, FilterCriteria(tag="VIP"), now=NOW) == []
        assert view(contacts, FilterCriteria(tag="vi"), now=NOW) == []

    def test_recent_keeps_contacts_created_in_last_week(self, contacts):
        result = view(contacts, FilterCriteria(recent=True), now=NOW)
        assert [c.id for c in result] == ["2"]

    def test_recent_boundary_is_exclusive(self):
        edge = Contact(id="e", name="Edge", email="e@x.com", created=_iso(timedelta(days=7)))
        assert view([edge], FilterCriteria(recent=True), now=NOW) == []

    def test_filters_compose_as_and(self, contacts):
        criteria = FilterCriteria(search="b", tag="vip")
        assert [c.id for c in view(contacts, criteria, now=NOW)] == ["3"]
        criteria = FilterCriteria(search="b", tag="vip", recent=True)
        assert view(contacts, criteria, now=NOW) == []


class TestSorting:
    def test_recent_sorts_by_updated_descending(self, contacts):
        result = view(contacts, FilterCriteria(sort_by=SortBy.RECENT.value), now=NOW)
        assert [c.id for c in result] == ["3", "1", "2"]

    def test_unknown_sort_keeps_insertion_order(self, contacts):
        result = view(contacts, FilterCriteria(sort_by="email"), now=NOW)
        assert [c.id for c in result] == ["1", "2", "3"]


class TestCriteria:
    def test_with_filter_returns_new_criteria(self):
        criteria = FilterCriteria()
        updated = criteria.with_filter("search", "ann")
        assert updated.search == "ann"
        assert criteria.search == ""

    def test_recent_accepts_string_flags(self):
        assert FilterCriteria().with_filter("recent", "on").recent is True
        assert FilterCriteria(recent=True).with_filter("recent", "off").recent is False

    def test_unknown_filter_is_rejected(self):
        with pytest.raises(ValueError):
            FilterCriteria().with_filter("phone", "555")

    def test_with_sort_accepts_enum(self):
        assert FilterCriteria().with_sort(SortBy.RECENT).sort_by == "recent"
