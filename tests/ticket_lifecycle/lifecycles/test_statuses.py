"""Unit tests for status sets, deduplication and status validation."""

from __future__ import annotations

import pytest

from ticket_lifecycle.lifecycles.statuses import (
    DUPLICATE_STATUS_MESSAGE,
    INVALID_STATUS_MESSAGE,
    StatusSet,
    clean_status_lists,
    coerce_status_list,
    contains_status,
    dedupe_statuses,
    is_valid_status_name,
    validate_statuses,
)


class TestDedupe:
    def test_keeps_first_spelling(self) -> None:
        assert dedupe_statuses(["Open", "open", "OPEN", "new"]) == ("Open", "new")

    def test_preserves_order(self) -> None:
        assert dedupe_statuses(["stalled", "new", "open"]) == ("stalled", "new", "open")

    def test_empty(self) -> None:
        assert dedupe_statuses([]) == ()


class TestContainsStatus:
    def test_case_insensitive(self) -> None:
        assert contains_status(["new", "Open"], "OPEN") is True

    def test_missing(self) -> None:
        assert contains_status(["new"], "open") is False

    def test_none_is_never_contained(self) -> None:
        assert contains_status(["new"], None) is False


class TestStatusNames:
    @pytest.mark.parametrize(
        "status",
        ["new", "Open", "waiting for customer", "done!", "v1.2", "a,b"],
    )
    def test_valid_names(self, status: str) -> None:
        assert is_valid_status_name(status) is True

    @pytest.mark.parametrize(
        "status",
        ["", "in-progress", "ouverté", "new\n", "tab\there", "under_score"],
    )
    def test_invalid_names(self, status: str) -> None:
        assert is_valid_status_name(status) is False


class TestCoerceStatusList:
    def test_drops_blank_and_non_string_items(self) -> None:
        assert coerce_status_list(["new", "", None, 3, "open"]) == ("new", "open")

    def test_non_list_is_empty(self) -> None:
        assert coerce_status_list("new") == ()
        assert coerce_status_list(None) == ()


class TestStatusSet:
    def test_all_is_deduplicated_concatenation(self) -> None:
        statuses = StatusSet(initial=("new",), active=("open", "New"), inactive=("closed",))
        assert statuses.all == ("new", "open", "closed")

    def test_of_type(self) -> None:
        statuses = StatusSet(initial=("new",), active=("open",), inactive=("closed",))
        assert statuses.of_type("active") == ("open",)
        assert statuses.of_type("bogus") == ()

    def test_from_dict_ignores_missing_classes(self) -> None:
        statuses = StatusSet.from_dict({"initial": ["new"]})
        assert statuses.initial == ("new",)
        assert statuses.active == ()
        assert statuses.all == ("new",)

    def test_to_dict(self) -> None:
        statuses = StatusSet(initial=("new",), active=("open",), inactive=("closed",))
        assert statuses.to_dict() == {
            "initial": ["new"],
            "active": ["open"],
            "inactive": ["closed"],
        }

    def test_union_merges_class_by_class(self) -> None:
        merged = StatusSet.union(
            [
                StatusSet(initial=("new",), active=("open", "stalled"), inactive=("resolved",)),
                StatusSet(initial=("New",), active=("open", "Waiting"), inactive=("closed",)),
            ]
        )
        assert merged.initial == ("new",)
        assert merged.active == ("open", "stalled", "Waiting")
        assert merged.inactive == ("resolved", "closed")
        assert merged.all == ("new", "open", "stalled", "Waiting", "resolved", "closed")

    def test_union_of_nothing(self) -> None:
        assert StatusSet.union([]).all == ()


class TestValidateStatuses:
    def test_valid(self) -> None:
        ok, error = validate_statuses(
            {"initial": ["new"], "active": ["open"], "inactive": ["resolved"]}
        )
        assert ok is True
        assert error is None

    def test_invalid_characters(self) -> None:
        ok, error = validate_statuses({"initial": ["new"], "active": ["in-progress"]})
        assert ok is False
        assert error == INVALID_STATUS_MESSAGE

    def test_duplicates_across_classes(self) -> None:
        ok, error = validate_statuses({"initial": ["new"], "inactive": ["New"]})
        assert ok is False
        assert error == DUPLICATE_STATUS_MESSAGE

    def test_empty_lifecycle_is_valid(self) -> None:
        assert validate_statuses({}) == (True, None)


def test_clean_status_lists_drops_blanks() -> None:
    assert clean_status_lists(initial=["new", None, ""], active=None, inactive=["closed"]) == {
        "initial": ["new"],
        "active": [],
        "inactive": ["closed"],
    }
