"""Tests for the category selection transitions."""

from nerc_dashboard.selection import (
    NOT_SELECTED,
    SELECTED,
    CategorySelection,
    SelectionMode,
    highlight_class,
)


class TestBarClicks:
    def test_first_click_replaces(self):
        assert CategorySelection().toggled("A") == {"A"}

    def test_second_click_adds(self):
        selection = CategorySelection.of(CategorySelection().toggled("A"))
        assert selection.toggled("B") == {"A", "B"}

    def test_click_selected_removes(self):
        assert CategorySelection.of({"A", "B"}).toggled("A") == {"B"}

    def test_removing_last_returns_to_unfiltered(self):
        selection = CategorySelection.of(CategorySelection.of({"A"}).toggled("A"))
        assert selection.mode is SelectionMode.UNFILTERED
        assert selection.toggled("C") == {"C"}


class TestCircleClicks:
    def test_unfiltered_click_selects(self):
        assert CategorySelection().released("A") == {"A"}

    def test_selected_click_releases(self):
        assert CategorySelection.of({"A", "B"}).released("B") == {"A"}

    def test_unselected_click_is_inert(self):
        assert CategorySelection.of({"A"}).released("B") is None


class TestHighlight:
    def test_unfiltered_has_no_class(self):
        assert highlight_class(CategorySelection(), "A") == ""

    def test_filtered_classes(self):
        selection = CategorySelection.of({"A"})
        assert highlight_class(selection, "A") == SELECTED
        assert highlight_class(selection, "B") == NOT_SELECTED

    def test_is_active(self):
        assert CategorySelection().is_active("anything")
        selection = CategorySelection.of(["A"])
        assert selection.is_active("A")
        assert not selection.is_active("B")

    def test_of_none(self):
        assert CategorySelection.of(None) == CategorySelection()
