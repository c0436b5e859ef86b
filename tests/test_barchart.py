"""Tests for the cause bar chart."""

import pytest

from conftest import raw_frame, raw_row
from nerc_dashboard.bus import CATEGORY_SELECTED
from nerc_dashboard.config import BarChartConfig
from nerc_dashboard.data import prepare_records
from nerc_dashboard.selection import NOT_SELECTED, SELECTED
from nerc_dashboard.views.barchart import (
    BarChart,
    estimate_text_width,
    group_by_category,
    region_breakdown,
    wrap_label,
)


@pytest.fixture()
def chart(records, bus):
    chart = BarChart(BarChartConfig(), records, bus=bus)
    bus.register(CATEGORY_SELECTED, chart.on_category_selected)
    chart.update()
    return chart


class TestGrouping:
    def test_sorted_by_count(self, records):
        assert group_by_category(records) == [("Severe Weather", 3), ("Vandalism", 1), ("Sabotage", 1)]

    def test_records_without_region_excluded(self, records):
        assert "Fuel Supply Emergency" not in dict(group_by_category(records))

    def test_ties_keep_first_occurrence(self):
        records = prepare_records(raw_frame([raw_row("B", "MRO"), raw_row("A", "MRO")]))
        assert group_by_category(records) == [("B", 1), ("A", 1)]

    def test_breakdown_descending(self):
        rows = [
            raw_row("Islanding", "MRO"),
            raw_row("Islanding", "WECC"),
            raw_row("Islanding", "WECC"),
            raw_row("Islanding", "", year="2017"),
        ]
        assert region_breakdown(prepare_records(raw_frame(rows)), "Islanding") == [("WECC", 2), ("MRO", 1)]


class TestLabels:
    def test_wraps_on_words(self):
        assert wrap_label("Severe Weather Event", 10, len) == ["Severe", "Weather", "Event"]
        assert wrap_label("a b c", 3, len) == ["a b", "c"]

    def test_long_word_kept_whole(self):
        assert wrap_label("Transmission", 5, len) == ["Transmission"]

    def test_lines_fit(self):
        for line in wrap_label("Transmission Interruption Distribution", 120, lambda s: estimate_text_width(s, 11)):
            assert estimate_text_width(line, 11) <= 120 or " " not in line


class TestRender:
    def test_bars_after_update(self, chart):
        data = chart.source.data
        assert data["category"] == ["Severe Weather", "Vandalism", "Sabotage"]
        assert data["top"] == [3, 1, 1]
        assert data["label_alpha"] == [1.0, 1.0, 1.0]
        assert chart.figure.x_range.factors == ["Severe Weather", "Vandalism", "Sabotage"]
        assert chart.figure.y_range.end == 3

    def test_bar_width_capped(self, chart):
        step = chart.inner_width / 3
        assert chart.bar_width == pytest.approx(60 / step)

    def test_tooltip_breakdown(self, chart):
        assert chart.source.data["breakdown"][0].count("<li") == 3

    def test_new_data(self, chart, records):
        chart.set_data(records[records["NERC Region"] == "WECC"])
        chart.update()
        assert chart.source.data["category"] == ["Severe Weather"]


class TestClicks:
    def test_click_sequence(self, chart, emitted):
        chart.click_category("Vandalism")
        chart.click_category("Sabotage")
        chart.click_category("Vandalism")
        chart.click_blank()
        assert emitted[CATEGORY_SELECTED] == [
            frozenset({"Vandalism"}),
            frozenset({"Vandalism", "Sabotage"}),
            frozenset({"Sabotage"}),
            frozenset(),
        ]

    def test_highlight_follows_selection(self, chart):
        chart.click_category("Vandalism")
        assert chart.source.data["highlight"] == [NOT_SELECTED, SELECTED, NOT_SELECTED]
        assert chart.source.data["alpha"] == [0.25, 1.0, 0.25]
        chart.click_blank()
        assert chart.source.data["highlight"] == ["", "", ""]

    def test_category_at(self, chart):
        assert chart.category_at(0.5, 2) == "Severe Weather"
        assert chart.category_at(1.5, 0.5) == "Vandalism"
        assert chart.category_at(0.5, 3.5) is None
        assert chart.category_at(0.1, 1) is None
        assert chart.category_at(3.5, 0.5) is None
        assert chart.category_at(None, None) is None

    def test_region_selection_ignored(self, chart):
        before = dict(chart.source.data)
        chart.on_region_selected(frozenset({"WECC"}))
        assert chart.source.data == before
