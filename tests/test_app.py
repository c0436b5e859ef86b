"""Tests for wiring the dashboard into a Bokeh document."""

from bokeh.document import Document

from nerc_dashboard.app import TITLE, build_dashboard
from nerc_dashboard.bus import CATEGORY_SELECTED, REGION_SELECTED
from nerc_dashboard.selection import SELECTED


class TestBuildDashboard:
    def test_document_populated(self, geo_file, csv_file):
        doc = Document()
        dashboard = build_dashboard(doc, geo_file, csv_file)

        assert dashboard is not None
        assert len(doc.roots) == 1
        assert doc.title == TITLE
        assert len(dashboard.records) == 6
        assert dashboard.bar_chart.source.data["category"][0] == "Severe Weather"
        assert len(dashboard.cartogram.clusters) == 4
        assert dashboard.line_chart.source.data["year"] == [2016, 2017, 2018]

    def test_selection_reaches_both_views(self, geo_file, csv_file):
        dashboard = build_dashboard(Document(), geo_file, csv_file)
        dashboard.bar_chart.click_category("Sabotage")

        bar_data = dashboard.bar_chart.source.data
        assert bar_data["highlight"][bar_data["category"].index("Sabotage")] == SELECTED
        assert sum(dashboard.cartogram.active_filter.booleans) == 1

    def test_region_event_registered(self, geo_file, csv_file):
        dashboard = build_dashboard(Document(), geo_file, csv_file)
        dashboard.bus.emit(REGION_SELECTED, frozenset({"MRO"}))
        assert dashboard.cartogram.selected_regions == {"MRO"}
        dashboard.bus.emit(CATEGORY_SELECTED, frozenset())

    def test_brush_filters_linked_views(self, geo_file, csv_file):
        dashboard = build_dashboard(Document(), geo_file, csv_file)
        dashboard.line_chart.brush_years(2016.0, 2016.99)

        assert dashboard.bar_chart.source.data["category"] == ["Severe Weather", "Vandalism"]
        assert sorted(cluster.key for cluster in dashboard.cartogram.clusters) == ["RFC", "WECC"]

        dashboard.line_chart.clear_brush()
        assert len(dashboard.cartogram.clusters) == 4

    def test_missing_records_leave_document_empty(self, geo_file, tmp_path):
        doc = Document()
        assert build_dashboard(doc, geo_file, tmp_path / "absent.csv") is None
        assert doc.roots == []

    def test_missing_boundaries_leave_document_empty(self, csv_file, tmp_path, caplog):
        doc = Document()
        assert build_dashboard(doc, tmp_path / "absent.json", csv_file) is None
        assert doc.roots == []
        assert "could not be loaded" in caplog.text

    def test_full_brush_then_clear_restores_records(self, geo_file, csv_file):
        dashboard = build_dashboard(Document(), geo_file, csv_file)
        dashboard.line_chart.brush_years(2016.0, 2018.999)
        assert len(dashboard.bar_chart.data) == len(dashboard.records)

        dashboard.line_chart.clear_brush()
        assert dashboard.bar_chart.data is dashboard.records
        assert dashboard.cartogram.data is dashboard.records
