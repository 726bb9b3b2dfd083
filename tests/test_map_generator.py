"""
Tests for folium map rendering
"""
import folium

from litterbugs.core.geo import Coordinate, Region
from litterbugs.markers.store import Marker
from litterbugs.reports.models import Report
from litterbugs.screen.controller import MapSnapshot
from litterbugs.screen.map_types import MapType
from litterbugs.visualization.map_generator import (
    create_report_map,
    marker_popup_html,
    save_report_map,
    zoom_for_region,
)


def tile_layers(report_map):
    return [c for c in report_map._children.values() if isinstance(c, folium.TileLayer)]


class TestZoom:
    """Test region span to zoom conversion."""

    def test_fallback_region(self):
        assert zoom_for_region(Region.fallback()) == 12

    def test_user_region(self):
        assert zoom_for_region(Region(35.6, -82.5, 0.02, 0.02)) == 14

    def test_zoom_is_clamped(self):
        assert zoom_for_region(Region(0, 0, 0.0, 0.0)) == 18
        assert zoom_for_region(Region(0, 0, 360.0, 360.0)) == 1


class TestReportMap:
    """Test report map contents."""

    def setup_method(self):
        self.markers = [
            Marker.from_report(Report.from_dict(row))
            for row in [
                {"id": "a1", "title": "Cans <by> creek", "severity": "High",
                 "latitude": 35.6012, "longitude": -82.5531, "litter_types": ["Cans"]},
                {"id": "b2", "severity": "Low", "latitude": 35.5987, "longitude": -82.5602},
            ]
        ]

    def test_markers_use_severity_colours(self):
        html = create_report_map(self.markers).get_root().render()

        assert "#E53935" in html
        assert "#43A047" in html
        assert "2 active reports" in html

    def test_draft_pin(self):
        html = create_report_map(
            self.markers, draft_coordinate=Coordinate(35.60, -82.55)
        ).get_root().render()

        assert "Draft report" in html
        assert "#FFC42E" in html

    def test_no_draft_pin(self):
        html = create_report_map(self.markers).get_root().render()

        assert "Draft report" not in html

    def test_popup_escapes_title(self):
        popup = marker_popup_html(self.markers[0])

        assert "Cans &lt;by&gt; creek" in popup
        assert "<b>Severity:</b> High" in popup
        assert "<b>Litter:</b> Cans" in popup

    def test_base_layers_per_map_type(self):
        assert len(tile_layers(create_report_map([], map_type=MapType.STANDARD))) == 1
        assert len(tile_layers(create_report_map([], map_type=MapType.SATELLITE))) == 1
        assert len(tile_layers(create_report_map([], map_type=MapType.HYBRID))) == 2
        assert len(tile_layers(create_report_map([], map_type=MapType.TERRAIN))) == 1

    def test_save_snapshot(self, tmp_path):
        snapshot = MapSnapshot(
            region=Region.fallback(),
            map_type=MapType.STANDARD,
            markers=self.markers,
        )
        output = tmp_path / "map.html"

        path = save_report_map(snapshot, str(output))

        assert path == str(output)
        assert "Cans &lt;by&gt; creek" in output.read_text(encoding="utf-8")
