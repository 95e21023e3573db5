"""Tests for the plotly displays."""

import pytest

from src.survey_viewer.navigation import InfoPanel
from src.survey_viewer.viewer import (
    DEFAULT_MARKER_COLOR,
    DEFAULT_MARKER_SIZE,
    HIGHLIGHT_MARKER_COLOR,
    HIGHLIGHT_MARKER_SIZE,
    MAX_ZOOM,
    PlotlyDisplays,
    create_map_figure,
    create_minimap_figure,
    export_html,
    fit_zoom,
    marker_styles,
)


class TestMarkerStyles:
    """Tests for marker_styles."""

    def test_single_highlight(self):
        colors, sizes = marker_styles(3, 1)
        assert colors == [DEFAULT_MARKER_COLOR, HIGHLIGHT_MARKER_COLOR, DEFAULT_MARKER_COLOR]
        assert sizes == [DEFAULT_MARKER_SIZE, HIGHLIGHT_MARKER_SIZE, DEFAULT_MARKER_SIZE]

    def test_no_highlight(self):
        colors, _ = marker_styles(2, None)
        assert colors == [DEFAULT_MARKER_COLOR] * 2

    def test_out_of_range_highlight_ignored(self):
        colors, _ = marker_styles(2, 5)
        assert HIGHLIGHT_MARKER_COLOR not in colors


class TestFigures:
    """Tests for map and minimap figure creation."""

    def test_map_has_one_marker_per_point(self, sample_points):
        fig = create_map_figure(sample_points)
        trace = fig.data[0]

        assert len(trace.lat) == 3
        assert list(trace.marker.color)[0] == HIGHLIGHT_MARKER_COLOR
        assert "Point 1" in trace.hovertext[0]

    def test_map_centered_on_dataset(self, sample_points):
        fig = create_map_figure(sample_points)
        assert fig.layout.map.center.lat == pytest.approx((47.3769 + 47.38 + 47.39) / 3)

    def test_single_point_gets_max_zoom(self, sample_points):
        assert fit_zoom(sample_points[:1]) == MAX_ZOOM

    def test_wider_extent_zooms_out(self, sample_points):
        assert fit_zoom(sample_points) < MAX_ZOOM

    def test_minimap_single_red_marker(self, sample_points):
        fig = create_minimap_figure(sample_points[1], zoom=15)
        trace = fig.data[0]

        assert list(trace.lat) == [47.38]
        assert trace.marker.color == HIGHLIGHT_MARKER_COLOR
        assert fig.layout.map.zoom == 15

    def test_export_html(self, sample_points, tmp_path):
        output = tmp_path / "map.html"
        export_html(create_map_figure(sample_points), str(output))
        assert output.exists()
        assert "plotly" in output.read_text(encoding="utf-8").lower()


class TestPlotlyDisplays:
    """Tests for the display commands."""

    @pytest.fixture
    def displays(self, sample_points):
        return PlotlyDisplays(sample_points, minimap_zoom=15)

    def test_highlight_restyles_markers(self, displays):
        displays.highlight_markers(2)
        trace = displays.map_figure.data[0]

        assert list(trace.marker.color) == [
            DEFAULT_MARKER_COLOR, DEFAULT_MARKER_COLOR, HIGHLIGHT_MARKER_COLOR,
        ]
        assert list(trace.marker.size) == [
            DEFAULT_MARKER_SIZE, DEFAULT_MARKER_SIZE, HIGHLIGHT_MARKER_SIZE,
        ]
        assert displays.highlighted_index == 2

    def test_update_minimap_moves_single_marker(self, displays):
        displays.update_minimap(47.39, 8.56)
        fig = displays.minimap_figure

        assert len(fig.data) == 1
        assert list(fig.data[0].lat) == [47.39]
        assert fig.layout.map.center.lon == 8.56

    def test_recenter_keeps_zoom(self, displays):
        zoom = displays.map_figure.layout.map.zoom
        displays.recenter_map(47.38, 8.55)

        assert displays.map_figure.layout.map.center.lat == 47.38
        assert displays.map_figure.layout.map.zoom == zoom

    def test_update_info_and_image(self, displays):
        displays.update_info(InfoPanel(3, 3, "Rear", 90.0, True, False))
        displays.update_image("point3_rear", "./images/r3.jpg")

        assert displays.info_text == "Point 3 of 3 | Rear View | Heading: 90°"
        assert displays.next_enabled is False
        assert displays.image_url == "./images/r3.jpg"

    def test_viewer_flags(self, displays):
        displays.show_viewer(True)
        displays.init_viewer()
        assert displays.viewer_active is True
        assert displays.viewer_initialized is True
