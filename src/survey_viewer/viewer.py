"""Plotly-based map, minimap and viewer displays for survey points."""

import logging
from typing import Optional, TYPE_CHECKING

import numpy as np
import plotly.graph_objects as go

from src.survey_viewer.loader import dataset_bounds

if TYPE_CHECKING:
    from src.survey_viewer.loader import SurveyPoint
    from src.survey_viewer.navigation import InfoPanel

logger = logging.getLogger(__name__)

MAP_STYLE = "open-street-map"

# Marker styling
DEFAULT_MARKER_COLOR = "#05CB63"
DEFAULT_MARKER_SIZE = 10
HIGHLIGHT_MARKER_COLOR = "#e74c3c"
HIGHLIGHT_MARKER_SIZE = 12
MINIMAP_MARKER_SIZE = 8

MAX_ZOOM = 19
MINIMAP_ZOOM = 15


def fit_zoom(points: list["SurveyPoint"], max_zoom: int = MAX_ZOOM) -> float:
    """
    Approximate the web-mercator zoom level that fits all points.

    Uses the larger of the latitude and longitude extents; a single point
    (zero extent) gets the maximum zoom.
    """
    (min_lat, min_lng), (max_lat, max_lng) = dataset_bounds(points)
    extent = max(max_lat - min_lat, max_lng - min_lng)
    if extent <= 0:
        return float(max_zoom)
    # Leave some padding around the outermost markers
    zoom = np.log2(360.0 / extent) - 1
    return float(np.clip(zoom, 1, max_zoom))


def marker_styles(count: int, highlight_index: Optional[int]) -> tuple[list[str], list[int]]:
    """Return per-marker (colors, sizes) with one index emphasized."""
    colors = [DEFAULT_MARKER_COLOR] * count
    sizes = [DEFAULT_MARKER_SIZE] * count
    if highlight_index is not None and 0 <= highlight_index < count:
        colors[highlight_index] = HIGHLIGHT_MARKER_COLOR
        sizes[highlight_index] = HIGHLIGHT_MARKER_SIZE
    return colors, sizes


def create_map_figure(
    points: list["SurveyPoint"],
    highlight_index: Optional[int] = 0,
    title: str = "Survey Points",
) -> go.Figure:
    """
    Create the main map with one marker per survey point.

    Args:
        points: Survey points in dataset order
        highlight_index: Index of the marker to emphasize (None for none)
        title: Figure title

    Returns:
        Plotly Figure centered on the dataset bounds
    """
    lats = np.array([point.lat for point in points])
    lngs = np.array([point.long for point in points])
    colors, sizes = marker_styles(len(points), highlight_index)

    hover_texts = [
        f"<b>Point {point.id}</b><br>Heading: {point.heading_front:g}°<br><i>Click to view</i>"
        for point in points
    ]

    fig = go.Figure(
        go.Scattermap(
            lat=lats,
            lon=lngs,
            mode="markers",
            marker=dict(size=sizes, color=colors, opacity=1.0),
            hovertext=hover_texts,
            hoverinfo="text",
            customdata=list(range(len(points))),
            name="Survey Points",
        )
    )

    fig.update_layout(
        title=title,
        map=dict(
            style=MAP_STYLE,
            center=dict(lat=float(lats.mean()), lon=float(lngs.mean())),
            zoom=fit_zoom(points),
        ),
        showlegend=False,
        margin=dict(l=0, r=0, t=50, b=0),
    )
    return fig


def create_minimap_figure(point: "SurveyPoint", zoom: int = MINIMAP_ZOOM) -> go.Figure:
    """Create a minimap centered on `point` with a single red marker."""
    fig = go.Figure(
        go.Scattermap(
            lat=[point.lat],
            lon=[point.long],
            mode="markers",
            marker=dict(size=MINIMAP_MARKER_SIZE, color=HIGHLIGHT_MARKER_COLOR),
            hoverinfo="skip",
            name="Current Point",
        )
    )
    fig.update_layout(
        map=dict(style=MAP_STYLE, center=dict(lat=point.lat, lon=point.long), zoom=zoom),
        showlegend=False,
        margin=dict(l=0, r=0, t=0, b=0),
    )
    return fig


class PlotlyDisplays:
    """
    Display surfaces backed by plotly figures.

    Keeps the main map and minimap figures plus the viewer's image and
    info text, and applies the controller's one-way refresh commands to
    them.
    """

    def __init__(self, points: list["SurveyPoint"], minimap_zoom: int = MINIMAP_ZOOM) -> None:
        self.points = points
        self.minimap_zoom = minimap_zoom
        self.map_figure = create_map_figure(points, highlight_index=0)
        self.minimap_figure = create_minimap_figure(points[0], zoom=minimap_zoom)

        self.viewer_active = False
        self.viewer_initialized = False
        self.image_id: Optional[str] = None
        self.image_url: Optional[str] = None
        self.info_text = ""
        self.prev_enabled = False
        self.next_enabled = len(points) > 1
        self.highlighted_index: Optional[int] = 0

    def init_viewer(self) -> None:
        self.viewer_initialized = True
        logger.debug("Viewer surface initialized")

    def show_viewer(self, active: bool) -> None:
        self.viewer_active = active

    def update_image(self, image_id: str, url: str) -> None:
        self.image_id = image_id
        self.image_url = url

    def update_info(self, info: "InfoPanel") -> None:
        self.info_text = info.text
        self.prev_enabled = info.prev_enabled
        self.next_enabled = info.next_enabled

    def update_minimap(self, lat: float, lng: float) -> None:
        """Recenter the minimap and replace its marker with one at (lat, lng)."""
        trace = self.minimap_figure.data[0]
        trace.lat = [lat]
        trace.lon = [lng]
        self.minimap_figure.update_layout(
            map=dict(center=dict(lat=lat, lon=lng), zoom=self.minimap_zoom)
        )

    def highlight_markers(self, index: int) -> None:
        colors, sizes = marker_styles(len(self.points), index)
        self.map_figure.update_traces(marker=dict(color=colors, size=sizes))
        self.highlighted_index = index

    def recenter_map(self, lat: float, lng: float) -> None:
        """Center the main map on (lat, lng), keeping the current zoom."""
        self.map_figure.update_layout(map=dict(center=dict(lat=lat, lon=lng)))


def show_figure(fig: go.Figure) -> None:
    """Display figure in browser."""
    fig.show()


def export_html(fig: go.Figure, output_path: str) -> None:
    """Export figure as standalone HTML file."""
    fig.write_html(output_path, include_plotlyjs=True, full_html=True)
