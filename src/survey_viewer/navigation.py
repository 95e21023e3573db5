"""
Navigation state machine for browsing survey points.

NavigationState is a single immutable value; the transition functions
below are pure (state in, state out) and return the same object when a
move is rejected. NavigationController is the only place that replaces
the current state, and it follows every change of point or side with a
full refresh of the dependent displays.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Protocol, TYPE_CHECKING

from src.survey_viewer.errors import Unsupported
from src.survey_viewer.graph import image_id, parse_image_id

if TYPE_CHECKING:
    from src.survey_viewer.loader import SurveyPoint
    from src.survey_viewer.provider import ImageProvider

logger = logging.getLogger(__name__)

DEFAULT_VIEWER_INIT_DELAY = 0.1  # seconds
DEFAULT_IMAGE_BASE = "./images"


class Mode(str, Enum):
    MAP_BROWSING = "map-browsing"
    VIEWER_ACTIVE = "viewer-active"


@dataclass(frozen=True)
class NavigationState:
    """Where the user is: point index, view side and mode."""

    current_point_index: int = 0
    is_showing_front: bool = True
    mode: Mode = Mode.MAP_BROWSING

    @property
    def side_label(self) -> str:
        return "Front" if self.is_showing_front else "Rear"


@dataclass(frozen=True)
class InfoPanel:
    """Contents of the viewer info panel, derived from state and dataset."""

    position: int  # 1-based
    total: int
    side_label: str
    heading: float
    prev_enabled: bool
    next_enabled: bool

    @property
    def text(self) -> str:
        return (
            f"Point {self.position} of {self.total} | "
            f"{self.side_label} View | "
            f"Heading: {self.heading:g}°"
        )


class Displays(Protocol):
    """One-way display commands issued by the controller."""

    def init_viewer(self) -> None: ...

    def show_viewer(self, active: bool) -> None: ...

    def update_image(self, image_id: str, url: str) -> None: ...

    def update_info(self, info: InfoPanel) -> None: ...

    def update_minimap(self, lat: float, lng: float) -> None: ...

    def highlight_markers(self, index: int) -> None: ...

    def recenter_map(self, lat: float, lng: float) -> None: ...


# ---------------------------------------------------------------------------
# Pure transitions
# ---------------------------------------------------------------------------

def open_viewer(state: NavigationState, index: int, total: int) -> NavigationState:
    """Open the viewer on the front view of point `index`; out-of-range is rejected."""
    if not 0 <= index < total:
        return state
    return NavigationState(
        current_point_index=index,
        is_showing_front=True,
        mode=Mode.VIEWER_ACTIVE,
    )


def leave_viewer(state: NavigationState) -> NavigationState:
    if state.mode != Mode.VIEWER_ACTIVE:
        return state
    return replace(state, mode=Mode.MAP_BROWSING)


def step_prev(state: NavigationState) -> NavigationState:
    if state.mode != Mode.VIEWER_ACTIVE or state.current_point_index <= 0:
        return state
    return replace(state, current_point_index=state.current_point_index - 1)


def step_next(state: NavigationState, total: int) -> NavigationState:
    if state.mode != Mode.VIEWER_ACTIVE or state.current_point_index >= total - 1:
        return state
    return replace(state, current_point_index=state.current_point_index + 1)


def toggle_side(state: NavigationState) -> NavigationState:
    if state.mode != Mode.VIEWER_ACTIVE:
        return state
    return replace(state, is_showing_front=not state.is_showing_front)


def apply_engine_image(
    state: NavigationState, point_index: int, is_front: bool
) -> NavigationState:
    """Adopt the point and side the viewer engine navigated to. Mode is kept."""
    return replace(state, current_point_index=point_index, is_showing_front=is_front)


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class NavigationController:
    """Single owner of NavigationState; fans every change out to the displays."""

    def __init__(
        self,
        points: list["SurveyPoint"],
        displays: Displays,
        provider: Optional["ImageProvider"] = None,
        image_base: str = DEFAULT_IMAGE_BASE,
        init_delay: float = DEFAULT_VIEWER_INIT_DELAY,
    ) -> None:
        """
        Initialize the controller in map-browsing mode at point 0, front side.

        Args:
            points: Survey points in dataset order (must be non-empty)
            displays: Receiver of the refresh commands
            provider: Image provider for the graph variant. Without one the
                controller runs the flat-image variant and builds image URLs
                from the point's filenames.
            image_base: URL prefix for the flat-image variant
            init_delay: Seconds to wait before the one-shot viewer
                initialization, so the viewer surface is laid out first
        """
        if not points:
            raise ValueError("NavigationController requires at least one survey point")

        self.points = points
        self.displays = displays
        self.provider = provider
        self.image_base = image_base.rstrip("/")
        self.init_delay = init_delay

        self._state = NavigationState()
        self._viewer_initialized = False
        self._viewer_init: Optional[asyncio.Task] = None
        self._index_by_point_id = {point.id: i for i, point in enumerate(points)}

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def total(self) -> int:
        return len(self.points)

    @property
    def current_point(self) -> "SurveyPoint":
        return self.points[self._state.current_point_index]

    @property
    def viewer_initialized(self) -> bool:
        return self._viewer_initialized

    @property
    def image_id(self) -> str:
        return image_id(self.current_point.id, self._state.is_showing_front)

    @property
    def image_url(self) -> str:
        point = self.current_point
        is_front = self._state.is_showing_front
        if self.provider is not None:
            entity = self.provider.image_for(point.id, is_front)
            if entity is not None:
                return entity.url
        return f"{self.image_base}/{point.image_file(is_front)}"

    def info_panel(self) -> InfoPanel:
        index = self._state.current_point_index
        is_front = self._state.is_showing_front
        return InfoPanel(
            position=index + 1,
            total=self.total,
            side_label=self._state.side_label,
            heading=self.current_point.heading(is_front),
            prev_enabled=index > 0,
            next_enabled=index < self.total - 1,
        )

    # -- inbound events ------------------------------------------------------

    async def marker_clicked(self, index: int) -> bool:
        """
        Enter the viewer on the front view of point `index`.

        On the first-ever entry the viewer engine is initialized after a
        short delay, before the first refresh. Clicks arriving during that
        delay wait on the same pending initialization; other events only
        update state until it completes.

        Returns:
            True if the viewer was opened, False if the index is out of range
        """
        new_state = open_viewer(self._state, index, self.total)
        if new_state is self._state:
            logger.warning(f"Ignoring marker click for out-of-range index {index}")
            return False

        self._state = new_state
        logger.info(f"Opening viewer at point {self.current_point.id} (index {index})")
        self.displays.show_viewer(True)

        if not self._viewer_initialized:
            if self._viewer_init is None:
                self._viewer_init = asyncio.ensure_future(self._initialize_viewer())
            await self._viewer_init

        # the viewer may have been closed while initialization was pending
        if self._state.mode == Mode.VIEWER_ACTIVE:
            self._refresh()
        return True

    def close_viewer(self) -> bool:
        """Return to map browsing, recentered on the current point."""
        new_state = leave_viewer(self._state)
        if new_state is self._state:
            return False

        self._state = new_state
        point = self.current_point
        self.displays.show_viewer(False)
        self.displays.recenter_map(point.lat, point.long)
        self.displays.highlight_markers(self._state.current_point_index)
        logger.debug(f"Closed viewer at point {point.id}")
        return True

    def minimap_clicked(self) -> bool:
        return self.close_viewer()

    def prev(self) -> bool:
        return self._apply(step_prev(self._state))

    def next(self) -> bool:
        return self._apply(step_next(self._state, self.total))

    def switch_view(self) -> bool:
        return self._apply(toggle_side(self._state))

    def engine_reported_image(self, reported_id: str) -> bool:
        """
        Reconcile state with an image the viewer engine moved to on its own.

        Unparseable ids and unknown point ids are ignored. The displays are
        only refreshed while the viewer is active.

        Returns:
            True if state was updated from the reported image
        """
        parsed = parse_image_id(reported_id)
        index = self._index_by_point_id.get(parsed[0]) if parsed else None
        if index is None:
            logger.debug(f"Ignoring engine image {reported_id!r}: unknown point")
            return False

        self._state = apply_engine_image(self._state, index, parsed[1])
        if self._state.mode == Mode.VIEWER_ACTIVE:
            self._refresh()
        return True

    # -- image fetch -----------------------------------------------------------

    async def fetch_current_image(self) -> Optional[bytes]:
        """
        Fetch bytes for the currently displayed image.

        The request is tagged with the state that initiated it. If the user
        navigated while the fetch was in flight, the late result is
        discarded and None is returned.

        Raises:
            Unsupported: Without an image provider (flat-image variant)
            FetchError: Propagated from the provider
        """
        if self.provider is None:
            raise Unsupported("Image fetch requires an image provider")

        tag = self._state
        url = self.image_url
        data = await self.provider.image_bytes(url)

        if self._state != tag:
            logger.debug(f"Discarding stale image response for {url}")
            return None
        return data

    # -- internals -------------------------------------------------------------

    def _apply(self, new_state: NavigationState) -> bool:
        if new_state is self._state:
            return False
        self._state = new_state
        self._refresh()
        return True

    async def _initialize_viewer(self) -> None:
        await asyncio.sleep(self.init_delay)
        self.displays.init_viewer()
        self._viewer_initialized = True
        logger.debug("Viewer engine initialized")

    def _refresh(self) -> None:
        """Push the current state to all four dependent displays."""
        if not self._viewer_initialized:
            logger.debug("Holding refresh until the viewer engine is initialized")
            return
        point = self.current_point
        self.displays.update_image(self.image_id, self.image_url)
        self.displays.update_info(self.info_panel())
        self.displays.update_minimap(point.lat, point.long)
        self.displays.highlight_markers(self._state.current_point_index)
