"""Session bootstrap: dataset -> provider -> navigation controller."""

import logging
from dataclasses import dataclass
from typing import Optional

from src.survey_viewer.config import ViewerConfig, load_config
from src.survey_viewer.loader import SurveyPoint, load_survey_csv
from src.survey_viewer.navigation import Displays, NavigationController
from src.survey_viewer.provider import ImageProvider
from src.survey_viewer.viewer import PlotlyDisplays

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Everything owned for one browsing session."""

    points: list[SurveyPoint]
    provider: Optional[ImageProvider]
    displays: Displays
    controller: NavigationController
    config: ViewerConfig

    @property
    def variant(self) -> str:
        return "graph" if self.provider is not None else "flat"

    async def aclose(self) -> None:
        if self.provider is not None:
            await self.provider.close()


def open_session(
    csv_path: str,
    config: Optional[ViewerConfig] = None,
    displays: Optional[Displays] = None,
    variant: str = "graph",
) -> Session:
    """
    Load the dataset and wire up provider, displays and controller.

    The flat variant skips the image graph entirely; the controller then
    builds image URLs straight from the point filenames.

    Args:
        csv_path: Path to the survey CSV
        config: Runtime settings (default: loaded from the environment)
        displays: Display receiver (default: PlotlyDisplays)
        variant: "graph" or "flat"

    Returns:
        A ready Session in map-browsing mode at the first point

    Raises:
        DatasetError: If the dataset cannot be loaded. Fatal for the session.
    """
    config = config or load_config()
    points = load_survey_csv(csv_path, variant=variant)

    provider = None
    if variant == "graph":
        provider = ImageProvider.from_points(
            points,
            image_base=config.image_base,
            resolution=config.cell_resolution,
            timeout=config.fetch_timeout,
        )

    if displays is None:
        displays = PlotlyDisplays(points, minimap_zoom=config.minimap_zoom)

    controller = NavigationController(
        points,
        displays,
        provider=provider,
        image_base=config.image_base,
        init_delay=config.viewer_init_delay,
    )

    logger.info(f"Session opened: {len(points)} points, {variant} variant")
    return Session(
        points=points,
        provider=provider,
        displays=displays,
        controller=controller,
        config=config,
    )
