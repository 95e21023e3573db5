"""
Shared pytest fixtures for survey viewer tests.

This module provides reusable fixtures that are automatically discovered
by pytest. Fixtures here are available to all test files.

Educational notes for new developers:
- Fixtures are functions that provide test data or set up test state
- @pytest.fixture decorator marks a function as a fixture
- Fixtures can depend on other fixtures (dependency injection)
- tmp_path is a built-in fixture giving each test its own directory
"""

import pytest
from unittest.mock import MagicMock

from src.survey_viewer.config import ViewerConfig
from src.survey_viewer.loader import SurveyPoint
from src.survey_viewer.navigation import NavigationController
from src.survey_viewer.provider import ImageProvider

SAMPLE_CSV = """id,lat,long,heading_front,front,rear,front_width,front_height,rear_width,rear_height
3,47.3900,8.5600,270,f3.jpg,r3.jpg,4000,3000,4000,3000
1,47.3769,8.5417,90,f1.jpg,r1.jpg,4000,3000,4000,3000
2,47.3800,8.5500,180,f2.jpg,r2.jpg,4000,3000,4000,3000
"""


def make_point(point_id: str, lat: float, lng: float, heading: float) -> SurveyPoint:
    return SurveyPoint(
        id=point_id,
        lat=lat,
        long=lng,
        heading_front=heading,
        front=f"f{point_id}.jpg",
        rear=f"r{point_id}.jpg",
        front_width=4000,
        front_height=3000,
        rear_width=4000,
        rear_height=3000,
    )


@pytest.fixture
def sample_points() -> list[SurveyPoint]:
    """
    Provide three survey points with ids "1", "2", "3".

    Headings are 90, 180 and 270 degrees, so the rear headings are
    270, 0 and 90.
    """
    return [
        make_point("1", 47.3769, 8.5417, 90),
        make_point("2", 47.3800, 8.5500, 180),
        make_point("3", 47.3900, 8.5600, 270),
    ]


@pytest.fixture
def sample_csv(tmp_path) -> str:
    """Write the sample dataset (unsorted) to a CSV file and return its path."""
    path = tmp_path / "data.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return str(path)


@pytest.fixture
def test_config() -> ViewerConfig:
    """Configuration with no viewer init delay so tests run instantly."""
    return ViewerConfig(image_base="http://survey.test/images", viewer_init_delay=0.0)


@pytest.fixture
def mock_displays() -> MagicMock:
    """
    Create a mock display receiver.

    Every refresh command is recorded, so tests can assert on the order
    of calls via mock_displays.method_calls.
    """
    return MagicMock()


@pytest.fixture
def provider(sample_points) -> ImageProvider:
    """Image provider over the sample points."""
    return ImageProvider.from_points(sample_points, image_base="http://survey.test/images")


@pytest.fixture
def controller(sample_points, mock_displays, provider) -> NavigationController:
    """Graph-variant controller in its initial map-browsing state."""
    return NavigationController(
        sample_points,
        mock_displays,
        provider=provider,
        init_delay=0.0,
    )
