"""Survey Viewer - map and front/rear imagery browsing for survey points."""

from src.survey_viewer.errors import DatasetError, FetchError, NotFound, Unsupported
from src.survey_viewer.graph import ImageEntity, Sequence, build_image_graph
from src.survey_viewer.loader import SurveyPoint, load_survey_csv
from src.survey_viewer.navigation import Mode, NavigationController, NavigationState
from src.survey_viewer.provider import ImageProvider
from src.survey_viewer.session import Session, open_session

__all__ = [
    "DatasetError",
    "FetchError",
    "NotFound",
    "Unsupported",
    "ImageEntity",
    "Sequence",
    "build_image_graph",
    "SurveyPoint",
    "load_survey_csv",
    "Mode",
    "NavigationController",
    "NavigationState",
    "ImageProvider",
    "Session",
    "open_session",
]
