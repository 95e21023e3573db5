"""Error taxonomy for the survey viewer."""

from typing import Any, Optional


class SurveyViewerError(Exception):
    """Base class for all survey viewer errors."""

    code = "SURVEY_VIEWER_ERROR"

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error_code": self.code, "error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class DatasetError(SurveyViewerError):
    """Dataset is missing, empty, or has no valid rows. Fatal to initialization."""

    code = "DATASET_ERROR"


class NotFound(SurveyViewerError):
    code = "NOT_FOUND"


class FetchError(SurveyViewerError):
    """
    Image bytes could not be retrieved.

    Attributes:
        url: The URL that was requested
        status: HTTP status code, or None for transport failures
    """

    code = "FETCH_ERROR"

    def __init__(self, url: str, status: Optional[int] = None, reason: str = "") -> None:
        if status is not None:
            message = f"Failed to load image: {url} (HTTP {status})"
        else:
            message = f"Failed to load image: {url} ({reason or 'transport error'})"
        super().__init__(message, details={"url": url, "status": status})
        self.url = url
        self.status = status


class Unsupported(SurveyViewerError):
    code = "UNSUPPORTED"
