"""Build the image graph (entities, sequences, spatial cells) from survey points."""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Optional, TYPE_CHECKING

import h3
import numpy as np

if TYPE_CHECKING:
    from src.survey_viewer.loader import SurveyPoint

logger = logging.getLogger(__name__)

FRONT_SEQUENCE_ID = "seq_front"
REAR_SEQUENCE_ID = "seq_rear"
SEQUENCE_IDS = (FRONT_SEQUENCE_ID, REAR_SEQUENCE_ID)

FRONT_SUFFIX = "_front"
REAR_SUFFIX = "_rear"
IMAGE_ID_PREFIX = "point"

# Images are treated as upright on the horizon: fixed 90 degree tilt, no roll
CAMERA_TILT_RAD = math.pi / 2
CAMERA_ROLL_RAD = 0.0

# Constant engine metadata; the survey has no real reconstruction behind it
MERGE_ID = "sample_2024"
CAMERA_TYPE = "perspective"
CAMERA_PARAMETERS = (0.8, 0.0, 0.0)
CREATOR = {"id": "user", "username": "survey"}


@dataclass(frozen=True)
class ImageEntity:
    """One directional view (front or rear) at one survey point."""

    id: str
    point_id: str
    sequence_id: str
    lat: float
    lng: float
    rotation: tuple[float, float, float]
    url: str
    width: Optional[int]
    height: Optional[int]
    captured_at: int  # synthesized epoch millis, not meaningful

    @property
    def is_front(self) -> bool:
        return self.sequence_id == FRONT_SEQUENCE_ID

    @property
    def heading_rad(self) -> float:
        return self.rotation[2]

    def to_dict(self) -> dict[str, Any]:
        """Render the entity in the shape the viewer engine consumes."""
        geometry = {"lat": self.lat, "lng": self.lng}
        return {
            "id": self.id,
            "sequence": {"id": self.sequence_id},
            "merge_id": MERGE_ID,
            "computed_geometry": dict(geometry),
            "geometry": dict(geometry),
            "computed_rotation": list(self.rotation),
            "camera_type": CAMERA_TYPE,
            "camera_parameters": list(CAMERA_PARAMETERS),
            "width": self.width,
            "height": self.height,
            "thumb": {"id": f"{self.id}_thumb", "url": self.url},
            "mesh": {"id": f"{self.id}_mesh", "url": ""},
            "cluster": {"id": f"{self.id}_cluster", "url": ""},
            "captured_at": self.captured_at,
            "creator": dict(CREATOR),
            "point_id": self.point_id,
        }


@dataclass(frozen=True)
class Sequence:
    """Ordered chain of same-direction image ids."""

    id: str
    image_ids: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "image_ids": list(self.image_ids)}


@dataclass
class ImageGraph:
    """
    Immutable-by-convention snapshot of the dataset as an image graph.

    Attributes:
        images: image_id -> ImageEntity (owns every entity)
        sequences: sequence_id -> Sequence (front and rear chains)
        cells: cell_id -> entities whose geometry falls in that cell
        resolution: H3 resolution used for the cell buckets
    """

    images: dict[str, ImageEntity] = field(default_factory=dict)
    sequences: dict[str, Sequence] = field(default_factory=dict)
    cells: dict[str, list[ImageEntity]] = field(default_factory=dict)
    resolution: int = 9


def image_id(point_id: str, is_front: bool) -> str:
    """
    Build the image id for one side of a survey point.

    Example:
        >>> image_id("12", True)
        "point12_front"
    """
    suffix = FRONT_SUFFIX if is_front else REAR_SUFFIX
    return f"{IMAGE_ID_PREFIX}{point_id}{suffix}"


def parse_image_id(value: str) -> Optional[tuple[str, bool]]:
    """
    Recover (point_id, is_front) from an image id handed back by the engine.

    Returns:
        Tuple of (point_id, is_front), or None if the id does not follow
        the point{id}_front / point{id}_rear pattern.
    """
    if not value.startswith(IMAGE_ID_PREFIX):
        return None
    body = value[len(IMAGE_ID_PREFIX):]
    if body.endswith(FRONT_SUFFIX):
        point_id, is_front = body[: -len(FRONT_SUFFIX)], True
    elif body.endswith(REAR_SUFFIX):
        point_id, is_front = body[: -len(REAR_SUFFIX)], False
    else:
        return None
    if not point_id:
        return None
    return point_id, is_front


def front_heading_rad(heading_deg):
    """Front heading in radians. Accepts scalars or numpy arrays."""
    return np.asarray(heading_deg, dtype=float) * np.pi / 180


def rear_heading_rad(heading_deg):
    """Rear heading in radians: the front heading turned by 180 degrees, mod 360."""
    return ((np.asarray(heading_deg, dtype=float) + 180) % 360) * np.pi / 180


def cell_id_for(lat: float, lng: float, resolution: int) -> str:
    """Deterministic geospatial cell (H3 index) containing (lat, lng)."""
    return h3.latlng_to_cell(lat, lng, resolution)


def build_image_graph(
    points: list["SurveyPoint"],
    image_base: str = "./images",
    resolution: int = 9,
) -> ImageGraph:
    """
    Materialize survey points into an image graph.

    Every point yields a front and a rear ImageEntity. Both are inserted
    into the id map, appended to their sequence in dataset order, and
    bucketed into the H3 cell containing the point.

    Args:
        points: Survey points, already validated and sorted
        image_base: URL prefix for image filenames
        resolution: H3 resolution for the spatial buckets

    Returns:
        ImageGraph with images, the two sequences and the cell buckets
    """
    graph = ImageGraph(resolution=resolution)
    base = image_base.rstrip("/")
    captured_at = int(time.time() * 1000)

    headings = np.array([point.heading_front for point in points], dtype=float)
    front_yaws = front_heading_rad(headings)
    rear_yaws = rear_heading_rad(headings)

    front_ids: list[str] = []
    rear_ids: list[str] = []

    for point, front_yaw, rear_yaw in zip(points, front_yaws, rear_yaws):
        cell = cell_id_for(point.lat, point.long, resolution)
        bucket = graph.cells.setdefault(cell, [])

        for is_front, yaw in ((True, front_yaw), (False, rear_yaw)):
            width, height = point.dimensions(is_front)
            entity = ImageEntity(
                id=image_id(point.id, is_front),
                point_id=point.id,
                sequence_id=FRONT_SEQUENCE_ID if is_front else REAR_SEQUENCE_ID,
                lat=point.lat,
                lng=point.long,
                rotation=(CAMERA_TILT_RAD, CAMERA_ROLL_RAD, float(yaw)),
                url=f"{base}/{point.image_file(is_front)}",
                width=width,
                height=height,
                captured_at=captured_at,
            )
            graph.images[entity.id] = entity
            (front_ids if is_front else rear_ids).append(entity.id)
            bucket.append(entity)

    graph.sequences[FRONT_SEQUENCE_ID] = Sequence(FRONT_SEQUENCE_ID, tuple(front_ids))
    graph.sequences[REAR_SEQUENCE_ID] = Sequence(REAR_SEQUENCE_ID, tuple(rear_ids))

    logger.info(
        f"Processed {len(graph.images)} images, {len(graph.sequences)} sequences, "
        f"{len(graph.cells)} cells"
    )
    return graph
