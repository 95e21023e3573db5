"""Load survey points from CSV files."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from src.survey_viewer.errors import DatasetError

logger = logging.getLogger(__name__)

# Columns required by each variant. The graph variant also needs image
# dimensions so the viewer engine can size its textures.
FLAT_COLUMNS = ["id", "lat", "long", "heading_front", "front", "rear"]
DIMENSION_COLUMNS = ["front_width", "front_height", "rear_width", "rear_height"]
GRAPH_COLUMNS = FLAT_COLUMNS + DIMENSION_COLUMNS
VARIANT_COLUMNS = {
    "flat": FLAT_COLUMNS,
    "graph": GRAPH_COLUMNS,
}


@dataclass(frozen=True)
class SurveyPoint:
    """One captured location with front/rear imagery and a compass heading."""

    id: str
    lat: float
    long: float
    heading_front: float  # degrees, 0-360
    front: str
    rear: str
    front_width: Optional[int] = None
    front_height: Optional[int] = None
    rear_width: Optional[int] = None
    rear_height: Optional[int] = None

    def image_file(self, is_front: bool) -> str:
        return self.front if is_front else self.rear

    def heading(self, is_front: bool) -> float:
        """Heading in degrees for the requested side (rear is opposite the front)."""
        if is_front:
            return self.heading_front
        return (self.heading_front + 180) % 360

    def dimensions(self, is_front: bool) -> tuple[Optional[int], Optional[int]]:
        if is_front:
            return self.front_width, self.front_height
        return self.rear_width, self.rear_height


def load_survey_csv(path: str, variant: str = "graph") -> list[SurveyPoint]:
    """
    Load and validate survey points from a CSV file.

    Rows missing any value required by the variant are dropped. The
    remaining points are sorted by id as a string (lexicographic, so
    "10" sorts before "2"), which fixes the order of the image sequences.

    Args:
        path: Path to the CSV file
        variant: "graph" (requires image dimensions) or "flat"

    Returns:
        List of SurveyPoint in lexicographic id order

    Raises:
        DatasetError: If the file is missing or unparseable, a required
            column is absent, or no valid rows remain
        ValueError: If the variant is unknown
    """
    if variant not in VARIANT_COLUMNS:
        raise ValueError(f"Unknown dataset variant: {variant}")
    required = VARIANT_COLUMNS[variant]

    if not os.path.exists(path):
        raise DatasetError(f"Dataset file not found: {path}", details={"path": path})

    try:
        frame = pd.read_csv(path, dtype={"id": str, "front": str, "rear": str},
                            skip_blank_lines=True)
    except pd.errors.EmptyDataError as e:
        raise DatasetError(f"No data in CSV: {path}") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise DatasetError(f"CSV error: {e}") from e

    missing_columns = [column for column in required if column not in frame.columns]
    if missing_columns:
        raise DatasetError(
            f"CSV is missing required columns: {', '.join(missing_columns)}",
            details={"missing": missing_columns},
        )

    if frame.empty:
        raise DatasetError(f"No data in CSV: {path}")

    frame["id"] = frame["id"].str.strip()
    numeric_columns = ["lat", "long", "heading_front"] + [
        column for column in DIMENSION_COLUMNS if column in frame.columns
    ]
    for column in numeric_columns:
        frame[column] = pd.to_numeric(frame[column], errors="coerce")

    valid = frame.dropna(subset=required)
    valid = valid[valid["id"] != ""]
    invalid = len(frame) - len(valid)
    if invalid:
        logger.warning(f"Dropped {invalid} rows with missing or non-numeric required fields")

    # first occurrence of an id wins
    unique = valid.drop_duplicates(subset="id", keep="first")
    duplicates = len(valid) - len(unique)
    if duplicates:
        logger.warning(f"Dropped {duplicates} rows with duplicate ids")
    valid = unique

    if valid.empty:
        raise DatasetError("No valid data in CSV")

    points = [_row_to_point(row, variant) for row in valid.to_dict("records")]
    points.sort(key=lambda point: point.id)

    logger.info(f"Loaded {len(points)} survey points from {path}")
    return points


def _row_to_point(row: dict, variant: str) -> SurveyPoint:
    """Convert one validated CSV record into a SurveyPoint."""
    dims: dict[str, Optional[int]] = {}
    for column in ("front_width", "front_height", "rear_width", "rear_height"):
        value = row.get(column)
        dims[column] = int(value) if value is not None and not pd.isna(value) else None

    return SurveyPoint(
        id=str(row["id"]),
        lat=float(row["lat"]),
        long=float(row["long"]),
        heading_front=float(row["heading_front"]),
        front=str(row["front"]),
        rear=str(row["rear"]),
        **dims,
    )


def dataset_bounds(
    points: list[SurveyPoint],
) -> tuple[tuple[float, float], tuple[float, float]]:
    """Return ((min_lat, min_lng), (max_lat, max_lng)) for a non-empty dataset."""
    if not points:
        raise DatasetError("Cannot compute bounds of an empty dataset")
    lats = [point.lat for point in points]
    lngs = [point.long for point in points]
    return (min(lats), min(lngs)), (max(lats), max(lngs))
