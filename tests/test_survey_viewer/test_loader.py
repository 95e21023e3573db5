"""Tests for CSV dataset loading."""

import pytest

from src.survey_viewer.errors import DatasetError
from src.survey_viewer.graph import build_image_graph
from src.survey_viewer.loader import SurveyPoint, dataset_bounds, load_survey_csv

FLAT_HEADER = "id,lat,long,heading_front,front,rear\n"
GRAPH_HEADER = (
    "id,lat,long,heading_front,front,rear,front_width,front_height,rear_width,rear_height\n"
)


def write_csv(tmp_path, text: str) -> str:
    path = tmp_path / "survey.csv"
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestLoadSurveyCsv:
    """Tests for load_survey_csv."""

    def test_loads_and_sorts_sample(self, sample_csv):
        points = load_survey_csv(sample_csv)

        assert [point.id for point in points] == ["1", "2", "3"]
        assert points[0].lat == pytest.approx(47.3769)
        assert points[0].heading_front == 90
        assert points[0].front_width == 4000

    def test_sort_is_lexicographic_not_numeric(self, tmp_path):
        path = write_csv(
            tmp_path,
            FLAT_HEADER
            + "2,1.0,1.0,10,a.jpg,b.jpg\n"
            + "10,1.0,1.0,10,a.jpg,b.jpg\n"
            + "1,1.0,1.0,10,a.jpg,b.jpg\n",
        )
        points = load_survey_csv(path, variant="flat")
        assert [point.id for point in points] == ["1", "10", "2"]

    def test_ids_stay_strings(self, tmp_path):
        path = write_csv(tmp_path, FLAT_HEADER + "007,1.0,1.0,10,a.jpg,b.jpg\n")
        assert load_survey_csv(path, variant="flat")[0].id == "007"

    def test_rows_missing_fields_are_dropped(self, tmp_path):
        path = write_csv(
            tmp_path,
            FLAT_HEADER
            + "1,1.0,1.0,10,a.jpg,b.jpg\n"
            + "2,,1.0,10,a.jpg,b.jpg\n"
            + "3,1.0,1.0,10,,b.jpg\n"
            + ",1.0,1.0,10,a.jpg,b.jpg\n",
        )
        points = load_survey_csv(path, variant="flat")
        assert [point.id for point in points] == ["1"]

    def test_zero_heading_is_valid(self, tmp_path):
        path = write_csv(tmp_path, FLAT_HEADER + "1,1.0,1.0,0,a.jpg,b.jpg\n")
        points = load_survey_csv(path, variant="flat")
        assert points[0].heading_front == 0

    def test_graph_variant_requires_dimensions(self, tmp_path):
        path = write_csv(
            tmp_path,
            "id,lat,long,heading_front,front,rear,front_width,front_height,rear_width,rear_height\n"
            "1,1.0,1.0,10,a.jpg,b.jpg,100,50,100,50\n"
            "2,1.0,1.0,10,a.jpg,b.jpg,,50,100,50\n",
        )
        points = load_survey_csv(path, variant="graph")
        assert [point.id for point in points] == ["1"]

    def test_non_numeric_dimension_row_is_dropped(self, tmp_path):
        path = write_csv(
            tmp_path,
            GRAPH_HEADER
            + "1,1.0,1.0,10,a.jpg,b.jpg,abc,50,100,50\n"
            + "2,1.0,1.0,10,a.jpg,b.jpg,100,50,100,50\n",
        )
        points = load_survey_csv(path, variant="graph")

        assert [point.id for point in points] == ["2"]
        assert points[0].front_width == 100

    def test_only_non_numeric_dimensions_raises_dataset_error(self, tmp_path):
        path = write_csv(tmp_path, GRAPH_HEADER + "1,1.0,1.0,10,a.jpg,b.jpg,100,50,wide,50\n")
        with pytest.raises(DatasetError, match="No valid data"):
            load_survey_csv(path, variant="graph")

    def test_duplicate_ids_keep_first_row(self, tmp_path):
        path = write_csv(
            tmp_path,
            FLAT_HEADER
            + "1,1.0,1.0,10,first.jpg,b.jpg\n"
            + "2,1.0,1.0,10,a.jpg,b.jpg\n"
            + "1,2.0,2.0,20,second.jpg,b.jpg\n",
        )
        points = load_survey_csv(path, variant="flat")

        assert [point.id for point in points] == ["1", "2"]
        assert points[0].front == "first.jpg"
        assert points[0].lat == 1.0

    def test_duplicate_ids_do_not_repeat_in_image_graph(self, tmp_path):
        path = write_csv(
            tmp_path,
            GRAPH_HEADER
            + "1,47.3769,8.5417,90,f1.jpg,r1.jpg,100,50,100,50\n"
            + "1,47.3769,8.5417,90,f1.jpg,r1.jpg,100,50,100,50\n",
        )
        graph = build_image_graph(load_survey_csv(path), image_base="./images", resolution=9)

        bucketed = [image.id for images in graph.cells.values() for image in images]
        assert sorted(bucketed) == ["point1_front", "point1_rear"]
        assert len(graph.sequences["seq_front"].image_ids) == 1

    def test_missing_column_raises(self, tmp_path):
        path = write_csv(tmp_path, FLAT_HEADER + "1,1.0,1.0,10,a.jpg,b.jpg\n")
        with pytest.raises(DatasetError) as exc_info:
            load_survey_csv(path, variant="graph")
        assert "front_width" in exc_info.value.details["missing"]

    def test_no_valid_rows_raises(self, tmp_path):
        path = write_csv(tmp_path, FLAT_HEADER + "1,,1.0,10,a.jpg,b.jpg\n")
        with pytest.raises(DatasetError, match="No valid data"):
            load_survey_csv(path, variant="flat")

    def test_header_only_raises(self, tmp_path):
        path = write_csv(tmp_path, FLAT_HEADER)
        with pytest.raises(DatasetError):
            load_survey_csv(path, variant="flat")

    def test_empty_file_raises(self, tmp_path):
        path = write_csv(tmp_path, "")
        with pytest.raises(DatasetError):
            load_survey_csv(path, variant="flat")

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(DatasetError, match="not found"):
            load_survey_csv(str(tmp_path / "nope.csv"))

    def test_unknown_variant_raises(self, sample_csv):
        with pytest.raises(ValueError):
            load_survey_csv(sample_csv, variant="stereo")


class TestSurveyPoint:
    """Tests for SurveyPoint helpers."""

    @pytest.mark.parametrize("front,rear", [(0, 180), (90, 270), (180, 0), (359, 179)])
    def test_rear_heading(self, front, rear):
        point = SurveyPoint("1", 0.0, 0.0, front, "a.jpg", "b.jpg")
        assert point.heading(True) == front
        assert point.heading(False) == rear

    def test_image_file(self):
        point = SurveyPoint("1", 0.0, 0.0, 0, "a.jpg", "b.jpg")
        assert point.image_file(True) == "a.jpg"
        assert point.image_file(False) == "b.jpg"


class TestDatasetBounds:
    """Tests for dataset_bounds."""

    def test_bounds(self, sample_points):
        assert dataset_bounds(sample_points) == ((47.3769, 8.5417), (47.3900, 8.5600))

    def test_empty_raises(self):
        with pytest.raises(DatasetError):
            dataset_bounds([])
