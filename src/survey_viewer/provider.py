"""Image provider: the query facade a panoramic viewer engine calls against."""

import logging
from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING

import httpx

from src.survey_viewer.errors import FetchError, NotFound, Unsupported
from src.survey_viewer.graph import (
    ImageEntity,
    ImageGraph,
    Sequence,
    build_image_graph,
    cell_id_for,
    image_id,
)

if TYPE_CHECKING:
    from src.survey_viewer.loader import SurveyPoint

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 10.0


@dataclass(frozen=True)
class ImageLookup:
    """Result slot for one requested id; node is None when the id is unknown."""

    id: str
    node: Optional[ImageEntity]

    @property
    def found(self) -> bool:
        return self.node is not None

    def to_dict(self) -> dict[str, Any]:
        return {"node_id": self.id, "node": self.node.to_dict() if self.node else None}


class ImageProvider:
    """
    Read-only index over one snapshot of the survey dataset.

    The provider is built once per session and never mutated. Empty
    cells and unknown ids are normal (sparse data at grid edges); only
    an unknown sequence id, a network failure, or a tile request raise.

    Example:
        provider = ImageProvider.from_points(points, image_base="http://host/images")
        images = await provider.images_in_cell(provider.cell_id(47.37, 8.54))
        data = await provider.image_bytes(images[0].url)
        await provider.close()
    """

    def __init__(
        self,
        graph: ImageGraph,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        self._graph = graph
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_points(
        cls,
        points: list["SurveyPoint"],
        image_base: str = "./images",
        resolution: int = 9,
        **kwargs,
    ) -> "ImageProvider":
        """Build the image graph for `points` and wrap it in a provider."""
        graph = build_image_graph(points, image_base=image_base, resolution=resolution)
        return cls(graph, **kwargs)

    @property
    def graph(self) -> ImageGraph:
        return self._graph

    def cell_id(self, lat: float, lng: float) -> str:
        """Cell identifier the provider buckets (lat, lng) into."""
        return cell_id_for(lat, lng, self._graph.resolution)

    def image_for(self, point_id: str, is_front: bool) -> Optional[ImageEntity]:
        return self._graph.images.get(image_id(point_id, is_front))

    async def images_in_cell(self, cell_id: str) -> list[ImageEntity]:
        images = list(self._graph.cells.get(cell_id, []))
        logger.debug(f"images_in_cell({cell_id}) -> {len(images)} images")
        return images

    async def images_by_id(self, ids: list[str]) -> list[ImageLookup]:
        """
        Look up a batch of image ids.

        The result has the same length and order as `ids`; unknown ids map
        to an ImageLookup with node=None so callers can match positionally.
        """
        logger.debug(f"images_by_id called for {len(ids)} images")
        return [ImageLookup(id=i, node=self._graph.images.get(i)) for i in ids]

    async def spatial_images(self, ids: list[str]) -> list[ImageLookup]:
        return await self.images_by_id(ids)

    async def sequence_by_id(self, sequence_id: str) -> Sequence:
        """
        Return the front or rear sequence.

        Raises:
            NotFound: If sequence_id is neither seq_front nor seq_rear
        """
        sequence = self._graph.sequences.get(sequence_id)
        if sequence is None:
            raise NotFound(
                f"Sequence {sequence_id} not found", details={"sequence_id": sequence_id}
            )
        return sequence

    async def image_bytes(self, url: str) -> bytes:
        """
        Fetch raw image bytes with a single GET request.

        Raises:
            FetchError: On a non-2xx response or a transport error. No retry
                is attempted; retry policy belongs to the caller.
        """
        logger.debug(f"image_bytes called for {url}")
        client = await self._get_client()

        try:
            response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Error loading image {url}: {e}")
            raise FetchError(url, reason=str(e)) from e

        if not response.is_success:
            logger.error(f"Error loading image {url}: HTTP {response.status_code}")
            raise FetchError(url, status=response.status_code)

        return response.content

    async def cluster(self, url: str) -> dict[str, Any]:
        return {"points": {}, "reference": {"lat": 0, "lng": 0, "alt": 0}}

    async def mesh(self, url: str) -> dict[str, Any]:
        return {"faces": [], "vertices": []}

    async def image_tiles(self, request: Any) -> Any:
        raise Unsupported("Image tiles not supported")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "ImageProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
