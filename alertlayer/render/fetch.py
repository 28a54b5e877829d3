"""
Tile Fetch Lifecycle

Each requested tile runs through a small state machine:

    requested ─► downloaded ─► decoded ─► composited
        │             │           ├─────► discarded   (stale or detached)
        └─────────────┴───────────┴─────► failed

Suspension happens only at the HTTP fetch and the image decode. Tiles run
independently with no ordering between them; stages within one tile are
strictly sequential. Transport and decode failures are recorded on the
TileJob and the tile is dropped; they never propagate to the caller.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx
from numpy.typing import NDArray

from alertlayer.core.exceptions import (
    LayerStateError,
    PixelDecodeError,
    TileDecodeError,
    TileFetchError,
)
from alertlayer.grid.base import TileCoordinate
from alertlayer.io.tile_image import decode_tile_image

logger = logging.getLogger(__name__)

REQUESTED = "requested"
DOWNLOADED = "downloaded"
DECODED = "decoded"
COMPOSITED = "composited"
DISCARDED = "discarded"
FAILED = "failed"

_TRANSITIONS = {
    REQUESTED: {DOWNLOADED, FAILED},
    DOWNLOADED: {DECODED, FAILED},
    DECODED: {COMPOSITED, DISCARDED, FAILED},
}

# Composite callback: draws the decoded tile, returns False if it was dropped
Compositor = Callable[["TileRequest", NDArray], bool]
Decoder = Callable[[bytes], Awaitable[NDArray]]


@dataclass(frozen=True)
class TileRequest:
    """
    One dispatched tile fetch

    Attributes:
        coordinate: Tile to fetch
        origin_column: First column of the viewport's tile rectangle
        origin_row: First row of the viewport's tile rectangle
        generation: Layer generation the request was issued in
    """

    coordinate: TileCoordinate
    origin_column: int
    origin_row: int
    generation: int = 0

    @property
    def offset(self) -> tuple[int, int]:
        """(column, row) position of the tile inside its batch rectangle"""
        return (
            self.coordinate.column - self.origin_column,
            self.coordinate.row - self.origin_row,
        )


class TileJob:
    """
    Progress of one tile through the fetch lifecycle

    Attributes:
        request: The TileRequest being processed
        state: Current lifecycle state
        error: Exception that moved the job to FAILED, if any
    """

    def __init__(self, request: TileRequest):
        self.request = request
        self.state = REQUESTED
        self.error: Exception | None = None

    @property
    def done(self) -> bool:
        return self.state in (COMPOSITED, DISCARDED, FAILED)

    def advance(self, state: str) -> None:
        """
        Move to the next lifecycle state

        Raises:
            LayerStateError: If the transition is not allowed
        """
        if state not in _TRANSITIONS.get(self.state, ()):
            raise LayerStateError(f"Tile {self.request.coordinate}: cannot go from {self.state} to {state}")
        logger.debug("Tile %s: %s -> %s", self.request.coordinate, self.state, state)
        self.state = state

    def fail(self, error: Exception) -> None:
        self.advance(FAILED)
        self.error = error

    def __repr__(self) -> str:
        return f"<TileJob {self.request.coordinate} {self.state}>"


class TileLoader:
    """
    Downloads and decodes alert tiles

    Owns an ``httpx.AsyncClient`` unless one is passed in. Use as an async
    context manager, or call :meth:`aclose` when done.

    Attributes:
        url_template: Tile URL with ``{z}``, ``{x}`` (column) and ``{y}`` (row)

    Examples:
        >>> async with TileLoader("https://tiles.example.com/alerts/{z}/{x}/{y}.png") as loader:
        ...     job = TileJob(TileRequest(TileCoordinate(10, 16, 5), 10, 16))
        ...     await loader.run(job, composite)
        ...     job.state
        'composited'
    """

    def __init__(
        self,
        url_template: str,
        client: httpx.AsyncClient | None = None,
        decoder: Decoder = decode_tile_image,
        timeout: float | None = None,
    ):
        """
        Args:
            url_template: Tile URL template
            client: Shared HTTP client; the loader will not close it
            decoder: Coroutine turning image bytes into an (H, W, 4) array
            timeout: Request timeout in seconds for an owned client (None = no timeout)
        """
        self.url_template = url_template
        self._client = client
        self._owns_client = client is None
        self._decoder = decoder
        self._timeout = timeout

    def tile_url(self, coordinate: TileCoordinate) -> str:
        return self.url_template.format(z=coordinate.zoom, x=coordinate.column, y=coordinate.row)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def fetch(self, coordinate: TileCoordinate) -> bytes:
        """
        Download the raw bytes of one tile

        Raises:
            TileFetchError: On transport errors or any status other than 200
        """
        url = self.tile_url(coordinate)
        try:
            response = await self._get_client().get(url)
        except httpx.HTTPError as e:
            raise TileFetchError(f"{url}: {e}") from e

        if response.status_code != 200:
            raise TileFetchError(f"{url}: HTTP {response.status_code}")
        return response.content

    async def run(self, job: TileJob, composite: Compositor) -> TileJob:
        """
        Drive a job from REQUESTED to a terminal state

        Args:
            job: Freshly created TileJob
            composite: Callback that draws the decoded tile

        Returns:
            The same job, in COMPOSITED, DISCARDED or FAILED state
        """
        coordinate = job.request.coordinate

        try:
            data = await self.fetch(coordinate)
        except TileFetchError as e:
            logger.debug("Dropping tile %s: %s", coordinate, e)
            job.fail(e)
            return job
        job.advance(DOWNLOADED)

        try:
            image = await self._decoder(data)
        except TileDecodeError as e:
            logger.warning("Dropping tile %s: %s", coordinate, e)
            job.fail(e)
            return job
        job.advance(DECODED)

        try:
            composited = composite(job.request, image)
        except PixelDecodeError as e:
            logger.error("Tile %s violates the alert encoding: %s", coordinate, e)
            job.fail(e)
            return job

        job.advance(COMPOSITED if composited else DISCARDED)
        return job

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "TileLoader":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def __repr__(self) -> str:
        return f"<TileLoader: {self.url_template}>"
