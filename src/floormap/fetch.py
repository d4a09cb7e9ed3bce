"""Fetch building feature collections from the GeoJSON feature services.

Units (rooms) and details (fixture outlines) live behind two ArcGIS
FeatureServer query endpoints.  Both are requested concurrently and joined;
if either fails the whole load fails, because floor buckets and the
orientation fit are derived from the pair.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import httpx
from loguru import logger

from floormap.layers.layer import FeatureCollection
from floormap.layers.parsers.geojson import parse_geojson

_USER_AGENT = "floormap/0.1.0"
DEFAULT_TIMEOUT_S = 30.0


class FeatureFetchError(RuntimeError):
    """A feature endpoint could not be fetched or did not return GeoJSON."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


@dataclass(frozen=True)
class BuildingData:
    """The joined result of both feature fetches."""
    units: FeatureCollection
    details: FeatureCollection


async def fetch_collection(client: httpx.AsyncClient, url: str) -> FeatureCollection:
    """GET one endpoint and parse it as a GeoJSON FeatureCollection."""
    try:
        resp = await client.get(url, headers={"User-Agent": _USER_AGENT})
        resp.raise_for_status()
    except httpx.HTTPError as e:
        raise FeatureFetchError(url, str(e) or type(e).__name__) from e

    try:
        data = resp.json()
    except ValueError as e:
        raise FeatureFetchError(url, "response is not JSON") from e

    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        # ArcGIS reports query errors as 200 + {"error": {...}}
        error = data.get("error") if isinstance(data, dict) else None
        detail = error.get("message") if isinstance(error, dict) else "not a FeatureCollection"
        raise FeatureFetchError(url, str(detail))

    collection = parse_geojson(data)
    logger.info(f"Fetched {len(collection)} features from {url}")
    return collection


async def fetch_building(
    units_url: str,
    details_url: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT_S,
) -> BuildingData:
    """Fetch units and details concurrently.

    Args:
        units_url: Room feature endpoint.
        details_url: Detail feature endpoint.
        client: Optional client to reuse (tests pass one with a mock transport).
        timeout: Per-request timeout when a client is created here.

    Raises:
        FeatureFetchError: If either request fails.
    """
    if client is None:
        async with httpx.AsyncClient(timeout=timeout) as own_client:
            return await fetch_building(units_url, details_url, client=own_client)

    units, details = await asyncio.gather(
        fetch_collection(client, units_url),
        fetch_collection(client, details_url),
    )
    return BuildingData(units=units, details=details)
