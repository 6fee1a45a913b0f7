# imagery.py

"""
Street-level imagery lookups.

A lookup answers one question: is there a panorama within ``radius`` metres of
``(lat, lng)``, and if so where exactly? Hits return a :class:`Position`,
misses return None, and transport or provider failures raise
:class:`ImageryLookupError`. The coverage resolver treats the last two the same.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from math import asin, cos, isfinite, radians, sin, sqrt
from typing import Any, Dict, Optional, Protocol

import requests

log = logging.getLogger(__name__)

GOOGLE_STREETVIEW_METADATA_URL = "https://maps.googleapis.com/maps/api/streetview/metadata"
GRAPH_MAPILLARY_URL = "https://graph.mapillary.com"
METERS_PER_DEGREE_LAT = 111_320.0


class ImageryLookupError(Exception):
    """The imagery provider could not answer (network, quota, auth)."""


@dataclass(frozen=True, slots=True)
class Position:
    """Coordinate of an actual panorama, which may differ from the place's nominal coordinate."""

    lat: float
    lng: float
    pano_id: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {"lat": self.lat, "lng": self.lng, "pano_id": self.pano_id}


class ImageryLookup(Protocol):
    def find_panorama(self, lat: float, lng: float, radius: int) -> Optional[Position]:
        ...


def haversine_distance_m(lat_a: float, lng_a: float, lat_b: float, lng_b: float) -> float:
    """
    Haversine distance in metres between two points.
    """
    earth_radius_m = 6_371_000.0
    delta_lat = radians(lat_b - lat_a)
    delta_lng = radians(lng_b - lng_a)
    h = (
        sin(delta_lat / 2) ** 2
        + cos(radians(lat_a)) * cos(radians(lat_b)) * sin(delta_lng / 2) ** 2
    )
    return 2 * earth_radius_m * asin(sqrt(h))


def _get_json(session: requests.Session, url: str, params: Dict[str, Any], timeout: float) -> Dict[str, Any]:
    """Single GET returning a decoded JSON object. No retries: the caller widens the radius instead."""
    try:
        resp = session.get(url, params=params, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
    except requests.Timeout as exc:
        log.warning("GET %s timed out after %s seconds", url, timeout)
        raise ImageryLookupError(f"timeout after {timeout} seconds") from exc
    except requests.HTTPError as exc:
        status = getattr(exc.response, "status_code", None)
        log.warning("GET %s failed with status %s: %s", url, status, exc)
        raise ImageryLookupError(f"HTTP {status}: {exc}") from exc
    except requests.RequestException as exc:
        log.warning("GET %s request error: %s", url, exc)
        raise ImageryLookupError(str(exc)) from exc
    except ValueError as exc:
        log.warning("GET %s returned invalid JSON: %s", url, exc)
        raise ImageryLookupError(f"invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        log.warning("GET %s returned %s instead of a JSON object", url, type(data).__name__)
        raise ImageryLookupError(f"expected a JSON object, got {type(data).__name__}")
    return data


class GoogleStreetViewLookup:
    """
    Street View Image Metadata API lookup. Metadata requests are free of quota
    charges and report the nearest panorama within the requested radius.
    """

    _NO_IMAGERY = {"ZERO_RESULTS", "NOT_FOUND"}

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        url: str = GOOGLE_STREETVIEW_METADATA_URL,
    ):
        if not api_key:
            raise RuntimeError("Please set GOOGLE_MAPS_API_KEY in your environment variables (or .env file).")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()
        self.url = url

    def find_panorama(self, lat: float, lng: float, radius: int) -> Optional[Position]:
        params = {
            "location": f"{lat},{lng}",
            "radius": radius,
            "source": "outdoor",
            "key": self.api_key,
        }
        data = _get_json(self.session, self.url, params, self.timeout)
        status = data.get("status")
        if status in self._NO_IMAGERY:
            return None
        if status != "OK":
            log.warning("Street View metadata returned status %s: %s", status, data.get("error_message", ""))
            raise ImageryLookupError(f"Street View status {status}")

        location = data.get("location") or {}
        try:
            return Position(float(location["lat"]), float(location["lng"]), data.get("pano_id"))
        except (KeyError, TypeError, ValueError) as exc:
            raise ImageryLookupError(f"Street View response without location: {data!r}") from exc


class MapillaryLookup:
    """Mapillary Graph API lookup: nearest panoramic image inside a bbox around the point."""

    def __init__(
        self,
        access_token: str,
        *,
        timeout: float = 10.0,
        limit: int = 50,
        session: Optional[requests.Session] = None,
    ):
        if not access_token:
            raise RuntimeError(
                "Please set MAPILLARY_ACCESS_TOKEN in your environment variables (or .env file)."
            )
        self.timeout = timeout
        self.limit = limit
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"OAuth {access_token}"})

    @staticmethod
    def bbox_around(lat: float, lng: float, radius: float) -> tuple[float, float, float, float]:
        """(min_lon, min_lat, max_lon, max_lat) of a square with half-side ``radius`` metres."""
        d_lat = radius / METERS_PER_DEGREE_LAT
        d_lng = radius / (METERS_PER_DEGREE_LAT * max(cos(radians(lat)), 1e-6))
        return (lng - d_lng, lat - d_lat, lng + d_lng, lat + d_lat)

    def find_panorama(self, lat: float, lng: float, radius: int) -> Optional[Position]:
        min_lon, min_lat, max_lon, max_lat = self.bbox_around(lat, lng, radius)
        params = {
            "bbox": f"{min_lon},{min_lat},{max_lon},{max_lat}",
            "is_pano": "true",
            "limit": self.limit,
            "fields": "id,geometry",
        }
        data = _get_json(self.session, f"{GRAPH_MAPILLARY_URL}/images", params, self.timeout)

        images = data.get("data")
        if not isinstance(images, list):
            raise ImageryLookupError(f"Mapillary response without an image list: {data!r}")

        best: Optional[Position] = None
        best_distance = float("inf")
        for image in images:
            point = self._image_point(image)
            if point is None:
                continue
            image_lat, image_lng = point
            distance = haversine_distance_m(lat, lng, image_lat, image_lng)
            # The bbox corners reach past the radius.
            if distance <= radius and distance < best_distance:
                best = Position(image_lat, image_lng, str(image.get("id")) if image.get("id") else None)
                best_distance = distance
        return best

    @staticmethod
    def _image_point(image: Any) -> Optional[tuple[float, float]]:
        """(lat, lng) of one Graph API image, or None when its geometry is unusable."""
        if not isinstance(image, dict):
            return None
        geometry = image.get("geometry")
        coordinates = geometry.get("coordinates") if isinstance(geometry, dict) else None
        if not isinstance(coordinates, (list, tuple)) or len(coordinates) < 2:
            return None
        try:
            image_lng, image_lat = float(coordinates[0]), float(coordinates[1])
        except (TypeError, ValueError):
            log.debug("Skipping Mapillary image %s with bad coordinates %r", image.get("id"), coordinates)
            return None
        if not (isfinite(image_lat) and isfinite(image_lng)):
            return None
        return image_lat, image_lng


def build_lookup(config: Dict[str, Any]) -> ImageryLookup:
    """Create the lookup named by ``IMAGERY_PROVIDER``."""
    provider = config.get("IMAGERY_PROVIDER", "google")
    timeout = float(config.get("IMAGERY_TIMEOUT_SECONDS", 10.0))
    if provider == "mapillary":
        return MapillaryLookup(config.get("MAPILLARY_ACCESS_TOKEN", ""), timeout=timeout)
    if provider == "google":
        return GoogleStreetViewLookup(config.get("GOOGLE_MAPS_API_KEY", ""), timeout=timeout)
    raise ValueError(f"Unknown imagery provider: {provider!r}")
