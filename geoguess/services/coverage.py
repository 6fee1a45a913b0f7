"""Nearest-coverage search: widen the radius until a panorama turns up."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from geoguess.services.imagery import ImageryLookup, ImageryLookupError, Position
from geoguess.services.places import Place

log = logging.getLogger(__name__)

DEFAULT_RADII: tuple[int, ...] = (50, 150, 300, 600)


class CoverageResolver:
    """
    Resolves a place to the closest panorama position, caching the answer per
    place id for the lifetime of the resolver (one game session).
    """

    def __init__(self, lookup: ImageryLookup, radii: Sequence[int] = DEFAULT_RADII):
        radii = tuple(int(r) for r in radii)
        if not radii:
            raise ValueError("At least one search radius is required")
        if any(r <= 0 for r in radii):
            raise ValueError(f"Search radii must be positive: {radii}")
        if any(b < a for a, b in zip(radii, radii[1:])):
            raise ValueError(f"Search radii must be non-decreasing: {radii}")
        self.lookup = lookup
        self.radii = radii
        self._cache: Dict[str, Optional[Position]] = {}

    def find_nearest(self, lat: float, lng: float) -> Optional[Position]:
        """Try each radius in order and return the first hit, or None once all radii miss."""
        for radius in self.radii:
            log.debug("Coverage lookup at (%s, %s) radius=%sm", lat, lng, radius)
            try:
                position = self.lookup.find_panorama(lat, lng, radius)
            except ImageryLookupError as exc:
                log.debug("Coverage lookup failed at radius=%sm: %s", radius, exc)
                continue
            if position is not None:
                return position
        return None

    def resolve(self, place: Place) -> Optional[Position]:
        if place.id in self._cache:
            return self._cache[place.id]

        position = self.find_nearest(place.lat, place.lng)
        if position is None:
            log.info("No coverage within %sm of %s (%s)", self.radii[-1], place.id, place.label())
        self._cache[place.id] = position
        return position

    def clear_cache(self) -> None:
        self._cache.clear()
