"""
Place catalog loading.

The catalog is a JSON list of records shaped like::

    {"id": "eiffel", "name": "Eiffel Tower", "city": "Paris", "country": "France",
     "lat": 48.8584, "lng": 2.2945, "difficulty": "easy", "weight": 4,
     "pov": {"heading": 120, "pitch": 5}}

Only ``lat`` and ``lng`` are required. Records without finite coordinates are
dropped; everything else is normalized into an immutable :class:`Place`.
"""

from __future__ import annotations

import json
import logging
import math
import uuid
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Any, Literal, Optional

import requests

log = logging.getLogger(__name__)

Difficulty = Literal["easy", "medium", "hard"]
DIFFICULTIES: frozenset[str] = frozenset({"easy", "medium", "hard"})

LoadErrorReason = Literal["unreachable", "malformed", "empty_catalog"]


class LoadError(Exception):
    """The catalog could not be loaded. Terminal for the session."""

    def __init__(self, reason: LoadErrorReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message

    def as_dict(self) -> dict[str, str]:
        return {"error": "load_error", "reason": self.reason, "message": self.message}


@dataclass(frozen=True, slots=True)
class PointOfView:
    heading: float = 0.0
    pitch: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {"heading": self.heading, "pitch": self.pitch}


@dataclass(frozen=True, slots=True)
class Place:
    """One candidate location. Immutable once loaded."""

    id: str
    lat: float
    lng: float
    name: str = ""
    city: str = ""
    country: str = ""
    difficulty: Optional[Difficulty] = None
    weight: Optional[int] = None
    pov: Optional[PointOfView] = None

    def label(self) -> str:
        """Short display name: the first non-empty of name, city, country."""
        return self.name or self.city or self.country

    def answer(self) -> str:
        """Full reveal text, e.g. ``"Eiffel Tower, Paris, France"``."""
        return ", ".join(p for p in (self.name, self.city, self.country) if p)

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "city": self.city,
            "country": self.country,
            "lat": self.lat,
            "lng": self.lng,
            "difficulty": self.difficulty,
            "weight": self.weight,
            "pov": self.pov.as_dict() if self.pov else None,
        }


def _clean_str(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _finite_number(value: Any) -> Optional[float]:
    # bool is an int subclass, and numeric strings are not coordinates.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def _normalize_weight(value: Any) -> Optional[int]:
    number = _finite_number(value)
    if number is None:
        return None
    # Explicit weights are floored with a minimum of 1, never dropped.
    return max(1, math.floor(number))


def _normalize_difficulty(value: Any) -> Optional[Difficulty]:
    raw = _clean_str(value).lower()
    return raw if raw in DIFFICULTIES else None  # type: ignore[return-value]


def _normalize_pov(value: Any) -> Optional[PointOfView]:
    if not isinstance(value, dict):
        return None
    return PointOfView(
        heading=_finite_number(value.get("heading")) or 0.0,
        pitch=_finite_number(value.get("pitch")) or 0.0,
    )


def normalize_place(record: Any) -> Optional[Place]:
    """Build a :class:`Place` from one raw record, or return None if it has no usable coordinates."""
    if not isinstance(record, dict):
        log.debug("Dropping non-object catalog record: %r", record)
        return None

    lat = _finite_number(record.get("lat"))
    lng = _finite_number(record.get("lng"))
    if lat is None or lng is None:
        log.debug("Dropping catalog record without finite lat/lng: %r", record)
        return None

    name = _clean_str(record.get("name"))
    # Two places sharing name and coordinates get the same id; not repaired here.
    place_id = _clean_str(record.get("id")) or f"{name or 'place'}-{record['lat']}-{record['lng']}"

    return Place(
        id=place_id,
        lat=lat,
        lng=lng,
        name=name,
        city=_clean_str(record.get("city")),
        country=_clean_str(record.get("country")),
        difficulty=_normalize_difficulty(record.get("difficulty")),
        weight=_normalize_weight(record.get("weight")),
        pov=_normalize_pov(record.get("pov")),
    )


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _fetch_raw(source: str | Path, timeout: float) -> Any:
    source_str = str(source)
    if _is_url(source_str):
        try:
            # Cache-busting parameter so a freshly edited catalog is always picked up.
            resp = requests.get(source_str, params={"cb": uuid.uuid4().hex[:8]}, timeout=timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            log.error("Catalog fetch from %s failed: %s", source_str, exc)
            raise LoadError("unreachable", f"Error loading places: {exc}") from exc
        try:
            return resp.json()
        except ValueError as exc:
            raise LoadError("malformed", f"Error loading places: invalid JSON ({exc})") from exc

    path = Path(source_str)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        log.error("Catalog file %s could not be read: %s", path, exc)
        raise LoadError("unreachable", f"Error loading places: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise LoadError("malformed", f"Error loading places: invalid JSON ({exc})") from exc


def load_places(source: str | Path, timeout: float = 10.0) -> tuple[Place, ...]:
    """
    Load and validate the catalog from a file path or an http(s) URL.

    Raises :class:`LoadError` when the source is unreachable, is not JSON, is not
    a list, or holds no usable record.
    """
    data = _fetch_raw(source, timeout)
    if not isinstance(data, list) or not data:
        raise LoadError("empty_catalog", "Error loading places: catalog is empty or not a list")

    places = tuple(p for p in (normalize_place(record) for record in data) if p is not None)
    dropped = len(data) - len(places)
    if dropped:
        log.warning("Dropped %s catalog records without usable coordinates", dropped)
    if not places:
        raise LoadError("empty_catalog", "Error loading places: no record has valid coordinates")

    duplicates = [place_id for place_id, count in Counter(p.id for p in places).items() if count > 1]
    if duplicates:
        log.warning("Catalog has duplicate place ids: %s", ", ".join(sorted(duplicates)))

    log.info("Loaded %s places from %s", len(places), source)
    return places


class PlaceCatalog:
    """Holds the current catalog. Reloading swaps the whole tuple."""

    def __init__(self, source: str | Path, timeout: float = 10.0):
        self.source = source
        self.timeout = timeout
        self._places: tuple[Place, ...] = ()
        self._lock = Lock()

    @property
    def places(self) -> tuple[Place, ...]:
        return self._places

    def reload(self) -> tuple[Place, ...]:
        places = load_places(self.source, self.timeout)
        with self._lock:
            self._places = places
        return places

    def __len__(self) -> int:
        return len(self._places)
