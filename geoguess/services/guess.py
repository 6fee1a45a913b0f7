"""
Loose free-text guess matching.

A guess is correct when, after normalization, it *contains* the expected field.
"Paris, France" therefore matches city "Paris". Long guesses that happen to
contain the target also match; there is no edit-distance matching.
"""

from __future__ import annotations

import unicodedata
from typing import Any, Literal

from geoguess.services.places import Place

GuessMode = Literal["country", "place", "city", "combined"]
COUNTRY_MODE = "country"
PLACE_MODE = "place"
CITY_MODE = "city"
COMBINED_MODE = "combined"

# Mode names offered by the page's <select id="mode">.
_MODE_ALIASES = {
    "easy": COUNTRY_MODE,
    "hard": CITY_MODE,
}


def normalize(text: Any) -> str:
    """Lowercase, trim and strip diacritics: ``"  São Paulo "`` -> ``"sao paulo"``."""
    if text is None:
        return ""
    decomposed = unicodedata.normalize("NFKD", str(text))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold().strip()


def resolve_mode(mode: str | None) -> GuessMode:
    raw = (mode or "").strip().lower()
    raw = _MODE_ALIASES.get(raw, raw)
    if raw in (COUNTRY_MODE, PLACE_MODE, CITY_MODE):
        return raw  # type: ignore[return-value]
    return COMBINED_MODE


def expected_fields(place: Place, mode: str | None) -> list[str]:
    resolved = resolve_mode(mode)
    if resolved == COUNTRY_MODE:
        fields = [place.country]
    elif resolved == PLACE_MODE:
        fields = [place.name or place.city]
    elif resolved == CITY_MODE:
        fields = [place.name, place.city]
    else:
        fields = [place.name, place.city, place.country]
    return [normalized for normalized in (normalize(f) for f in fields) if normalized]


def is_correct(raw_guess: Any, place: Place, mode: str | None = COMBINED_MODE) -> bool:
    guess = normalize(raw_guess)
    if not guess:
        return False
    return any(field in guess for field in expected_fields(place, mode))
