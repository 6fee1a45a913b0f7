from geoguess.services.imagery import ImageryLookupError, Position
from geoguess.services.places import Place


class StubLookup:
    """Imagery lookup answering from a table of place coordinate -> smallest radius with coverage."""

    def __init__(self, coverage=None, default_radius=50, errors=()):
        # coverage: {(lat, lng): radius or None}; None means no imagery at any radius.
        self.coverage = coverage or {}
        self.default_radius = default_radius
        self.errors = set(errors)
        self.calls = []

    def find_panorama(self, lat, lng, radius):
        self.calls.append((lat, lng, radius))
        if radius in self.errors:
            raise ImageryLookupError("boom")
        needed = self.coverage.get((lat, lng), self.default_radius)
        if needed is None or radius < needed:
            return None
        return Position(lat + 0.0001, lng + 0.0001, f"pano-{lat}-{lng}")


def make_place(place_id, **kwargs):
    defaults = {"lat": 10.0, "lng": 20.0}
    defaults.update(kwargs)
    return Place(id=place_id, **defaults)


SAMPLE_RECORDS = [
    {"id": "eiffel", "name": "Eiffel Tower", "city": "Paris", "country": "France", "lat": 48.8584, "lng": 2.2945, "difficulty": "easy"},
    {"id": "tokyo", "name": "Tokyo Tower", "city": "Tokyo", "country": "Japan", "lat": 35.6586, "lng": 139.7454, "difficulty": "medium"},
    {"id": "registan", "name": "Registan", "city": "Samarkand", "country": "Uzbekistan", "lat": 39.6547, "lng": 66.9758, "difficulty": "hard"},
]
