import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from geoguess.services.places import LoadError, PlaceCatalog, PointOfView, load_places, normalize_place


def _write(tmp_path, data):
    path = tmp_path / "places.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_normalize_fills_missing_fields():
    place = normalize_place({"lat": 48.8584, "lng": 2.2945, "city": " Paris "})
    assert place is not None
    assert place.name == ""
    assert place.city == "Paris"
    assert place.country == ""
    assert place.id == "place-48.8584-2.2945"
    assert place.difficulty is None
    assert place.weight is None
    assert place.pov is None


def test_normalize_synthesizes_id_from_name_and_coordinates():
    place = normalize_place({"name": "Big Ben", "lat": 51.5007, "lng": -0.1246})
    assert place.id == "Big Ben-51.5007--0.1246"


@pytest.mark.parametrize(
    "record",
    [
        {"lng": 2.0},
        {"lat": 1.0},
        {"lat": "48.85", "lng": 2.29},
        {"lat": float("nan"), "lng": 2.29},
        {"lat": 48.85, "lng": float("inf")},
        {"lat": True, "lng": 2.29},
        {"lat": None, "lng": None},
        "not a record",
    ],
)
def test_normalize_drops_records_without_finite_coordinates(record):
    assert normalize_place(record) is None


def test_normalize_difficulty_weight_and_pov():
    place = normalize_place(
        {"lat": 1, "lng": 2, "difficulty": "HARD", "weight": 3.7, "pov": {"heading": 90, "pitch": "x"}}
    )
    assert place.difficulty == "hard"
    assert place.weight == 3
    assert place.pov == PointOfView(heading=90.0, pitch=0.0)


def test_normalize_ignores_unknown_difficulty_and_clamps_small_weight():
    place = normalize_place({"lat": 1, "lng": 2, "difficulty": "brutal", "weight": 0.5})
    assert place.difficulty is None
    assert place.weight == 1


def test_place_label_and_answer():
    place = normalize_place({"lat": 1, "lng": 2, "city": "Paris", "country": "France"})
    assert place.label() == "Paris"
    assert place.answer() == "Paris, France"


def test_load_places_keeps_valid_records(tmp_path):
    path = _write(
        tmp_path,
        [
            {"id": "a", "name": "A", "lat": 1.0, "lng": 2.0},
            {"id": "b", "name": "B", "lat": "bad", "lng": 2.0},
            {"id": "c", "name": "C", "lat": -3.5, "lng": 4},
        ],
    )
    places = load_places(path)
    assert isinstance(places, tuple)
    assert [p.id for p in places] == ["a", "c"]


@pytest.mark.parametrize("data", [[], {"places": []}, "nope", [{"lat": "x", "lng": "y"}]])
def test_load_places_empty_catalog(tmp_path, data):
    with pytest.raises(LoadError) as excinfo:
        load_places(_write(tmp_path, data))
    assert excinfo.value.reason == "empty_catalog"


def test_load_places_missing_file(tmp_path):
    with pytest.raises(LoadError) as excinfo:
        load_places(tmp_path / "missing.json")
    assert excinfo.value.reason == "unreachable"


def test_load_places_malformed_json(tmp_path):
    path = tmp_path / "places.json"
    path.write_text("[{", encoding="utf-8")
    with pytest.raises(LoadError) as excinfo:
        load_places(path)
    assert excinfo.value.reason == "malformed"
    assert excinfo.value.as_dict()["error"] == "load_error"


@patch("geoguess.services.places.requests.get")
def test_load_places_from_url(mock_get):
    mock_resp = MagicMock()
    mock_resp.raise_for_status.return_value = None
    mock_resp.json.return_value = [{"id": "x", "lat": 1.0, "lng": 2.0}]
    mock_get.return_value = mock_resp

    places = load_places("https://example.com/places.json", timeout=3)

    assert [p.id for p in places] == ["x"]
    args, kwargs = mock_get.call_args
    assert args[0] == "https://example.com/places.json"
    assert "cb" in kwargs["params"]
    assert kwargs["timeout"] == 3


@patch("geoguess.services.places.requests.get")
def test_load_places_from_url_unreachable(mock_get):
    mock_get.side_effect = requests.ConnectionError("down")
    with pytest.raises(LoadError) as excinfo:
        load_places("http://example.com/places.json")
    assert excinfo.value.reason == "unreachable"


def test_catalog_reload_replaces_tuple(tmp_path):
    path = _write(tmp_path, [{"id": "a", "lat": 1.0, "lng": 2.0}])
    catalog = PlaceCatalog(path)
    first = catalog.reload()

    path.write_text(json.dumps([{"id": "b", "lat": 1.0, "lng": 2.0}, {"id": "c", "lat": 3.0, "lng": 4.0}]))
    second = catalog.reload()

    assert [p.id for p in first] == ["a"]
    assert [p.id for p in second] == ["b", "c"]
    assert catalog.places is second
    assert len(catalog) == 2


def test_catalog_reload_failure_keeps_previous(tmp_path):
    path = _write(tmp_path, [{"id": "a", "lat": 1.0, "lng": 2.0}])
    catalog = PlaceCatalog(path)
    catalog.reload()

    path.write_text("[]")
    with pytest.raises(LoadError):
        catalog.reload()
    assert [p.id for p in catalog.places] == ["a"]
