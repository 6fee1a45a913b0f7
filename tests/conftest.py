import json
import random

import pytest

from geoguess import create_app
from geoguess.config import TestingConfig
from tests.helpers import SAMPLE_RECORDS, StubLookup


@pytest.fixture
def stub_lookup():
    return StubLookup()


@pytest.fixture
def places_file(tmp_path):
    path = tmp_path / "places.json"
    path.write_text(json.dumps(SAMPLE_RECORDS), encoding="utf-8")
    return path


@pytest.fixture
def app(places_file, stub_lookup):
    class _Config(TestingConfig):
        PLACES_SOURCE = str(places_file)

    return create_app(_Config, imagery_lookup=stub_lookup, rng=random.Random(7))


@pytest.fixture
def client(app):
    return app.test_client()
