"""
Game service - wires catalog, imagery lookup, difficulty policy and sessions
together for the Flask application.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Mapping, Optional

from flask import Flask, current_app

from geoguess.services.coverage import CoverageResolver
from geoguess.services.imagery import ImageryLookup, build_lookup
from geoguess.services.places import LoadError, PlaceCatalog
from geoguess.services.presenter import CommandRecorder
from geoguess.services.rounds import RoundController
from geoguess.services.selection import DifficultyPolicy, build_policy
from geoguess.services.sessions import SessionRegistry

log = logging.getLogger(__name__)

EXTENSION_KEY = "geoguess"


class GameService:
    def __init__(
        self,
        config: Mapping[str, Any],
        lookup: ImageryLookup,
        *,
        rng: Optional[random.Random] = None,
    ):
        self.lookup = lookup
        self.radii = tuple(config.get("COVERAGE_RADII", (50, 150, 300, 600)))
        self.guess_mode = config.get("GUESS_MODE", "combined")
        self.policy: DifficultyPolicy = build_policy(
            config.get("DIFFICULTY_POLICY", "weighted"),
            low=int(config.get("SCORE_GATE_LOW", 3)),
            mid=int(config.get("SCORE_GATE_MID", 6)),
        )
        self.rng = rng
        self.catalog = PlaceCatalog(
            config["PLACES_SOURCE"],
            timeout=float(config.get("PLACES_TIMEOUT_SECONDS", 10.0)),
        )
        self.load_error: Optional[LoadError] = None
        self.sessions = SessionRegistry(self._new_controller, int(config.get("MAX_SESSIONS", 1000)))

    def load_catalog(self) -> None:
        """Load the catalog once. A failure is kept and reported on every request; no retry."""
        try:
            self.catalog.reload()
            self.load_error = None
        except LoadError as exc:
            log.error("Place catalog unavailable (%s): %s", exc.reason, exc.message)
            self.load_error = exc

    def _new_controller(self) -> RoundController:
        # One resolver per session: the coverage cache lives as long as the session.
        return RoundController(
            self.catalog.places,
            CoverageResolver(self.lookup, self.radii),
            self.policy,
            CommandRecorder(),
            guess_mode=self.guess_mode,
            rng=random.Random(self.rng.random()) if self.rng else None,
        )


def init_game(app: Flask, lookup: Optional[ImageryLookup] = None, rng: Optional[random.Random] = None) -> GameService:
    service = GameService(app.config, lookup or build_lookup(app.config), rng=rng)
    service.load_catalog()
    app.extensions[EXTENSION_KEY] = service
    return service


def get_game_service() -> GameService:
    return current_app.extensions[EXTENSION_KEY]
