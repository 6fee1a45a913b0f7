"""
Round controller: one game session's state machine.

    idle -> selecting -> resolving -> active -> resolved -> selecting -> ...
                     \-> unplayable (terminal)

Selection and coverage resolution happen inside :meth:`RoundController.start_round`;
score and round counters only change on the active -> resolved transition.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Dict, Literal, Optional, Sequence

from geoguess.services.coverage import CoverageResolver
from geoguess.services.guess import is_correct, normalize, resolve_mode
from geoguess.services.imagery import Position
from geoguess.services.places import Place
from geoguess.services.presenter import Presenter
from geoguess.services.selection import DifficultyPolicy, select_next

log = logging.getLogger(__name__)

Phase = Literal["idle", "selecting", "resolving", "active", "resolved", "unplayable"]
Outcome = Literal["correct", "incorrect", "gave_up"]

IDLE: Phase = "idle"
SELECTING: Phase = "selecting"
RESOLVING: Phase = "resolving"
ACTIVE: Phase = "active"
RESOLVED: Phase = "resolved"
UNPLAYABLE: Phase = "unplayable"

EMPTY_POOL_MESSAGE = "No valid places available. Update places.json."
NO_COVERAGE_MESSAGE = "No Street View coverage for remaining locations. Please update places.json."


@dataclass(frozen=True, slots=True)
class RoundResult:
    outcome: Outcome
    place: Place
    guess: str
    score: int
    rounds_played: int

    @property
    def correct(self) -> bool:
        return self.outcome == "correct"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome,
            "correct": self.correct,
            "guess": self.guess,
            "answer": self.place.answer(),
            "name": self.place.name,
            "city": self.place.city,
            "country": self.place.country,
            "score": self.score,
            "rounds_played": self.rounds_played,
        }


@dataclass
class SessionState:
    used_ids: set[str] = field(default_factory=set)
    current_place: Optional[Place] = None
    resolved_position: Optional[Position] = None
    score: int = 0
    rounds_played: int = 0
    phase: Phase = IDLE
    last_result: Optional[RoundResult] = None
    error: Optional[str] = None


class RoundController:
    """Owns one :class:`SessionState`; every mutation goes through its methods."""

    def __init__(
        self,
        catalog: Sequence[Place],
        resolver: CoverageResolver,
        policy: DifficultyPolicy,
        presenter: Optional[Presenter] = None,
        *,
        guess_mode: str = "combined",
        rng: Optional[random.Random] = None,
    ):
        self.catalog = tuple(catalog)
        self.resolver = resolver
        self.policy = policy
        self.presenter = presenter or Presenter()
        self.guess_mode = resolve_mode(guess_mode)
        self.rng = rng or random.Random()
        self.state = SessionState()
        # Serializes requests of one session so rounds never overlap.
        self.lock = Lock()

    # ------------------------------------------------------------------ rounds

    def start_round(self) -> Dict[str, Any]:
        """
        Select and resolve the next place. Only acts from ``idle`` or ``resolved``;
        from ``unplayable`` it re-reports the terminal error.
        """
        state = self.state
        if state.phase == UNPLAYABLE:
            self.presenter.show_status(state.error or EMPTY_POOL_MESSAGE, "error")
            return self.snapshot()
        if state.phase not in (IDLE, RESOLVED):
            log.debug("start_round ignored in phase %s", state.phase)
            return self.snapshot()

        previous_phase = state.phase
        used_before = set(state.used_ids)
        try:
            found = self._find_playable_place()
        except Exception:
            state.phase = previous_phase
            state.used_ids = used_before
            raise

        if found is None:
            return self.snapshot()

        place, position = found
        state.current_place = place
        state.resolved_position = position
        state.last_result = None
        state.phase = ACTIVE
        log.info("Round ready: %s at (%s, %s)", place.id, position.lat, position.lng)

        self.presenter.show_panorama(position, place.pov)
        self.presenter.show_status("Make a guess!", "info")
        self.presenter.set_input_enabled(True)
        return self.snapshot()

    next_round = start_round

    def _find_playable_place(self) -> Optional[tuple[Place, Position]]:
        state = self.state
        state.phase = SELECTING
        self.presenter.set_input_enabled(False)
        self.presenter.show_status("Loading a location…", "info")

        # Each pass over the pool tries every place at most once, so the cap
        # only trips once every remaining place has been checked for coverage.
        max_attempts = max(1, len(self.catalog))
        attempts = 0
        restarted = False

        while attempts < max_attempts:
            state.phase = SELECTING
            place = select_next(self.catalog, state.used_ids, self.policy, score=state.score, rng=self.rng)
            if place is None:
                if restarted:
                    self._become_unplayable(NO_COVERAGE_MESSAGE if attempts else EMPTY_POOL_MESSAGE)
                    return None
                log.info("All %s places used; restarting the pool", len(state.used_ids))
                state.used_ids.clear()
                self.presenter.show_status("All places seen. Restarting the pool…", "warn")
                restarted = True
                attempts = 0
                continue

            state.used_ids.add(place.id)
            state.phase = RESOLVING
            attempts += 1
            position = self.resolver.resolve(place)
            if position is not None:
                return place, position
            log.debug("Skipping %s: no coverage (attempt %s/%s)", place.id, attempts, max_attempts)

        self._become_unplayable(NO_COVERAGE_MESSAGE)
        return None

    def _become_unplayable(self, message: str) -> None:
        log.error("Game unplayable: %s", message)
        state = self.state
        state.phase = UNPLAYABLE
        state.error = message
        state.current_place = None
        state.resolved_position = None
        self.presenter.set_input_enabled(False)
        self.presenter.show_status(message, "error")

    # ----------------------------------------------------------------- guesses

    def submit_guess(self, text: Any, mode: Optional[str] = None) -> Optional[RoundResult]:
        """Score a guess for the active round. Returns None when nothing was scored."""
        state = self.state
        if state.phase != ACTIVE or state.current_place is None:
            return None

        guess = "" if text is None else str(text)
        if not normalize(guess):
            self.presenter.show_status("Type a guess first.", "warn")
            return None

        correct = is_correct(guess, state.current_place, mode or self.guess_mode)
        return self._finish_round("correct" if correct else "incorrect", guess)

    def give_up(self) -> Optional[RoundResult]:
        state = self.state
        if state.phase != ACTIVE or state.current_place is None:
            return None
        return self._finish_round("gave_up", "")

    def _finish_round(self, outcome: Outcome, guess: str) -> RoundResult:
        state = self.state
        place = state.current_place
        if place is None:
            raise RuntimeError(f"Cannot finish a round in phase {state.phase} without a current place")

        delta = 1 if outcome == "correct" else -1
        result = RoundResult(
            outcome=outcome,
            place=place,
            guess=guess,
            score=state.score + delta,
            rounds_played=state.rounds_played + 1,
        )
        state.score = result.score
        state.rounds_played = result.rounds_played
        state.last_result = result
        state.phase = RESOLVED
        log.info("Round %s: %s on %s (score=%s)", result.rounds_played, outcome, place.id, result.score)

        if outcome == "correct":
            self.presenter.show_status(f"Correct: {place.label()}", "success")
        elif outcome == "incorrect":
            self.presenter.show_status(f"Not quite. Answer: {place.answer()}", "warn")
        else:
            self.presenter.show_status(f"You gave up. Answer: {place.answer()}", "info")
        self.presenter.reveal(place)
        self.presenter.show_score(state.score, state.rounds_played)
        self.presenter.set_input_enabled(False)
        return result

    # ---------------------------------------------------------------- queries

    def snapshot(self) -> Dict[str, Any]:
        """JSON view of the session. The answer is only included once the round is resolved."""
        state = self.state
        position = state.resolved_position if state.phase in (ACTIVE, RESOLVED) else None
        pov = state.current_place.pov if position and state.current_place else None
        return {
            "phase": state.phase,
            "score": state.score,
            "score_text": f"Score: {state.score}",
            "rounds_played": state.rounds_played,
            "used_count": len(state.used_ids),
            "catalog_size": len(self.catalog),
            "position": position.as_dict() if position else None,
            "pov": pov.as_dict() if pov else None,
            "last_result": state.last_result.as_dict() if state.phase == RESOLVED and state.last_result else None,
            "error": state.error,
        }
