"""Game API — round lifecycle endpoints."""

import uuid
from typing import Any, Dict, Optional

from flask import jsonify, request, session
from werkzeug.exceptions import BadRequest

from geoguess.api import api_bp
from geoguess.services.game import get_game_service
from geoguess.services.rounds import RoundController, RoundResult

SESSION_KEY = "game_id"


def _session_id() -> str:
    game_id = session.get(SESSION_KEY)
    if not game_id:
        game_id = uuid.uuid4().hex
        session[SESSION_KEY] = game_id
    return game_id


def _controller() -> RoundController:
    """The caller's controller. Raises the catalog's LoadError when it failed to load."""
    service = get_game_service()
    if service.load_error is not None:
        raise service.load_error
    return service.sessions.get_or_create(_session_id())


def _game_response(controller: RoundController, result: Optional[RoundResult] = None):
    body: Dict[str, Any] = {
        "state": controller.snapshot(),
        "commands": controller.presenter.drain(),
    }
    if result is not None:
        body["result"] = result.as_dict()
    return jsonify(body)


def _json_body() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise BadRequest("Expected a JSON object.")
    return payload


@api_bp.get("/game/state")
def game_state():
    """Current session snapshot (the answer stays hidden while a round is active)."""
    controller = _controller()
    with controller.lock:
        return _game_response(controller)


@api_bp.post("/game/start")
@api_bp.post("/game/next")
def next_round():
    """Start the next round. Ignored while a round is still active."""
    controller = _controller()
    with controller.lock:
        controller.start_round()
        return _game_response(controller)


@api_bp.post("/game/guess")
def submit_guess():
    payload = _json_body()
    guess = payload.get("guess", "")
    mode = payload.get("mode")
    if not isinstance(guess, str) or (mode is not None and not isinstance(mode, str)):
        raise BadRequest("'guess' and 'mode' must be strings.")

    controller = _controller()
    with controller.lock:
        result = controller.submit_guess(guess, mode)
        return _game_response(controller, result)


@api_bp.post("/game/give-up")
def give_up():
    controller = _controller()
    with controller.lock:
        result = controller.give_up()
        return _game_response(controller, result)
