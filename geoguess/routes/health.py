import logging
from flask import Blueprint, jsonify

from geoguess.services.game import get_game_service

health_bp = Blueprint("health", __name__)
log = logging.getLogger(__name__)


@health_bp.get("/health")
def health():
    """Health check; also reports whether the place catalog loaded."""
    service = get_game_service()
    log.debug("health check")
    return jsonify(
        status="ok",
        catalog_loaded=service.load_error is None,
        places=len(service.catalog),
    )
