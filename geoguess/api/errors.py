"""JSON error responses for ``/api`` routes."""

import logging

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from geoguess.api import api_bp
from geoguess.services.places import LoadError

log = logging.getLogger(__name__)


@api_bp.app_errorhandler(HTTPException)
def handle_http_error(exc: HTTPException):
    if not request.path.startswith("/api"):
        return exc
    error = (exc.name or "error").lower().replace(" ", "_")
    return jsonify({"error": error, "message": exc.description}), exc.code


@api_bp.errorhandler(LoadError)
def handle_load_error(exc: LoadError):
    return jsonify(exc.as_dict()), 503


@api_bp.app_errorhandler(Exception)
def handle_unexpected_error(exc: Exception):
    log.exception("Unhandled error on %s %s", request.method, request.path)
    if not request.path.startswith("/api"):
        return "Internal Server Error", 500
    return jsonify({"error": "internal_server_error", "message": "Unexpected server error."}), 500
