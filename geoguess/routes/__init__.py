"""Routes package - Blueprint imports and exports"""
from geoguess.routes.health import health_bp

__all__ = ['health_bp']
