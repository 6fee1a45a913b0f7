from flask import Flask
from geoguess.config import Config

def create_app(config_class=Config, imagery_lookup=None, rng=None):
    """Application factory function"""
    app = Flask(__name__)
    app.config.from_object(config_class)

    from geoguess.logging_config import configure_app_logging
    configure_app_logging(app)

    from geoguess.services.game import init_game
    init_game(app, lookup=imagery_lookup, rng=rng)

    # Register blueprints
    from geoguess.routes import health_bp
    from geoguess.api import api_bp
    app.register_blueprint(health_bp)
    app.register_blueprint(api_bp)

    return app
