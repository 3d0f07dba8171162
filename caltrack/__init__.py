import logging

from flask import Flask
from flask_migrate import Migrate

from caltrack.extensions import db, cors
from caltrack.routes import register_routes


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object("config.Config")
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL") or "INFO").upper(), logging.INFO))

    # Initialize database
    db.init_app(app)

    # Initialize Flask-Migrate
    Migrate(app, db)

    # CORS Configuration
    cors.init_app(app,
                  origins=app.config.get("CORS_ORIGINS") or [],
                  supports_credentials=True,
                  allow_headers=["Content-Type", "Authorization"],
                  methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
                  expose_headers=["Content-Type", "Authorization"])

    # Make sure the models are registered on the metadata
    from caltrack import models  # noqa: F401

    register_routes(app)

    return app
