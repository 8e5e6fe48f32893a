"""Route registration for the Flask app."""

from __future__ import annotations

from flask import Flask

from .health import health_bp
from .picks import picks_bp
from .rooms import rooms_bp


def register_routes(app: Flask) -> None:
    app.register_blueprint(health_bp)
    app.register_blueprint(picks_bp)
    app.register_blueprint(rooms_bp)
