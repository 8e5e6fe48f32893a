"""Flask application factory with security defaults."""

from __future__ import annotations

from typing import Optional

from flask import Flask

from config import Config, load_config
from services.context import ServiceContext, build_services
from web.auth import AdminCredentials, init_login_manager
from web.config_middleware import (
    configure_app,
    setup_metrics,
    setup_proxy,
    setup_security_headers,
)
from web.errors import register_error_handlers
from web.extensions import init_services
from web.rate_limit import RateLimiter
from web.routes import register_routes


def create_app(
    config: Optional[Config] = None,
    services: Optional[ServiceContext] = None,
    testing: bool = False,
) -> Flask:
    """Create and configure Flask application.

    Args:
        config: Application configuration, loaded from the environment if omitted
        services: Pre-built service context, built from ``config`` if omitted
        testing: Whether running in testing mode

    Returns:
        Configured Flask application
    """
    config = config or load_config()
    services = services or build_services(config)

    app = Flask(__name__)

    # Configure application
    configure_app(app, config, testing)
    setup_proxy(app, config)
    init_services(app, services)

    # Setup middleware
    setup_metrics(app)
    RateLimiter(
        max_requests=config.rate_limit_max,
        window_seconds=config.rate_limit_window,
    ).init_app(app)
    setup_security_headers(app)

    # Initialize authentication
    init_login_manager(
        app,
        AdminCredentials(username=config.admin_username, password_hash=config.admin_password),
    )

    # Register routes
    register_routes(app)
    register_error_handlers(app)

    return app
