"""Flask application configuration and middleware setup."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from flask import Flask, g, request
from prometheus_client import Counter, Histogram
from werkzeug.middleware.proxy_fix import ProxyFix

if TYPE_CHECKING:
    from config import Config

# Prometheus metrics
REQUEST_LATENCY = Histogram(
    "http_request_latency_seconds",
    "HTTP request latency",
    ["method", "path"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)
REQUEST_ERRORS = Counter(
    "http_request_errors_total",
    "Total number of 5xx responses",
    ["method", "path"],
)

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; "
    "style-src 'self' 'unsafe-inline'; "
    "script-src 'self'; "
    "img-src 'self' data:"
)


def configure_app(app: Flask, config: Config, testing: bool = False) -> None:
    """Configure Flask application settings.

    Args:
        app: Flask application instance
        config: Application configuration
        testing: Whether running in testing mode
    """
    app.config.update(
        SECRET_KEY=config.secret_key,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SECURE=(config.environment != 'development'),
        SESSION_COOKIE_SAMESITE='Lax',
        TESTING=testing,
    )
    app.json.sort_keys = False

    # Warn if insecure defaults detected
    if config.environment == 'production':
        if config.admin_username == "admin" and config.admin_password == "123456":
            app.logger.warning("Insecure admin credentials detected in production")
        if config.secret_key.startswith("production_secret_key_must_be_changed"):
            app.logger.warning("SECRET_KEY is not set properly")


def setup_proxy(app: Flask, config: Config) -> None:
    """Trust one reverse proxy hop for the client address when configured."""
    if config.trust_proxy:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)


def setup_security_headers(app: Flask) -> None:
    """Setup security headers middleware.

    Args:
        app: Flask application instance
    """
    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses."""
        response.headers.setdefault('Content-Security-Policy', CONTENT_SECURITY_POLICY)
        response.headers.setdefault('X-Content-Type-Options', 'nosniff')
        response.headers.setdefault('X-Frame-Options', 'DENY')
        response.headers.setdefault('Referrer-Policy', 'same-origin')
        response.headers.setdefault('Cross-Origin-Resource-Policy', 'same-origin')
        return response


def setup_metrics(app: Flask) -> None:
    """Setup Prometheus metrics middleware.

    Args:
        app: Flask application instance
    """
    @app.before_request
    def before_metrics():
        """Store request start time."""
        g._metrics_start = time.perf_counter()

    @app.after_request
    def after_metrics(response):
        """Record request metrics."""
        start = g.pop('_metrics_start', None)
        path = getattr(request.url_rule, 'rule', None) or 'unmatched'
        if start is not None:
            duration = time.perf_counter() - start
            REQUEST_LATENCY.labels(method=request.method, path=path).observe(duration)
            response.headers['X-Response-Time'] = f"{duration:.3f}s"

        # Record 5xx errors
        if response.status_code >= 500:
            REQUEST_ERRORS.labels(method=request.method, path=path).inc()
        return response
