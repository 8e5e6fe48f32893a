"""Health check and metrics blueprint."""

from __future__ import annotations

from flask import Blueprint, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from database.models import isoformat, utcnow
from utils.performance import monitor
from web.extensions import get_services


health_bp = Blueprint("health", __name__)


@health_bp.route("/")
def root():
    return jsonify({"status": "ok", "message": "Random Picker is running"})


@health_bp.route("/health")
def health_check():
    data = {
        "status": "ok",
        "timestamp": isoformat(utcnow()),
        "emailService": get_services().email_service,
        "host": monitor.gather_host_metrics(),
    }
    return jsonify(data)


@health_bp.route("/metrics")
def metrics():
    """Expose Prometheus metrics."""
    return generate_latest(), 200, {"Content-Type": CONTENT_TYPE_LATEST}
