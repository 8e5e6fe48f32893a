"""Access to the per-app service context from request handlers."""

from __future__ import annotations

from flask import Flask, current_app

from services.context import ServiceContext

SERVICES_KEY = "SERVICES"


def init_services(app: Flask, services: ServiceContext) -> None:
    app.config[SERVICES_KEY] = services


def get_services() -> ServiceContext:
    try:
        return current_app.config[SERVICES_KEY]
    except KeyError:
        raise RuntimeError("Services are not initialized for this app") from None
