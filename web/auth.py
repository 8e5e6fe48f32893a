"""Operator authentication for administrative endpoints.

Resetting the ledger and reading the picks log require HTTP Basic
credentials matching ``ADMIN_USERNAME``/``ADMIN_PASSWORD``. The API is
otherwise anonymous: callers are told apart only by network address.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from flask import Flask, Request, jsonify
from flask_login import LoginManager, UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass
class AdminCredentials:
    """Operator credentials; ``password_hash`` may be given in plain text."""
    username: str
    password_hash: str


class AdminUser(UserMixin):
    """Represents an authenticated operator."""
    def __init__(self, username: str) -> None:
        self.id = username
        self.username = username


def init_login_manager(app: Flask, credentials: AdminCredentials) -> AdminCredentials:
    """Attach a request-based Flask-Login manager to the app.

    Args:
        app: Flask application instance
        credentials: Operator credentials

    Returns:
        Credentials with the password hashed
    """
    # Check if password needs to be hashed (only if it's not already hashed)
    if not credentials.password_hash.startswith(("pbkdf2:", "scrypt:")):
        credentials = AdminCredentials(
            username=credentials.username,
            password_hash=generate_password_hash(credentials.password_hash),
        )

    login_manager = LoginManager()
    login_manager.init_app(app)

    @login_manager.request_loader
    def load_user_from_request(request: Request) -> Optional[AdminUser]:
        auth = request.authorization
        if auth is None or auth.type != "basic":
            return None
        if validate_credentials(credentials, auth.username or "", auth.password or ""):
            return AdminUser(username=credentials.username)
        logger.warning("Rejected operator credentials for '%s' from %s", auth.username, request.remote_addr)
        return None

    @login_manager.unauthorized_handler
    def unauthorized():
        response = jsonify(AuthenticationError().to_dict())
        response.status_code = AuthenticationError.http_status
        response.headers["WWW-Authenticate"] = 'Basic realm="picker-admin"'
        return response

    logger.info("Operator endpoints enabled for username '%s'", credentials.username)
    return credentials


def validate_credentials(credentials: AdminCredentials, username: str, password: str) -> bool:
    """Validate operator credentials.

    Args:
        credentials: Admin credentials to validate against
        username: Username provided by user
        password: Password provided by user

    Returns:
        True if credentials are valid, False otherwise
    """
    if username.lower() != credentials.username.lower():
        return False
    return check_password_hash(credentials.password_hash, password)
