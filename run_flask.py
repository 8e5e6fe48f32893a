"""Flask server runner using environment variables."""

from __future__ import annotations

from pathlib import Path

from config import load_config
from core import setup_logger, get_logger
from web import create_app

logger = get_logger(__name__)


def main() -> None:
    # Load configuration
    config = load_config()

    setup_logger(
        level=config.log_level,
        log_file=str(Path(config.log_folder) / "picker.log"),
        colored=True,
    )

    # Create Flask application
    app = create_app(config)

    logger.info("Server running on http://localhost:%s", config.web_port)
    logger.info("Random Picker with email support (email service: %s)", app.config["SERVICES"].email_service)

    # Run Flask server; threaded so requests are served in parallel
    app.run(host=config.web_host, port=config.web_port, debug=config.debug, threaded=True)


if __name__ == "__main__":
    main()
