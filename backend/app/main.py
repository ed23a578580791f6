"""Contact Relay Backend Application.

Accepts contact-form submissions and file uploads from the website
frontend and forwards them to a Telegram chat through the Bot API.

Modules:
    - factory: create_app() and the startup/shutdown lifespan
    - relay: the /send-message and /send-file endpoints and error mapping
    - uploads: temp-directory storage for multipart uploads + path guard
    - notifier: Telegram Bot API client
    - sanitizer: HTML escaping of free-text fields
    - config: YAML + environment configuration

Run with any ASGI server, e.g. ``uvicorn app.main:app``.
"""
import logging

from app.factory import create_app

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# httpx logs every request URL at INFO, and Bot API URLs embed the token.
for _noisy in (
    "httpx",
    "httpcore",
    "httpcore.http11",
    "httpcore.connection",
):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

app = create_app()
