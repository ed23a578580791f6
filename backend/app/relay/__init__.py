"""Contact form relay: validation, formatting and delivery to Telegram."""

from .errors import error_response, register_error_handlers
from .router import router

__all__ = ["error_response", "register_error_handlers", "router"]
