"""HTML escaping for free-text form fields.

Only ``<`` and ``>`` are escaped: that is enough to stop user input from
opening tags inside a Telegram ``parse_mode=HTML`` message while leaving
everything else (quotes, ampersands, emoji) exactly as typed.
"""
from typing import Any


def sanitize(text: Any) -> str:
    """Escape ``<`` and ``>`` in *text*.

    Non-string or empty input returns an empty string.  Never raises.
    """
    if not isinstance(text, str) or not text:
        return ""
    return text.replace("<", "&lt;").replace(">", "&gt;")
