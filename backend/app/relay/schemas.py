"""Request and response models for the relay endpoints."""
from typing import Optional

from pydantic import BaseModel


class ContactMessage(BaseModel):
    """JSON body of ``POST /send-message``.

    Fields are optional here so a missing field gets the relay's own
    400 message rather than a framework validation error.
    """
    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None


class RelayResponse(BaseModel):
    """Body of every relay response."""
    success: bool
    message: str
