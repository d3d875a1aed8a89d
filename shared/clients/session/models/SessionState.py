"""Models exchanged with the messaging session manager."""

from datetime import datetime

from pydantic import BaseModel


class PairingChallenge(BaseModel):
    """Data the user needs to pair a messaging account with a bot.

    Attributes:
        qr_code:    Payload to render as QR code, None when the session is already paired.
        expires_at: When the challenge stops being accepted.
    """

    qr_code: str | None = None
    expires_at: datetime | None = None


class SessionState(BaseModel):
    """Live state of a bot's messaging session.

    Attributes:
        state:       "disconnected", "pairing" or "connected".
        is_active:   True only while connected.
        last_active: Last time the session was seen connected.
    """

    state: str = "disconnected"
    is_active: bool = False
    last_active: datetime | None = None
