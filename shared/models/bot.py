"""Pydantic read model for bots."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class Bot(BaseModel):
    """A configured assistant identity owned by one user."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    description: str | None = None
    is_active: bool = False
    created_at: datetime
    last_active: datetime | None = None
