"""Pydantic model for grounded answers."""

from pydantic import BaseModel


class AnswerResult(BaseModel):
    """Reply for a chat surface. Always present, never an error."""

    text: str
