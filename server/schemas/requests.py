"""Pydantic request models for FastAPI endpoints."""

from pydantic import BaseModel, Field


class AskRequest(BaseModel):
    # blank questions are answered with a prompt to enter one, not a 422
    question: str = Field("", max_length=2000)
