"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorDTO(BaseModel):
    code: str
    message: str
    stage: str
    retryable: bool
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_stage_error(cls, error):
        if error is None:
            return None
        return cls(
            code=error.code,
            message=error.message,
            stage=error.stage,
            retryable=error.retryable,
            details=error.details,
        )


class AskResponseDTO(BaseModel):
    request_id: str
    answer: str
    stage: str
    completed: bool
    failure_code: str | None = None

    @classmethod
    def from_outcome(cls, outcome, request_id: str):
        """Convert PipelineOutcome to DTO."""
        return cls(
            request_id=request_id,
            answer=outcome.answer,
            stage=outcome.stage,
            completed=outcome.completed,
            failure_code=outcome.failure_code,
        )


class LoginResponseDTO(BaseModel):
    signed_in: bool
    account: str | None = None
    session_id: str | None = None
    error: ErrorDTO | None = None


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    synthesis_mode: str
    version: str = "1.0.0"
