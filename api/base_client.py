import time
import uuid
from abc import ABC, abstractmethod
from typing import Any

from models.completion import CompletionResponse, FinishReason
from models.stage_result import StageError


class BaseAIClient(ABC):
    """
    Abstract base class for completion clients.
    Concrete clients return a CompletionResponse and never raise from get_completion().
    """

    @abstractmethod
    def __init__(self, api_key: str, **kwargs):
        """
        Initialize the AI client.

        Args:
            api_key: API key for the AI service
            **kwargs: Additional model-specific parameters
        """
        self.api_key = api_key
        self.model_name = kwargs.get('model_name')

    @abstractmethod
    async def get_completion(self, prompt: str, **kwargs) -> CompletionResponse:
        """
        Get a completion for a single user-role prompt.

        Args:
            prompt: The input prompt to send to the model
            **kwargs: Additional parameters for the API call
                (model, temperature, max_tokens)

        Returns:
            CompletionResponse, with ``error`` set instead of raising
        """
        pass

    @staticmethod
    def _generate_request_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def _measure_latency(start_time: float) -> int:
        return int((time.time() - start_time) * 1000)

    @staticmethod
    def _normalize_finish_reason(reason: Any) -> FinishReason:
        if reason is None:
            return None
        reason = str(reason).lower()
        if reason == "stop":
            return "stop"
        if reason == "length":
            return "length"
        if reason == "content_filter":
            return "content_filter"
        return reason

    def _normalize_error(self, exc: Exception) -> StageError:
        """
        Map any exception from the provider SDK to a synthesis StageError.
        """
        name = type(exc).__name__
        message = str(exc) or name
        retryable = any(k in name for k in ("Timeout", "RateLimit", "Connection", "InternalServer"))
        details: dict[str, Any] = {"exception_type": name}
        status_code = getattr(exc, "status_code", None)
        if status_code is not None:
            details["status_code"] = status_code
        return StageError(
            code="synthesis_transport",
            message=message,
            stage="synthesis",
            retryable=retryable,
            details=details,
        )

    def _create_error_response(
        self, *, request_id: str, error: StageError, latency_ms: int, model: str
    ) -> CompletionResponse:
        return CompletionResponse(
            request_id=request_id,
            text="",
            model=model,
            latency_ms=latency_ms,
            finish_reason="error",
            error=error,
        )
