import time

import openai

from models.completion import CompletionResponse, TokenUsage
from utils.logger import get_logger

from .base_client import BaseAIClient

logger = get_logger(__name__)


class OpenAIClient(BaseAIClient):
    """
    Async client for the OpenAI Chat Completions API.
    Responses are normalized to CompletionResponse; errors are returned, not raised.
    """

    def __init__(self, api_key: str, model_name: str = "gpt-3.5-turbo", client=None, **kwargs):
        """
        Initialize the OpenAI client.

        Args:
            api_key: The OpenAI API key
            model_name: The name of the model to use (default: gpt-3.5-turbo)
            client: Pre-built AsyncOpenAI-compatible client (tests pass a fake here)
            **kwargs: Additional keyword arguments
        """
        super().__init__(api_key, model_name=model_name, **kwargs)
        self.client = client or openai.AsyncOpenAI(api_key=api_key)
        self.model_name = model_name

    async def get_completion(self, prompt: str, **kwargs) -> CompletionResponse:
        """
        Send one user-role message and return the first generated choice.

        Args:
            prompt: The composed prompt
            **kwargs: Additional parameters for the API call
                - model: Override the default model for this call
                - temperature: Controls randomness (0.0 to 2.0)
                - max_tokens: Maximum number of tokens to generate

        Returns:
            CompletionResponse; ``text`` is empty when the response has no choices
        """
        request_id = self._generate_request_id()
        start_time = time.time()

        model = kwargs.get('model', self.model_name)
        temperature = kwargs.get('temperature', 0.3)
        max_tokens = kwargs.get('max_tokens', 300)

        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            latency_ms = self._measure_latency(start_time)
            error = self._normalize_error(e)
            logger.error(
                f"OpenAI completion failed: {error.details.get('exception_type')}",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "model": model,
                        "error_code": error.code,
                        "error_message": error.message,
                        "retryable": error.retryable,
                    }
                },
            )
            return self._create_error_response(
                request_id=request_id, error=error, latency_ms=latency_ms, model=model
            )

        latency_ms = self._measure_latency(start_time)
        choices = getattr(response, "choices", None) or []
        text = ""
        finish_reason = None
        if choices:
            message = getattr(choices[0], "message", None)
            text = (getattr(message, "content", None) or "") if message else ""
            finish_reason = self._normalize_finish_reason(getattr(choices[0], "finish_reason", None))

        usage = getattr(response, "usage", None)
        token_usage = TokenUsage(
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
            total_tokens=getattr(usage, "total_tokens", 0) or 0,
        )

        logger.info(
            "OpenAI completion successful",
            extra={
                "extra_fields": {
                    "request_id": request_id,
                    "model": model,
                    "latency_ms": latency_ms,
                    "tokens": token_usage.total_tokens,
                    "choices": len(choices),
                }
            },
        )

        return CompletionResponse(
            request_id=request_id,
            text=text,
            model=model,
            latency_ms=latency_ms,
            token_usage=token_usage,
            finish_reason=finish_reason,
        )
