from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypeVar

T = TypeVar("T")

Stage = Literal["auth", "sites", "lists", "items", "synthesis", "input"]

VALID_ERROR_CODES = {
    "not_authenticated",
    "interactive_auth_failed",
    "unauthorized",
    "transport",
    "bad_response",
    "synthesis_transport",
    "unknown",
}


@dataclass(frozen=True)
class StageError:
    code: str
    message: str
    stage: Stage
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.code not in VALID_ERROR_CODES:
            md = dict(self.details)
            md.setdefault("original_code", self.code)
            object.__setattr__(self, "details", md)
            object.__setattr__(self, "code", "unknown")

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "stage": self.stage,
            "retryable": self.retryable,
            "details": self.details,
        }


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """
    Outcome of one remote call in the pipeline.

    A successful call carries its data (possibly an empty list); a failed
    call carries a StageError and no data. Callers that only care about
    "anything to work with?" use ``is_empty``, which is true for both.
    """

    data: T | None = None
    error: StageError | None = None

    @classmethod
    def ok(cls, data: T) -> "StageResult[T]":
        return cls(data=data, error=None)

    @classmethod
    def fail(
        cls,
        *,
        code: str,
        message: str,
        stage: Stage,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
    ) -> "StageResult[T]":
        return cls(
            data=None,
            error=StageError(
                code=code,
                message=message,
                stage=stage,
                retryable=retryable,
                details=details or {},
            ),
        )

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def is_empty(self) -> bool:
        return self.is_error or not self.data
