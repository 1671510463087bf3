"""
Models package for pipeline data and result objects.
"""

from .completion import CompletionResponse, TokenUsage
from .graph import Credential, ListDescriptor, ListRecord, SiteDescriptor
from .session import PipelineOutcome, QuerySession
from .stage_result import StageError, StageResult

__all__ = [
    "CompletionResponse",
    "Credential",
    "ListDescriptor",
    "ListRecord",
    "PipelineOutcome",
    "QuerySession",
    "SiteDescriptor",
    "StageError",
    "StageResult",
    "TokenUsage",
]
