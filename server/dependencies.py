"""FastAPI dependencies for configuration and orchestrator access."""

from fastapi import Depends, HTTPException, status

from config.config import Config
from utils.logger import get_logger

logger = get_logger(__name__)


def get_config() -> Config:
    """Dependency to get the configuration (read once per process)."""
    if not hasattr(get_config, "_instance"):
        get_config._instance = Config()
    return get_config._instance


def get_orchestrator(config: Config = Depends(get_config)):
    """Dependency to get orchestrator instance (singleton pattern)."""
    from orchestrator.core import QueryOrchestrator

    if not hasattr(get_orchestrator, "_instance"):
        try:
            get_orchestrator._instance = QueryOrchestrator.from_config(config)
        except ValueError as e:
            logger.error(
                "Orchestrator not configured",
                extra={"extra_fields": {"error": str(e)}},
            )
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=str(e),
            )
    return get_orchestrator._instance
