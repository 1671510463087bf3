"""Liveness endpoint; reports the configured synthesis mode without touching remote services."""

from datetime import datetime

from fastapi import APIRouter, Depends

from config.config import Config
from server.dependencies import get_config
from server.schemas.responses import HealthResponseDTO

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponseDTO)
async def health_check(config: Config = Depends(get_config)):
    return HealthResponseDTO(
        status="healthy",
        timestamp=datetime.utcnow().isoformat() + "Z",
        synthesis_mode=config.SYNTHESIS_MODE,
    )
