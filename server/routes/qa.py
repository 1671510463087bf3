"""Login and ask endpoints: the two user triggers of the Q&A page."""

from fastapi import APIRouter, Depends, Request

from orchestrator.core import QueryOrchestrator
from server.dependencies import get_orchestrator
from server.schemas.requests import AskRequest
from server.schemas.responses import AskResponseDTO, ErrorDTO, LoginResponseDTO
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Q&A"])


@router.post("/login", response_model=LoginResponseDTO)
async def login(
    request: Request,
    orchestrator: QueryOrchestrator = Depends(get_orchestrator),
):
    """
    Run the interactive sign-in flow and start a new session.

    A failed sign-in is reported in the body (signed_in=false), not as an HTTP error.
    """
    request_id = getattr(request.state, "request_id", "unknown")
    result = await orchestrator.login()

    if result.is_error:
        logger.warning(
            "Login failed",
            extra={"extra_fields": {"request_id": request_id, "error": result.error.to_dict()}},
        )
        return LoginResponseDTO(signed_in=False, error=ErrorDTO.from_stage_error(result.error))

    session = result.data
    return LoginResponseDTO(
        signed_in=True,
        account=session.account_username,
        session_id=session.session_id,
    )


@router.post("/ask", response_model=AskResponseDTO)
async def ask(
    body: AskRequest,
    request: Request,
    orchestrator: QueryOrchestrator = Depends(get_orchestrator),
):
    """Answer a question from the first list of the first site."""
    request_id = getattr(request.state, "request_id", "unknown")
    outcome = await orchestrator.run(body.question)

    logger.info(
        "Ask handled",
        extra={
            "extra_fields": {
                "request_id": request_id,
                "stage": outcome.stage,
                "failure_code": outcome.failure_code,
            }
        },
    )
    return AskResponseDTO.from_outcome(outcome, request_id=request_id)
