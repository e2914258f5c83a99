"""Health check endpoint."""

from fastapi import APIRouter

from ... import __version__
from ..deps import get_knowledge_base
from ..models import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Basic health check endpoint.

    Returns:
        HealthResponse with current status, version and knowledge base state.
    """
    knowledge_base = get_knowledge_base()
    return HealthResponse(
        status="healthy",
        version=__version__,
        knowledge_base=knowledge_base.state.value,
    )
