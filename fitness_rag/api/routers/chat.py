"""Chat endpoints for asking the fitness coach."""

import logging

from fastapi import APIRouter

from ..deps import get_knowledge_base
from ..models import ChatRequest, ChatResponse, SourceInfo, StatusResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["chat"])


@router.post("/rag-chat", response_model=ChatResponse)
def rag_chat(request: ChatRequest) -> ChatResponse:
    """Answer a fitness question from the knowledge base.

    Errors (blank question, knowledge base not ready, model failures) are
    rendered by the application's exception handlers.
    """
    knowledge_base = get_knowledge_base()
    response = knowledge_base.answer(request.question, request.type)

    return ChatResponse(
        answer=response.answer,
        sources=[
            SourceInfo(url=s.url, title=s.title, relevance_score=s.relevance_score)
            for s in response.sources
        ],
        type=request.type,
    )


@router.get("/rag-chat/status", response_model=StatusResponse)
def rag_chat_status() -> StatusResponse:
    """Report whether the knowledge base can answer questions."""
    status = get_knowledge_base().status()
    message = (
        "Knowledge base is ready"
        if status["is_ready"]
        else "Knowledge base is not initialized"
    )
    return StatusResponse(
        is_ready=status["is_ready"],
        state=status["state"],
        index_info=status["index_info"],
        message=message,
    )
