"""Pydantic models for API requests and responses."""

from typing import Any

from pydantic import AliasChoices, BaseModel, Field, HttpUrl

from ..agent.rag_chain import MAX_QUESTION_LENGTH
from ..domain.models import QueryType


class ChatRequest(BaseModel):
    """Request model for asking the fitness coach a question."""

    question: str = Field(
        ...,
        min_length=1,
        max_length=MAX_QUESTION_LENGTH,
        validation_alias=AliasChoices("question", "message"),
        description="The workout, form or nutrition question to ask",
        json_schema_extra={"example": "How do I do a proper squat?"},
    )
    type: QueryType = Field(
        default=QueryType.GENERAL,
        description="Retrieval profile: general, workout, form or nutrition",
    )


class SourceInfo(BaseModel):
    """Information about a source article."""

    url: str = Field(..., description="Article URL")
    title: str = Field(..., description="Article title")
    relevance_score: float | None = Field(None, description="Cosine similarity from retrieval")


class ChatResponse(BaseModel):
    """Response model for an answered question."""

    answer: str = Field(..., description="The AI-generated answer")
    sources: list[SourceInfo] = Field(
        default_factory=list,
        description="Sources used to generate the answer, most relevant first",
    )
    type: QueryType = Field(..., description="Retrieval profile used")


class StatusResponse(BaseModel):
    """Response model for knowledge base status."""

    is_ready: bool
    state: str
    index_info: dict[str, Any]
    message: str


class SourcesRequest(BaseModel):
    """Request model for adding article URLs."""

    urls: list[HttpUrl] = Field(..., min_length=1, description="Article URLs to crawl")


class RebuildRequest(BaseModel):
    """Request model for rebuilding the knowledge base."""

    urls: list[HttpUrl] | None = Field(
        None, description="Custom URLs to crawl instead of the default sources"
    )


class KnowledgeUpdateResponse(BaseModel):
    """Response model for knowledge base mutations."""

    status: str
    documents: int = Field(..., description="Number of documents indexed or added")
    message: str


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")
    knowledge_base: str = Field(..., description="Knowledge base lifecycle state")
