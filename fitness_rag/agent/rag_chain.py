"""Retrieval-augmented answerer for workout questions."""

import logging
from typing import Any

from ..common.exceptions import EmptyQueryError, QueryTooLongError
from ..common.utils import normalize_text, truncate
from ..domain.models import QueryType, RAGResponse, ScoredRecord, SourceReference
from ..ports.llm import LLMPort
from ..rag.knowledge_index import KnowledgeIndex
from .prompts import (
    ANSWER_PROMPT,
    COACH_SYSTEM_PROMPT,
    FORM_QUERY,
    NO_CONTEXT,
    NO_CONTEXT_ANSWER,
    NUTRITION_QUERY,
    WORKOUT_QUERY,
)

logger = logging.getLogger(__name__)

DEFAULT_K = 4
WORKOUT_K = 6
MAX_QUESTION_LENGTH = 1000


def _validate_question(question: str) -> str:
    """Normalize a user question, rejecting blank or over-long input."""
    question = normalize_text(question)
    if not question:
        raise EmptyQueryError("Question cannot be empty")
    if len(question) > MAX_QUESTION_LENGTH:
        raise QueryTooLongError(
            f"Question exceeds {MAX_QUESTION_LENGTH} characters",
            context={"length": len(question), "max_length": MAX_QUESTION_LENGTH},
        )
    return question


def _rewrite(template: str, query: str) -> str:
    """Expand a retrieval query template around a validated question."""
    return template.format(query=_validate_question(query))


def build_context(hits: list[ScoredRecord], snippet_chars: int) -> str:
    """Render search hits as numbered source blocks for the prompt.

    Args:
        hits: Search hits in rank order.
        snippet_chars: Characters of record text kept per block.

    Returns:
        Blocks separated by blank lines, each ending with a ``---`` divider.
    """
    blocks = []
    for i, hit in enumerate(hits, 1):
        blocks.append(
            f"Source {i} (Relevance: {hit.score * 100:.1f}%):\n"
            f"Title: {hit.record.metadata.title}\n"
            f"Content: {truncate(hit.record.text, snippet_chars)}\n"
            "\n---"
        )
    return "\n\n".join(blocks)


class WorkoutRAGChain:
    """Answers fitness questions from the knowledge index through an LLM."""

    def __init__(
        self,
        index: KnowledgeIndex,
        llm: LLMPort,
        temperature: float = 0.1,
        max_output_tokens: int = 300,
        snippet_chars: int = 400,
        timeout: float | None = None,
        default_k: int = DEFAULT_K,
    ) -> None:
        """Initialize the answerer.

        Args:
            index: Knowledge index to retrieve from.
            llm: Language model used to write the answer.
            temperature: Sampling temperature for the model.
            max_output_tokens: Token ceiling for each answer.
            snippet_chars: Characters of each hit included in the context.
            timeout: Default deadline in seconds for the model call.
            default_k: Hits retrieved for general, form and nutrition questions.
        """
        self.index = index
        self.llm = llm
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.snippet_chars = snippet_chars
        self.timeout = timeout
        self.default_k = default_k

    def answer(
        self, question: str, k: int | None = None, timeout: float | None = None
    ) -> RAGResponse:
        """Retrieve context for ``question`` and generate a short answer.

        The model is not called when retrieval finds nothing; a fixed
        fallback answer is returned instead.

        Args:
            question: User question.
            k: Maximum number of hits used as context, ``default_k`` when omitted.
            timeout: Deadline in seconds for the model call, overriding the default.

        Returns:
            The answer with its ordered sources and the rendered context.

        Raises:
            EmptyQueryError: ``question`` is blank.
            QueryTooLongError: ``question`` is longer than ``MAX_QUESTION_LENGTH``.
            NotInitializedError: The index has not been built or loaded.
        """
        return self._generate(_validate_question(question), k, timeout)

    def _generate(self, question: str, k: int | None, timeout: float | None) -> RAGResponse:
        hits = self.index.search(question, self.default_k if k is None else k)
        if not hits:
            logger.info("No context found for question, returning fallback answer")
            return RAGResponse(answer=NO_CONTEXT_ANSWER, sources=[], context=NO_CONTEXT)

        context = build_context(hits, self.snippet_chars)
        answer = self.llm.generate(
            ANSWER_PROMPT.format(context=context, question=question),
            system_prompt=COACH_SYSTEM_PROMPT,
            temperature=self.temperature,
            max_tokens=self.max_output_tokens,
            timeout=timeout if timeout is not None else self.timeout,
        )

        sources = [
            SourceReference(
                url=hit.record.metadata.url,
                title=hit.record.metadata.title,
                relevance_score=hit.score,
            )
            for hit in hits
        ]
        return RAGResponse(answer=answer, sources=sources, context=context)

    def workout_suggestions(self, query: str, timeout: float | None = None) -> RAGResponse:
        return self._generate(_rewrite(WORKOUT_QUERY, query), WORKOUT_K, timeout)

    def exercise_form(self, exercise_name: str, timeout: float | None = None) -> RAGResponse:
        return self._generate(_rewrite(FORM_QUERY, exercise_name), self.default_k, timeout)

    def nutrition_advice(self, query: str, timeout: float | None = None) -> RAGResponse:
        return self._generate(_rewrite(NUTRITION_QUERY, query), self.default_k, timeout)

    def general_advice(self, query: str, timeout: float | None = None) -> RAGResponse:
        return self.answer(query, k=self.default_k, timeout=timeout)

    def answer_query(
        self, question: str, query_type: QueryType, timeout: float | None = None
    ) -> RAGResponse:
        """Route ``question`` to the specialisation for ``query_type``."""
        handlers = {
            QueryType.WORKOUT: self.workout_suggestions,
            QueryType.FORM: self.exercise_form,
            QueryType.NUTRITION: self.nutrition_advice,
            QueryType.GENERAL: self.general_advice,
        }
        return handlers[query_type](question, timeout=timeout)

    def is_ready(self) -> bool:
        return self.index.is_loaded

    def status(self) -> dict[str, Any]:
        return {"is_ready": self.is_ready(), "index_info": self.index.info().to_dict()}
