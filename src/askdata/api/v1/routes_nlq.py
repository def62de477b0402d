"""Natural Language Query (NLQ) API routes.

This module provides the REST endpoints that answer a plain-language
question about the database with a plain-language explanation.
"""

import logging
from uuid import uuid4

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from askdata.core.config import settings
from askdata.nlq.pipeline import NlqPipeline, PipelineStage

logger = logging.getLogger(__name__)

router = APIRouter()


class PromptRequest(BaseModel):
    """Request body for question endpoints."""

    prompt: str | None = Field(None, description="Question about the data, in natural language")


def answer_prompt(request: PromptRequest) -> PlainTextResponse:
    """Run the NLQ pipeline for one request and map the outcome to HTTP.

    Args:
        request: PromptRequest with the user's question

    Returns:
        PlainTextResponse with the explanation

    Raises:
        HTTPException: 400 for a missing prompt, 503 if the feature is disabled,
            403 for a rejected query, 500 for any other failure
    """
    correlation_id = str(uuid4())

    if not request.prompt or not request.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")

    if not settings.LLM_ENABLED:
        logger.warning(
            "NLQ feature disabled",
            extra={"correlation_id": correlation_id},
        )
        raise HTTPException(
            status_code=503,
            detail="Natural language query feature is currently disabled",
        )

    outcome = NlqPipeline().answer(request.prompt, correlation_id=correlation_id)

    if outcome.stage is PipelineStage.REJECTED:
        raise HTTPException(status_code=403, detail=outcome.message)

    if outcome.stage is not PipelineStage.DONE:
        logger.error(
            "Question could not be answered",
            extra={
                "correlation_id": correlation_id,
                "error_kind": outcome.error_kind.value if outcome.error_kind else None,
            },
        )
        raise HTTPException(status_code=500, detail=outcome.message)

    return PlainTextResponse(outcome.message)


@router.post("/human-query", response_class=PlainTextResponse)
def human_query(request: PromptRequest) -> PlainTextResponse:
    """Answer a natural language question about the data."""
    return answer_prompt(request)


@router.post("/gemini", response_class=PlainTextResponse)
def gemini_query(request: PromptRequest) -> PlainTextResponse:
    """Alias of /human-query kept for existing clients."""
    return answer_prompt(request)
