"""Question answering pipeline.

Sequences one question through query generation, safety validation,
execution and explanation, and is the only place where component errors are
turned into a caller-facing outcome.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable
from uuid import uuid4

from sqlalchemy.engine import Engine

from askdata.core.config import settings
from askdata.core.logging import correlation_id_context
from askdata.nlq.errors import DeadlineExceededError, ErrorKind, ExtractionError, NlqError
from askdata.nlq.llm_client import LLMClient, get_llm_client
from askdata.nlq.prompts import build_explanation_prompt, build_query_prompt, serialize_results
from askdata.nlq.query_engine import run_readonly_query
from askdata.nlq.schema_context import SchemaContext, get_schema_context
from askdata.nlq.sql_extract import extract_sql
from askdata.nlq.sql_safety import check_query_safety

logger = logging.getLogger(__name__)

REFUSAL_MESSAGE = (
    "I can't do that. I can only help you look up information, "
    "not modify or delete it."
)
GENERIC_FAILURE_MESSAGE = (
    "An error occurred while processing your request. Please try again later."
)


class PipelineStage(str, Enum):
    """Stages a question moves through."""

    IDLE = "idle"
    GENERATING_QUERY = "generating_query"
    VALIDATING = "validating"
    EXECUTING = "executing"
    EXPLAINING = "explaining"
    DONE = "done"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class PipelineOutcome:
    """Result of answering one question.

    ``message`` is always safe to show to the caller. ``error_kind``,
    ``offending_keyword`` and ``failed_stage`` are for logging and status
    mapping only.
    """

    stage: PipelineStage
    message: str
    explanation: str | None = None
    error_kind: ErrorKind | None = None
    offending_keyword: str | None = None
    failed_stage: PipelineStage | None = None

    @property
    def succeeded(self) -> bool:
        return self.stage is PipelineStage.DONE


class Deadline:
    """Wall-clock limit for one question, checked between stages."""

    def __init__(self, timeout_seconds: float | None):
        self.timeout_seconds = timeout_seconds
        self._expires_at = (
            time.monotonic() + timeout_seconds if timeout_seconds is not None else None
        )

    def check(self, stage: PipelineStage) -> None:
        if self._expires_at is not None and time.monotonic() >= self._expires_at:
            raise DeadlineExceededError(
                f"Request exceeded {self.timeout_seconds}s before {stage.value}"
            )


class NlqPipeline:
    """Answers natural language questions about the database."""

    def __init__(
        self,
        llm_client: LLMClient | None = None,
        engine: Engine | None = None,
        schema_provider: Callable[[], SchemaContext] = get_schema_context,
    ):
        """Initialize the pipeline.

        Args:
            llm_client: Model client (default: configured provider, created on first use)
            engine: Engine for query execution (default: shared engine)
            schema_provider: Returns the active schema snapshot
        """
        self._llm_client = llm_client
        self.engine = engine
        self.schema_provider = schema_provider

    @property
    def llm_client(self) -> LLMClient:
        if self._llm_client is None:
            self._llm_client = get_llm_client()
        return self._llm_client

    def answer(
        self,
        question: str,
        correlation_id: str | None = None,
        timeout_seconds: float | None = None,
    ) -> PipelineOutcome:
        """Answer a question end to end.

        Never raises: every failure is reported as a REJECTED or FAILED
        outcome carrying a fixed, caller-safe message.

        Args:
            question: Natural language question from user
            correlation_id: Optional correlation ID (generated when absent)
            timeout_seconds: Deadline (default: settings.NLQ_REQUEST_TIMEOUT_SECONDS)

        Returns:
            PipelineOutcome
        """
        correlation_id = correlation_id or str(uuid4())
        token = correlation_id_context.set(correlation_id)
        log_extra = {"correlation_id": correlation_id}
        deadline = Deadline(
            timeout_seconds if timeout_seconds is not None else settings.NLQ_REQUEST_TIMEOUT_SECONDS
        )
        stage = PipelineStage.IDLE

        logger.info("Answering question", extra={**log_extra, "user_query": question})

        try:
            stage = PipelineStage.GENERATING_QUERY
            deadline.check(stage)
            sql = self.generate_sql(question, correlation_id=correlation_id)

            stage = PipelineStage.VALIDATING
            deadline.check(stage)
            verdict = check_query_safety(sql, correlation_id=correlation_id)
            if not verdict.is_safe:
                logger.warning(
                    "Generated query rejected by safety check",
                    extra={**log_extra, "sql": sql, "keyword": verdict.keyword},
                )
                return PipelineOutcome(
                    stage=PipelineStage.REJECTED,
                    message=REFUSAL_MESSAGE,
                    error_kind=ErrorKind.FORBIDDEN_OPERATION,
                    offending_keyword=verdict.keyword,
                    failed_stage=stage,
                )

            stage = PipelineStage.EXECUTING
            deadline.check(stage)
            rows = run_readonly_query(sql, engine=self.engine, correlation_id=correlation_id)

            stage = PipelineStage.EXPLAINING
            deadline.check(stage)
            explanation = self.explain_results(question, rows, correlation_id=correlation_id)

        except NlqError as e:
            logger.error(
                f"Question failed during {stage.value}: {e}",
                extra={**log_extra, "error_kind": e.kind.value, "stage": stage.value},
            )
            return self._failed(e.kind, stage)

        except Exception as e:
            logger.error(
                f"Unexpected error during {stage.value}: {e}",
                extra={**log_extra, "stage": stage.value},
                exc_info=True,
            )
            return self._failed(ErrorKind.UNEXPECTED, stage)

        finally:
            correlation_id_context.reset(token)

        logger.info("Generated final explanation for user", extra=log_extra)
        return PipelineOutcome(
            stage=PipelineStage.DONE,
            message=explanation,
            explanation=explanation,
        )

    def generate_sql(self, question: str, correlation_id: str | None = None) -> str:
        """Ask the model for a query and extract it from the response.

        Raises:
            SchemaUnavailableError: If no schema is loaded (no model call is made)
            ExtractionError: If the response contains no recognizable SQL
            NlqError: Any model client error
        """
        log_extra = {"correlation_id": correlation_id} if correlation_id else {}

        prompt = build_query_prompt(question, self.schema_provider().formatted)
        raw_response = self.llm_client.generate_text(prompt, correlation_id=correlation_id)

        sql = extract_sql(raw_response)
        if not sql:
            logger.warning(
                "Could not extract a SQL query from model response",
                extra={**log_extra, "llm_response": raw_response},
            )
            raise ExtractionError("Failed to extract a SQL query from the model response")

        logger.info("Generated SQL query", extra={**log_extra, "sql": sql})
        return sql

    def explain_results(
        self,
        question: str,
        rows: list[dict[str, Any]],
        correlation_id: str | None = None,
    ) -> str:
        """Turn query rows into a natural language answer."""
        prompt = build_explanation_prompt(question, serialize_results(rows))
        logger.debug(
            "Generated explanation prompt",
            extra={"correlation_id": correlation_id, "prompt_chars": len(prompt)},
        )
        return self.llm_client.generate_text(prompt, correlation_id=correlation_id).strip()

    @staticmethod
    def _failed(kind: ErrorKind, stage: PipelineStage) -> PipelineOutcome:
        return PipelineOutcome(
            stage=PipelineStage.FAILED,
            message=GENERIC_FAILURE_MESSAGE,
            error_kind=kind,
            failed_stage=stage,
        )
