"""Error kinds raised by the NLQ pipeline components."""

from enum import Enum


class ErrorKind(str, Enum):
    """Tag identifying why a question could not be answered."""

    SCHEMA_UNAVAILABLE = "schema_unavailable"
    MALFORMED_PROVIDER_RESPONSE = "malformed_provider_response"
    EMPTY_GENERATION = "empty_generation"
    MODEL_PROVIDER_ERROR = "model_provider_error"
    EXTRACTION_FAILURE = "extraction_failure"
    FORBIDDEN_OPERATION = "forbidden_operation"
    EXECUTION_FAILURE = "execution_failure"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    UNEXPECTED = "unexpected"


class NlqError(Exception):
    """Base exception for NLQ pipeline components."""

    kind: ErrorKind = ErrorKind.UNEXPECTED


class SchemaUnavailableError(NlqError):
    """Raised when no database schema is loaded to build a query prompt."""

    kind = ErrorKind.SCHEMA_UNAVAILABLE


class MalformedProviderResponseError(NlqError):
    """Raised when the model response does not have the expected shape."""

    kind = ErrorKind.MALFORMED_PROVIDER_RESPONSE


class EmptyGenerationError(NlqError):
    """Raised when the model returns empty text."""

    kind = ErrorKind.EMPTY_GENERATION


class ModelProviderError(NlqError):
    """Raised when the model provider call itself fails."""

    kind = ErrorKind.MODEL_PROVIDER_ERROR


class ExtractionError(NlqError):
    """Raised when no SQL query can be found in the model response."""

    kind = ErrorKind.EXTRACTION_FAILURE


class QueryExecutionError(NlqError):
    """Raised when the store fails to execute a query."""

    kind = ErrorKind.EXECUTION_FAILURE


class DeadlineExceededError(NlqError):
    """Raised when a question runs past its deadline."""

    kind = ErrorKind.DEADLINE_EXCEEDED
