"""
Retry rules and dispatch error classification for ingestion jobs.

Retries are caller-driven (no scheduler): a FAILED job may be put back to
PENDING while retry_count < max_retries. A retry that would exceed the budget
is rejected, never clamped.

Dispatch failures are classified so logs can distinguish transient transport
problems from worker-side rejections:
- timeout / connection -> transport never completed
- 429 -> rate_limit
- 5xx -> server_error
- other 4xx -> client_error
- unusable response body -> invalid_response
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from docu_service.ingestion.jobs.models import JobStatus

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """Error classification for dispatch failures."""
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    SERVER_ERROR = "server_error"
    RATE_LIMIT = "rate_limit"
    CLIENT_ERROR = "client_error"
    INVALID_RESPONSE = "invalid_response"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RetryEligibility:
    """
    Result of checking whether a job may be retried.

    Attributes:
        allowed: Whether the retry may proceed
        reason: Human-readable explanation (used as the rejection message)
    """
    allowed: bool
    reason: str


def categorize_error(
    status_code: Optional[int],
    error_type: Optional[str] = None,
) -> ErrorCategory:
    """
    Categorize a dispatch error.

    Args:
        status_code: HTTP status code (if the worker answered)
        error_type: Error type name (for transport errors)

    Returns:
        ErrorCategory for the error
    """
    if status_code is not None:
        if status_code == 429:
            return ErrorCategory.RATE_LIMIT
        if 500 <= status_code < 600:
            return ErrorCategory.SERVER_ERROR
        if 400 <= status_code < 500:
            return ErrorCategory.CLIENT_ERROR
        if 200 <= status_code < 300:
            return ErrorCategory.INVALID_RESPONSE

    if error_type:
        error_lower = error_type.lower()
        if "timeout" in error_lower:
            return ErrorCategory.TIMEOUT
        if "connection" in error_lower or "network" in error_lower:
            return ErrorCategory.CONNECTION
        if "response" in error_lower:
            return ErrorCategory.INVALID_RESPONSE

    return ErrorCategory.UNKNOWN


def check_retry_eligibility(job) -> RetryEligibility:
    """
    Decide whether a job may be retried.

    Args:
        job: IngestionJob (or any object with status/retry_count/max_retries)

    Returns:
        RetryEligibility naming why a retry is refused
    """
    if job.status != JobStatus.FAILED:
        status = job.status.value if isinstance(job.status, JobStatus) else job.status
        return RetryEligibility(
            allowed=False,
            reason=f"Only failed jobs can be retried (current status: {status})",
        )

    if job.retry_count >= job.max_retries:
        return RetryEligibility(
            allowed=False,
            reason=f"Max retries ({job.max_retries}) exceeded",
        )

    return RetryEligibility(
        allowed=True,
        reason=f"Retry {job.retry_count + 1}/{job.max_retries}",
    )


def merge_retry_payload(
    current: Optional[Dict[str, Any]],
    overrides: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    """
    Shallow-merge retry payload fields over the current payload.

    Top-level keys from overrides replace existing ones; keys absent from
    overrides survive unchanged. Nested objects are replaced, not merged.
    """
    merged = dict(current or {})
    if overrides:
        merged.update(overrides)
    return merged


def log_retry_decision(
    job_id: str,
    retry_count: int,
    max_retries: int,
    eligibility: RetryEligibility,
) -> None:
    """
    Log retry decision for observability.

    Args:
        job_id: Job identifier
        retry_count: Retries performed before this request
        max_retries: Retry budget
        eligibility: Decision made
    """
    log_extra = {
        "job_id": job_id,
        "retry_count": retry_count,
        "max_retries": max_retries,
        "allowed": eligibility.allowed,
        "reason": eligibility.reason,
    }

    if eligibility.allowed:
        logger.info("job.retry", extra=log_extra)
    else:
        logger.warning("job.retry_rejected", extra=log_extra)
