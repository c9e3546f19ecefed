"""
Pure functions that turn an ``UpstreamOutcome`` into the status code and
``Envelope`` sent back to the caller.

All functions are stateless and never raise.
"""

import json
from typing import Any, Tuple

from app.models import (
    Envelope,
    FailureKind,
    TransportFailure,
    UpstreamOutcome,
    UpstreamSuccess,
)
from app.utils import utc_timestamp

FAILURE_STATUS = {
    FailureKind.CONNECTION_REFUSED: 502,
    FailureKind.TIMED_OUT: 504,
    FailureKind.OTHER: 500,
}

FAILURE_ERROR = {
    FailureKind.CONNECTION_REFUSED: "Cannot connect to upstream server",
    FailureKind.TIMED_OUT: "Upstream request timed out",
    FailureKind.OTHER: "Failed to fetch data from upstream",
}

FORBIDDEN_ERROR = "Upstream returned 403 Forbidden"
FORBIDDEN_MESSAGE = (
    "Upstream requires authentication (a key) or has blocked the request"
)
FORBIDDEN_SOLUTION = (
    "Obtain a valid key from the upstream provider and pass it as ?key=YOUR_KEY"
)


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def parse_body(raw: str) -> Any:
    """
    Decode ``raw`` as strict JSON, or return it unchanged when it is not valid JSON.

    ``NaN`` and ``Infinity`` are rejected: they cannot be rendered back out as JSON.
    """
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except (TypeError, ValueError, RecursionError):
        return raw


def _normalize_failure(outcome: TransportFailure) -> Tuple[int, Envelope]:
    if outcome.status_code is not None:
        status = outcome.status_code
        error = f"Upstream returned error: {status}"
    else:
        status = FAILURE_STATUS[outcome.kind]
        error = FAILURE_ERROR[outcome.kind]
    return status, Envelope(
        success=False,
        error=error,
        details=outcome.message,
        statusCode=status,
        timestamp=utc_timestamp(),
    )


def _normalize_response(outcome: UpstreamSuccess) -> Tuple[int, Envelope]:
    status = outcome.status_code
    if status == 403:
        return status, Envelope(
            success=False,
            error=FORBIDDEN_ERROR,
            message=FORBIDDEN_MESSAGE,
            statusCode=status,
            timestamp=utc_timestamp(),
            solution=FORBIDDEN_SOLUTION,
        )
    if status == 200:
        return status, Envelope(
            success=True,
            data=parse_body(outcome.raw_body),
            statusCode=status,
            timestamp=utc_timestamp(),
        )
    return status, Envelope(
        success=False,
        error=f"Upstream returned status {status}",
        data=outcome.raw_body,
        statusCode=status,
        timestamp=utc_timestamp(),
    )


def normalize(outcome: UpstreamOutcome) -> Tuple[int, Envelope]:
    if isinstance(outcome, TransportFailure):
        return _normalize_failure(outcome)
    return _normalize_response(outcome)


def missing_key_envelope() -> Tuple[int, Envelope]:
    return 400, Envelope(
        success=False,
        error="Missing key",
        message="Please provide a key via query parameter: ?key=YOUR_KEY",
        statusCode=400,
        timestamp=utc_timestamp(),
    )
