from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class ForwardRequest:
    query_type: str
    credential: Optional[str] = None

    def __post_init__(self):
        if not self.query_type:
            raise ValueError("query_type must be a non-empty string")
        # An empty key is the same as no key
        if not self.credential:
            object.__setattr__(self, "credential", None)


class FailureKind(str, Enum):
    CONNECTION_REFUSED = "connection-refused"
    TIMED_OUT = "timed-out"
    OTHER = "other"


@dataclass(frozen=True)
class UpstreamSuccess:
    """The upstream answered with a status in the accepted 200-599 window."""

    status_code: int
    raw_body: str


@dataclass(frozen=True)
class TransportFailure:
    """
    The upstream could not be reached, or answered outside the accepted window.

    ``status_code`` is only set in the latter case.
    """

    kind: FailureKind
    message: str
    status_code: Optional[int] = None


UpstreamOutcome = Union[UpstreamSuccess, TransportFailure]


class Envelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    data: Any = None
    error: Optional[str] = None
    message: Optional[str] = None
    statusCode: int
    timestamp: str
    details: Optional[str] = None
    solution: Optional[str] = None

    def to_payload(self) -> dict:
        # Only explicitly given fields, so a JSON ``null`` body survives as data
        return self.model_dump(exclude_unset=True)


class ProbeResult(BaseModel):
    name: str
    url: str
    status: Union[int, str]
    success: bool
    dataLength: Optional[int] = None
    error: Optional[str] = None

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)
