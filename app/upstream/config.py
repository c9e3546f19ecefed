from dataclasses import dataclass, field
from typing import Dict, Tuple
from urllib.parse import urlparse

from app.vars import (
    UPSTREAM_ACCEPT_LANGUAGE,
    UPSTREAM_ORIGIN,
    UPSTREAM_PROBE_TIMEOUT,
    UPSTREAM_TIMEOUT,
    UPSTREAM_USER_AGENT,
)

HU_QUERY_TYPE = "lc79_hu"
MD5_QUERY_TYPE = "lc79_md5"

BROWSER_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,"
    "image/avif,image/webp,*/*;q=0.8"
)


def browser_headers(
    origin: str,
    user_agent: str = UPSTREAM_USER_AGENT,
    accept_language: str = UPSTREAM_ACCEPT_LANGUAGE,
) -> Dict[str, str]:
    """Headers that make the upstream believe it is talking to a desktop browser."""
    return {
        "Referer": origin,
        "User-Agent": user_agent,
        "Accept": BROWSER_ACCEPT,
        "Accept-Language": accept_language,
        "Connection": "keep-alive",
        "Host": urlparse(origin).netloc,
    }


@dataclass(frozen=True)
class UpstreamConfig:
    origin: str
    headers: Dict[str, str]
    timeout: float = 15.0
    probe_timeout: float = 8.0
    probe_headers: Dict[str, str] = field(
        default_factory=lambda: {"User-Agent": "Mozilla/5.0"}
    )
    probe_query_types: Tuple[str, ...] = (HU_QUERY_TYPE, MD5_QUERY_TYPE)

    @classmethod
    def for_origin(cls, origin: str, **kwargs) -> "UpstreamConfig":
        origin = origin.rstrip("/")
        kwargs.setdefault("headers", browser_headers(origin))
        return cls(origin=origin, **kwargs)


def default_upstream_config() -> UpstreamConfig:
    return UpstreamConfig.for_origin(
        UPSTREAM_ORIGIN,
        timeout=UPSTREAM_TIMEOUT,
        probe_timeout=UPSTREAM_PROBE_TIMEOUT,
    )
