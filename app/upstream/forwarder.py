"""
Outbound side of the proxy: build the upstream request, issue it once and
classify what came back as an ``UpstreamOutcome``.
"""

import asyncio
import json
import logging
import socket
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional
from urllib.parse import quote

import httpx
from opentelemetry import trace
from prometheus_client import Counter

from app.models import (
    FailureKind,
    ForwardRequest,
    ProbeResult,
    TransportFailure,
    UpstreamOutcome,
    UpstreamSuccess,
)
from app.upstream.config import UpstreamConfig
from app.upstream.normalizer import parse_body
from app.utils import mask_credential
from app.utils.exception_logging import (
    format_exception_message,
    log_exception_with_details,
)
from app.utils.traced_requests import traced_request

tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")

# Statuses outside this window are reported as failures carrying the status
ACCEPTED_STATUS_RANGE = range(200, 600)

# Same unreserved set as JavaScript's encodeURIComponent
_KEY_SAFE_CHARS = "-_.!~*'()"

UPSTREAM_REQUESTS = Counter(
    "cutools_upstream_requests",
    "Upstream calls by query type and outcome",
    ["query_type", "outcome"],
)


def build_target_url(
    origin: str, query_type: str, credential: Optional[str] = None
) -> str:
    """Construct ``<origin>/?api=<query_type>[&key=<credential>]``."""
    url = f"{origin.rstrip('/')}/?api={quote(query_type, safe=_KEY_SAFE_CHARS)}"
    if credential:
        url += f"&key={quote(credential, safe=_KEY_SAFE_CHARS)}"
    return url


def _is_dns_failure(exc: BaseException) -> bool:
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, socket.gaierror):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


def classify_transport_error(exc: httpx.HTTPError) -> FailureKind:
    if isinstance(exc, httpx.TimeoutException):
        return FailureKind.TIMED_OUT
    if isinstance(exc, httpx.ConnectError) and not _is_dns_failure(exc):
        return FailureKind.CONNECTION_REFUSED
    return FailureKind.OTHER


@asynccontextmanager
async def _client_scope(
    client: Optional[httpx.AsyncClient],
) -> AsyncIterator[httpx.AsyncClient]:
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient() as owned:
        yield owned


def _deadline_message(timeout: float) -> str:
    return f"Upstream did not finish responding within {timeout:g}s"


def _utf16_length(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def data_length(raw_body: str) -> int:
    """
    Size of a body as a browser-side client reports it: JSON bodies are measured
    in their compact re-serialized form, text as is, both in UTF-16 code units.
    Empty and falsy bodies (``null``, ``0``, ``false``) count as 0.
    """
    data = parse_body(raw_body)
    if isinstance(data, str):
        return _utf16_length(data)
    if not data and not isinstance(data, (list, dict)):
        return 0
    return _utf16_length(json.dumps(data, ensure_ascii=False, separators=(",", ":")))


async def forward(
    request: ForwardRequest,
    config: UpstreamConfig,
    client: Optional[httpx.AsyncClient] = None,
) -> UpstreamOutcome:
    """
    Issue a single GET against the upstream for ``request``.

    Never raises for transport problems: those come back as ``TransportFailure``.
    ``config.timeout`` bounds the whole call, body included.
    A caller-supplied ``client`` is used as-is and left open.
    """
    target_url = build_target_url(config.origin, request.query_type, request.credential)
    masked_url = build_target_url(
        config.origin, request.query_type, mask_credential(request.credential)
    )

    with traced_request(
        tracer,
        operation="upstream.forward",
        query_type=request.query_type,
        has_key=bool(request.credential),
        start_message=f"[Forward] Calling upstream: {masked_url}",
        extra_attrs={"upstream.url": masked_url},
    ) as span:
        try:
            async with _client_scope(client) as http:
                response = await asyncio.wait_for(
                    http.get(
                        target_url,
                        headers=config.headers,
                        timeout=config.timeout,
                    ),
                    timeout=config.timeout,
                )
        except asyncio.TimeoutError:
            logger.error(f"[Forward] {_deadline_message(config.timeout)}")
            span.set_attribute("upstream.error", FailureKind.TIMED_OUT.value)
            UPSTREAM_REQUESTS.labels(
                request.query_type, FailureKind.TIMED_OUT.value
            ).inc()
            return TransportFailure(
                kind=FailureKind.TIMED_OUT,
                message=_deadline_message(config.timeout),
            )
        except httpx.HTTPError as e:
            kind = classify_transport_error(e)
            log_exception_with_details(
                logger, f"[Forward] Upstream call failed ({kind.value}):", e
            )
            span.set_attribute("upstream.error", kind.value)
            UPSTREAM_REQUESTS.labels(request.query_type, kind.value).inc()
            return TransportFailure(kind=kind, message=format_exception_message(e))

        status = response.status_code
        span.set_attribute("upstream.status_code", status)
        logger.info(f"[Forward] Upstream answered with status {status}")

        if status not in ACCEPTED_STATUS_RANGE:
            UPSTREAM_REQUESTS.labels(request.query_type, FailureKind.OTHER.value).inc()
            return TransportFailure(
                kind=FailureKind.OTHER,
                message=f"Request failed with status code {status}",
                status_code=status,
            )

        UPSTREAM_REQUESTS.labels(request.query_type, str(status)).inc()
        return UpstreamSuccess(status_code=status, raw_body=response.text)


async def probe(
    query_type: str, config: UpstreamConfig, client: httpx.AsyncClient
) -> ProbeResult:
    """Call one sub-API with the short timeout. Any failure becomes an ``ERROR`` result."""
    url = build_target_url(config.origin, query_type)
    with tracer.start_as_current_span("upstream.probe") as span:
        span.set_attribute("upstream.query_type", query_type)
        try:
            response = await asyncio.wait_for(
                client.get(
                    url, headers=config.probe_headers, timeout=config.probe_timeout
                ),
                timeout=config.probe_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"[Probe] {query_type}: {_deadline_message(config.probe_timeout)}")
            span.set_attribute("upstream.error", FailureKind.TIMED_OUT.value)
            return ProbeResult(
                name=query_type,
                url=url,
                status="ERROR",
                success=False,
                error=_deadline_message(config.probe_timeout),
            )
        except Exception as e:
            log_exception_with_details(
                logger, f"[Probe] {query_type} failed:", e, level=logging.WARNING
            )
            if isinstance(e, httpx.HTTPError):
                span.set_attribute("upstream.error", classify_transport_error(e).value)
            else:
                span.set_attribute("upstream.error", FailureKind.OTHER.value)
            return ProbeResult(
                name=query_type,
                url=url,
                status="ERROR",
                success=False,
                error=format_exception_message(e),
            )

        span.set_attribute("upstream.status_code", response.status_code)
        logger.info(f"[Probe] {query_type} answered with status {response.status_code}")
        return ProbeResult(
            name=query_type,
            url=url,
            status=response.status_code,
            success=response.status_code == 200,
            dataLength=data_length(response.text),
        )


async def probe_all(
    config: UpstreamConfig, client: Optional[httpx.AsyncClient] = None
) -> List[ProbeResult]:
    """Probe every fixed sub-API one after the other; one failure never stops the rest."""
    results: List[ProbeResult] = []
    async with _client_scope(client) as http:
        for query_type in config.probe_query_types:
            results.append(await probe(query_type, config, http))
    return results
