import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response
from opentelemetry import trace

from app.models import FailureKind, ForwardRequest, TransportFailure
from app.upstream import (
    UpstreamConfig,
    default_upstream_config,
    forward,
    missing_key_envelope,
    normalize,
    probe_all,
)
from app.upstream.config import HU_QUERY_TYPE, MD5_QUERY_TYPE
from app.utils import utc_timestamp
from app.utils.exception_logging import (
    format_exception_message,
    log_exception_with_details,
)

router = APIRouter()
logger = logging.getLogger("uvicorn.error")
tracer = trace.get_tracer(__name__)


def get_upstream_config() -> UpstreamConfig:
    return default_upstream_config()


def get_http_client() -> Optional[httpx.AsyncClient]:
    """No shared client by default; each upstream call opens its own."""
    return None


async def proxy_cutools(
    query_type: str,
    config: UpstreamConfig,
    client: Optional[httpx.AsyncClient] = None,
    credential: Optional[str] = None,
) -> JSONResponse:
    """Forward one request upstream and answer with the normalized envelope."""
    try:
        outcome = await forward(ForwardRequest(query_type, credential), config, client)
    except Exception as e:
        log_exception_with_details(logger, "[Routes] Proxy error:", e)
        outcome = TransportFailure(
            kind=FailureKind.OTHER, message=format_exception_message(e)
        )
    status, envelope = normalize(outcome)
    return JSONResponse(status_code=status, content=envelope.to_payload())


def _missing_key_response() -> JSONResponse:
    status, envelope = missing_key_envelope()
    logger.info("[Routes] Rejecting request without key")
    return JSONResponse(status_code=status, content=envelope.to_payload())


@router.get("/api/tx")
async def hu(
    config: UpstreamConfig = Depends(get_upstream_config),
    client: Optional[httpx.AsyncClient] = Depends(get_http_client),
):
    return await proxy_cutools(HU_QUERY_TYPE, config, client)


@router.get("/api/cutools/hu/with-key")
async def hu_with_key(
    key: Optional[str] = Query(None, description="Upstream access key"),
    config: UpstreamConfig = Depends(get_upstream_config),
    client: Optional[httpx.AsyncClient] = Depends(get_http_client),
):
    if not key:
        return _missing_key_response()
    return await proxy_cutools(HU_QUERY_TYPE, config, client, key)


@router.get("/api/md5")
async def md5(
    config: UpstreamConfig = Depends(get_upstream_config),
    client: Optional[httpx.AsyncClient] = Depends(get_http_client),
):
    return await proxy_cutools(MD5_QUERY_TYPE, config, client)


@router.get("/api/cutools/md5/with-key")
async def md5_with_key(
    key: Optional[str] = Query(None, description="Upstream access key"),
    config: UpstreamConfig = Depends(get_upstream_config),
    client: Optional[httpx.AsyncClient] = Depends(get_http_client),
):
    if not key:
        return _missing_key_response()
    return await proxy_cutools(MD5_QUERY_TYPE, config, client, key)


@router.get("/api/all")
async def all_apis(
    api_type: Optional[str] = Query(
        None, alias="type", description="Upstream sub-API to call"
    ),
    key: Optional[str] = Query(None, description="Optional upstream access key"),
    config: UpstreamConfig = Depends(get_upstream_config),
    client: Optional[httpx.AsyncClient] = Depends(get_http_client),
):
    return await proxy_cutools(api_type or HU_QUERY_TYPE, config, client, key)


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "message": "Proxy server is running",
        "timestamp": utc_timestamp(),
        "endpoints": {
            "hu": "/api/tx",
            "huWithKey": "/api/cutools/hu/with-key?key=YOUR_KEY",
            "md5": "/api/md5",
            "md5WithKey": "/api/cutools/md5/with-key?key=YOUR_KEY",
            "flexible": "/api/all?type=lc79_hu&key=YOUR_KEY",
        },
    }


@router.get("/api/test-all")
async def probe_endpoints(
    config: UpstreamConfig = Depends(get_upstream_config),
    client: Optional[httpx.AsyncClient] = Depends(get_http_client),
):
    with tracer.start_as_current_span("test_all"):
        results = await probe_all(config, client)
    return {
        "success": True,
        "results": [r.to_payload() for r in results],
        "timestamp": utc_timestamp(),
    }


@router.get("/")
async def index():
    return Response(status_code=200)
