import logging
from typing import Optional, Dict
from contextlib import contextmanager

from opentelemetry.trace import Tracer

logger = logging.getLogger("uvicorn.error")


@contextmanager
def traced_request(
    tracer: Tracer,
    operation: str,
    query_type: str,
    has_key: bool,
    start_message: str,
    extra_attrs: Optional[Dict] = None,
):
    """
    Open a span for an upstream call, set common attributes and log a start message.

    ``start_message`` and ``extra_attrs`` must already have the key masked.
    """
    with tracer.start_as_current_span(operation) as span:
        span.set_attribute("upstream.query_type", query_type)
        span.set_attribute("upstream.has_key", has_key)
        if extra_attrs:
            for k, v in extra_attrs.items():
                span.set_attribute(k, v)
        logger.info(start_message)
        yield span
