import httpx
import pytest

from app.upstream.config import UpstreamConfig

TEST_UPSTREAM_ORIGIN = "http://upstream.test"


@pytest.fixture
def upstream_config():
    """Upstream configuration pointing at a host that only exists in tests."""
    return UpstreamConfig.for_origin(TEST_UPSTREAM_ORIGIN)


@pytest.fixture
def fake_upstream():
    """
    Simulated upstream keyed by the ``api`` query parameter.

    Each entry is either an ``httpx.Response`` or an exception to raise.
    Every request seen is recorded in ``fake_upstream.requests``.
    """

    class FakeUpstream:
        def __init__(self):
            self.routes = {}
            self.requests = []

        def handler(self, request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            result = self.routes.get(request.url.params.get("api"))
            if result is None:
                return httpx.Response(404, text="no such api")
            if isinstance(result, Exception):
                raise result
            return result

        def client(self) -> httpx.AsyncClient:
            return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    return FakeUpstream()
