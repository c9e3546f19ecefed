import pytest
from pydantic import ValidationError

from app.models import Envelope, ForwardRequest, ProbeResult


def test_forward_request_empty_credential_is_none():
    assert ForwardRequest("lc79_hu", "").credential is None
    assert ForwardRequest("lc79_hu").credential is None
    assert ForwardRequest("lc79_hu", "abc").credential == "abc"


def test_forward_request_requires_query_type():
    with pytest.raises(ValueError):
        ForwardRequest("")


def test_envelope_payload_only_has_given_fields():
    envelope = Envelope(success=False, error="x", statusCode=500, timestamp="t")

    assert envelope.to_payload() == {
        "success": False,
        "error": "x",
        "statusCode": 500,
        "timestamp": "t",
    }


def test_envelope_is_immutable():
    envelope = Envelope(success=True, data={"a": 1}, statusCode=200, timestamp="t")

    with pytest.raises(ValidationError):
        envelope.success = False


def test_probe_result_payload_drops_empty_fields():
    result = ProbeResult(name="lc79_hu", url="u", status=200, success=True, dataLength=3)

    assert result.to_payload() == {
        "name": "lc79_hu",
        "url": "u",
        "status": 200,
        "success": True,
        "dataLength": 3,
    }
