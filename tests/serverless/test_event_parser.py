"""
Test suite for API Gateway event parsing.

Covers route matching with and without the API prefix, job id parsing,
JSON and base64 bodies, and face and batch size decoding.
"""

import base64
import json
import uuid

import pytest

from facescan.serverless.lambda_utils.event_parser import (
    decode_face,
    parse_api_event,
    parse_batch_size,
)
from facescan.serverless.lambda_utils.exceptions import EventParseError, RouteNotFoundError


def event(method: str, path: str, body=None, base64_body: bool = False) -> dict:
    raw = json.dumps(body) if body is not None else None
    if raw is not None and base64_body:
        raw = base64.b64encode(raw.encode()).decode()
    return {
        "rawPath": path,
        "requestContext": {"http": {"method": method}},
        "body": raw,
        "isBase64Encoded": base64_body,
    }


class TestRoutes:
    """Route matching."""

    @pytest.mark.parametrize("prefix", ["", "/api/v1"])
    def test_create_scan_route(self, prefix):
        request = parse_api_event(event("POST", f"{prefix}/scans", {"url": "u"}))

        assert request.action == "create_scan"
        assert request.job_id is None
        assert request.body == {"url": "u"}

    def test_analyze_route_parses_job_id(self):
        job_id = uuid.uuid4()

        request = parse_api_event(event("POST", f"/api/v1/jobs/{job_id}/analyze", {}))

        assert request.action == "analyze"
        assert request.job_id == job_id

    def test_get_job_route(self):
        job_id = uuid.uuid4()

        request = parse_api_event(event("GET", f"/jobs/{job_id}"))

        assert request.action == "get_job"
        assert request.job_id == job_id
        assert request.body == {}

    def test_rest_api_event_shape(self):
        request = parse_api_event({"httpMethod": "get", "path": "/health"})

        assert request.action == "health"

    def test_wrong_method_is_not_routed(self):
        with pytest.raises(RouteNotFoundError):
            parse_api_event(event("GET", "/api/v1/scans"))

    def test_unknown_path_is_not_routed(self):
        with pytest.raises(RouteNotFoundError):
            parse_api_event(event("POST", "/api/v1/folders"))

    def test_invalid_job_id(self):
        with pytest.raises(EventParseError, match="Invalid job id"):
            parse_api_event(event("GET", "/api/v1/jobs/not-a-uuid"))


class TestBody:
    """Body decoding."""

    def test_base64_encoded_body(self):
        request = parse_api_event(event("POST", "/scans", {"url": "u"}, base64_body=True))

        assert request.body == {"url": "u"}

    def test_invalid_json(self):
        bad = event("POST", "/scans")
        bad["body"] = "{not json"

        with pytest.raises(EventParseError, match="Invalid JSON body"):
            parse_api_event(bad)

    def test_non_object_body(self):
        with pytest.raises(EventParseError, match="JSON object"):
            parse_api_event(event("POST", "/scans", ["u"]))


class TestFace:
    """Reference face decoding."""

    def test_plain_base64(self):
        assert decode_face({"face": base64.b64encode(b"face").decode()}) == b"face"

    def test_data_url(self):
        encoded = base64.b64encode(b"face").decode()

        assert decode_face({"face": f"data:image/jpeg;base64,{encoded}"}) == b"face"

    @pytest.mark.parametrize("body", [{}, {"face": ""}, {"face": None}])
    def test_missing_face(self, body):
        assert decode_face(body) is None

    def test_invalid_base64(self):
        with pytest.raises(EventParseError, match="not valid base64"):
            decode_face({"face": "***"})

    def test_non_string_face(self):
        with pytest.raises(EventParseError):
            decode_face({"face": 123})


class TestBatchSize:
    """Batch size parsing."""

    @pytest.mark.parametrize("value, expected", [(None, None), ("", None), (4, 4), ("7", 7)])
    def test_valid_values(self, value, expected):
        assert parse_batch_size({"batch_size": value}) == expected

    def test_invalid_value(self):
        with pytest.raises(EventParseError, match="batch_size"):
            parse_batch_size({"batch_size": "many"})
