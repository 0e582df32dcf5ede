"""
Test suite for HttpJobTransport.

Uses a mocked requests session to check request shapes and the mapping
of HTTP failures to retryable and fatal TransportErrors.
"""

from unittest.mock import MagicMock

import pytest
import requests

from facescan.client.exceptions import TransportError
from facescan.client.transport import HttpJobTransport


def response(status_code: int = 200, body=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body if body is not None else {}
    resp.text = "<html>gateway timeout</html>"
    return resp


@pytest.fixture
def session() -> MagicMock:
    return MagicMock()


@pytest.fixture
def transport(session) -> HttpJobTransport:
    return HttpJobTransport("http://api.test/api/v1/", timeout=5.0, session=session)


def test_create_scan_posts_json(transport, session):
    session.request.return_value = response(201, {"job_id": "abc"})

    assert transport.create_scan("https://drive.google.com/drive/folders/x") == {"job_id": "abc"}
    session.request.assert_called_once_with(
        "POST",
        "http://api.test/api/v1/scans",
        timeout=5.0,
        json={"url": "https://drive.google.com/drive/folders/x"},
    )


def test_analyze_sends_multipart_form(transport, session):
    session.request.return_value = response(200, {"next_token": None})

    transport.analyze("job-1", token="tok", face=b"face", face_content_type="image/png", batch_size=3)

    args, kwargs = session.request.call_args
    assert args == ("POST", "http://api.test/api/v1/jobs/job-1/analyze")
    assert kwargs["data"] == {"token": "tok", "batch_size": "3"}
    assert kwargs["files"] == {"face": ("face", b"face", "image/png")}


def test_analyze_without_face_or_token(transport, session):
    session.request.return_value = response(200, {})

    transport.analyze("job-1")

    _, kwargs = session.request.call_args
    assert kwargs["data"] == {}
    assert kwargs["files"] is None


def test_get_job(transport, session):
    session.request.return_value = response(200, {"status": "processing"})

    assert transport.get_job("job-1") == {"status": "processing"}
    assert session.request.call_args.args == ("GET", "http://api.test/api/v1/jobs/job-1")


def test_connection_error_is_retryable(transport, session):
    session.request.side_effect = requests.ConnectionError("refused")

    with pytest.raises(TransportError) as exc_info:
        transport.get_job("job-1")

    assert exc_info.value.retryable is True
    assert exc_info.value.status_code is None


@pytest.mark.parametrize("status_code", [408, 409, 429, 500, 502, 504])
def test_transient_statuses_are_retryable(transport, session, status_code):
    session.request.return_value = response(status_code, {"detail": {"message": "try later"}})

    with pytest.raises(TransportError) as exc_info:
        transport.get_job("job-1")

    assert exc_info.value.retryable is True
    assert exc_info.value.status_code == status_code


@pytest.mark.parametrize("status_code", [400, 404, 422])
def test_client_errors_are_fatal(transport, session, status_code):
    session.request.return_value = response(status_code, {"detail": {"message": "Job not found: x"}})

    with pytest.raises(TransportError, match="Job not found") as exc_info:
        transport.get_job("job-1")

    assert exc_info.value.retryable is False


def test_non_json_error_body_uses_text(transport, session):
    session.request.return_value = response(504, ValueError("no json"))

    with pytest.raises(TransportError, match="gateway timeout"):
        transport.get_job("job-1")


def test_invalid_json_success_body(transport, session):
    session.request.return_value = response(200, ValueError("no json"))

    with pytest.raises(TransportError, match="invalid JSON"):
        transport.get_job("job-1")
