"""
API Gateway event parsing utilities for Lambda.

Handles HTTP API (payload format 2.0) events. Binary request fields such
as the reference face travel base64-encoded inside a JSON body.
"""

import base64
import binascii
import json
import logging
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict

from facescan.serverless.lambda_utils.exceptions import EventParseError, RouteNotFoundError

logger = logging.getLogger(__name__)

ROUTES = (
    ("POST", re.compile(r"^(?:/api/v1)?/scans/?$"), "create_scan"),
    ("POST", re.compile(r"^(?:/api/v1)?/jobs/(?P<job_id>[^/]+)/analyze/?$"), "analyze"),
    ("GET", re.compile(r"^(?:/api/v1)?/jobs/(?P<job_id>[^/]+)/?$"), "get_job"),
    ("GET", re.compile(r"^(?:/api/v1)?/health/?$"), "health"),
)


@dataclass
class ApiRequest:
    """Parsed API Gateway request."""

    action: str
    job_id: uuid.UUID | None = None
    body: Dict[str, Any] = field(default_factory=dict)


def parse_api_event(event: Dict[str, Any]) -> ApiRequest:
    """
    Parse an API Gateway HTTP API event into an ApiRequest.

    Event shape (relevant fields):
    {
        "rawPath": "/api/v1/jobs/<job_id>/analyze",
        "requestContext": {"http": {"method": "POST"}},
        "body": "{\"face\": \"<base64>\", \"token\": \"...\"}",
        "isBase64Encoded": false
    }

    Raises:
        RouteNotFoundError: No route matches method and path
        EventParseError: Malformed body or path parameter
    """
    method = (
        event.get("requestContext", {}).get("http", {}).get("method")
        or event.get("httpMethod")
        or ""
    ).upper()
    path = event.get("rawPath") or event.get("path") or ""

    for route_method, pattern, action in ROUTES:
        match = pattern.match(path)
        if route_method == method and match:
            break
    else:
        raise RouteNotFoundError(f"No route for {method} {path}")

    job_id = None
    raw_job_id = match.groupdict().get("job_id")
    if raw_job_id is not None:
        try:
            job_id = uuid.UUID(raw_job_id)
        except ValueError as e:
            raise EventParseError(f"Invalid job id: {raw_job_id}") from e

    request = ApiRequest(action=action, job_id=job_id, body=_parse_body(event))
    logger.info(
        "parse_api_event - Parsed request",
        extra={"action": action, "job_id": str(job_id) if job_id else None},
    )
    return request


def _parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    raw = event.get("body")
    if not raw:
        return {}
    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw).decode("utf-8")
        body = json.loads(raw)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("_parse_body - %s: %s", type(e).__name__, e)
        raise EventParseError(f"Invalid JSON body: {e}") from e
    if not isinstance(body, dict):
        raise EventParseError("Request body must be a JSON object")
    return body


def decode_face(body: Dict[str, Any]) -> bytes | None:
    """
    Decode the base64 reference face from a request body.

    Accepts plain base64 or a data URL (``data:image/jpeg;base64,...``).

    Raises:
        EventParseError: Field present but not valid base64
    """
    value = body.get("face")
    if not value:
        return None
    if not isinstance(value, str):
        raise EventParseError("face must be a base64 string")
    if value.startswith("data:") and "," in value:
        value = value.split(",", 1)[1]
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as e:
        raise EventParseError(f"face is not valid base64: {e}") from e


def parse_batch_size(body: Dict[str, Any]) -> int | None:
    """
    Read the optional batch size.

    Raises:
        EventParseError: Value is not an integer
    """
    value = body.get("batch_size")
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise EventParseError(f"batch_size must be an integer, got {value!r}") from e
