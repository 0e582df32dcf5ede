"""
Lambda handler for API Gateway scan requests.

Serves the same routes as the HTTP API from a function with a hard
timeout. Each analyze call runs one tick whose budget is derived from the
invocation's remaining time.

Environment variables:
- POSTGRES_URL: Async SQLAlchemy URL of the job database
- DRIVE_API_KEY: Google API key with Drive read access
- AWS_REGION: AWS region for Rekognition and S3
- AWS_REFERENCE_BUCKET: Optional bucket keeping reference faces
- LOG_LEVEL: Logging level

Dependencies: facescan.api.deps, facescan.serverless.lambda_utils
System role: Lambda entry point for stateless analysis ticks
"""

import asyncio
import json
import logging
import os
from typing import Any, Dict

from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

from facescan import __version__
from facescan.api.deps.dependencies import ServiceCache
from facescan.api.routers.router_utils.error_handling import error_body, status_for
from facescan.core.exceptions import FaceScanException
from facescan.models import AnalyzeResponse, JobSnapshotResponse, ScanResponse
from facescan.observability.correlation import set_correlation_id
from facescan.serverless.lambda_utils.config import configure_secrets, validate_environment
from facescan.serverless.lambda_utils.event_parser import (
    ApiRequest,
    decode_face,
    parse_api_event,
    parse_batch_size,
)
from facescan.serverless.lambda_utils.exceptions import EventParseError, RouteNotFoundError

# Configure logging
logger = logging.getLogger(__name__)
logger.setLevel(os.getenv("LOG_LEVEL", "INFO"))

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Correlation-ID",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": CORS_HEADERS,
        "body": json.dumps(body, default=str),
    }


def _remaining_seconds(context: Any) -> float | None:
    get_remaining = getattr(context, "get_remaining_time_in_millis", None)
    if get_remaining is None:
        return None
    return get_remaining() / 1000.0


def build_service_cache() -> ServiceCache:
    """Service cache for one invocation (engines are bound to its event loop)."""
    return ServiceCache(pooled_engine=False)


async def _dispatch(request: ApiRequest, context: Any) -> Dict[str, Any]:
    if request.action == "health":
        return _response(200, {"status": "healthy", "version": __version__})

    cache = build_service_cache()
    try:
        service = cache.job_service()

        if request.action == "create_scan":
            url = request.body.get("url")
            if not isinstance(url, str) or not url.strip():
                raise EventParseError("url is required")
            job = await service.create_scan_job(url)
            return _response(
                201,
                ScanResponse(
                    job_id=job.id,
                    status=job.status,
                    source_type=job.source_type,
                    item_count=job.item_count,
                ).model_dump(mode="json"),
            )

        if request.action == "analyze":
            tick = await service.analyze(
                request.job_id,
                token=request.body.get("token") or None,
                reference_bytes=decode_face(request.body),
                batch_size=parse_batch_size(request.body),
                remaining_seconds=_remaining_seconds(context),
            )
            return _response(200, AnalyzeResponse.from_tick(tick).model_dump(mode="json"))

        job = await service.get_job(request.job_id)
        return _response(200, JobSnapshotResponse.from_record(job).model_dump(mode="json"))
    finally:
        await cache.aclose()


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for API Gateway HTTP API events.

    Args:
        event: API Gateway payload format 2.0 event
        context: Lambda context object

    Returns:
        Dict with statusCode, headers and JSON body
    """
    headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}
    correlation_id = set_correlation_id(headers.get("x-correlation-id"))
    logger.info(
        "handler - Received API event",
        extra={"raw_path": event.get("rawPath"), "correlation_id": correlation_id},
    )

    if not getattr(handler, "_configured", False):
        configure_secrets()
        try:
            validate_environment()
        except ValueError as e:
            logger.error("handler - ValueError: %s", e)
            return _response(500, {"error": "ConfigurationError", "message": str(e)})
        handler._configured = True

    try:
        request = parse_api_event(event)
        return asyncio.run(_dispatch(request, context))

    except RouteNotFoundError as e:
        logger.warning("handler - RouteNotFoundError: %s", e)
        return _response(404, {"error": "RouteNotFound", "message": str(e)})

    except EventParseError as e:
        logger.warning("handler - EventParseError: %s", e)
        return _response(400, {"error": "InvalidRequest", "message": str(e)})

    except FaceScanException as e:
        code = status_for(e)
        log = logger.warning if code < 500 else logger.error
        log("handler - %s: %s", type(e).__name__, e)
        return _response(code, error_body(e))

    except Exception as e:  # pylint: disable=broad-except
        logger.exception("handler - %s: %s", type(e).__name__, e)
        return _response(500, {"error": "InternalError", "message": "Unexpected server error"})
