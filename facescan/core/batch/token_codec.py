"""
Continuation token codec.

Tokens are compact JSON, zlib-compressed and URL-safe base64 encoded.
They are opaque to clients but not signed: the orchestrator still checks
the job id against the job being acted upon.

Dependencies: pydantic, zlib, base64
System role: Codec boundary for resume state handed to clients
"""

import base64
import binascii
import json
import zlib

from pydantic import ValidationError as PydanticValidationError

from facescan.core.batch.models import ContinuationState
from facescan.core.exceptions import TokenDecodeError

TOKEN_VERSION = 1
DEFAULT_MAX_TOKEN_LENGTH = 4096


def encode_token(state: ContinuationState) -> str:
    """
    Encode resume state into an opaque string.

    Args:
        state: Continuation state to hand to the client

    Returns:
        str: URL-safe token
    """
    payload = {
        "v": TOKEN_VERSION,
        "job": str(state.job_id),
        "ref": state.reference.model_dump(exclude_none=True),
        "next": state.next_index,
    }
    raw = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
    compressed = zlib.compress(raw, level=9)
    return base64.urlsafe_b64encode(compressed).decode("ascii")


def decode_token(token: str, max_length: int = DEFAULT_MAX_TOKEN_LENGTH) -> ContinuationState:
    """
    Decode a token produced by encode_token.

    Fails closed: any malformed, foreign or oversized input raises
    TokenDecodeError instead of falling back to a default state.

    Args:
        token: Token received from the client
        max_length: Longest token accepted

    Returns:
        ContinuationState: Decoded resume state

    Raises:
        TokenDecodeError: Token cannot be decoded or validated
    """
    if not isinstance(token, str) or not token.strip():
        raise TokenDecodeError("Continuation token is empty")
    if len(token) > max_length:
        raise TokenDecodeError(
            "Continuation token is too long", {"length": len(token), "max_length": max_length}
        )

    try:
        compressed = base64.urlsafe_b64decode(token.strip().encode("ascii"))
        raw = zlib.decompress(compressed)
        payload = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError, zlib.error) as e:
        raise TokenDecodeError(f"Continuation token is malformed: {type(e).__name__}") from e

    if not isinstance(payload, dict):
        raise TokenDecodeError("Continuation token payload is not an object")
    if payload.get("v") != TOKEN_VERSION:
        raise TokenDecodeError(
            "Unsupported continuation token version", {"version": payload.get("v")}
        )

    try:
        return ContinuationState(
            job_id=payload["job"],
            reference=payload["ref"],
            next_index=payload["next"],
        )
    except KeyError as e:
        raise TokenDecodeError(f"Continuation token is missing field {e.args[0]!r}") from e
    except PydanticValidationError as e:
        raise TokenDecodeError(
            "Continuation token failed validation", {"errors": e.error_count()}
        ) from e
