"""
OAuth state parameter encoding for the Gmail connect flow.

The state is base64-encoded JSON round-tripped through Google so the callback
knows which app user started the connection: ``base64('{"userId": "..."}')``.
"""

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Literal

from app.infrastructure.observability.logging import get_logger, preview

logger = get_logger(__name__)

StateFailure = Literal["missing", "undecodable", "missing_user_id"]


@dataclass(frozen=True)
class StatePayload:
    """Decoded state contents. Only the initiating user is consumed."""

    user_id: str


@dataclass(frozen=True)
class StateDecodeResult:
    payload: StatePayload | None = None
    failure: StateFailure | None = None

    @property
    def ok(self) -> bool:
        return self.payload is not None


def encode_state(user_id: str) -> str:
    """Build the state parameter for a user starting the Gmail connection."""
    raw = json.dumps({"userId": user_id}, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def _b64decode(value: str) -> bytes:
    # Accept URL-safe alphabets and stripped padding from intermediaries
    normalized = value.strip().replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    return base64.b64decode(normalized, validate=True)


def decode_state(state: str | None) -> StateDecodeResult:
    """
    Decode the state parameter into a StatePayload.

    Never raises. Decode errors are logged and reported as a failure kind so
    callers can treat them the same as a payload without ``userId``.
    """
    if not state:
        logger.warning("OAuth state parameter missing")
        return StateDecodeResult(failure="missing")

    try:
        data = json.loads(_b64decode(state).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError, RecursionError) as e:
        logger.error(
            "Error parsing state",
            state_preview=preview(state),
            error=str(e),
            error_type=type(e).__name__,
        )
        return StateDecodeResult(failure="undecodable")

    user_id = data.get("userId") if isinstance(data, dict) else None
    if not user_id or not isinstance(user_id, str):
        logger.warning("OAuth state has no userId", state_preview=preview(state))
        return StateDecodeResult(failure="missing_user_id")

    return StateDecodeResult(payload=StatePayload(user_id=user_id))
