"""
Profile repository for Gmail connection fields on the Supabase `profiles` table.
Rows are created by signup; this module only updates existing rows.
"""

from datetime import UTC, datetime

from postgrest.exceptions import APIError
from supabase import Client

from app.infrastructure.observability.logging import get_logger
from app.services.gmail_service import TokenResponse

logger = get_logger(__name__)

PROFILES_TABLE = "profiles"


class ProfileUpdateError(Exception):
    """Raised when Supabase rejects a profile update."""

    def __init__(self, message: str, user_id: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.user_id = user_id
        self.details = details or {}


def build_gmail_connection_update(tokens: TokenResponse, now: datetime | None = None) -> dict:
    """Column values written when a user connects Gmail."""
    timestamp = now or datetime.now(UTC)
    return {
        "gmail_connected": True,
        "gmail_access_token": tokens.access_token,
        "gmail_refresh_token": tokens.refresh_token,
        "updated_at": timestamp.isoformat(),
    }


def save_gmail_connection(
    client: Client, user_id: str, tokens: TokenResponse, now: datetime | None = None
) -> None:
    """
    Store Gmail tokens on the user's profile row (last write wins).

    Raises:
        ProfileUpdateError: If Supabase reports an error for the update
    """
    payload = build_gmail_connection_update(tokens, now)

    try:
        client.table(PROFILES_TABLE).update(payload).eq("id", user_id).execute()
    except APIError as e:
        logger.error(
            "Error updating profile",
            user_id=user_id,
            error=e.message,
            error_code=e.code,
        )
        raise ProfileUpdateError(
            f"Failed to update profile: {e.message}",
            user_id=user_id,
            details={"code": e.code, "hint": e.hint, "details": e.details},
        ) from e

    logger.info(
        "Gmail connection saved to profile",
        user_id=user_id,
        has_refresh_token=bool(tokens.refresh_token),
    )
