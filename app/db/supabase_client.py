"""
supabase_client.py
------------------
Purpose:
    Supabase client construction and bearer-token user lookup for server routes.

Notes:
    - `create_service_client` uses the service role key and keeps no session
      state between calls; use it only from trusted backend code.
    - `create_anon_client` uses the public anon key with default session options.
    - `get_user_from_request` never raises; every failure resolves to None.
"""

from fastapi.concurrency import run_in_threadpool
from starlette.requests import Request
from supabase import AuthError, Client, ClientOptions, create_client

from app.config import settings
from app.infrastructure.observability.logging import get_logger, preview

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "


class SupabaseConfigError(RuntimeError):
    """Raised when Supabase credentials are missing from the environment."""


def create_service_client() -> Client:
    """
    Create a Supabase client with the service role key for admin operations.

    Session persistence and token auto-refresh are disabled so each call
    yields an independent client.

    Raises:
        SupabaseConfigError: If the project URL or service role key is missing
    """
    supabase_url = settings.NEXT_PUBLIC_SUPABASE_URL
    service_role_key = settings.SUPABASE_SERVICE_ROLE_KEY

    if not supabase_url or not service_role_key:
        raise SupabaseConfigError("Missing Supabase environment variables")

    return create_client(
        supabase_url,
        service_role_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )


def create_anon_client() -> Client:
    """
    Create a Supabase client with the anon key for client-scoped operations.

    Raises:
        SupabaseConfigError: If the project URL or anon key is missing
    """
    supabase_url = settings.NEXT_PUBLIC_SUPABASE_URL
    anon_key = settings.NEXT_PUBLIC_SUPABASE_ANON_KEY

    if not supabase_url or not anon_key:
        raise SupabaseConfigError("Missing Supabase environment variables")

    return create_client(supabase_url, anon_key)


def extract_bearer_token(authorization: str) -> str:
    """Strip a leading 'Bearer ' prefix; other values are returned unchanged."""
    if authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX) :]
    return authorization


def _lookup_user(token: str):
    client = create_anon_client()
    response = client.auth.get_user(token)
    return response.user if response else None


async def get_user_from_request(request: Request):
    """
    Resolve the Supabase user behind the request's Authorization header.

    Returns:
        The authenticated Supabase user, or None when the header is missing,
        the token is empty, the lookup fails, or anything unexpected happens.
    """
    try:
        authorization = request.headers.get("authorization")
        logger.info("Authorization header", present=bool(authorization))

        if not authorization:
            logger.info("No authorization header found")
            return None

        token = extract_bearer_token(authorization)
        logger.info("Token extracted", token_preview=preview(token, 20))

        if not token:
            logger.info("Token is empty after extraction")
            return None

        try:
            user = await run_in_threadpool(_lookup_user, token)
        except AuthError as e:
            logger.info("Supabase auth error", error=str(e))
            return None

        if user is None:
            logger.info("Supabase auth returned no user")
            return None

        logger.info("User authenticated", user_id=user.id)
        return user

    except Exception as e:
        logger.error(
            "Error getting user from request",
            error=str(e),
            error_type=type(e).__name__,
        )
        return None
