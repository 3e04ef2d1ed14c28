"""
Gmail OAuth routes for the mobile connection flow.
"""

from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse

from app.db.supabase_client import create_service_client, get_user_from_request
from app.infrastructure.observability.logging import get_logger, preview
from app.models.api.oauth_response import GmailAuthURLResponse
from app.repositories.profile_repository import ProfileUpdateError, save_gmail_connection
from app.services.gmail_service import GoogleOAuthError, generate_auth_url, get_tokens
from app.services.oauth_state import decode_state, encode_state
from app.templates.callback_pages import render_error_page, render_success_page

logger = get_logger(__name__)

router = APIRouter()

NO_CODE_MESSAGE = "No authorization code provided"
INVALID_STATE_MESSAGE = "Invalid state parameter"
NO_ACCESS_TOKEN_MESSAGE = "Failed to get access token from Google"
SAVE_FAILED_MESSAGE = "Failed to save Gmail connection"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


def _error_page(message: str, status_code: int) -> HTMLResponse:
    return HTMLResponse(content=render_error_page(message), status_code=status_code)


@router.get("/auth-url", response_model=GmailAuthURLResponse)
async def get_oauth_url(request: Request):
    """
    Generate the Google OAuth URL the app opens to connect Gmail.

    The caller is resolved from its Supabase access token; the returned state
    carries the user id back to the callback.

    Raises:
        401: Missing or invalid bearer token
        503: Google OAuth is not configured
    """
    user = await get_user_from_request(request)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    state = encode_state(user.id)

    try:
        auth_url = generate_auth_url(state)
    except GoogleOAuthError as e:
        logger.error(
            "Gmail OAuth URL generation failed",
            user_id=user.id,
            error=str(e),
            error_code=e.error_code,
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Gmail service temporarily unavailable",
        ) from None

    logger.info("Gmail OAuth URL generated", user_id=user.id, state_preview=preview(state))
    return GmailAuthURLResponse(auth_url=auth_url, state=state)


@router.get("/callback", response_class=HTMLResponse)
async def oauth_callback(
    code: str | None = Query(None, description="Authorization code from Google"),
    state: str | None = Query(None, description="Base64-encoded JSON state with userId"),
    error: str | None = Query(None, description="OAuth error if any"),
):
    """
    Handle the OAuth redirect from Google and store the Gmail tokens.

    Always answers with an HTML page that deep-links back into the app.
    """
    try:
        if error:
            logger.warning("OAuth callback received error", error=error)

        if not code:
            logger.warning("OAuth callback missing authorization code")
            return _error_page(NO_CODE_MESSAGE, status.HTTP_400_BAD_REQUEST)

        decoded = decode_state(state)
        if not decoded.ok:
            logger.warning("OAuth callback state rejected", reason=decoded.failure)
            return _error_page(INVALID_STATE_MESSAGE, status.HTTP_400_BAD_REQUEST)

        user_id = decoded.payload.user_id
        logger.info(
            "Processing Gmail OAuth callback",
            user_id=user_id,
            code_preview=preview(code, 12),
        )

        tokens = await get_tokens(code)

        if not tokens or not tokens.access_token:
            logger.warning("Google returned no access token", user_id=user_id)
            return _error_page(NO_ACCESS_TOKEN_MESSAGE, status.HTTP_400_BAD_REQUEST)

        supabase = create_service_client()

        try:
            await run_in_threadpool(save_gmail_connection, supabase, user_id, tokens)
        except ProfileUpdateError as e:
            logger.error("Error updating profile", user_id=user_id, error=str(e))
            return _error_page(SAVE_FAILED_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)

        logger.info("Gmail OAuth callback completed successfully", user_id=user_id)
        return HTMLResponse(content=render_success_page())

    except Exception as e:
        logger.error(
            "Gmail callback error",
            error=str(e),
            error_type=type(e).__name__,
        )
        return _error_page(UNEXPECTED_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)
