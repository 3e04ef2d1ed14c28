"""
Google OAuth service for the Gmail connect flow.
Handles authorization URL generation and authorization code exchange.
"""

from urllib.parse import urlencode

import httpx

from app.config import settings
from app.infrastructure.observability.logging import get_logger, preview

logger = get_logger(__name__)

# OAuth configuration
GOOGLE_OAUTH_BASE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

GMAIL_SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/userinfo.email",
]


class GoogleOAuthError(Exception):
    """Custom exception for Google OAuth-related errors."""

    def __init__(
        self, message: str, error_code: str | None = None, response_data: dict | None = None
    ):
        super().__init__(message)
        self.error_code = error_code
        self.response_data = response_data or {}


class TokenResponse:
    """Structured representation of OAuth token response."""

    def __init__(self, data: dict):
        self.access_token = data.get("access_token")
        self.refresh_token = data.get("refresh_token")
        self.token_type = data.get("token_type", "Bearer")
        self.expires_in = data.get("expires_in")
        self.scope = data.get("scope", "")

    def is_valid(self) -> bool:
        """Check if token response contains required fields."""
        return bool(self.access_token)


class GmailOAuthService:
    """
    Service for Google OAuth 2.0 operations needed to connect Gmail.

    The token exchange is a single request; failures are terminal for the
    current callback.
    """

    def __init__(self):
        self.client_id = settings.GOOGLE_CLIENT_ID
        self.client_secret = settings.GOOGLE_CLIENT_SECRET
        self.redirect_uri = settings.gmail_redirect_uri()
        self._validate_config()

    def _validate_config(self) -> None:
        """Validate Google OAuth configuration."""
        if not self.client_id:
            raise GoogleOAuthError("GOOGLE_CLIENT_ID not configured", error_code="config_error")
        if not self.client_secret:
            raise GoogleOAuthError(
                "GOOGLE_CLIENT_SECRET not configured", error_code="config_error"
            )

        logger.info(
            "Google OAuth service initialized",
            client_id_preview=preview(self.client_id, 12),
            redirect_uri=self.redirect_uri,
            total_scopes=len(GMAIL_SCOPES),
        )

    def generate_auth_url(self, state: str) -> str:
        """
        Generate Google OAuth authorization URL for Gmail access.

        Args:
            state: Encoded state identifying the initiating user

        Returns:
            str: Complete OAuth authorization URL
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(GMAIL_SCOPES),
            "response_type": "code",
            "state": state,
            "access_type": "offline",  # Request refresh token
            "prompt": "consent",  # Force consent screen to get refresh token
        }

        oauth_url = f"{GOOGLE_OAUTH_BASE_URL}?{urlencode(params)}"

        logger.info(
            "OAuth URL generated",
            state_preview=preview(state),
            url_length=len(oauth_url),
        )

        return oauth_url

    async def get_tokens(self, authorization_code: str) -> TokenResponse:
        """
        Exchange authorization code for access and refresh tokens.

        Args:
            authorization_code: Authorization code from OAuth callback

        Returns:
            TokenResponse: Parsed token response. ``access_token`` is None when
            Google answered successfully without one.

        Raises:
            GoogleOAuthError: If Google rejects the exchange or the request fails
        """
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": authorization_code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        }

        logger.info(
            "Exchanging authorization code for Gmail tokens",
            code_preview=preview(authorization_code, 12),
        )

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data=data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.RequestError as e:
            logger.error(
                "Network error during token exchange",
                code_preview=preview(authorization_code, 12),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise GoogleOAuthError(f"Network error during token exchange: {e}") from e

        return self._handle_token_response(response)

    def _handle_token_response(self, response: httpx.Response) -> TokenResponse:
        """
        Handle and validate token response from Google.

        Raises:
            GoogleOAuthError: If response is an error or cannot be parsed
        """
        if not response.is_success:
            try:
                error_data = response.json()
            except ValueError:
                logger.error(
                    "Google code exchange failed with non-JSON response",
                    status_code=response.status_code,
                    response_text=response.text[:200],
                )
                raise GoogleOAuthError(
                    f"Google OAuth service error (HTTP {response.status_code})"
                ) from None

            error_code = error_data.get("error", "unknown_error")
            logger.error(
                "Google code exchange failed",
                status_code=response.status_code,
                error_code=error_code,
                error_description=error_data.get("error_description", "No description provided"),
            )
            raise GoogleOAuthError(
                self._map_google_error(error_code),
                error_code=error_code,
                response_data=error_data,
            )

        try:
            token_response = TokenResponse(response.json())
        except (ValueError, AttributeError) as e:
            logger.error(
                "Failed to parse Google code exchange response",
                response_text=response.text[:200],
                error=str(e),
            )
            raise GoogleOAuthError(f"Failed to parse Google response: {e}") from e

        logger.info(
            "Google code exchange completed",
            token_type=token_response.token_type,
            expires_in=token_response.expires_in,
            has_access_token=bool(token_response.access_token),
            has_refresh_token=bool(token_response.refresh_token),
        )
        return token_response

    def _map_google_error(self, error_code: str) -> str:
        """Map Google OAuth error codes to user-friendly messages."""
        error_messages = {
            "access_denied": "Gmail access was denied. Please try connecting again.",
            "invalid_grant": "Authorization code expired or invalid. Please try connecting Gmail again.",
            "invalid_client": "Gmail connection configuration error. Please contact support.",
            "invalid_request": "Invalid Gmail connection request. Please try again.",
            "unauthorized_client": "Gmail connection not authorized. Please contact support.",
        }

        return error_messages.get(
            error_code,
            f"Gmail connection failed ({error_code}). Please try again or contact support.",
        )


_service: GmailOAuthService | None = None


def get_gmail_oauth_service() -> GmailOAuthService:
    """Return the shared service, building it on first use."""
    global _service
    if _service is None:
        _service = GmailOAuthService()
    return _service


# Convenience functions for easy import
def generate_auth_url(state: str) -> str:
    """Generate Google OAuth authorization URL for Gmail."""
    return get_gmail_oauth_service().generate_auth_url(state)


async def get_tokens(authorization_code: str) -> TokenResponse:
    """Exchange an authorization code for Gmail tokens."""
    return await get_gmail_oauth_service().get_tokens(authorization_code)
