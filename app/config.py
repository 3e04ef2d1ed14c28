from pathlib import Path
from urllib.parse import urlparse

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Supabase settings (shared with the Next.js frontend, hence the prefix)
    NEXT_PUBLIC_SUPABASE_URL: str | None = None
    NEXT_PUBLIC_SUPABASE_ANON_KEY: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # Gmail OAuth settings
    GOOGLE_CLIENT_ID: str | None = None
    GOOGLE_CLIENT_SECRET: str | None = None
    GOOGLE_REDIRECT_URI: str | None = None

    # Mobile app deep link
    APP_DEEP_LINK_SCHEME: str = "foundmoney"

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def project_ref(self) -> str | None:
        """
        Extract the Supabase project ref from the project URL host, e.g.
        https://ykvceus...supabase.co -> ykvceus...
        """
        if not self.NEXT_PUBLIC_SUPABASE_URL:
            return None
        try:
            host = urlparse(self.NEXT_PUBLIC_SUPABASE_URL).hostname or ""
            return host.split(".")[0] or None
        except ValueError:
            return None

    def gmail_redirect_uri(self) -> str:
        """Get Gmail OAuth redirect URI with fallback."""
        if self.GOOGLE_REDIRECT_URI:
            return self.GOOGLE_REDIRECT_URI
        # Default for local development
        return "http://localhost:8000/api/gmail/callback"

    def supabase_configured(self) -> bool:
        return bool(self.NEXT_PUBLIC_SUPABASE_URL and self.SUPABASE_SERVICE_ROLE_KEY)

    def google_oauth_configured(self) -> bool:
        return bool(self.GOOGLE_CLIENT_ID and self.GOOGLE_CLIENT_SECRET)


settings = Settings()
