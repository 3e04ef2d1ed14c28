# models/api/oauth_response.py
"""
OAuth API response models for the Gmail connect flow.
"""

from pydantic import BaseModel, Field


class GmailAuthURLResponse(BaseModel):
    """Response containing the Google OAuth URL for Gmail access."""

    auth_url: str = Field(..., description="Google OAuth authorization URL")
    state: str = Field(..., description="Base64-encoded state carrying the user id")
