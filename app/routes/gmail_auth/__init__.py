"""Gmail auth route aggregation."""

from fastapi import APIRouter

from app.routes.gmail_auth import oauth

router = APIRouter(prefix="/api/gmail", tags=["gmail-auth"])

router.include_router(oauth.router)
