"""
Health check endpoints.
"""

from fastapi import APIRouter

from app.config import settings

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "gmail-connect"}


@router.get("/readyz")
async def readyz():
    """
    Readiness check for configuration the Gmail connect flow depends on.

    Clients are built per request, so readiness only verifies that their
    credentials are present.
    """
    checks = {}

    supabase_issues = []
    if not settings.NEXT_PUBLIC_SUPABASE_URL:
        supabase_issues.append("NEXT_PUBLIC_SUPABASE_URL not set")
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        supabase_issues.append("SUPABASE_SERVICE_ROLE_KEY not set")
    if not settings.NEXT_PUBLIC_SUPABASE_ANON_KEY:
        supabase_issues.append("NEXT_PUBLIC_SUPABASE_ANON_KEY not set")

    checks["supabase"] = {"ok": not supabase_issues, "project_ref": settings.project_ref()}
    if supabase_issues:
        checks["supabase"]["error"] = "; ".join(supabase_issues)

    google_ok = settings.google_oauth_configured()
    checks["google_oauth"] = {"ok": google_ok, "redirect_uri": settings.gmail_redirect_uri()}
    if not google_ok:
        checks["google_oauth"]["error"] = "GOOGLE_CLIENT_ID or GOOGLE_CLIENT_SECRET not set"

    overall_ok = all(check["ok"] for check in checks.values())
    return {"overall_ok": overall_ok, "environment": settings.environment, "checks": checks}
