"""
HTML pages returned by the Gmail OAuth callback.

Both pages hand control back to the mobile app through its deep link; the
error page carries an HTML-escaped message.
"""

import html
import json
from functools import lru_cache
from pathlib import Path
from string import Template

from app.config import settings

_STATIC_DIR = Path(__file__).resolve().parents[1] / "static"
_SUCCESS_TEMPLATE = "gmail_connected.html"
_ERROR_TEMPLATE = "gmail_connection_failed.html"

APP_NAME = "Found Money"


@lru_cache(maxsize=4)
def _load_template(name: str) -> Template:
    return Template((_STATIC_DIR / name).read_text(encoding="utf-8"))


def deep_link(success: bool) -> str:
    """Deep link the app listens on after the Gmail connection attempt."""
    outcome = "true" if success else "false"
    return f"{settings.APP_DEEP_LINK_SCHEME}://gmail-connected?success={outcome}"


def _js_string(value: str) -> str:
    # Safe inside an inline <script> block
    return json.dumps(value).replace("</", "<\\/")


def render_success_page() -> str:
    """Green confirmation page that immediately opens the success deep link."""
    return _load_template(_SUCCESS_TEMPLATE).substitute(
        app_name=html.escape(APP_NAME),
        deep_link_js=_js_string(deep_link(True)),
    )


def render_error_page(message: str) -> str:
    """Red failure page showing ``message`` before opening the failure deep link."""
    return _load_template(_ERROR_TEMPLATE).substitute(
        message=html.escape(message),
        deep_link_js=_js_string(deep_link(False)),
    )
