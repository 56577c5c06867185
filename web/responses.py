"""
web/responses.py -- Shared rendering helpers for the web routers.

  templates            -- the Jinja2 environment (try_get_claim exposed as a global)
  flash / pop_flash    -- one-shot message kept in the signed session cookie
  read_payload         -- request body as a dict, from JSON or an HTML form
  respond              -- negotiated success: JSON body, or flash + 302 redirect
  render_error_page    -- HTML rendering of a normalized failure

render_error_page is attached to app.state.error_page by asgi.py; the exception
handlers in api/main.py call it for clients that did not ask for JSON. It may
run outside SessionMiddleware (unhandled 500s), so it never touches the session.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from auth.dependencies import try_get_claim
from core.errors import ValidationFailure
from core.negotiation import wants_json
from core.normalizer import Normalized

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
templates.env.globals["try_get_claim"] = try_get_claim

_FLASH_KEY = "message"
_BAD_BODY = "Le corps de la requête est invalide."


def flash(request: Request, message: str) -> None:
    request.session[_FLASH_KEY] = message


def pop_flash(request: Request) -> Optional[str]:
    """Return the pending flash message and forget it."""
    return request.session.pop(_FLASH_KEY, None)


async def read_payload(request: Request) -> dict[str, Any]:
    """Return the request body as a flat dict.

    JSON bodies must be objects. Form bodies keep the last value of repeated
    keys; the _method override field is dropped.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise ValidationFailure([_BAD_BODY]) from None
        if not isinstance(body, dict):
            raise ValidationFailure([_BAD_BODY])
        return body
    form = await request.form()
    return {key: value for key, value in form.items() if key != "_method"}


def respond(
    request: Request,
    payload: Any,
    redirect_to: str,
    message: str,
    status_code: int = 200,
) -> Response:
    """Finish a mutation: JSON for API and dashboard clients, redirect for forms."""
    if wants_json(request.headers, request.url.path, request.method):
        return JSONResponse(status_code=status_code, content=jsonable_encoder(payload, by_alias=True))
    flash(request, message)
    return RedirectResponse(redirect_to, status_code=302)


def negotiate(request: Request, payload: Any, template: str, context: dict[str, Any]) -> Response:
    """Render a read: JSON when asked for, otherwise the template."""
    if wants_json(request.headers, request.url.path, request.method):
        return JSONResponse(content=jsonable_encoder(payload, by_alias=True))
    return templates.TemplateResponse(request, template, context)


def render_error_page(request: Request, normalized: Normalized) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "error.html",
        {
            "status_code": normalized.status_code,
            "code": normalized.code,
            "messages": normalized.messages,
        },
        status_code=normalized.status_code,
    )
