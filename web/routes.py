"""
web/routes.py -- Public pages, login flow, dashboard and first-run setup.

The entity pages live in web/users.py, web/catways.py and web/reservations.py.

Routes:
  GET      /                          -- home page with the login form (public)
  POST     /authenticate              -- form login; renders the dashboard with the cookie set
  GET|POST /logout                    -- delete the cookie, back to /
  GET      /dashboard                 -- dashboard (auth required)
  GET      /dashboard/{entity}/{action} -- dashboard widget form (auth required)
  GET      /setup                     -- first-run wizard (404 once a user exists)
  POST     /setup                     -- create the first user

A failed login re-renders the home page with the normalized status (401) and
one generic message, whichever of email or password was wrong.
"""

import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from auth.dependencies import require_claim, try_get_claim
from auth.services import UserService
from auth.store import UserStore
from auth.tokens import TokenService, authenticate_user, clear_auth_cookie, issue_session, set_auth_cookie
from core.config import get_settings
from core.errors import AuthenticationFailure, DuplicateKeyError, NotFoundError, ValidationFailure
from core.negotiation import wants_json
from core.normalizer import normalize
from web.responses import flash, pop_flash, templates

logger = logging.getLogger("marina.web")

router = APIRouter()

# entity -> actions offered as dashboard widgets
_WIDGETS: dict[str, tuple[str, ...]] = {
    "user": ("edit", "delete"),
    "catway": ("edit", "delete", "details"),
    "reservation": ("details", "delete"),
}

_PASSWORD_MISMATCH = "Les mots de passe ne correspondent pas."


def _dashboard_context(request: Request, claim: dict, message=None) -> dict:
    return {
        "user": claim,
        "message": message,
        "catway_count": len(request.app.state.catways.list()),
        "reservation_count": len(request.app.state.reservations.list()),
    }


# ---------------------------------------------------------------------------
# Home and login
# ---------------------------------------------------------------------------


@router.get("/", response_class=HTMLResponse)
def home(request: Request) -> Response:
    if try_get_claim(request) is not None:
        return RedirectResponse("/dashboard", status_code=302)
    return templates.TemplateResponse(request, "home.html", {"message": pop_flash(request)})


@router.post("/authenticate", response_class=HTMLResponse)
def authenticate(
    request: Request,
    email: str = Form(default=""),
    password: str = Form(default=""),
) -> Response:
    """Handle the home page login form."""
    user_store: UserStore = request.app.state.user_store
    tokens: TokenService = request.app.state.tokens
    try:
        user = authenticate_user(user_store, email, password)
    except AuthenticationFailure as exc:
        if wants_json(request.headers, request.url.path, request.method):
            raise
        normalized = normalize(exc)
        return templates.TemplateResponse(
            request,
            "home.html",
            {"message": normalized.message, "email": email},
            status_code=normalized.status_code,
        )

    token = issue_session(tokens, user)
    logger.info("User %d logged in", user.id)
    resp = templates.TemplateResponse(
        request,
        "dashboard.html",
        _dashboard_context(request, user.to_claim(), "Connexion réussie."),
    )
    set_auth_cookie(resp, token, secure=get_settings().secure_cookies)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.api_route("/logout", methods=["GET", "POST"])
def logout(request: Request) -> RedirectResponse:
    """Delete the session cookie and go back to the home page."""
    resp = RedirectResponse("/", status_code=302)
    clear_auth_cookie(resp)
    return resp


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(request: Request, claim: dict = Depends(require_claim)) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        _dashboard_context(request, claim, pop_flash(request)),
    )


@router.get("/dashboard/{entity}/{action}", response_class=HTMLResponse)
def dashboard_widget(
    request: Request,
    entity: str,
    action: str,
    claim: dict = Depends(require_claim),
) -> HTMLResponse:
    """Render one of the small forms the dashboard loads into its side panel.

    Only the combinations in _WIDGETS exist; anything else is a 404.
    """
    if action not in _WIDGETS.get(entity, ()):
        raise NotFoundError()
    if entity == "user":
        items = request.app.state.users.list()
    elif entity == "catway":
        items = request.app.state.catways.list()
    else:
        items = request.app.state.reservations.list()
    return templates.TemplateResponse(
        request,
        "dashboard_widget.html",
        {"entity": entity, "action": action, "items": items, "user": claim},
    )


# ---------------------------------------------------------------------------
# First-run setup
# ---------------------------------------------------------------------------


@router.get("/setup", response_class=HTMLResponse)
def setup_form(request: Request) -> HTMLResponse:
    """Render the first-run wizard. Returns 404 once a user exists."""
    if not getattr(request.app.state, "setup_required", True):
        raise HTTPException(status_code=404)
    return templates.TemplateResponse(request, "setup.html", {})


@router.post("/setup", response_class=HTMLResponse)
def setup_post(
    request: Request,
    name: str = Form(default=""),
    email: str = Form(default=""),
    password: str = Form(default=""),
    confirm_password: str = Form(default=""),
) -> Response:
    """Create the first user.

    has_users() is checked again here: two requests can both pass the setup
    middleware before either inserts, and only one of them may win.
    """
    users: UserService = request.app.state.users
    if users.store.has_users():
        request.app.state.setup_required = False
        return RedirectResponse("/", status_code=302)

    form = {"name": name, "email": email}
    if password != confirm_password:
        return templates.TemplateResponse(
            request, "setup.html", {"errors": [_PASSWORD_MISMATCH], "form": form}, status_code=400
        )
    try:
        user = users.create({"name": name, "email": email, "password": password})
    except (ValidationFailure, DuplicateKeyError) as exc:
        normalized = normalize(exc)
        return templates.TemplateResponse(
            request,
            "setup.html",
            {"errors": normalized.messages, "form": form},
            status_code=normalized.status_code,
        )

    request.app.state.setup_required = False
    logger.info("First user %d created via setup", user.id)
    flash(request, "Compte créé, vous pouvez vous connecter.")
    return RedirectResponse("/", status_code=302)
