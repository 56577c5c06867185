"""
web/users.py -- Back-office user management pages (auth required).

Routes:
  GET    /users            -- user list
  GET    /users/create     -- creation form (registered before /users/{user_id})
  POST   /users            -- create, then redirect to /users
  GET    /users/{user_id}  -- one user, always JSON
  GET    /users/{user_id}/edit -- edit form
  PUT    /users/{user_id}  -- partial update (forms: POST ?_method=PUT)
  DELETE /users/{user_id}  -- delete (forms: POST ?_method=DELETE)

Hashed passwords never leave this module: every JSON body goes through
UserResponse.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from api.models import MessageResponse, UserResponse
from auth.dependencies import require_claim
from auth.services import UserService
from web.responses import negotiate, pop_flash, read_payload, respond, templates

router = APIRouter(dependencies=[Depends(require_claim)])


def _users(request: Request) -> UserService:
    return request.app.state.users


@router.get("/users", response_class=HTMLResponse)
def list_users(request: Request) -> Response:
    users = _users(request).list()
    return negotiate(
        request,
        [UserResponse.from_user(u) for u in users],
        "users/list.html",
        {"users": users, "message": pop_flash(request)},
    )


@router.get("/users/create", response_class=HTMLResponse)
def create_form(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "users/create.html", {})


@router.post("/users")
async def create_user(request: Request) -> Response:
    data = await read_payload(request)
    user = _users(request).create(data)
    return respond(
        request,
        UserResponse.from_user(user),
        "/users",
        f"Utilisateur {user.name} créé avec succès",
        status_code=201,
    )


@router.get("/users/{user_id}")
def get_user(request: Request, user_id: str) -> JSONResponse:
    user = _users(request).get(user_id)
    return JSONResponse(content=UserResponse.from_user(user).model_dump(by_alias=True))


@router.get("/users/{user_id}/edit", response_class=HTMLResponse)
def edit_form(request: Request, user_id: str) -> HTMLResponse:
    user = _users(request).get(user_id)
    return templates.TemplateResponse(
        request, "users/edit.html", {"user_record": user, "message": pop_flash(request)}
    )


@router.put("/users/{user_id}")
async def update_user(request: Request, user_id: str) -> Response:
    """Overwrite only the fields that were filled in; a blank password keeps the old one."""
    data = await read_payload(request)
    user = _users(request).update(user_id, data)
    return respond(request, UserResponse.from_user(user), "/users", "Utilisateur mis à jour avec succès")


@router.delete("/users/{user_id}")
def delete_user(request: Request, user_id: str) -> Response:
    user = _users(request).delete(user_id)
    message = f"Utilisateur {user.name} supprimé"
    return respond(request, MessageResponse(message=message), "/users", message)
