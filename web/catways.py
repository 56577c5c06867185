"""
web/catways.py -- Catway pages and mutations (auth required).

Routes:
  GET    /catways                  -- list
  GET    /catways/add              -- creation form (registered before /catways/{catway_id})
  GET    /catways/{catway_id}      -- details page
  POST   /catways                  -- create, then redirect to /catways
  GET    /catways/{catway_id}/edit -- edit form
  PUT    /catways/{catway_id}      -- partial update (forms: POST ?_method=PUT)
  DELETE /catways/{catway_id}      -- delete; its reservations are kept

Every handler returns JSON instead of HTML or a redirect when the client asks
for it (core.negotiation.wants_json), including dashboard widgets.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response

from api.models import CatwayResponse, MessageResponse
from auth.dependencies import require_claim
from marina.schemas import CATWAY_TYPES
from marina.services import CatwayService
from web.responses import negotiate, pop_flash, read_payload, respond, templates

router = APIRouter(dependencies=[Depends(require_claim)])


def _catways(request: Request) -> CatwayService:
    return request.app.state.catways


@router.get("/catways", response_class=HTMLResponse)
def list_catways(request: Request) -> Response:
    catways = _catways(request).list()
    return negotiate(
        request,
        [CatwayResponse.from_catway(c) for c in catways],
        "catways/list.html",
        {"catways": catways, "message": pop_flash(request)},
    )


@router.get("/catways/add", response_class=HTMLResponse)
def add_form(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "catways/add.html", {"types": CATWAY_TYPES})


@router.get("/catways/{catway_id}", response_class=HTMLResponse)
def catway_details(request: Request, catway_id: str) -> Response:
    catway = _catways(request).get(catway_id)
    return negotiate(
        request,
        CatwayResponse.from_catway(catway),
        "catways/details.html",
        {"catway": catway, "message": pop_flash(request)},
    )


@router.post("/catways")
async def create_catway(request: Request) -> Response:
    data = await read_payload(request)
    catway = _catways(request).create(data)
    return respond(
        request,
        CatwayResponse.from_catway(catway),
        "/catways",
        f"Catway {catway.catway_number} créé avec succès",
        status_code=201,
    )


@router.get("/catways/{catway_id}/edit", response_class=HTMLResponse)
def edit_form(request: Request, catway_id: str) -> HTMLResponse:
    catway = _catways(request).get(catway_id)
    return templates.TemplateResponse(
        request,
        "catways/edit.html",
        {"catway": catway, "types": CATWAY_TYPES, "message": pop_flash(request)},
    )


@router.put("/catways/{catway_id}")
async def update_catway(request: Request, catway_id: str) -> Response:
    data = await read_payload(request)
    catway = _catways(request).update(catway_id, data)
    return respond(
        request,
        CatwayResponse.from_catway(catway),
        f"/catways/{catway.id}",
        "Catway mis à jour avec succès",
    )


@router.delete("/catways/{catway_id}")
def delete_catway(request: Request, catway_id: str) -> Response:
    catway = _catways(request).delete(catway_id)
    message = f"Catway {catway.catway_number} supprimé"
    return respond(request, MessageResponse(message=message), "/catways", message)
