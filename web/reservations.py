"""
web/reservations.py -- Reservation pages and mutations, nested under /catways (auth required).

Routes:
  GET    /catways/reservations/list                      -- all reservations
  GET    /catways/reservation/add                        -- booking form; ?catway=<id> picks the catway
  GET    /catways/{catway_id}/reservations               -- reservations of one catway, JSON
  GET    /catways/{catway_id}/reservations/{reservation_id} -- details page
  POST   /catways/{catway_id}/reservations               -- book the catway
  DELETE /catways/{catway_id}/reservations/{reservation_id} -- cancel (forms: POST ?_method=DELETE)

Reservations point at a catway by number. The catway id in the details and
delete paths is checked for format only; the reservation is looked up by its
own id.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, JSONResponse, Response

from api.models import MessageResponse, ReservationResponse
from auth.dependencies import require_claim
from core.validation import parse_id
from marina.services import ReservationService
from web.responses import negotiate, pop_flash, read_payload, respond, templates

router = APIRouter(dependencies=[Depends(require_claim)])

_LIST_URL = "/catways/reservations/list"


def _reservations(request: Request) -> ReservationService:
    return request.app.state.reservations


@router.get("/catways/reservations/list", response_class=HTMLResponse)
def list_reservations(request: Request) -> Response:
    reservations = _reservations(request).list()
    return negotiate(
        request,
        [ReservationResponse.from_reservation(r) for r in reservations],
        "reservations/list.html",
        {"reservations": reservations, "message": pop_flash(request)},
    )


@router.get("/catways/reservation/add", response_class=HTMLResponse)
def add_form(request: Request, catway: Optional[str] = None) -> HTMLResponse:
    """Booking form. Without ?catway= the page only offers the catway picker."""
    service = _reservations(request)
    selected = service.catways.get(catway) if catway else None
    return templates.TemplateResponse(
        request,
        "reservations/add.html",
        {"catways": service.catways.list(), "selected": selected},
    )


@router.get("/catways/{catway_id}/reservations")
def catway_reservations(request: Request, catway_id: str) -> JSONResponse:
    reservations = _reservations(request).list_for_catway(catway_id)
    return JSONResponse(
        content=jsonable_encoder(
            [ReservationResponse.from_reservation(r) for r in reservations], by_alias=True
        )
    )


@router.get("/catways/{catway_id}/reservations/{reservation_id}", response_class=HTMLResponse)
def reservation_details(request: Request, catway_id: str, reservation_id: str) -> Response:
    parse_id(catway_id)
    reservation = _reservations(request).get(reservation_id)
    return negotiate(
        request,
        ReservationResponse.from_reservation(reservation),
        "reservations/details.html",
        {"reservation": reservation},
    )


@router.post("/catways/{catway_id}/reservations")
async def create_reservation(request: Request, catway_id: str) -> Response:
    """Book a catway. Catway number and boat name are taken from the catway itself."""
    data = await read_payload(request)
    reservation = _reservations(request).create(catway_id, data)
    return respond(
        request,
        ReservationResponse.from_reservation(reservation),
        _LIST_URL,
        f"Réservation de {reservation.client_name} enregistrée",
        status_code=201,
    )


@router.delete("/catways/{catway_id}/reservations/{reservation_id}")
def delete_reservation(request: Request, catway_id: str, reservation_id: str) -> Response:
    parse_id(catway_id)
    reservation = _reservations(request).delete(reservation_id)
    message = f"Réservation {reservation.id} supprimée"
    return respond(request, MessageResponse(message=message), _LIST_URL, message)
