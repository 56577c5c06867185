"""
asgi.py -- Application assembly for the marina backend.

This is the ONLY file that imports from both api/ and web/. It mounts the web
routers on the API app and hands the HTML error renderer to the exception
handlers through app.state, so api/main.py never imports web/.

Run with:  uvicorn asgi:app --reload
"""

from api.main import app
from web.catways import router as catways_router
from web.reservations import router as reservations_router
from web.responses import render_error_page
from web.routes import router as web_router
from web.users import router as users_router

app.state.error_page = render_error_page

# reservations before catways: /catways/reservations/... must not reach /catways/{catway_id}
app.include_router(web_router, tags=["Web UI"])
app.include_router(users_router, tags=["Users"])
app.include_router(reservations_router, tags=["Reservations"])
app.include_router(catways_router, tags=["Catways"])
