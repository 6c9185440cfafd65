from itertools import chain

from fastapi import FastAPI, Request, Response, status
from loguru import logger

from emma.core import config
from emma.core.errors import register_exception_handlers, route_table
from emma.core.logging import setup_logging
from emma.core.responses import error_response
from emma.db import database
from emma.routes import (
    addresses,
    areas,
    communities,
    events,
    event_types,
    f_groups,
    geolocation,
    groups,
    i_groups,
    nwta_events,
    people,
    prospects,
    registrants,
    transactions,
    users,
    venues,
    warriors,
)
from emma.routes import config as config_routes

setup_logging(config.LOG_LEVEL)

# Create FastAPI app
app = FastAPI(title="Emma API")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ", ".join(config.ALLOWED_METHODS),
    "Access-Control-Allow-Headers": ", ".join(config.ALLOWED_HEADERS),
}

# Paths under /api that answer without a datastore
DATASTORE_FREE_PATHS = ("/api/geolocation", "/api/config")


def needs_datastore(path: str) -> bool:
    if not path.startswith("/api/"):
        return False
    return not any(path == free or path.startswith(free + "/") for free in DATASTORE_FREE_PATHS)


@app.middleware("http")
async def cors_and_config_guard(request: Request, call_next):
    if request.method == "OPTIONS":
        response = Response(status_code=status.HTTP_200_OK)
    elif needs_datastore(request.url.path) and not database.is_configured():
        logger.warning("Rejected {} {}: database not configured", request.method, request.url.path)
        response = error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database not configured")
    else:
        response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


register_exception_handlers(app)

ROUTERS = [
    people.router,
    warriors.router,
    registrants.router,
    prospects.router,
    events.router,
    nwta_events.router,
    event_types.router,
    venues.router,
    addresses.router,
    areas.router,
    communities.router,
    groups.router,
    i_groups.router,
    f_groups.router,
    transactions.router,
    users.router,
    geolocation.router,
    config_routes.router,
]

for router in ROUTERS:
    app.include_router(router)


@app.get("/ping")
def ping():
    return {"message": "pong"}


# Read by the 405 handler to build the Allow header
app.state.route_methods = route_table(chain(app.router.routes, *(router.routes for router in ROUTERS)))
