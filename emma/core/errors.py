from typing import Any, Dict, Iterable, List, Pattern, Set, Tuple

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from emma.core.responses import error_response


class DatabaseNotConfiguredError(RuntimeError):
    """Raised when a request needs the datastore but DB_URL was never set."""


class StorageNotConfiguredError(RuntimeError):
    """Raised when an upload needs object storage but Supabase was never set up."""


METHOD_ORDER = ["GET", "POST", "PUT", "DELETE"]


RouteTable = List[Tuple[Pattern, Set[str]]]


def route_table(routes: Iterable[Any]) -> RouteTable:
    """Path pattern and methods of every endpoint route in ``routes``."""
    table = []
    for route in routes:
        path_regex = getattr(route, "path_regex", None)
        methods = getattr(route, "methods", None)
        if path_regex is not None and methods:
            table.append((path_regex, set(methods)))
    return table


def allowed_methods_for(request: Request) -> List[str]:
    """Methods served at the request path, read from ``app.state.route_methods``.

    Included routers are not always flattened into ``app.router.routes``, so the
    table is built from each router when the app is assembled.
    """
    table = getattr(request.app.state, "route_methods", None) or route_table(request.app.router.routes)
    methods = set()
    for path_regex, route_methods in table:
        if path_regex.match(request.url.path):
            methods.update(route_methods)
    methods.discard("HEAD")
    return sorted(methods, key=lambda m: METHOD_ORDER.index(m) if m in METHOD_ORDER else len(METHOD_ORDER))


def format_validation_errors(errors) -> List[Dict[str, Any]]:
    details = []
    for error in errors:
        location = [part for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        details.append(
            {
                "path": location,
                "message": error.get("msg"),
                "code": error.get("type"),
            }
        )
    return details


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        allowed = allowed_methods_for(request)
        return error_response(
            exc.status_code,
            f"Method {request.method} not allowed",
            headers={"Allow": ", ".join(allowed)},
        )
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Validation error",
        details=format_validation_errors(exc.errors()),
    )


async def database_not_configured_handler(request: Request, exc: DatabaseNotConfiguredError):
    logger.warning("Rejected {} {}: database not configured", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database not configured")


async def storage_not_configured_handler(request: Request, exc: StorageNotConfiguredError):
    logger.warning("Rejected {} {}: storage not configured", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Storage not configured")


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.opt(exception=exc).error("Database error on {} {}", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error")


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error("Server error on {} {}", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(DatabaseNotConfiguredError, database_not_configured_handler)
    app.add_exception_handler(StorageNotConfiguredError, storage_not_configured_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
