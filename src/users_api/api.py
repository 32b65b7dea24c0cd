"""FastAPI application exposing CRUD endpoints for users."""

import logging
import re
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, settings as default_settings
from .controller import UserController
from .database import SessionLocal, init_db
from .errors import ErrorKind, UserServiceError, ValidationError
from .logger import configure_logging
from .middleware import register_request_logging
from .models.schemas import (
    ErrorResponse,
    MessageResponse,
    UserCreate,
    UserOutput,
    UserUpdate,
)
from .repository import UserRepository

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.DUPLICATE_EMAIL: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORE: 500,
}

ID_PATTERN = re.compile(r"[+-]?\d+")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    404: {"model": ErrorResponse, "description": "User not found"},
    500: {"model": ErrorResponse, "description": "Server error"},
}

router = APIRouter(tags=["Users"])


def error_response(message: str, status: int) -> JSONResponse:
    return JSONResponse(status_code=status, content={"message": message, "status": status})


def get_controller(request: Request) -> UserController:
    return request.app.state.user_controller


def parse_user_id(raw: str) -> int:
    """Convert a path segment to an id, rejecting anything but an integer."""
    if not ID_PATTERN.fullmatch(raw):
        raise ValidationError("Invalid ID format")
    return int(raw)


@router.get(
    "",
    response_model=List[UserOutput],
    summary="Get all users",
    responses={500: ERROR_RESPONSES[500]},
)
def list_users(controller: UserController = Depends(get_controller)):
    """Retrieve a list of all users."""
    return controller.get_all_users()


@router.get(
    "/{user_id}",
    response_model=UserOutput,
    summary="Get user by ID",
    responses=ERROR_RESPONSES,
)
def get_user(user_id: str, controller: UserController = Depends(get_controller)):
    """Retrieve a single user by ID."""
    return controller.get_user_by_id(parse_user_id(user_id))


@router.post(
    "",
    response_model=UserOutput,
    status_code=201,
    summary="Create a new user",
    responses={400: ERROR_RESPONSES[400], 500: ERROR_RESPONSES[500]},
)
def create_user(
    payload: Optional[UserCreate] = None,
    controller: UserController = Depends(get_controller),
):
    """Create a new user with the provided data."""
    return controller.create_user(payload or UserCreate())


@router.put(
    "/{user_id}",
    response_model=UserOutput,
    summary="Update a user",
    responses=ERROR_RESPONSES,
)
def update_user(
    user_id: str,
    payload: Optional[UserUpdate] = None,
    controller: UserController = Depends(get_controller),
):
    """Update a user's information by ID. Only the fields sent are changed."""
    changes = payload.changes() if payload else {}
    return controller.update_user(parse_user_id(user_id), changes)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete a user",
    responses=ERROR_RESPONSES,
)
def delete_user(user_id: str, controller: UserController = Depends(get_controller)):
    """Delete a user by ID."""
    return controller.delete_user(parse_user_id(user_id))


async def user_error_handler(request: Request, exc: UserServiceError) -> JSONResponse:
    return error_response(exc.message, STATUS_BY_KIND[exc.kind])


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # field locations only, the offending values may include a password
    locations = [error["loc"] for error in exc.errors()]
    logger.info("invalid request body for %s %s: %s", request.method, request.url.path, locations)
    return error_response("Invalid request body", 400)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(str(exc.detail), exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response("Internal server error", 500)


@asynccontextmanager
async def _create_tables_on_startup(app: FastAPI):
    init_db()
    yield


def create_app(
    settings: Settings = default_settings,
    session_factory: Optional[sessionmaker] = None,
) -> FastAPI:
    """Build the API application.

    Without an explicit ``session_factory`` the default database is used and
    missing tables are created on startup unless ``create_tables`` is off.
    """
    configure_logging(settings.log_level)
    prefix = ("/" + settings.api_prefix.strip("/")).rstrip("/")

    lifespan = None
    if session_factory is None:
        session_factory = SessionLocal
        if settings.create_tables:
            lifespan = _create_tables_on_startup

    app = FastAPI(
        lifespan=lifespan,
        title=settings.api_title,
        version=settings.api_version,
        description="API documentation for the users service",
        license_info={"name": "MIT", "url": "https://opensource.org/licenses/MIT"},
        docs_url=f"{prefix}/docs",
        redoc_url=None,
        openapi_url=f"{prefix}/openapi.json",
    )
    app.state.settings = settings
    app.state.user_controller = UserController(
        UserRepository(session_factory, rounds=settings.bcrypt_rounds)
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_request_logging(app, logging.getLogger("users_api.requests"))

    app.add_exception_handler(UserServiceError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(router, prefix=f"{prefix}/users")

    @app.get("/", include_in_schema=False)
    def index():
        return {"api": f"{prefix}/users", "docs": f"{prefix}/docs"}

    logger.info("API available at %s, docs at %s/docs", prefix, prefix)
    return app


app = create_app()
