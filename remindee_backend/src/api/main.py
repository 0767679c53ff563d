import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import NotFound, ParseError, PersistenceError, RemindeeError
from .settings import get_settings
from .routers import review as review_router
from .routers import situations as situations_router
from .routers import templates as templates_router
from .routers import transfer as transfer_router

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "situations", "description": "Create and edit situations, their todos and sub-todos."},
    {"name": "review", "description": "Current situation and the list of unfinished todos."},
    {"name": "templates", "description": "Past situations per title and pinned restore."},
    {"name": "data", "description": "Export and import of the whole situation store."},
]

_settings = get_settings()

logging.basicConfig(
    level=getattr(logging, _settings.log_level, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Remindee Backend",
    description="Time-anchored situations with checklists, unfinished-todo review and pinned templates.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Configure CORS based on settings (CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_STATUS_BY_ERROR = {
    NotFound: 404,
    ParseError: 400,
    PersistenceError: 503,
}


def _error_body(error: str, message: str, detail) -> dict:
    return jsonable_encoder({"error": error, "message": message, "detail": detail})


# Global exception handlers for consistent JSON error bodies
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    return JSONResponse(
        status_code=422,
        content=_error_body("ValidationError", "Request validation failed", exc.errors()),
    )


@app.exception_handler(RemindeeError)
async def remindee_exception_handler(request: Request, exc: RemindeeError) -> JSONResponse:
    """
    Map engine errors to HTTP: NotFound -> 404, ParseError -> 400, PersistenceError -> 503.
    The body uses the same structure as validation errors.
    """
    status_code = _STATUS_BY_ERROR.get(type(exc), 500)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", exc.error_name, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content=_error_body(exc.error_name, exc.message, exc.detail))


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


# Include routers
app.include_router(situations_router.router)
app.include_router(review_router.router)
app.include_router(templates_router.router)
app.include_router(transfer_router.router)
