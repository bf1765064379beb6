import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from sitecms.config import settings
from sitecms.rate_limit import limiter
from sitecms.schemas.api_schemas import ErrorResponse
from sitecms.routers import achievements, services, projects, team, content, customizations, contact, uploads
from sitecms.domain.errors import (
    DomainError,
    NotFoundError,
    ValidationError,
    ConflictError,
    UploadRejectedError,
    AuthenticationError,
)
from sitecms.application.event_handlers import register_event_handlers
from sitecms.db.init_db import init_database

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Site CMS API",
    description="Content management API for the company website",
    version=settings.VERSION,
    debug=settings.DEBUG,
)
app.state.limiter = limiter

# Register domain event handlers and create missing tables on startup
@app.on_event("startup")
async def startup_event():
    register_event_handlers()
    init_database()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allows all origins
    allow_credentials=True,
    allow_methods=["*"],  # Allows all methods
    allow_headers=["*"],  # Allows all headers
)


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message, **extra})


# Domain error handlers
@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return error_response(404, str(exc))


@app.exception_handler(UploadRejectedError)
async def upload_rejected_handler(request: Request, exc: UploadRejectedError):
    return error_response(400, str(exc), error=exc.code)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return error_response(400, str(exc), errors=exc.errors)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return error_response(400, "Validation error", errors=errors)


@app.exception_handler(ConflictError)
async def conflict_error_handler(request: Request, exc: ConflictError):
    return error_response(409, str(exc))


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    return error_response(401, str(exc))


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded on {request.url.path} by {get_remote_address(request)}")
    return error_response(429, exc.detail)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    logger.error(f"Unhandled domain error on {request.url.path}: {exc}")
    return error_response(500, str(exc))

# Include routers
ERROR_RESPONSES = {status: {"model": ErrorResponse} for status in (400, 401, 404, 409, 429)}

for module, tag in (
    (achievements, "Achievements"),
    (services, "Services"),
    (projects, "Projects"),
    (team, "Team"),
    (content, "Content"),
    (customizations, "Customizations"),
    (contact, "Contact"),
):
    app.include_router(module.router, prefix=settings.API_PREFIX, tags=[tag], responses=ERROR_RESPONSES)
app.include_router(uploads.router, tags=["Uploads"])

@app.get("/")
async def root():
    return {"message": "Welcome to the Site CMS API. See /docs for API documentation"}
