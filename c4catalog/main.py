import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from c4catalog.config import settings
from c4catalog.routers import collaboration, diagrams, health, pipelines, projects, services
from c4catalog.domain.errors import DomainError, NotFoundError, ValidationError, ConflictError, StorageError
from c4catalog.application.event_handlers import register_event_handlers
from c4catalog.schemas.api_schemas import ErrorResponse

logger = logging.getLogger(__name__)


def error_body(message: str) -> dict:
    return ErrorResponse(error=message).model_dump()


app = FastAPI(
    title="C4 Catalog API",
    description="Service catalog, C4 architecture diagrams, pipelines and projects",
    version=settings.VERSION,
)

# Register domain event handlers on startup
@app.on_event("startup")
async def startup_event():
    register_event_handlers()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Domain error handlers
@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content=error_body(str(exc)))


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content=error_body(str(exc)))


@app.exception_handler(ConflictError)
async def conflict_error_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content=error_body(str(exc)))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(status_code=400, content=error_body(f"{location}: {message}" if location else message))


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(
        "Storage failure during %s %s (%s %s/%s): %s",
        request.method, request.url.path, exc.operation, exc.collection, exc.entity_id, exc,
    )
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    logger.error("Unhandled domain error during %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content=error_body("Internal server error"))

# Include routers
app.include_router(health.router, tags=["Health"])  # Health check endpoints first
app.include_router(services.router, tags=["Services"])
app.include_router(diagrams.router, tags=["Diagrams"])
app.include_router(pipelines.router, tags=["Pipelines"])
app.include_router(projects.router, tags=["Projects"])
app.include_router(collaboration.router, tags=["Collaboration"])

@app.get("/")
async def root():
    return {"message": "Welcome to C4 Catalog API. See /docs for API documentation"}
