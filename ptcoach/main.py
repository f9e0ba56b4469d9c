import logging
import uuid

from fastapi import FastAPI, HTTPException, status
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ptcoach.config import settings
from ptcoach.core import exceptions
from ptcoach.database import Database
from ptcoach.routers.users import router as users_router
from ptcoach.routers.trainers import router as trainers_router
from ptcoach.routers.workouts import router as workouts_router

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)
app.state.database = Database(settings.SQLALCHEMY_DATABASE_URI, echo=settings.DATABASE_ECHO)

# CORS must be added before other middleware
configured_origins = [str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS]
default_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]
allow_origins = configured_origins if settings.APP_ENV == "production" else list(dict.fromkeys([*default_origins, *configured_origins]))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def attach_request_id(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response

# Exception Handlers
app.add_exception_handler(exceptions.AppError, exceptions.app_exception_handler)  # type: ignore
app.add_exception_handler(RequestValidationError, exceptions.validation_exception_handler)  # type: ignore
app.add_exception_handler(IntegrityError, exceptions.integrity_exception_handler)  # type: ignore
app.add_exception_handler(SQLAlchemyError, exceptions.storage_exception_handler)  # type: ignore
app.add_exception_handler(Exception, exceptions.unhandled_exception_handler)  # type: ignore

# Routers
app.include_router(users_router, prefix=f"{settings.API_V1_STR}/users", tags=["Users"])
app.include_router(trainers_router, prefix=f"{settings.API_V1_STR}/trainers", tags=["Trainers"])
app.include_router(workouts_router, prefix=f"{settings.API_V1_STR}/workouts", tags=["Workouts"])

@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.get("/healthz")
async def healthz(request: Request):
    try:
        await request.app.state.database.ping()
    except Exception as exc:
        logger.exception("Health check failed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="database unavailable",
        ) from exc
    return {"status": "ok", "database": "ok"}

@app.get("/")
async def root():
    return {"message": "Welcome to the PT Coach API", "docs": "/docs"}


@app.on_event("startup")
async def startup_database() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    _validate_security_settings()
    database: Database = app.state.database
    await database.connect()
    if settings.AUTO_CREATE_TABLES:
        await database.create_all()
        logger.info("Database schema created")


@app.on_event("shutdown")
async def shutdown_database() -> None:
    await app.state.database.disconnect()


def _validate_security_settings() -> None:
    if settings.APP_ENV != "production":
        return

    errors: list[str] = []
    if len(settings.SECRET_KEY.strip()) < 24:
        errors.append("SECRET_KEY must be at least 24 characters in production.")
    if not settings.BACKEND_CORS_ORIGINS:
        errors.append("BACKEND_CORS_ORIGINS must be explicitly configured in production.")

    if errors:
        raise RuntimeError("; ".join(errors))
