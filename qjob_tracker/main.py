# qjob_tracker/main.py
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging
from typing import Dict
from dotenv import load_dotenv
load_dotenv()

from .settings import settings
from .storage.sqlite_base import close_sqlite_db_connection, get_sqlite_db_connection
from .users.endpoints import users_router
from .users.sqlite_user_store import get_sqlite_user_store
from .sessions import RedisSessionRegistry, create_session_registry, realtime_router

# Configure logging based on debug mode setting
if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level="DEBUG" if settings.debug_mode else settings.log_level.upper(),
        format='%(asctime)s - %(name)s [%(levelname)s] - %(message)s'
    )

logger = logging.getLogger(__name__)
logger.setLevel(logging.DEBUG if settings.debug_mode else settings.log_level.upper())


@asynccontextmanager
async def app_lifespan(app_instance: FastAPI):
    """
    Opens the user database and creates the realtime session registry on
    startup; tears both down in reverse order on shutdown.
    """
    logger.info("Application startup initiated.")
    initialized_components = []

    try:
        await get_sqlite_db_connection()
        initialized_components.append("sqlite_db_connection")
        user_store = await get_sqlite_user_store()
        initialized_components.append(user_store)
        logger.info("User directory initialized.")

        session_registry = create_session_registry()
        await session_registry.initialize()
        initialized_components.append(session_registry)
        app_instance.state.session_registry = session_registry
        logger.info(f"Realtime session registry initialized: {type(session_registry).__name__}")
    except Exception as e:
        logger.error(f"Error during startup: {e}", exc_info=True)
        raise

    yield

    logger.info("Application shutdown initiated.")
    for component in reversed(initialized_components):
        try:
            if component == "sqlite_db_connection":
                await close_sqlite_db_connection()
            elif hasattr(component, 'teardown'):
                await component.teardown()
        except Exception as e_td:
            logger.error(f"Teardown error: {e_td}", exc_info=True)
    logger.info("All components torn down.")


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug_mode,
    version="0.1.0",
    lifespan=app_lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error as {"error": detail}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Missing or empty body fields are a client error, reported as 400."""
    errors = exc.errors()
    if errors:
        first_error = errors[0]
        field_path = ".".join(str(part) for part in first_error.get("loc", ()) if part != "body")
        message = f"{field_path}: {first_error.get('msg')}" if field_path else first_error.get("msg")
    else:
        message = "Invalid request body"
    logger.info(f"API: Rejected request to {request.url.path}: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


@app.get("/", response_class=PlainTextResponse)
async def root_api():
    return "Quantum Job Tracker API is running"


@app.get("/health")
async def health_api():
    """Health check endpoint that validates storage backend connectivity."""
    store_statuses: Dict[str, str] = {}
    all_healthy = True

    try:
        conn = await get_sqlite_db_connection()
        conn.execute("SELECT 1")
        store_statuses["sqlite_user_db"] = "healthy"
    except Exception as e:
        store_statuses["sqlite_user_db"] = f"unhealthy: {e}"
        all_healthy = False

    session_registry = getattr(app.state, "session_registry", None)
    if isinstance(session_registry, RedisSessionRegistry):
        try:
            redis_client = await session_registry._get_client()
            await redis_client.ping()
            store_statuses["session_registry_redis"] = "healthy"
        except Exception as e:
            store_statuses["session_registry_redis"] = f"unhealthy: {e}"
            all_healthy = False
    elif session_registry is not None:
        store_statuses["session_registry"] = "in-memory"

    return {
        "status": "healthy" if all_healthy else "degraded",
        "session_backend": settings.session_backend,
        "details": store_statuses
    }


app.include_router(users_router)
app.include_router(realtime_router)

logger.info(f"{settings.app_name} initialized. Session backend: {settings.session_backend}. Routers mounted.")
