import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from hrdocs.config import Settings
from hrdocs.database import get_engine, get_session_factory, init_db
from hrdocs.errors import ServiceError
from hrdocs.routers import documents
from hrdocs.services.graph_client import GraphDriveClient
from hrdocs.utils.cors import cors_headers
from hrdocs.utils.responses import error_response, service_error_response

VERSION = "0.1.0"

logger = logging.getLogger("hrdocs")


def configure_logging(settings: Settings):
    logging.basicConfig(format="[%(levelname)s] %(name)s: %(message)s")
    logging.getLogger("hrdocs").setLevel(settings.log_level)


def create_app(settings: Settings | None = None, *, drive=None, session_factory=None,
               retry_sleep=asyncio.sleep) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings)

    engine = None
    if session_factory is None:
        engine = get_engine(settings.database_url)
        session_factory = get_session_factory(engine)
    owns_drive = drive is None
    if owns_drive:
        drive = GraphDriveClient(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if engine is not None:
            try:
                init_db(engine)
            except Exception as exc:
                logger.error("Could not initialise the database: %s", exc)
                raise
        yield
        if owns_drive:
            await drive.aclose()

    app = FastAPI(
        title="HR Document Service",
        description="Uploads HR documents to OneDrive and links them to reports and receipts",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.drive = drive
    app.state.retry_sleep = retry_sleep

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        logger.debug("Request %s %s", request.method, request.url.path)
        response = await call_next(request)
        for key, value in cors_headers(settings, request.headers.get("origin")).items():
            response.headers.setdefault(key, value)
        return response

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        return service_error_response(exc, settings)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == 405:
            message = f"Method {request.method} not allowed"
        response = error_response(message, exc.status_code, settings)
        for key, value in (exc.headers or {}).items():
            response.headers[key] = value
        return response

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return error_response("Invalid request", 400, settings)

    app.include_router(documents.router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": VERSION}

    return app


app = create_app()


def run():
    import uvicorn

    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)
