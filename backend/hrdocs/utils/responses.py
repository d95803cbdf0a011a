import traceback
from datetime import datetime, timezone

from fastapi.responses import JSONResponse

from hrdocs.config import Settings
from hrdocs.errors import ServiceError


def success_response(payload: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse({"success": True, **payload}, status_code=status_code)


def error_response(message: str, status_code: int, settings: Settings | None = None,
                   exc: BaseException | None = None) -> JSONResponse:
    body = {"success": False, "error": message}
    if settings is not None and settings.is_development:
        body["timestamp"] = datetime.now(timezone.utc).isoformat()
        if exc is not None:
            body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(body, status_code=status_code)


def service_error_response(exc: ServiceError, settings: Settings | None = None) -> JSONResponse:
    return error_response(str(exc), exc.status_code, settings, exc)
