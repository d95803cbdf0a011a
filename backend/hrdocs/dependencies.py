from fastapi import BackgroundTasks, Header, Request

from hrdocs.config import Settings
from hrdocs.errors import AuthorizationError
from hrdocs.services.activity_service import ActivityLogger


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_drive(request: Request):
    return request.app.state.drive


def get_activity_logger(request: Request, background_tasks: BackgroundTasks) -> ActivityLogger:
    return ActivityLogger(
        request.app.state.session_factory,
        background_tasks,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


async def require_authorization(authorization: str | None = Header(None)):
    if not authorization:
        raise AuthorizationError("Missing authorization header")
    return authorization
