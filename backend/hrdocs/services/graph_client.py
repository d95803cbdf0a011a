"""Microsoft Graph client for the administrative OneDrive.

Every failure leaves this module as a ``RemoteStoreError`` whose ``kind`` is
decided here, so callers never look at HTTP responses themselves.
"""
import logging
import time
from urllib.parse import quote

import httpx

from hrdocs.config import Settings
from hrdocs.errors import ConfigurationError, RemoteErrorKind, RemoteStoreError

logger = logging.getLogger(__name__)

GRAPH_SCOPE = "https://graph.microsoft.com/.default"
# Renew the token this many seconds before Graph says it expires
TOKEN_EXPIRY_MARGIN = 60


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        code = error.get("code") or ""
        message = error.get("message") or ""
        return f"{code}: {message}".strip(": ") or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("error_description"):
        return str(body["error_description"])
    return f"HTTP {response.status_code}"


class GraphDriveClient:
    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None, clock=time.monotonic):
        self._settings = settings
        self._http = http_client or httpx.AsyncClient(timeout=settings.graph_timeout_seconds)
        self._clock = clock
        self._token: str | None = None
        self._token_expires_at = 0.0

    @property
    def _drive_url(self) -> str:
        admin = quote(self._settings.microsoft_admin_email, safe="@.")
        return f"{self._settings.graph_base_url}/users/{admin}/drive"

    async def aclose(self):
        await self._http.aclose()

    async def _access_token(self) -> str:
        if self._token and self._clock() < self._token_expires_at:
            return self._token

        s = self._settings
        if not (s.microsoft_tenant_id and s.microsoft_client_id and s.microsoft_client_secret):
            raise ConfigurationError(
                "Microsoft Graph credentials are not configured "
                "(HRDOCS_MICROSOFT_TENANT_ID / CLIENT_ID / CLIENT_SECRET)"
            )
        if not s.microsoft_admin_email:
            raise ConfigurationError("HRDOCS_MICROSOFT_ADMIN_EMAIL is not configured")

        token_url = f"{s.login_base_url}/{s.microsoft_tenant_id}/oauth2/v2.0/token"
        payload = {
            "client_id": s.microsoft_client_id,
            "client_secret": s.microsoft_client_secret,
            "scope": GRAPH_SCOPE,
            "grant_type": "client_credentials",
        }
        try:
            response = await self._http.post(token_url, data=payload)
        except httpx.HTTPError as exc:
            raise RemoteStoreError(RemoteErrorKind.TRANSIENT, f"Token request failed: {exc}") from exc
        if response.is_error:
            logger.error("Token response error: %s", response.text)
            raise RemoteStoreError.from_status(
                response.status_code, f"Failed to get access token: {_error_message(response)}"
            )

        body = response.json()
        token = body.get("access_token")
        if not isinstance(token, str) or not token:
            raise RemoteStoreError(RemoteErrorKind.PERMISSION, "Token response did not contain an access token")
        expires_in = int(body.get("expires_in", 3600))
        self._token = token
        self._token_expires_at = self._clock() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
        return token

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        token = await self._access_token()
        headers = {"Authorization": f"Bearer {token}", **kwargs.pop("headers", {})}
        try:
            response = await self._http.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise RemoteStoreError(RemoteErrorKind.TRANSIENT, f"{method} {url} failed: {exc}") from exc
        if response.is_error:
            raise RemoteStoreError.from_status(response.status_code, _error_message(response))
        return response

    def _path_url(self, path: str, suffix: str = "") -> str:
        return f"{self._drive_url}/root:{quote(path)}{suffix}"

    async def get_item(self, path: str) -> dict:
        response = await self._request("GET", self._path_url(path))
        return response.json()

    async def create_folder(self, parent_path: str, name: str) -> dict:
        if parent_path:
            url = self._path_url(parent_path, ":/children")
        else:
            url = f"{self._drive_url}/root/children"
        body = {
            "name": name,
            "folder": {},
            "@microsoft.graph.conflictBehavior": "replace",
        }
        response = await self._request("POST", url, json=body)
        return response.json()

    async def upload_content(self, path: str, content: bytes, content_type: str) -> dict:
        response = await self._request(
            "PUT",
            self._path_url(path, ":/content"),
            content=content,
            headers={"Content-Type": content_type},
        )
        return response.json()

    async def create_link(self, item_id: str) -> str:
        body = {"type": self._settings.share_link_type, "scope": self._settings.share_link_scope}
        response = await self._request("POST", f"{self._drive_url}/items/{item_id}/createLink", json=body)
        link = response.json().get("link") or {}
        web_url = link.get("webUrl")
        if not web_url:
            raise RemoteStoreError(RemoteErrorKind.REJECTED, "createLink response did not contain a link")
        return web_url

    async def delete_item(self, item_id: str):
        await self._request("DELETE", f"{self._drive_url}/items/{item_id}")
