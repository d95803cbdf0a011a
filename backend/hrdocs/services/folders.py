import logging

from hrdocs.errors import RemoteStoreError
from hrdocs.services.retry import with_retry
from hrdocs.utils.paths import join_path, parent_and_name, split_path

logger = logging.getLogger(__name__)


class FolderEnsurer:
    """Create every missing folder along a drive path, root to leaf."""

    def __init__(self, drive, retry: dict | None = None):
        self._drive = drive
        self._retry = retry or {}

    async def _exists(self, path: str) -> bool:
        async def probe():
            try:
                await self._drive.get_item(path)
                return True
            except RemoteStoreError as exc:
                if exc.is_not_found:
                    return False
                raise

        return await with_retry(probe, description=f"lookup {path}", **self._retry)

    async def ensure_path(self, path: str):
        segments = split_path(path)
        for depth in range(1, len(segments) + 1):
            current = join_path(*segments[:depth])
            if await self._exists(current):
                continue
            parent, name = parent_and_name(current)
            logger.debug("Creating folder %s", current)
            try:
                await with_retry(
                    lambda: self._drive.create_folder(parent, name),
                    description=f"create folder {current}",
                    **self._retry,
                )
            except RemoteStoreError as exc:
                logger.error("Graph API folder creation error: path=%s folder=%s error=%s", current, name, exc)
                raise exc.add_context(path=current)
