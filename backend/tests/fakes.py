from hrdocs.errors import RemoteErrorKind, RemoteStoreError
from hrdocs.utils.paths import join_path


class FakeDrive:
    """In-memory drive with the GraphDriveClient interface.

    ``fail(method, *errors)`` queues errors raised by the next calls of that
    method; ``fail_always(method, error)`` makes every call raise.
    """

    def __init__(self):
        self.folders: set[str] = set()
        self.items: dict[str, dict] = {}
        self.calls: list[tuple[str, str]] = []
        self._queued: dict[str, list[Exception]] = {}
        self._always: dict[str, Exception] = {}
        self._next_id = 0

    def fail(self, method, *errors):
        self._queued.setdefault(method, []).extend(errors)

    def fail_always(self, method, error):
        self._always[method] = error

    def count(self, method) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    def _call(self, method, arg):
        self.calls.append((method, arg))
        if method in self._always:
            raise self._always[method]
        queued = self._queued.get(method)
        if queued:
            raise queued.pop(0)

    async def get_item(self, path):
        self._call("get_item", path)
        if path in self.folders:
            return {"id": f"folder:{path}", "folder": {}}
        for item_id, item in self.items.items():
            if item["path"] == path:
                return {"id": item_id, "file": {}}
        raise RemoteStoreError(RemoteErrorKind.NOT_FOUND, "itemNotFound: The resource could not be found.", 404)

    async def create_folder(self, parent_path, name):
        path = join_path(parent_path, name)
        self._call("create_folder", path)
        self.folders.add(path)
        return {"id": f"folder:{path}", "name": name, "folder": {}}

    async def upload_content(self, path, content, content_type):
        self._call("upload_content", path)
        self._next_id += 1
        item_id = f"ITEM{self._next_id}"
        self.items[item_id] = {"path": path, "content": content, "content_type": content_type}
        return {
            "id": item_id,
            "name": path.rsplit("/", 1)[-1],
            "webUrl": f"https://onedrive.example/{item_id}",
            "parentReference": {"driveId": "DRIVE1"},
        }

    async def create_link(self, item_id):
        self._call("create_link", item_id)
        return f"https://1drv.ms/u/{item_id}"

    async def delete_item(self, item_id):
        self._call("delete_item", item_id)
        if item_id not in self.items:
            raise RemoteStoreError(RemoteErrorKind.NOT_FOUND, "itemNotFound: The resource could not be found.", 404)
        del self.items[item_id]


def transient_error():
    return RemoteStoreError(RemoteErrorKind.TRANSIENT, "serviceNotAvailable", 503)
