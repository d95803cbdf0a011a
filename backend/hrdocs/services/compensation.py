import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class CompensationStack:
    """Undo actions registered by completed steps of a multi-step write.

    ``unwind`` runs them newest first. Each undo is best-effort: a failing one
    is logged and the rest still run.
    """

    def __init__(self):
        self._actions: list[tuple[str, Callable[[], Awaitable[None]]]] = []

    def push(self, description: str, undo: Callable[[], Awaitable[None]]):
        self._actions.append((description, undo))

    def clear(self):
        self._actions.clear()

    def __len__(self) -> int:
        return len(self._actions)

    async def unwind(self) -> list[str]:
        """Run and drop every registered action. Returns the descriptions that failed."""
        failed = []
        while self._actions:
            description, undo = self._actions.pop()
            try:
                await undo()
                logger.info("Compensated: %s", description)
            except Exception:
                logger.exception("Compensation failed, manual cleanup needed: %s", description)
                failed.append(description)
        return failed
