import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fastapi import BackgroundTasks
from sqlalchemy.orm import sessionmaker

from hrdocs.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


@dataclass
class ActivityEntry:
    user_id: str
    company_id: str | None
    activity_type: str
    description: str
    old_value: dict | None = None
    new_value: dict | None = None
    metadata: dict = field(default_factory=dict)
    ip_address: str | None = None
    user_agent: str | None = None


class ActivityLogger:
    """Audit trail writer.

    ``log`` only queues the entry on the request's background tasks; the
    insert runs after the response in its own session, and any failure there
    is logged and dropped.
    """

    def __init__(self, session_factory: sessionmaker, background_tasks: BackgroundTasks,
                 ip_address: str | None = None, user_agent: str | None = None):
        self._session_factory = session_factory
        self._background_tasks = background_tasks
        self._ip_address = ip_address
        self._user_agent = user_agent

    def log(self, user_id: str, company_id: str | None, activity_type: str, description: str,
            old_value: dict | None = None, new_value: dict | None = None, metadata: dict | None = None):
        entry = ActivityEntry(
            user_id=user_id,
            company_id=company_id,
            activity_type=activity_type,
            description=description,
            old_value=old_value,
            new_value=new_value,
            metadata=metadata or {},
            ip_address=self._ip_address,
            user_agent=self._user_agent,
        )
        self._background_tasks.add_task(write_activity, self._session_factory, entry)


def write_activity(session_factory: sessionmaker, entry: ActivityEntry):
    try:
        db = session_factory()
    except Exception:
        logger.exception("Error logging activity %s: could not open a session", entry.activity_type)
        return
    try:
        db.add(ActivityLog(
            id=str(uuid.uuid4()),
            user_id=entry.user_id,
            company_id=entry.company_id,
            activity_type=entry.activity_type,
            description=entry.description,
            old_value=entry.old_value,
            new_value=entry.new_value,
            metadata_=entry.metadata,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            created_at=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        ))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Error logging activity %s", entry.activity_type)
    finally:
        db.close()
