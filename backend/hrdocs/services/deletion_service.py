import asyncio
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from hrdocs.config import Settings
from hrdocs.errors import RecordNotFoundError, RemoteStoreError, ValidationError
from hrdocs.models.document import EmployeeDocument
from hrdocs.services.activity_service import ActivityLogger
from hrdocs.services.references import REFERENCE_KINDS, find_reference, pointer_for, pointer_value, set_pointer
from hrdocs.services.retry import retry_policy, with_retry

logger = logging.getLogger(__name__)


class DeletionService:
    def __init__(self, settings: Settings, drive, db: Session, activity: ActivityLogger, sleep=asyncio.sleep):
        self._drive = drive
        self._db = db
        self._activity = activity
        self._retry = retry_policy(settings, sleep)

    async def delete_remote(self, item_id: str) -> bool:
        """Delete a drive item. Returns False when it was already gone."""

        async def attempt():
            try:
                await self._drive.delete_item(item_id)
                return True
            except RemoteStoreError as exc:
                if exc.is_not_found:
                    return False
                raise

        try:
            return await with_retry(attempt, description=f"delete item {item_id}", **self._retry)
        except RemoteStoreError as exc:
            if exc.is_not_found:
                return False
            raise exc.add_context(item_id=item_id)

    async def delete(
        self,
        item_id: str,
        document_id: str,
        actor_id: str,
        company_id: str,
        reference_id: str | None = None,
        reference_type: str | None = None,
    ) -> EmployeeDocument:
        document = self._db.query(EmployeeDocument).filter(
            EmployeeDocument.id == document_id,
            EmployeeDocument.company_id == company_id,
        ).first()
        if not document:
            raise RecordNotFoundError("Document not found")
        if document.item_id and document.item_id != item_id:
            raise ValidationError("Item ID does not match document")

        record = None
        if reference_id and reference_type:
            record = find_reference(self._db, reference_type, reference_id)
            if not record or record.company_id != company_id:
                raise RecordNotFoundError(f"{reference_type.replace('_', ' ').capitalize()} not found")

        existed = await self.delete_remote(item_id)
        if not existed:
            logger.info("Item %s was already absent from the drive", item_id)

        now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        previous_status = document.status
        document.status = "deleted"
        if not document.deleted_at:
            document.deleted_at = now
            document.deleted_by = actor_id

        previous_pointer = None
        pointer_cleared = False
        if record is not None:
            previous_pointer = pointer_value(reference_type, record)
            # The record may already point at a newer upload; leave that link alone
            if previous_pointer is not None and previous_pointer == pointer_for(reference_type, document):
                set_pointer(reference_type, record, None)
                record.modified_at = now
                record.modified_by = actor_id
                pointer_cleared = True
            else:
                logger.info("%s %s does not point at document %s, keeping its link",
                            reference_type, reference_id, document.id)

        self._db.commit()
        self._db.refresh(document)

        old_value = {"status": previous_status, "file_name": document.file_name, "file_path": document.file_path}
        new_value = {"status": document.status}
        if record is not None:
            pointer = REFERENCE_KINDS[reference_type].pointer
            old_value[pointer] = previous_pointer
            new_value[pointer] = None if pointer_cleared else previous_pointer
        self._activity.log(
            actor_id,
            company_id,
            f"{document.document_type}_DELETE",
            f"Document {document.file_name} deleted",
            old_value=old_value,
            new_value=new_value,
            metadata={
                "documentId": document.id,
                "itemId": item_id,
                "remoteItemExisted": existed,
                "pointerCleared": pointer_cleared,
                "reportId": reference_id,
                "reportType": reference_type,
            },
        )
        return document
