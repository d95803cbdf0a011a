import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from hrdocs.config import Settings
from hrdocs.errors import ValidationError
from hrdocs.services.activity_service import ActivityLogger
from hrdocs.services.compensation import CompensationStack
from hrdocs.services.linking import LinkResult, get_reference_or_404, record_and_link
from hrdocs.services.naming import category_for
from hrdocs.services.references import REFERENCE_KINDS
from hrdocs.services.upload_service import UploadResult, UploadService

logger = logging.getLogger(__name__)


@dataclass
class Attachment:
    upload: UploadResult
    link: LinkResult


class AttachmentService:
    """Upload a file and attach it to a business record as one unit.

    Steps run in order: check the business record exists, upload (validate,
    ensure folders, put, share link), insert the Document Record and update
    the business record, commit, then queue the audit entry. If anything fails
    after the file reached the drive, the database work is rolled back and the
    uploaded item is deleted again.
    """

    def __init__(self, settings: Settings, drive, db: Session, activity: ActivityLogger, sleep=asyncio.sleep):
        self._db = db
        self._activity = activity
        self._uploader = UploadService(settings, drive, db, sleep=sleep)

    async def attach(
        self,
        content: bytes,
        file_name: str,
        mime_type: str,
        company_id: str,
        employee_id: str | None,
        reference_id: str,
        reference_type: str,
        uploaded_by: str,
        metadata: dict | None = None,
    ) -> Attachment:
        category = category_for(reference_type)
        if not category.subject_scoped:
            employee_id = None

        upload_metadata = {
            **(metadata or {}),
            "reference_id": reference_id,
            "reference_type": reference_type,
        }
        compensations = CompensationStack()
        try:
            # Unknown or foreign records are rejected before anything reaches the drive
            get_reference_or_404(self._db, reference_type, reference_id, company_id)
            upload = await self._uploader.upload(
                content, company_id, employee_id, file_name, mime_type, category,
                upload_metadata, compensations=compensations,
            )
            link = record_and_link(
                self._db, upload, reference_id, reference_type, company_id, employee_id, uploaded_by,
            )
            self._db.commit()
        except Exception as exc:
            self._db.rollback()
            if len(compensations):
                logger.warning("Upload for %s %s failed after reaching the drive, compensating", reference_type, reference_id)
                await compensations.unwind()
            if not isinstance(exc, ValidationError):
                self._activity.log(
                    uploaded_by, company_id, f"{category.name}_UPLOAD_FAILED",
                    f"{category.name.replace('_', ' ').capitalize()} upload failed for {reference_type} {reference_id}",
                    metadata={"reportId": reference_id, "reportType": reference_type, "error": str(exc)},
                )
            raise
        compensations.clear()

        pointer = REFERENCE_KINDS[reference_type].pointer
        self._db.refresh(link.document)
        self._db.refresh(link.record)
        self._activity.log(
            uploaded_by,
            company_id,
            f"{category.name}_UPLOAD",
            f"{category.name.replace('_', ' ').capitalize()} uploaded for {reference_type} {reference_id}",
            old_value={pointer: link.previous_pointer},
            new_value={pointer: getattr(link.record, pointer)},
            metadata={
                "documentId": link.document.id,
                "fileName": upload.file_name,
                "fileType": upload.mime_type,
                "fileSize": upload.size,
                "filePath": upload.path,
                "reportId": reference_id,
                "reportType": reference_type,
            },
        )
        return Attachment(upload=upload, link=link)
