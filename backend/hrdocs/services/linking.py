import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from hrdocs.errors import RecordNotFoundError
from hrdocs.models.document import EmployeeDocument
from hrdocs.services.naming import category_for
from hrdocs.services.references import find_reference, pointer_for, pointer_value, set_pointer
from hrdocs.services.upload_service import UploadResult


@dataclass
class LinkResult:
    document: EmployeeDocument
    record: object
    previous_pointer: str | None


def get_reference_or_404(db: Session, reference_type: str, reference_id: str, company_id: str):
    record = find_reference(db, reference_type, reference_id)
    if not record or record.company_id != company_id:
        raise RecordNotFoundError(f"{reference_type.replace('_', ' ').capitalize()} not found")
    return record


def record_and_link(
    db: Session,
    upload: UploadResult,
    reference_id: str,
    reference_type: str,
    company_id: str,
    employee_id: str | None,
    actor_id: str,
) -> LinkResult:
    """Insert the Document Record and point the business record at it.

    Both writes are flushed in ``db`` but not committed; the caller commits
    them together or rolls both back.
    """
    record = get_reference_or_404(db, reference_type, reference_id, company_id)
    now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    document = EmployeeDocument(
        id=str(uuid.uuid4()),
        company_id=company_id,
        employee_id=employee_id,
        document_type=category_for(reference_type).name,
        reference_type=reference_type,
        reference_id=reference_id,
        file_path=upload.path,
        drive_id=upload.drive_id,
        item_id=upload.item_id,
        file_url=upload.web_url,
        share_url=upload.share_url,
        file_name=upload.file_name,
        mime_type=upload.mime_type,
        file_size_bytes=upload.size,
        file_hash=upload.file_hash,
        uploaded_by=actor_id,
        status="active",
        created_at=now,
    )
    db.add(document)
    db.flush()

    previous = pointer_value(reference_type, record)
    set_pointer(reference_type, record, pointer_for(reference_type, document))
    record.modified_at = now
    record.modified_by = actor_id
    db.flush()

    return LinkResult(document=document, record=record, previous_pointer=previous)
