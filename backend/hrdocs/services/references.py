"""Business records a document can be attached to, and how each one points at it.

Reports keep the id of their Document Record; receipts keep the shareable URL
of the file itself.
"""
from dataclasses import dataclass

from sqlalchemy.orm import Session

from hrdocs.models.receipt import Receipt
from hrdocs.models.report import AccidentReport, IllnessReport


@dataclass(frozen=True)
class ReferenceKind:
    model: type
    pointer: str
    # "document_id" or "share_url"
    stores: str


REFERENCE_KINDS = {
    "accident_report": ReferenceKind(AccidentReport, "medical_certificate_id", "document_id"),
    "illness_report": ReferenceKind(IllnessReport, "medical_certificate_id", "document_id"),
    "company_receipt": ReferenceKind(Receipt, "receipt_url", "share_url"),
}


def find_reference(db: Session, reference_type: str, reference_id: str):
    kind = REFERENCE_KINDS[reference_type]
    return db.query(kind.model).filter(kind.model.id == reference_id).first()


def pointer_value(reference_type: str, record):
    return getattr(record, REFERENCE_KINDS[reference_type].pointer)


def set_pointer(reference_type: str, record, value: str | None):
    setattr(record, REFERENCE_KINDS[reference_type].pointer, value)


def pointer_for(reference_type: str, document) -> str | None:
    """The value the link step stores on a business record for ``document``."""
    if REFERENCE_KINDS[reference_type].stores == "document_id":
        return document.id
    return document.share_url or document.file_url


def record_to_response(reference_type: str, record) -> dict:
    data = {
        "id": record.id,
        "type": reference_type,
        "company_id": record.company_id,
        "modified_at": record.modified_at,
        "modified_by": record.modified_by,
    }
    if hasattr(record, "employee_id"):
        data["employee_id"] = record.employee_id
    data[REFERENCE_KINDS[reference_type].pointer] = pointer_value(reference_type, record)
    return data
