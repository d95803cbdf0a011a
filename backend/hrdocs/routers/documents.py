import json
import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import Response
from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import Session

from hrdocs.config import Settings
from hrdocs.database import get_db
from hrdocs.dependencies import get_activity_logger, get_drive, get_settings, require_authorization
from hrdocs.errors import ServiceError, ValidationError
from hrdocs.models.document import EmployeeDocument
from hrdocs.schemas.document import DeleteDocumentRequest, DocumentResponse
from hrdocs.services.activity_service import ActivityLogger
from hrdocs.services.attachment_service import AttachmentService
from hrdocs.services.deletion_service import DeletionService
from hrdocs.services.naming import REFERENCE_TYPES, category_for
from hrdocs.services.references import record_to_response
from hrdocs.utils.cors import preflight_headers
from hrdocs.utils.responses import error_response, service_error_response, success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onedrive-upload", tags=["documents"])


def _document_to_response(doc: EmployeeDocument) -> dict:
    return DocumentResponse(
        id=doc.id,
        company_id=doc.company_id,
        employee_id=doc.employee_id,
        document_type=doc.document_type,
        reference_type=doc.reference_type,
        reference_id=doc.reference_id,
        file_path=doc.file_path,
        drive_id=doc.drive_id,
        item_id=doc.item_id,
        file_url=doc.file_url,
        share_url=doc.share_url,
        file_name=doc.file_name,
        mime_type=doc.mime_type,
        file_size_bytes=doc.file_size_bytes,
        file_hash=doc.file_hash,
        uploaded_by=doc.uploaded_by,
        status=doc.status,
        created_at=doc.created_at,
        deleted_at=doc.deleted_at,
        deleted_by=doc.deleted_by,
    ).model_dump()


def _require(value, message: str):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(message)
    return value


def _check_report_type(report_type: str):
    if report_type not in REFERENCE_TYPES:
        raise ValidationError("Invalid report type")


async def _read_limited(file: UploadFile, limit: int) -> bytes:
    # Stop one byte past the limit; validation reports the size error
    chunks: list[bytes] = []
    size = 0
    while size <= limit:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        chunks.append(chunk)
    return b"".join(chunks)[: limit + 1]


def _parse_metadata(raw: str | None) -> dict:
    if not raw:
        return {}
    try:
        metadata = json.loads(raw)
    except ValueError:
        raise ValidationError("Invalid metadata")
    if not isinstance(metadata, dict):
        raise ValidationError("Invalid metadata")
    return metadata


@router.options("")
async def preflight(request: Request, settings: Settings = Depends(get_settings)):
    return Response(status_code=204, headers=preflight_headers(settings, request.headers.get("origin")))


@router.post("", dependencies=[Depends(require_authorization)])
async def upload_document(
    request: Request,
    file: UploadFile | None = File(None),
    companyId: str | None = Form(None),
    employeeId: str | None = Form(None),
    uploadedBy: str | None = Form(None),
    reportId: str | None = Form(None),
    reportType: str | None = Form(None),
    metadata: str | None = Form(None),
    settings: Settings = Depends(get_settings),
    drive=Depends(get_drive),
    activity: ActivityLogger = Depends(get_activity_logger),
    db: Session = Depends(get_db),
):
    try:
        _require(companyId, "Company ID is required")
        _require(file, "File is required")
        _require(reportType, "Report type is required")
        _check_report_type(reportType)
        if category_for(reportType).subject_scoped:
            _require(employeeId, "Employee ID is required")
        _require(reportId, "Report ID is required")
        _require(uploadedBy, "Uploader ID is required")
        extra = _parse_metadata(metadata)

        content = await _read_limited(file, settings.max_upload_bytes)
        logger.debug("Upload request for %s %s: %s (%d bytes)", reportType, reportId, file.filename, len(content))

        service = AttachmentService(settings, drive, db, activity, sleep=request.app.state.retry_sleep)
        attachment = await service.attach(
            content,
            file.filename or "",
            file.content_type or "",
            companyId,
            employeeId,
            reportId,
            reportType,
            uploadedBy,
            extra,
        )
    except ServiceError as exc:
        if exc.status_code >= 500:
            logger.error("Upload failed: %s", exc)
        return service_error_response(exc, settings)
    except Exception as exc:
        logger.exception("Unexpected upload failure")
        return error_response(str(exc) or "Internal server error", 500, settings, exc)

    return success_response({
        "data": {
            **attachment.upload.to_response(),
            "document": _document_to_response(attachment.link.document),
            "report": record_to_response(reportType, attachment.link.record),
        },
    })


@router.delete("", dependencies=[Depends(require_authorization)])
async def delete_document(
    request: Request,
    settings: Settings = Depends(get_settings),
    drive=Depends(get_drive),
    activity: ActivityLogger = Depends(get_activity_logger),
    db: Session = Depends(get_db),
):
    try:
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError("Invalid request body")
        if not isinstance(body, dict):
            raise ValidationError("Invalid request body")

        try:
            req = DeleteDocumentRequest(
                item_id=_require(body.get("itemId"), "Item ID is required"),
                document_id=_require(body.get("documentId"), "Document ID is required"),
                user_id=_require(body.get("userId"), "User ID is required"),
                company_id=_require(body.get("companyId"), "Company ID is required"),
                report_id=body.get("reportId") or None,
                report_type=body.get("reportType") or None,
            )
        except SchemaError:
            raise ValidationError("Invalid request body")
        if req.report_type:
            _check_report_type(req.report_type)
            _require(req.report_id, "Report ID is required")
        elif req.report_id:
            raise ValidationError("Report type is required")

        service = DeletionService(settings, drive, db, activity, sleep=request.app.state.retry_sleep)
        document = await service.delete(
            req.item_id, req.document_id, req.user_id, req.company_id, req.report_id, req.report_type,
        )
    except ServiceError as exc:
        if exc.status_code >= 500:
            logger.error("Delete failed: %s", exc)
        return service_error_response(exc, settings)
    except Exception as exc:
        logger.exception("Unexpected delete failure")
        return error_response(str(exc) or "Internal server error", 500, settings, exc)

    return success_response({
        "message": "Document deleted successfully",
        "document": _document_to_response(document),
    })
