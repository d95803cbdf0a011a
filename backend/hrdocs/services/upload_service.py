import asyncio
import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from hrdocs.config import Settings
from hrdocs.errors import RemoteStoreError, ValidationError
from hrdocs.models.company import Company
from hrdocs.models.employee import Employee
from hrdocs.services.compensation import CompensationStack
from hrdocs.services.folders import FolderEnsurer
from hrdocs.services.references import find_reference
from hrdocs.services.naming import (
    EXTENSIONS_BY_MIME_TYPE,
    DocumentCategory,
    build_file_name,
    build_folder_path,
)
from hrdocs.services.retry import retry_policy, with_retry
from hrdocs.utils.paths import join_path

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = frozenset(EXTENSIONS_BY_MIME_TYPE)


@dataclass
class UploadResult:
    path: str
    drive_id: str | None
    item_id: str
    web_url: str | None
    file_name: str
    mime_type: str
    size: int
    file_hash: str
    share_url: str | None = None

    def to_response(self) -> dict:
        return {
            "filePath": self.path,
            "driveId": self.drive_id,
            "itemId": self.item_id,
            "webUrl": self.web_url,
            "sharingLink": self.share_url,
            "fileName": self.file_name,
            "mimeType": self.mime_type,
        }


def validate_file(settings: Settings, content: bytes, file_name: str, mime_type: str):
    max_bytes = settings.max_upload_bytes
    if len(content) > max_bytes:
        raise ValidationError(f"File size exceeds {max_bytes // (1024 * 1024)}MB limit")
    if not content:
        raise ValidationError("File is empty")
    if mime_type not in ALLOWED_MIME_TYPES:
        raise ValidationError(f"File type {mime_type or 'unknown'} is not allowed")
    if len(file_name) > settings.max_file_name_length:
        raise ValidationError(f"File name must be {settings.max_file_name_length} characters or fewer")


def enrich_metadata(db: Session, company_id: str, employee_id: str | None, metadata: dict) -> dict:
    """Merge display names and sequence numbers from the database into ``metadata``.

    Stored values win over values sent by the client; missing rows are tolerated
    here and only fail later if a required sequence number is still absent.
    """
    enriched = dict(metadata)

    company = db.query(Company).filter(Company.id == company_id).first()
    if company:
        enriched["company_name"] = company.name
        if company.company_number is not None:
            enriched["company_number"] = company.company_number

    if employee_id:
        employee = db.query(Employee).filter(Employee.id == employee_id).first()
        if employee:
            enriched["employee_name"] = employee.full_name or None
            if employee.employee_number is not None:
                enriched["employee_number"] = employee.employee_number

    reference_id = metadata.get("reference_id")
    reference_type = metadata.get("reference_type")
    if reference_id and reference_type:
        record = find_reference(db, reference_type, reference_id)
        form_number = getattr(record, "form_number", None) if record else None
        if form_number is not None:
            enriched["form_number"] = form_number
    return enriched


class UploadService:
    def __init__(self, settings: Settings, drive, db: Session, sleep=asyncio.sleep):
        self._settings = settings
        self._drive = drive
        self._db = db
        self._retry = retry_policy(settings, sleep)
        self._folders = FolderEnsurer(drive, self._retry)

    async def upload(
        self,
        content: bytes,
        company_id: str,
        employee_id: str | None,
        file_name: str,
        mime_type: str,
        category: DocumentCategory,
        metadata: dict,
        compensations: CompensationStack | None = None,
        now: datetime | None = None,
    ) -> UploadResult:
        validate_file(self._settings, content, file_name, mime_type)

        enriched = enrich_metadata(self._db, company_id, employee_id, metadata)

        folder_path = build_folder_path(company_id, employee_id, category, enriched)
        await self._folders.ensure_path(folder_path)

        unique_name = build_file_name(file_name, category, enriched, now=now, mime_type=mime_type)
        file_path = join_path(folder_path, unique_name)

        try:
            item = await with_retry(
                lambda: self._drive.upload_content(file_path, content, mime_type),
                description=f"upload {file_path}",
                **self._retry,
            )
        except RemoteStoreError as exc:
            exc.add_context(path=file_path, mime_type=mime_type, size=len(content))
            logger.error("Graph API upload error: %s", exc)
            raise

        item_id = item["id"]
        if compensations is not None:
            compensations.push(
                f"delete uploaded item {item_id} at {file_path}",
                lambda: self._drive.delete_item(item_id),
            )

        result = UploadResult(
            path=file_path,
            drive_id=(item.get("parentReference") or {}).get("driveId"),
            item_id=item_id,
            web_url=item.get("webUrl"),
            file_name=unique_name,
            mime_type=mime_type,
            size=len(content),
            file_hash=hashlib.sha256(content).hexdigest(),
        )

        if self._settings.create_share_links:
            try:
                result.share_url = await with_retry(
                    lambda: self._drive.create_link(item_id),
                    description=f"create link for {item_id}",
                    **self._retry,
                )
            except RemoteStoreError as exc:
                exc.add_context(path=file_path, item_id=item_id)
                logger.error("Graph API share link error: %s", exc)
                raise

        logger.debug("Uploaded %s (%d bytes) as item %s", file_path, result.size, item_id)
        return result
