from pydantic import BaseModel


class DocumentResponse(BaseModel):
    id: str
    company_id: str
    employee_id: str | None
    document_type: str
    reference_type: str
    reference_id: str
    file_path: str
    drive_id: str | None
    item_id: str | None
    file_url: str | None
    share_url: str | None
    file_name: str
    mime_type: str | None
    file_size_bytes: int | None
    file_hash: str | None
    uploaded_by: str
    status: str
    created_at: str
    deleted_at: str | None
    deleted_by: str | None


class DeleteDocumentRequest(BaseModel):
    item_id: str
    document_id: str
    user_id: str
    company_id: str
    report_id: str | None = None
    report_type: str | None = None
