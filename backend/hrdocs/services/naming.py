"""Deterministic folder paths and collision-resistant file names on the drive."""
import re
from dataclasses import dataclass
from datetime import datetime, timezone

from hrdocs.errors import ConfigurationError
from hrdocs.utils.paths import join_path, sanitize_segment


@dataclass(frozen=True)
class DocumentCategory:
    name: str
    prefix: str
    short_code: str
    folder: str
    subject_scoped: bool = True


MEDICAL_CERTIFICATE = DocumentCategory("MEDICAL_CERTIFICATE", "med-cert", "ACC", "MedicalCertificates")
ILLNESS_CERTIFICATE = DocumentCategory("ILLNESS_CERTIFICATE", "ill-cert", "ILL", "IllnessCertificates")
RECEIPT = DocumentCategory("RECEIPT", "receipt", "REC", "Receipts", subject_scoped=False)

# reference type -> category of the document attached to it
CATEGORIES_BY_REFERENCE_TYPE = {
    "accident_report": MEDICAL_CERTIFICATE,
    "illness_report": ILLNESS_CERTIFICATE,
    "company_receipt": RECEIPT,
}
REFERENCE_TYPES = tuple(CATEGORIES_BY_REFERENCE_TYPE)

_EXTENSION_RE = re.compile(r"[a-z0-9]{1,10}")

EXTENSIONS_BY_MIME_TYPE = {
    "application/pdf": "pdf",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/heic": "heic",
    "image/webp": "webp",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
}


def category_for(reference_type: str) -> DocumentCategory:
    return CATEGORIES_BY_REFERENCE_TYPE[reference_type]


def _sequence(metadata: dict, key: str, label: str) -> int:
    value = metadata.get(key)
    if value is None or value == "":
        raise ConfigurationError(f"{label} sequence number is missing")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{label} sequence number is invalid: {value!r}")


def _folder_name(marker: str, name: str | None) -> str:
    safe = sanitize_segment(name) if name else ""
    return sanitize_segment(f"{marker}_{safe}" if safe else marker)


def build_folder_path(company_id: str, employee_id: str | None, category: DocumentCategory,
                      metadata: dict) -> str:
    company_seq = _sequence(metadata, "company_number", "Company")
    company_folder = _folder_name(f"C{company_seq}", metadata.get("company_name"))

    if not category.subject_scoped:
        return join_path("Companies", company_folder, category.folder)

    employee_seq = _sequence(metadata, "employee_number", "Employee")
    employee_folder = _folder_name(f"E{employee_seq}", metadata.get("employee_name"))
    reference_type = sanitize_segment(metadata.get("reference_type") or category.folder)
    return join_path(
        "Companies", company_folder, "Employees", employee_folder, category.folder, reference_type,
    )


def file_timestamp(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    iso = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


def file_extension(original_name: str, mime_type: str | None = None) -> str:
    if "." in original_name.strip(".") and not original_name.endswith("."):
        extension = original_name.rsplit(".", 1)[1].lower()
        # Anything else could add segments to the drive path
        if _EXTENSION_RE.fullmatch(extension):
            return extension
    return EXTENSIONS_BY_MIME_TYPE.get(mime_type or "", "bin")


def build_file_name(original_name: str, category: DocumentCategory, metadata: dict,
                    now: datetime | None = None, mime_type: str | None = None) -> str:
    parts = [category.prefix, category.short_code, f"C{_sequence(metadata, 'company_number', 'Company')}"]
    if category.subject_scoped:
        parts.append(f"E{_sequence(metadata, 'employee_number', 'Employee')}")
    if metadata.get("form_number") not in (None, ""):
        parts.append(f"F{_sequence(metadata, 'form_number', 'Form')}")
    parts.append(file_timestamp(now))
    return "_".join(parts) + "." + file_extension(original_name, mime_type)
