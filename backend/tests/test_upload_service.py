import re
from datetime import datetime, timezone

import pytest

from hrdocs.errors import ConfigurationError, RemoteErrorKind, RemoteStoreError, ValidationError
from hrdocs.services.compensation import CompensationStack
from hrdocs.services.naming import MEDICAL_CERTIFICATE, RECEIPT
from hrdocs.services.upload_service import UploadService, enrich_metadata, validate_file

from fakes import transient_error

PDF = b"%PDF-1.4 " + b"x" * 500 * 1024
REPORT_METADATA = {"reference_id": "R1", "reference_type": "accident_report"}


class UntouchableSession:
    def __getattr__(self, name):
        raise AssertionError(f"database accessed: {name}")


@pytest.fixture
def uploader(settings, drive, db, no_sleep):
    return UploadService(settings, drive, db, sleep=no_sleep)


class TestValidateFile:
    def test_size_limit_production(self, settings):
        with pytest.raises(ValidationError) as exc_info:
            validate_file(settings, b"x" * (10 * 1024 * 1024 + 1), "a.pdf", "application/pdf")
        assert exc_info.value.message == "File size exceeds 10MB limit"

    def test_size_limit_development(self, settings):
        settings.environment = "development"
        validate_file(settings, b"x" * (15 * 1024 * 1024), "a.pdf", "application/pdf")
        with pytest.raises(ValidationError, match="20MB"):
            validate_file(settings, b"x" * (20 * 1024 * 1024 + 1), "a.pdf", "application/pdf")

    def test_mime_type_allow_list(self, settings):
        with pytest.raises(ValidationError, match="text/html is not allowed"):
            validate_file(settings, b"<html>", "a.html", "text/html")

    def test_file_name_length(self, settings):
        with pytest.raises(ValidationError, match="100 characters"):
            validate_file(settings, b"x", "a" * 97 + ".pdf", "application/pdf")

    def test_empty_file(self, settings):
        with pytest.raises(ValidationError, match="empty"):
            validate_file(settings, b"", "a.pdf", "application/pdf")


class TestEnrichMetadata:
    def test_reads_sequence_numbers_and_names(self, db):
        enriched = enrich_metadata(db, "C1", "E1", {"reference_id": "R2", "reference_type": "illness_report"})
        assert enriched["company_number"] == 7
        assert enriched["company_name"] == "Acme Ltd."
        assert enriched["employee_number"] == 3
        assert enriched["employee_name"] == "Jane Doe"
        assert enriched["form_number"] == 12

    def test_stored_values_win(self, db):
        enriched = enrich_metadata(db, "C1", None, {"company_number": 99})
        assert enriched["company_number"] == 7

    def test_unknown_rows_are_tolerated(self, db):
        enriched = enrich_metadata(db, "missing", "missing", {"company_number": 4})
        assert enriched == {"company_number": 4}


class TestUpload:
    async def test_happy_path(self, uploader, drive):
        result = await uploader.upload(PDF, "C1", "E1", "certificate.pdf", "application/pdf",
                                       MEDICAL_CERTIFICATE, REPORT_METADATA)
        assert "/C7_Acme-Ltd/" in result.path
        assert "/E3_Jane-Doe/" in result.path
        assert re.fullmatch(r"med-cert_ACC_C7_E3_[0-9T-]+Z\.pdf", result.file_name)
        assert result.path.endswith("/" + result.file_name)
        assert result.item_id in drive.items
        assert result.drive_id == "DRIVE1"
        assert result.share_url == f"https://1drv.ms/u/{result.item_id}"
        assert result.size == len(PDF)
        assert len(result.file_hash) == 64

    async def test_fixed_clock(self, uploader):
        now = datetime(2026, 5, 1, 8, 30, 0, 5000, tzinfo=timezone.utc)
        result = await uploader.upload(b"img", "C1", None, "r.JPG", "image/jpeg", RECEIPT,
                                       {"reference_id": "RC1", "reference_type": "company_receipt"}, now=now)
        assert result.path == "/Companies/C7_Acme-Ltd/Receipts/receipt_REC_C7_2026-05-01T08-30-00-005Z.jpg"

    async def test_oversize_file_touches_nothing(self, settings, drive, no_sleep):
        uploader = UploadService(settings, drive, UntouchableSession(), sleep=no_sleep)
        with pytest.raises(ValidationError) as exc_info:
            await uploader.upload(b"x" * (10 * 1024 * 1024 + 1), "C1", "E1", "a.pdf", "application/pdf",
                                  MEDICAL_CERTIFICATE, REPORT_METADATA)
        assert str(exc_info.value) == "File size exceeds 10MB limit"
        assert drive.calls == []

    async def test_missing_company_number(self, uploader, drive):
        with pytest.raises(ConfigurationError):
            await uploader.upload(b"x", "C2", "E2", "a.pdf", "application/pdf", MEDICAL_CERTIFICATE,
                                  {"reference_id": "R3", "reference_type": "accident_report"})
        assert drive.calls == []

    async def test_transient_upload_is_retried(self, uploader, drive, sleeps):
        drive.fail("upload_content", transient_error(), transient_error())
        result = await uploader.upload(b"x", "C1", "E1", "a.pdf", "application/pdf", MEDICAL_CERTIFICATE,
                                       REPORT_METADATA)
        assert drive.count("upload_content") == 3
        assert sleeps == [2.0, 4.0]
        assert result.item_id in drive.items

    async def test_upload_failure_keeps_context(self, uploader, drive):
        error = RemoteStoreError(RemoteErrorKind.REJECTED, "invalidRequest", 400)
        drive.fail_always("upload_content", error)
        with pytest.raises(RemoteStoreError) as exc_info:
            await uploader.upload(b"abc", "C1", "E1", "a.pdf", "application/pdf", MEDICAL_CERTIFICATE,
                                  REPORT_METADATA)
        assert exc_info.value is error
        assert exc_info.value.context["mime_type"] == "application/pdf"
        assert exc_info.value.context["size"] == 3
        assert exc_info.value.context["path"].startswith("/Companies/C7_Acme-Ltd/")
        assert "size=3" in str(exc_info.value)

    async def test_share_link_failure_fails_upload(self, uploader, drive):
        drive.fail_always("create_link", transient_error())
        compensations = CompensationStack()
        with pytest.raises(RemoteStoreError):
            await uploader.upload(b"x", "C1", "E1", "a.pdf", "application/pdf", MEDICAL_CERTIFICATE,
                                  REPORT_METADATA, compensations=compensations)
        # the orchestrator registers the undo but leaves running it to the caller
        assert len(compensations) == 1
        assert len(drive.items) == 1
        await compensations.unwind()
        assert drive.items == {}

    async def test_share_links_can_be_disabled(self, settings, drive, db, no_sleep):
        settings.create_share_links = False
        uploader = UploadService(settings, drive, db, sleep=no_sleep)
        result = await uploader.upload(b"x", "C1", "E1", "a.pdf", "application/pdf", MEDICAL_CERTIFICATE,
                                       REPORT_METADATA)
        assert result.share_url is None
        assert drive.count("create_link") == 0
