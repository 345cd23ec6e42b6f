"""Tests for AttachmentService and the attachment client payload."""

import base64

import pytest

from src.db.models import FileAttachment
from src.errors.domain import NotFoundError
from src.services.attachment_service import AttachmentService, attachment_payload
from src.services.file_export import EncodedFile


@pytest.fixture
def svc(test_db):
    """Service under test."""
    return AttachmentService(test_db)


@pytest.fixture
def encoded() -> EncodedFile:
    return EncodedFile(filename="report.csv", mime="text/csv", data=b"A,B\n1,2\n")


class TestStore:
    def test_store_and_get(self, svc, encoded):
        record = svc.store(encoded, None)
        fetched = svc.get(record.id)
        assert fetched.filename == "report.csv"
        assert fetched.size == len(encoded.data)
        assert fetched.data == encoded.data

    def test_get_missing_raises(self, svc):
        with pytest.raises(NotFoundError) as exc_info:
            svc.get("missing")
        assert exc_info.value.code == "E-1005"


class TestListForMessages:
    def test_empty_ids(self, svc):
        assert svc.list_for_messages([]) == {}

    def test_unattached_files_are_not_listed(self, svc, encoded):
        svc.store(encoded, None)
        assert svc.list_for_messages(["m1"]) == {}


class TestPayload:
    def test_small_file_is_inlined(self, encoded):
        record = FileAttachment(
            id="f1", filename="r.csv", mime="text/csv", size=len(encoded.data), data=encoded.data
        )
        payload = attachment_payload(record)
        assert base64.b64decode(payload["content_base64"]) == encoded.data
        assert payload["download_url"] == "/api/v1/files/f1"

    def test_large_file_is_download_only(self):
        data = b"x" * 32
        record = FileAttachment(id="f2", filename="r.csv", mime="text/csv", size=32, data=data)
        payload = attachment_payload(record, inline_max_bytes=16)
        assert payload["content_base64"] is None
        assert payload["download_url"] == "/api/v1/files/f2"
        assert payload["size"] == 32
