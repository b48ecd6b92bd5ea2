"""Integration tests for the documents API

Tests the complete document workflow:
- Upload with validation (all field errors reported together)
- Owner-scoped listing with computed expiry flags
- Show, archive (one-way) and download
- Storage failure handling
"""

from datetime import timedelta
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile

from conftest import NOW, PDF_BYTES
from domain.documents.errors import StorageError
from infrastructure.storage.storage_config import get_storage
from models.document import Document

pytestmark = pytest.mark.integration

DOCUMENTS_URL = "/api/v1/documents"


def _upload(client: TestClient, name="Passport", expires_at="2027-01-01", content=PDF_BYTES,
            content_type="application/pdf", filename="passport.pdf"):
    return client.post(
        DOCUMENTS_URL,
        data={"name": name, "expires_at": expires_at},
        files={"file": (filename, content, content_type)},
    )


class TestCreateDocument:

    def test_upload_pdf(self, owner_client, owner, db_session):
        response = _upload(owner_client)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Passport"
        assert data["expires_at"].startswith("2027-01-01T00:00:00")
        assert data["archived_at"] is None
        assert data["is_expired"] is False
        assert data["is_expiring_soon"] is False
        assert data["owner"] == {"id": str(owner.id), "name": "Alice", "email": "alice@example.com"}
        assert data["download_url"].endswith(f"/api/v1/documents/{data['id']}/download")
        assert data["path"].startswith(f"documents/{owner.id}/")

        document = db_session.get(Document, UUID(data["id"]))
        assert document.owner_id == owner.id

    def test_exactly_five_years_out_is_accepted(self, owner_client):
        assert _upload(owner_client, expires_at="2031-03-10").status_code == 201

    def test_five_years_and_one_day_is_rejected(self, owner_client, caplog):
        response = _upload(owner_client, expires_at="2031-03-11")

        assert response.status_code == 422
        body = response.json()
        assert body["errors"]["expires_at"] == [
            "The expiry date cannot be more than 5 years in the future."
        ]
        assert "Document expiry date exceeds maximum allowed" in caplog.text

    @pytest.mark.parametrize("expires_at", ["2026-03-09", "2026-03-10"])
    def test_past_or_today_is_rejected(self, owner_client, expires_at):
        response = _upload(owner_client, expires_at=expires_at)

        assert response.status_code == 422
        assert response.json()["errors"]["expires_at"] == ["The expiry date must be in the future."]

    def test_non_pdf_is_rejected(self, owner_client):
        response = _upload(owner_client, content=b"PNG...", content_type="image/png", filename="scan.png")

        assert response.status_code == 422
        assert response.json()["errors"]["file"] == ["Only PDF files are allowed."]

    def test_oversized_upload_is_read_only_past_the_limit(self, owner_client, monkeypatch):
        monkeypatch.setattr("documents.router.MAX_FILE_SIZE", 1024)
        monkeypatch.setattr("domain.documents.validation.MAX_FILE_SIZE", 1024)
        reads = []
        original_read = UploadFile.read

        async def recording_read(self, size=-1):
            data = await original_read(self, size)
            reads.append((size, len(data)))
            return data

        monkeypatch.setattr(UploadFile, "read", recording_read)

        response = _upload(owner_client, content=PDF_BYTES + b"0" * 4096)

        assert response.status_code == 422
        assert response.json()["errors"]["file"] == ["The file may not be greater than 1 kilobytes."]
        assert reads == [(1025, 1025)]

    def test_all_errors_are_reported_together(self, owner_client):
        response = owner_client.post(DOCUMENTS_URL, data={"name": "", "expires_at": "not a date"})

        assert response.status_code == 422
        body = response.json()
        assert body["message"] == "The given data was invalid."
        assert set(body["errors"]) == {"name", "expires_at", "file"}

    def test_name_too_long(self, owner_client):
        response = _upload(owner_client, name="x" * 256)

        assert response.status_code == 422
        assert "name" in response.json()["errors"]

    def test_storage_failure_returns_generic_500(self, app, owner_client, db_session):
        class BrokenStorage:
            async def store_file(self, **kwargs):
                raise StorageError("bucket unreachable")

        app.dependency_overrides[get_storage] = lambda: BrokenStorage()

        response = _upload(owner_client)

        assert response.status_code == 500
        assert response.json() == {"message": "Storage operation failed"}
        assert db_session.query(Document).count() == 0

    def test_same_content_twice_creates_two_documents(self, owner_client):
        first = _upload(owner_client, name="Copy 1").json()["data"]
        second = _upload(owner_client, name="Copy 2").json()["data"]

        assert first["id"] != second["id"]
        assert first["path"] == second["path"]


class TestListDocuments:

    def test_lists_only_own_documents_sorted_by_expiry(self, owner_client, owner, other_user, make_document):
        make_document(owner, "Later", NOW + timedelta(days=90))
        make_document(owner, "Soon", NOW + timedelta(days=3))
        make_document(owner, "Gone", NOW - timedelta(days=2))
        make_document(other_user, "Bob's visa", NOW + timedelta(days=1))

        response = owner_client.get(DOCUMENTS_URL)

        assert response.status_code == 200
        data = response.json()["data"]
        assert [d["name"] for d in data] == ["Gone", "Soon", "Later"]
        flags = {d["name"]: (d["is_expired"], d["is_expiring_soon"]) for d in data}
        assert flags == {
            "Gone": (True, False),
            "Soon": (False, True),
            "Later": (False, False),
        }

    def test_archived_documents_are_listed_with_flags_by_date(self, owner_client, owner, make_document):
        make_document(owner, "Old", NOW - timedelta(days=1), archived_at=NOW - timedelta(hours=1))

        data = owner_client.get(DOCUMENTS_URL).json()["data"]

        assert data[0]["archived_at"] is not None
        assert data[0]["is_expired"] is True

    def test_empty_list(self, owner_client):
        response = owner_client.get(DOCUMENTS_URL)

        assert response.status_code == 200
        assert response.json() == {"data": []}


class TestShowDocument:

    def test_owner_can_view(self, owner_client, owner, make_document):
        document = make_document(owner, "Passport", NOW + timedelta(days=30))

        response = owner_client.get(f"{DOCUMENTS_URL}/{document.id}")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(document.id)

    def test_unknown_document(self, owner_client):
        response = owner_client.get(f"{DOCUMENTS_URL}/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["message"] == "Document not found"

    def test_malformed_id(self, owner_client):
        assert owner_client.get(f"{DOCUMENTS_URL}/not-a-uuid").status_code == 422


class TestArchiveDocument:

    def test_archive(self, owner_client, owner, make_document):
        document = make_document(owner, "Passport", NOW + timedelta(days=30))

        response = owner_client.post(f"{DOCUMENTS_URL}/{document.id}/archive")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Document archived successfully"
        assert body["data"]["archived_at"].startswith("2026-03-10T12:00:00")

    def test_archive_twice_is_rejected(self, owner_client, owner, make_document, db_session):
        document = make_document(owner, "Passport", NOW + timedelta(days=30))
        owner_client.post(f"{DOCUMENTS_URL}/{document.id}/archive")

        response = owner_client.post(f"{DOCUMENTS_URL}/{document.id}/archive")

        assert response.status_code == 422
        assert response.json()["message"] == "Document is already archived"
        db_session.refresh(document)
        assert document.archived_at == NOW

    def test_archive_unknown_document(self, owner_client):
        assert owner_client.post(f"{DOCUMENTS_URL}/{uuid4()}/archive").status_code == 404


class TestDownloadDocument:

    def test_upload_then_download_round_trip(self, owner_client):
        created = _upload(owner_client, name="Passport").json()["data"]

        response = owner_client.get(created["download_url"])

        assert response.status_code == 200
        assert response.content == PDF_BYTES
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="Passport.pdf"'

    @pytest.mark.parametrize("name,fallback,encoded", [
        ("Résumé", "Resume.pdf", "R%C3%A9sum%C3%A9.pdf"),
        ("合同", "document.pdf", "%E5%90%88%E5%90%8C.pdf"),
        ("Pass—port", "Passport.pdf", "Pass%E2%80%94port.pdf"),
    ])
    def test_non_ascii_name_download(self, owner_client, name, fallback, encoded):
        created = _upload(owner_client, name=name).json()["data"]

        response = owner_client.get(created["download_url"])

        assert response.status_code == 200
        assert response.content == PDF_BYTES
        assert response.headers["content-disposition"] == (
            f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"
        )

    def test_archived_document_can_still_be_downloaded(self, owner_client):
        created = _upload(owner_client).json()["data"]
        owner_client.post(f"{DOCUMENTS_URL}/{created['id']}/archive")

        assert owner_client.get(created["download_url"]).content == PDF_BYTES

    def test_missing_blob_returns_404(self, owner_client, owner, make_document):
        document = make_document(owner, "Lost", NOW + timedelta(days=30), path="documents/x/gone.pdf")

        response = owner_client.get(f"{DOCUMENTS_URL}/{document.id}/download")

        assert response.status_code == 404
        assert response.json() == {"message": "File not found"}
