"""Integration tests for record file downloads

Tests cover:
- Access check endpoint
- Download authorization per role and request status
- End-to-end request scenarios (approve, reject, complete)
- Missing or escaping file paths
- Audit events for downloads
"""

from uuid import uuid4

import pytest

from archive_access.models import AuditLog, Record

pytestmark = pytest.mark.integration


def _access(client, record):
    response = client.get(f"/api/v1/records/{record.id}/access")
    assert response.status_code == 200
    return response.json()


class TestAccessCheck:
    """Test GET /api/v1/records/{id}/access"""

    @pytest.mark.parametrize("client_fixture", ["admin_client", "archivist_client"])
    def test_staff_allowed_without_any_request(self, request, client_fixture, record_with_file):
        staff_client = request.getfixturevalue(client_fixture)

        data = _access(staff_client, record_with_file)

        assert data == {"record_id": str(record_with_file.id), "allowed": True, "reason": None}

    def test_researcher_without_request(self, researcher_client, record_with_file):
        data = _access(researcher_client, record_with_file)

        assert data["allowed"] is False
        assert data["reason"] == "REQUIRES_APPROVED_REQUEST"

    @pytest.mark.parametrize("status,allowed", [
        ("NEW", False),
        ("IN_PROGRESS", False),
        ("APPROVED", True),
        ("REJECTED", False),
        ("COMPLETED", True),
    ])
    def test_researcher_by_request_status(self, researcher_client, make_request, researcher_user,
                                          record_with_file, status, allowed):
        make_request(record_with_file, researcher_user, status)

        assert _access(researcher_client, record_with_file)["allowed"] is allowed

    def test_approval_of_another_researcher_does_not_count(self, other_researcher_client,
                                                           make_request, researcher_user,
                                                           record_with_file):
        make_request(record_with_file, researcher_user, "APPROVED")

        data = _access(other_researcher_client, record_with_file)

        assert data["reason"] == "REQUIRES_APPROVED_REQUEST"

    def test_record_without_file(self, admin_client, record_without_file):
        data = _access(admin_client, record_without_file)

        assert data["allowed"] is False
        assert data["reason"] == "NO_FILE"

    def test_unknown_record(self, admin_client):
        response = admin_client.get(f"/api/v1/records/{uuid4()}/access")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestDownload:
    """Test GET /api/v1/records/{id}/download"""

    def test_staff_download_streams_file(self, archivist_client, record_with_file, db_session):
        response = archivist_client.get(f"/api/v1/records/{record_with_file.id}/download")

        assert response.status_code == 200
        assert response.content == b"%PDF-1.4 scanned register"
        assert response.headers["content-type"] == "application/pdf"
        assert "register_1831.pdf" in response.headers["content-disposition"]

        entry = db_session.query(AuditLog).filter(AuditLog.action == "FILE_DOWNLOADED").one()
        assert entry.entity_id == record_with_file.id

    def test_researcher_denied_without_approval(self, researcher_client, researcher_user,
                                                record_with_file, db_session):
        response = researcher_client.get(f"/api/v1/records/{record_with_file.id}/download")

        assert response.status_code == 403

        entry = db_session.query(AuditLog).filter(AuditLog.action == "FILE_DOWNLOAD_DENIED").one()
        assert entry.actor_id == researcher_user.id
        assert entry.metadata_json == {"reason": "REQUIRES_APPROVED_REQUEST"}

    def test_researcher_with_approval_downloads(self, researcher_client, make_request,
                                                researcher_user, record_with_file):
        make_request(record_with_file, researcher_user, "APPROVED")

        response = researcher_client.get(f"/api/v1/records/{record_with_file.id}/download")

        assert response.status_code == 200
        assert response.content == b"%PDF-1.4 scanned register"

    def test_no_file_is_not_found(self, admin_client, record_without_file):
        response = admin_client.get(f"/api/v1/records/{record_without_file.id}/download")

        assert response.status_code == 404

    def test_file_missing_from_storage(self, admin_client, db_session):
        record = Record(
            ref_code="F-2/D-1",
            title="Lost scan",
            file_path="records/does-not-exist.pdf",
            file_name="lost.pdf",
        )
        db_session.add(record)
        db_session.commit()

        response = admin_client.get(f"/api/v1/records/{record.id}/download")

        assert response.status_code == 404
        assert response.json()["detail"] == "File not found on server"

    def test_path_outside_upload_dir(self, admin_client, db_session):
        record = Record(
            ref_code="F-2/D-2",
            title="Escaping path",
            file_path="../../../etc/passwd",
            file_name="passwd",
        )
        db_session.add(record)
        db_session.commit()

        response = admin_client.get(f"/api/v1/records/{record.id}/download")

        assert response.status_code == 404

    def test_requires_authentication(self, client, record_with_file):
        response = client.get(f"/api/v1/records/{record_with_file.id}/download")

        assert response.status_code in (401, 403)


class TestRequestScenarios:
    """End-to-end flows through the HTTP API"""

    def test_approval_does_not_help_record_without_file(self, researcher_client, archivist_client,
                                                        archivist_user, record_without_file):
        created = researcher_client.post(
            "/api/v1/requests",
            json={"record_id": str(record_without_file.id), "type": "VIEW"}
        ).json()
        assert created["status"] == "NEW"

        approved = archivist_client.patch(
            f"/api/v1/requests/{created['id']}", json={"status": "APPROVED"}
        ).json()
        assert approved["status"] == "APPROVED"
        assert approved["processed_by_id"] == str(archivist_user.id)

        assert _access(researcher_client, record_without_file)["reason"] == "NO_FILE"

    def test_rejected_scan_request_keeps_file_locked(self, researcher_client, archivist_client,
                                                     record_with_file):
        assert _access(researcher_client, record_with_file)["reason"] == "REQUIRES_APPROVED_REQUEST"

        created = researcher_client.post(
            "/api/v1/requests",
            json={"record_id": str(record_with_file.id), "type": "SCAN"}
        ).json()

        no_reason = archivist_client.patch(
            f"/api/v1/requests/{created['id']}", json={"status": "REJECTED"}
        )
        assert no_reason.status_code == 400

        rejected = archivist_client.patch(
            f"/api/v1/requests/{created['id']}",
            json={"status": "REJECTED", "rejection_reason": "document restricted"}
        )
        assert rejected.status_code == 200
        assert rejected.json()["status"] == "REJECTED"

        assert _access(researcher_client, record_with_file)["reason"] == "REQUIRES_APPROVED_REQUEST"

    def test_approved_then_completed_keeps_download(self, researcher_client, archivist_client,
                                                    admin_client, archivist_user,
                                                    record_with_file):
        created = researcher_client.post(
            "/api/v1/requests",
            json={"record_id": str(record_with_file.id), "type": "SCAN"}
        ).json()

        approved = archivist_client.patch(
            f"/api/v1/requests/{created['id']}", json={"status": "APPROVED"}
        ).json()
        assert approved["processed_by_id"] == str(archivist_user.id)
        assert _access(researcher_client, record_with_file)["allowed"] is True

        completed = admin_client.patch(
            f"/api/v1/requests/{created['id']}", json={"status": "COMPLETED"}
        ).json()
        assert completed["status"] == "COMPLETED"
        assert completed["processed_by_id"] == str(archivist_user.id)
        assert completed["processed_at"] == approved["processed_at"]

        assert _access(researcher_client, record_with_file)["allowed"] is True
        download = researcher_client.get(f"/api/v1/records/{record_with_file.id}/download")
        assert download.status_code == 200
