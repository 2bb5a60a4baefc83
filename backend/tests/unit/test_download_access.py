"""Unit tests for the file authorization gate

Covers the decision table (file presence, role, approval) without a database.
"""

from uuid import uuid4

import pytest

from archive_access.auth.principal import Principal
from archive_access.auth.roles import UserRole
from archive_access.records.access import (
    AccessDecision,
    DenyReason,
    FileAuthorizationGate,
    evaluate_download_access,
)
from archive_access.records.store import RecordView

pytestmark = pytest.mark.unit


def _never_called():
    raise AssertionError("approval lookup should not run")


class FakeRepository:
    """Stands in for AccessRequestRepository.exists_approved."""

    def __init__(self, approved_pairs=()):
        self.approved_pairs = set(approved_pairs)
        self.calls = []

    def exists_approved(self, record_id, user_id):
        self.calls.append((record_id, user_id))
        return (record_id, user_id) in self.approved_pairs


def _record(has_file=True):
    return RecordView(
        id=uuid4(),
        has_file=has_file,
        file_name="scan.pdf" if has_file else None,
        file_path="records/scan.pdf" if has_file else None,
        access_level="RESTRICTED",
    )


class TestEvaluateDownloadAccess:
    """Test the pure decision function"""

    @pytest.mark.parametrize("role", list(UserRole))
    def test_no_file_denies_every_role(self, role):
        decision = evaluate_download_access(False, role, _never_called)

        assert decision == AccessDecision(allowed=False, reason=DenyReason.NO_FILE)

    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.ARCHIVIST])
    def test_staff_always_allowed(self, role):
        decision = evaluate_download_access(True, role, _never_called)

        assert decision.allowed is True
        assert decision.reason is None

    def test_researcher_with_approval_allowed(self):
        decision = evaluate_download_access(True, UserRole.RESEARCHER, lambda: True)

        assert decision == AccessDecision.allow()

    def test_researcher_without_approval_denied(self):
        decision = evaluate_download_access(True, UserRole.RESEARCHER, lambda: False)

        assert decision.allowed is False
        assert decision.reason == DenyReason.REQUIRES_APPROVED_REQUEST

    def test_role_given_as_string(self):
        decision = evaluate_download_access(True, "ARCHIVIST", _never_called)

        assert decision.allowed is True

    def test_unknown_role_forbidden(self):
        decision = evaluate_download_access(True, "GUEST", _never_called)

        assert decision == AccessDecision.deny(DenyReason.FORBIDDEN)


class TestFileAuthorizationGate:
    """Test the gate wired to a repository"""

    def test_researcher_lookup_is_scoped_to_record_and_user(self):
        record = _record()
        principal = Principal(id=uuid4(), role=UserRole.RESEARCHER)
        repository = FakeRepository(approved_pairs=[(record.id, principal.id)])

        decision = FileAuthorizationGate(repository).authorize_download(record, principal)

        assert decision.allowed is True
        assert repository.calls == [(record.id, principal.id)]

    def test_approval_for_other_user_does_not_count(self):
        record = _record()
        principal = Principal(id=uuid4(), role=UserRole.RESEARCHER)
        repository = FakeRepository(approved_pairs=[(record.id, uuid4())])

        decision = FileAuthorizationGate(repository).authorize_download(record, principal)

        assert decision.reason == DenyReason.REQUIRES_APPROVED_REQUEST

    def test_staff_skip_lookup(self):
        repository = FakeRepository()
        principal = Principal(id=uuid4(), role=UserRole.ADMIN)

        decision = FileAuthorizationGate(repository).authorize_download(_record(), principal)

        assert decision.allowed is True
        assert repository.calls == []

    def test_missing_file_checked_before_lookup(self):
        repository = FakeRepository()
        principal = Principal(id=uuid4(), role=UserRole.RESEARCHER)

        decision = FileAuthorizationGate(repository).authorize_download(
            _record(has_file=False), principal
        )

        assert decision.reason == DenyReason.NO_FILE
        assert repository.calls == []

    def test_decisions_are_not_cached(self):
        """Revoking an approval is seen by the next evaluation"""
        record = _record()
        principal = Principal(id=uuid4(), role=UserRole.RESEARCHER)
        repository = FakeRepository(approved_pairs=[(record.id, principal.id)])
        gate = FileAuthorizationGate(repository)

        assert gate.authorize_download(record, principal).allowed is True

        repository.approved_pairs.clear()

        assert gate.authorize_download(record, principal).allowed is False
        assert len(repository.calls) == 2
