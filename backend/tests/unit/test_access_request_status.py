"""Unit tests for the AccessRequestStatus state machine"""

import pytest

from archive_access.access_requests.status import (
    ALLOWED_TRANSITIONS,
    DECISION_STATUSES,
    DOWNLOAD_GRANTING_STATUSES,
    INITIAL_STATUS,
    TERMINAL_STATUSES,
    AccessRequestStatus,
    AccessRequestType,
    can_transition,
    get_allowed_transitions,
    is_terminal,
)

pytestmark = pytest.mark.unit

S = AccessRequestStatus


class TestStatusValues:
    def test_status_enum_values(self):
        assert [s.value for s in AccessRequestStatus] == [
            "NEW", "IN_PROGRESS", "APPROVED", "REJECTED", "COMPLETED"
        ]

    def test_type_enum_values(self):
        assert {t.value for t in AccessRequestType} == {"VIEW", "SCAN"}

    def test_initial_status_is_new(self):
        assert INITIAL_STATUS == S.NEW

    def test_every_status_has_transition_entry(self):
        assert set(ALLOWED_TRANSITIONS) == set(AccessRequestStatus)


class TestTransitions:
    """Test the transition table edge by edge"""

    @pytest.mark.parametrize("current,target", [
        (S.NEW, S.IN_PROGRESS),
        (S.NEW, S.APPROVED),
        (S.NEW, S.REJECTED),
        (S.IN_PROGRESS, S.APPROVED),
        (S.IN_PROGRESS, S.REJECTED),
        (S.APPROVED, S.COMPLETED),
    ])
    def test_allowed_edges(self, current, target):
        assert can_transition(current, target) is True

    @pytest.mark.parametrize("current,target", [
        (S.NEW, S.COMPLETED),
        (S.IN_PROGRESS, S.NEW),
        (S.IN_PROGRESS, S.COMPLETED),
        (S.APPROVED, S.REJECTED),
        (S.APPROVED, S.IN_PROGRESS),
        (S.APPROVED, S.NEW),
        (S.REJECTED, S.APPROVED),
        (S.REJECTED, S.NEW),
        (S.COMPLETED, S.APPROVED),
    ])
    def test_forbidden_edges(self, current, target):
        assert can_transition(current, target) is False

    @pytest.mark.parametrize("status", list(AccessRequestStatus))
    def test_self_transitions_are_not_allowed(self, status):
        assert can_transition(status, status) is False

    def test_no_transition_returns_to_new(self):
        for status in AccessRequestStatus:
            assert can_transition(status, S.NEW) is False

    def test_allowed_transitions_from_new(self):
        assert get_allowed_transitions(S.NEW) == [S.IN_PROGRESS, S.APPROVED, S.REJECTED]

    def test_allowed_transitions_returns_copy(self):
        allowed = get_allowed_transitions(S.APPROVED)
        allowed.append(S.NEW)

        assert get_allowed_transitions(S.APPROVED) == [S.COMPLETED]


class TestStatusGroups:
    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {S.REJECTED, S.COMPLETED}
        assert is_terminal(S.REJECTED) is True
        assert is_terminal(S.COMPLETED) is True
        assert is_terminal(S.APPROVED) is False

    def test_terminal_statuses_have_no_exits(self):
        for status in TERMINAL_STATUSES:
            assert get_allowed_transitions(status) == []

    def test_decision_statuses(self):
        assert DECISION_STATUSES == {S.APPROVED, S.REJECTED}

    def test_download_granting_statuses(self):
        assert DOWNLOAD_GRANTING_STATUSES == {S.APPROVED, S.COMPLETED}
