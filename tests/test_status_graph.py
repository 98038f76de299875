"""상태 그래프 테스트.

Status graph tests — Edge table, approval requirements and status rank.
"""

import pytest

from app.models.enums import IssueStatus, UserRole, WorkflowStepType
from app.services import status_graph
from app.utils.exceptions import InvalidTransitionError

ALL_STATUSES = list(IssueStatus)

EXPECTED_EDGES = {
    IssueStatus.NEW: {IssueStatus.IN_PROGRESS},
    IssueStatus.IN_PROGRESS: {IssueStatus.DEV_REVIEW, IssueStatus.NEW},
    IssueStatus.DEV_REVIEW: {IssueStatus.QA_REVIEW, IssueStatus.IN_PROGRESS, IssueStatus.REJECTED},
    IssueStatus.QA_REVIEW: {IssueStatus.PM_REVIEW, IssueStatus.DEV_REVIEW, IssueStatus.REJECTED},
    IssueStatus.PM_REVIEW: {IssueStatus.RESOLVED, IssueStatus.QA_REVIEW, IssueStatus.REJECTED},
    IssueStatus.RESOLVED: {IssueStatus.NEW},
    IssueStatus.REJECTED: {IssueStatus.NEW},
}


class TestAdjacency:
    """전이 테이블 테스트."""

    def test_every_status_has_edges(self):
        """모든 상태에 나가는 간선이 있음 (막다른 상태 없음)."""
        for status in ALL_STATUSES:
            assert status_graph.get_available_transitions(status)

    def test_edges_match_table(self):
        for source, targets in EXPECTED_EDGES.items():
            assert status_graph.get_available_transitions(source) == targets

    def test_graph_closed_over_statuses(self):
        """모든 목표 상태가 IssueStatus 안에 있음."""
        for status in ALL_STATUSES:
            assert status_graph.get_available_transitions(status) <= set(ALL_STATUSES)

    def test_is_valid_matches_adjacency(self):
        for source in ALL_STATUSES:
            for target in ALL_STATUSES:
                expected = target in EXPECTED_EDGES[source]
                assert status_graph.is_valid_transition(source, target) is expected

    def test_accepts_raw_strings(self):
        assert status_graph.is_valid_transition("new", "in_progress")
        assert not status_graph.is_valid_transition("new", "resolved")

    def test_unknown_status_has_no_edges(self):
        assert status_graph.get_available_transitions("archived") == frozenset()
        assert not status_graph.is_valid_transition("archived", "new")
        assert not status_graph.is_valid_transition("new", "archived")

    @pytest.mark.parametrize(
        "source,target",
        [
            ("new", "dev_review"),
            ("new", "resolved"),
            ("in_progress", "qa_review"),
            ("in_progress", "resolved"),
            ("dev_review", "pm_review"),
            ("qa_review", "resolved"),
        ],
    )
    def test_no_skip_ahead(self, source, target):
        """검토 단계 건너뛰기 불가."""
        assert not status_graph.is_valid_transition(source, target)


class TestRequirements:
    """전이 요건 테스트."""

    @pytest.mark.parametrize(
        "source,target,role,step_type",
        [
            (IssueStatus.IN_PROGRESS, IssueStatus.DEV_REVIEW, UserRole.DEVELOPER, WorkflowStepType.DEV_REVIEW),
            (IssueStatus.QA_REVIEW, IssueStatus.PM_REVIEW, UserRole.QA, WorkflowStepType.QA_REVIEW),
            (IssueStatus.PM_REVIEW, IssueStatus.RESOLVED, UserRole.PRODUCT_MANAGER, WorkflowStepType.PM_REVIEW),
        ],
    )
    def test_approval_edges(self, source, target, role, step_type):
        requirement = status_graph.transition_requirement(source, target)
        assert requirement.requires_approval is True
        assert requirement.approver_role is role
        assert requirement.step_type is step_type

    def test_other_edges_are_direct(self):
        gated = {
            (IssueStatus.IN_PROGRESS, IssueStatus.DEV_REVIEW),
            (IssueStatus.QA_REVIEW, IssueStatus.PM_REVIEW),
            (IssueStatus.PM_REVIEW, IssueStatus.RESOLVED),
        }
        for source, targets in EXPECTED_EDGES.items():
            for target in targets:
                if (source, target) in gated:
                    continue
                requirement = status_graph.transition_requirement(source, target)
                assert requirement.requires_approval is False
                assert requirement.approver_role is None
                assert requirement.step_type is None

    def test_invalid_edge_raises(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            status_graph.transition_requirement(IssueStatus.NEW, IssueStatus.RESOLVED)
        assert exc_info.value.status_code == 400
        assert exc_info.value.from_status == "new"
        assert exc_info.value.to_status == "resolved"
        assert exc_info.value.detail == "Invalid status transition from new to resolved"

    def test_unknown_target_raises(self):
        with pytest.raises(InvalidTransitionError):
            status_graph.transition_requirement("new", "archived")


class TestStatusRank:
    """표시용 정렬 순위 테스트."""

    def test_rank_follows_workflow_order(self):
        ranked = sorted(ALL_STATUSES, key=status_graph.status_rank)
        assert ranked == [
            IssueStatus.NEW,
            IssueStatus.IN_PROGRESS,
            IssueStatus.DEV_REVIEW,
            IssueStatus.QA_REVIEW,
            IssueStatus.PM_REVIEW,
            IssueStatus.RESOLVED,
            IssueStatus.REJECTED,
        ]

    def test_unknown_status_sorts_last(self):
        assert status_graph.status_rank("archived") > status_graph.status_rank("rejected")
