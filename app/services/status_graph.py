"""이슈 상태 그래프 — 허용된 상태 전이와 승인 요건의 정적 테이블.

Status graph — Static table of legal issue status transitions and the
approval requirement of each edge. Pure lookups, no I/O.

Approval policy:
    - in_progress → dev_review: developer 승인 필요 (dev_review step)
    - qa_review → pm_review: qa 승인 필요 (qa_review step)
    - pm_review → resolved: product_manager 승인 필요 (pm_review step)
    그 외 전이는 즉시 적용 (All other edges apply directly)
"""

from dataclasses import dataclass

from app.models.enums import IssueStatus, UserRole, WorkflowStepType
from app.utils.exceptions import InvalidTransitionError


@dataclass(frozen=True)
class TransitionRequirement:
    """전이 요건 — 승인 필요 여부와 승인 역할/단계.

    Requirement of one status edge.

    Attributes:
        requires_approval: 승인 단계 생성 여부 (Whether an approval step gates the edge)
        approver_role: 승인 역할 (Role that must approve, approval edges only)
        step_type: 생성할 단계 유형 (Step type to create, approval edges only)
    """

    requires_approval: bool
    approver_role: UserRole | None = None
    step_type: WorkflowStepType | None = None


_DIRECT: TransitionRequirement = TransitionRequirement(requires_approval=False)

# 상태 전이 테이블 — from → {to: requirement}
_GRAPH: dict[IssueStatus, dict[IssueStatus, TransitionRequirement]] = {
    IssueStatus.NEW: {
        IssueStatus.IN_PROGRESS: _DIRECT,
    },
    IssueStatus.IN_PROGRESS: {
        IssueStatus.DEV_REVIEW: TransitionRequirement(True, UserRole.DEVELOPER, WorkflowStepType.DEV_REVIEW),
        IssueStatus.NEW: _DIRECT,
    },
    IssueStatus.DEV_REVIEW: {
        IssueStatus.QA_REVIEW: _DIRECT,
        IssueStatus.IN_PROGRESS: _DIRECT,
        IssueStatus.REJECTED: _DIRECT,
    },
    IssueStatus.QA_REVIEW: {
        IssueStatus.PM_REVIEW: TransitionRequirement(True, UserRole.QA, WorkflowStepType.QA_REVIEW),
        IssueStatus.DEV_REVIEW: _DIRECT,
        IssueStatus.REJECTED: _DIRECT,
    },
    IssueStatus.PM_REVIEW: {
        IssueStatus.RESOLVED: TransitionRequirement(True, UserRole.PRODUCT_MANAGER, WorkflowStepType.PM_REVIEW),
        IssueStatus.QA_REVIEW: _DIRECT,
        IssueStatus.REJECTED: _DIRECT,
    },
    IssueStatus.RESOLVED: {
        IssueStatus.NEW: _DIRECT,  # reopen
    },
    IssueStatus.REJECTED: {
        IssueStatus.NEW: _DIRECT,  # reopen
    },
}

# 표시용 정렬 순서 — 전이 의미 없음 (Presentation-only sort rank)
STATUS_RANK: dict[IssueStatus, int] = {
    IssueStatus.NEW: 1,
    IssueStatus.IN_PROGRESS: 2,
    IssueStatus.DEV_REVIEW: 3,
    IssueStatus.QA_REVIEW: 4,
    IssueStatus.PM_REVIEW: 5,
    IssueStatus.RESOLVED: 6,
    IssueStatus.REJECTED: 7,
}


def get_available_transitions(from_status: IssueStatus | str) -> frozenset[IssueStatus]:
    """현재 상태에서 이동 가능한 상태 집합을 반환합니다.

    Return the set of statuses reachable in one step from ``from_status``.
    Unknown statuses have no outgoing edges.
    """
    edges = _GRAPH.get(_coerce(from_status))
    return frozenset(edges) if edges else frozenset()


def is_valid_transition(from_status: IssueStatus | str, to_status: IssueStatus | str) -> bool:
    """(from, to) 쌍이 그래프의 간선인지 확인합니다.

    True iff ``to_status`` is in the adjacency list of ``from_status``.
    """
    return _coerce(to_status) in get_available_transitions(from_status)


def transition_requirement(
    from_status: IssueStatus | str,
    to_status: IssueStatus | str,
) -> TransitionRequirement:
    """간선의 승인 요건을 반환합니다.

    Return the requirement of the edge ``from_status → to_status``.

    Raises:
        InvalidTransitionError: 그래프에 없는 전이 (Edge not in the graph)
    """
    source = _coerce(from_status)
    target = _coerce(to_status)
    edges = _GRAPH.get(source) if source is not None else None
    if not edges or target not in edges:
        raise InvalidTransitionError(from_status, to_status)
    return edges[target]


def status_rank(status: IssueStatus | str) -> int:
    """표시용 정렬 순위 (알 수 없는 상태는 맨 뒤) — Display rank, unknown statuses sort last."""
    coerced = _coerce(status)
    return STATUS_RANK[coerced] if coerced is not None else len(STATUS_RANK) + 1


def _coerce(value: IssueStatus | str) -> IssueStatus | None:
    if isinstance(value, IssueStatus):
        return value
    try:
        return IssueStatus(value)
    except ValueError:
        return None
