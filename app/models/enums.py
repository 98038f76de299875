"""이슈 워크플로우 열거형 정의.

Enumerations shared by the ORM models, schemas and the workflow core.
All members subclass ``str`` so they compare equal to the raw column values.
"""

import enum


class IssueStatus(str, enum.Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    DEV_REVIEW = "dev_review"
    QA_REVIEW = "qa_review"
    PM_REVIEW = "pm_review"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class IssueType(str, enum.Enum):
    BUG = "bug"
    FEATURE = "feature"


class IssuePriority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class WorkflowStepType(str, enum.Enum):
    DEV_REVIEW = "dev_review"
    QA_REVIEW = "qa_review"
    PM_REVIEW = "pm_review"


class WorkflowStepStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class UserRole(str, enum.Enum):
    DEVELOPER = "developer"
    QA = "qa"
    PRODUCT_MANAGER = "product_manager"


class NotificationType(str, enum.Enum):
    ASSIGNMENT = "assignment"
    STATUS_CHANGE = "status_change"
    APPROVAL_REQUIRED = "approval_required"
    COMMENT_ADDED = "comment_added"
    MENTION = "mention"


# 검토 단계 → 승인 역할 (1:1) — Review step type to approver role
STEP_APPROVER_ROLE: dict[WorkflowStepType, UserRole] = {
    WorkflowStepType.DEV_REVIEW: UserRole.DEVELOPER,
    WorkflowStepType.QA_REVIEW: UserRole.QA,
    WorkflowStepType.PM_REVIEW: UserRole.PRODUCT_MANAGER,
}
