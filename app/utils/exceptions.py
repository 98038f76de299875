"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for the error kinds raised
by the issue workflow. Services raise them directly and they propagate
unchanged to the API layer, where FastAPI renders the status code.

Usage:
    from app.utils.exceptions import NotFoundError, InvalidTransitionError
    raise NotFoundError("Issue not found")
    raise InvalidTransitionError("new", "resolved")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised when a referenced issue, workflow step or user does not exist.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    400 Bad Request exception.
    Raised when the request data is invalid beyond what Pydantic validation catches.

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidTransitionError(BadRequestError):
    """허용되지 않은 상태 전이 — 상태 그래프에 없는 (from, to) 쌍.

    Raised when the requested (from, to) status pair is not an edge of the
    status graph.

    Args:
        from_status: 현재 상태 (Current status)
        to_status: 요청된 상태 (Requested status)
    """

    def __init__(self, from_status: str, to_status: str) -> None:
        self.from_status: str = getattr(from_status, "value", from_status)
        self.to_status: str = getattr(to_status, "value", to_status)
        super().__init__(f"Invalid status transition from {self.from_status} to {self.to_status}")


class AuthorizationError(HTTPException):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    403 Forbidden exception.
    Raised when the resolving user is not the step's designated approver,
    does not hold the approver role, or may not change the issue.

    Args:
        detail: 오류 메시지 (Error message, default: "Insufficient permissions")
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    401 Unauthorized exception.
    Raised when the bearer token is missing, invalid or expired, or the user is inactive.
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class ConflictError(HTTPException):
    """409 Conflict 예외 — 이미 처리된 단계 또는 동시 수정 감지.

    409 Conflict exception.
    Raised when a workflow step was already approved/rejected, or when the
    compare-and-swap write detects that the issue status changed concurrently.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource state conflict")
    """

    def __init__(self, detail: str = "Resource state conflict") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ValidationError(HTTPException):
    """422 Unprocessable Entity 예외 — 비즈니스 규칙 검증 실패.

    422 validation exception for business rules Pydantic cannot express on
    its own (e.g. a rejection without a long enough reason).

    Args:
        detail: 오류 메시지 (Error message, default: "Validation failed")
    """

    def __init__(self, detail: str = "Validation failed") -> None:
        super().__init__(status_code=422, detail=detail)
