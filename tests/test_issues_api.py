"""이슈 API 테스트.

Issue API tests — Create, read, list (filters/search/sort), update and
assignment notifications.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import auth_header


ISSUES_URL = "/api/v1/issues"


async def make_issue(db: AsyncSession, creator, **fields):
    from app.models.issue import Issue
    values = {"title": "Checkout page crashes", "type": "bug", "priority": "medium"}
    values.update(fields)
    issue = Issue(created_by=creator.id, **values)
    db.add(issue)
    await db.flush()
    await db.refresh(issue)
    return issue


@pytest_asyncio.fixture
async def seeded_issues(db: AsyncSession, reporter, developer):
    """상태/우선순위가 다른 이슈 4개."""
    return [
        await make_issue(db, reporter, title="Resolved crash on login", status="resolved", priority="low"),
        await make_issue(db, reporter, title="New dashboard widget", status="new", type="feature", priority="high"),
        await make_issue(db, reporter, title="Slow search results", status="qa_review", assigned_to=developer.id),
        await make_issue(db, reporter, title="Broken avatar upload", status="in_progress", priority="high"),
    ]


class TestCreateIssue:
    """이슈 생성 API 테스트."""

    async def test_create_issue(self, client: AsyncClient, reporter):
        """이슈 생성 — new 상태로 시작."""
        res = await client.post(
            ISSUES_URL,
            json={"title": "Login button does nothing", "type": "bug", "priority": "high"},
            headers=auth_header(reporter),
        )
        assert res.status_code == 201
        data = res.json()
        assert data["status"] == "new"
        assert data["created_by"] == str(reporter.id)
        assert data["created_by_name"] == "Test Reporter"
        assert data["resolved_at"] is None

    async def test_create_ignores_status(self, client: AsyncClient, reporter):
        res = await client.post(
            ISSUES_URL,
            json={"title": "Sneaky resolved issue", "type": "bug", "status": "resolved"},
            headers=auth_header(reporter),
        )
        assert res.status_code == 201
        assert res.json()["status"] == "new"

    async def test_create_validation(self, client: AsyncClient, reporter):
        """제목 길이, 유형, 시간 범위 검증."""
        headers = auth_header(reporter)
        res = await client.post(ISSUES_URL, json={"title": "Bug", "type": "bug"}, headers=headers)
        assert res.status_code == 422
        res = await client.post(ISSUES_URL, json={"title": "Valid title", "type": "chore"}, headers=headers)
        assert res.status_code == 422
        res = await client.post(
            ISSUES_URL,
            json={"title": "Valid title", "type": "bug", "estimated_hours": 0},
            headers=headers,
        )
        assert res.status_code == 422

    async def test_create_with_assignee_notifies(self, client: AsyncClient, db: AsyncSession, reporter, developer):
        from app.models.notification import Notification
        res = await client.post(
            ISSUES_URL,
            json={"title": "Assign me please", "type": "feature", "assigned_to": str(developer.id)},
            headers=auth_header(reporter),
        )
        assert res.status_code == 201
        assert res.json()["assigned_to_name"] == "Test Developer"

        result = await db.execute(select(Notification).where(Notification.user_id == developer.id))
        notifications = result.scalars().all()
        assert len(notifications) == 1
        assert notifications[0].type == "assignment"

    async def test_create_unknown_assignee(self, client: AsyncClient, reporter):
        res = await client.post(
            ISSUES_URL,
            json={"title": "Assign to nobody", "type": "bug", "assigned_to": "00000000-0000-0000-0000-000000000000"},
            headers=auth_header(reporter),
        )
        assert res.status_code == 404

    async def test_create_no_auth(self, client: AsyncClient):
        res = await client.post(ISSUES_URL, json={"title": "Anonymous bug", "type": "bug"})
        assert res.status_code in (401, 403)

    async def test_inactive_user_rejected(self, client: AsyncClient, inactive_user):
        res = await client.get(ISSUES_URL, headers=auth_header(inactive_user))
        assert res.status_code == 401

    async def test_invalid_token_rejected(self, client: AsyncClient):
        res = await client.get(ISSUES_URL, headers=auth_header("not-a-jwt"))
        assert res.status_code == 401


class TestListIssues:
    """이슈 목록 API 테스트."""

    async def test_list_all(self, client: AsyncClient, reporter, seeded_issues):
        res = await client.get(ISSUES_URL, headers=auth_header(reporter))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 4
        assert len(data["items"]) == 4

    async def test_filter_by_status(self, client: AsyncClient, reporter, seeded_issues):
        res = await client.get(ISSUES_URL, params={"status": "qa_review"}, headers=auth_header(reporter))
        data = res.json()
        assert data["total"] == 1
        assert data["items"][0]["title"] == "Slow search results"

    async def test_filter_by_priority_and_type(self, client: AsyncClient, reporter, seeded_issues):
        res = await client.get(
            ISSUES_URL, params={"priority": "high", "type": "feature"}, headers=auth_header(reporter)
        )
        data = res.json()
        assert data["total"] == 1
        assert data["items"][0]["title"] == "New dashboard widget"

    async def test_filter_by_assignee(self, client: AsyncClient, reporter, developer, seeded_issues):
        res = await client.get(
            ISSUES_URL, params={"assigned_to": str(developer.id)}, headers=auth_header(reporter)
        )
        assert [i["title"] for i in res.json()["items"]] == ["Slow search results"]

    async def test_search(self, client: AsyncClient, reporter, seeded_issues):
        """제목 부분 일치 검색 (대소문자 무시)."""
        res = await client.get(ISSUES_URL, params={"search": "CRASH"}, headers=auth_header(reporter))
        assert [i["title"] for i in res.json()["items"]] == ["Resolved crash on login"]

    async def test_sort_by_status_rank(self, client: AsyncClient, reporter, seeded_issues):
        """status 정렬은 워크플로우 순서 (알파벳 순 아님)."""
        res = await client.get(
            ISSUES_URL, params={"sort": "status", "order": "asc"}, headers=auth_header(reporter)
        )
        statuses = [i["status"] for i in res.json()["items"]]
        assert statuses == ["new", "in_progress", "qa_review", "resolved"]

    async def test_sort_by_priority(self, client: AsyncClient, reporter, seeded_issues):
        res = await client.get(
            ISSUES_URL, params={"sort": "priority", "order": "asc"}, headers=auth_header(reporter)
        )
        priorities = [i["priority"] for i in res.json()["items"]]
        assert priorities == ["high", "high", "medium", "low"]

    async def test_unsupported_sort(self, client: AsyncClient, reporter, seeded_issues):
        res = await client.get(ISSUES_URL, params={"sort": "password"}, headers=auth_header(reporter))
        assert res.status_code == 400

    async def test_pagination(self, client: AsyncClient, reporter, seeded_issues):
        res = await client.get(ISSUES_URL, params={"page": 2, "per_page": 3}, headers=auth_header(reporter))
        data = res.json()
        assert data["total"] == 4
        assert len(data["items"]) == 1
        assert data["page"] == 2

    async def test_page_size_capped(self, client: AsyncClient, reporter):
        res = await client.get(ISSUES_URL, params={"per_page": 101}, headers=auth_header(reporter))
        assert res.status_code == 422


class TestGetAndUpdateIssue:
    """이슈 조회/수정 API 테스트."""

    async def test_get_issue(self, client: AsyncClient, db: AsyncSession, reporter):
        issue = await make_issue(db, reporter)
        res = await client.get(f"{ISSUES_URL}/{issue.id}", headers=auth_header(reporter))
        assert res.status_code == 200
        assert res.json()["title"] == "Checkout page crashes"

    async def test_get_missing_issue(self, client: AsyncClient, reporter):
        res = await client.get(
            f"{ISSUES_URL}/00000000-0000-0000-0000-000000000000", headers=auth_header(reporter)
        )
        assert res.status_code == 404

    async def test_update_fields(self, client: AsyncClient, db: AsyncSession, reporter):
        issue = await make_issue(db, reporter)
        res = await client.patch(
            f"{ISSUES_URL}/{issue.id}",
            json={"title": "Checkout page crashes on submit", "priority": "high", "estimated_hours": 4},
            headers=auth_header(reporter),
        )
        assert res.status_code == 200
        data = res.json()
        assert data["title"] == "Checkout page crashes on submit"
        assert data["priority"] == "high"
        assert data["estimated_hours"] == 4
        assert data["status"] == "new"

    async def test_update_cannot_change_status(self, client: AsyncClient, db: AsyncSession, reporter):
        issue = await make_issue(db, reporter)
        res = await client.patch(
            f"{ISSUES_URL}/{issue.id}", json={"status": "resolved"}, headers=auth_header(reporter)
        )
        assert res.status_code == 200
        assert res.json()["status"] == "new"

    async def test_update_forbidden_for_unrelated_developer(
        self, client: AsyncClient, db: AsyncSession, reporter, developer
    ):
        issue = await make_issue(db, reporter)
        res = await client.patch(
            f"{ISSUES_URL}/{issue.id}", json={"priority": "low"}, headers=auth_header(developer)
        )
        assert res.status_code == 403

    async def test_reassign_notifies_new_assignee(
        self, client: AsyncClient, db: AsyncSession, reporter, developer
    ):
        from app.models.notification import Notification
        issue = await make_issue(db, reporter)
        res = await client.patch(
            f"{ISSUES_URL}/{issue.id}",
            json={"assigned_to": str(developer.id)},
            headers=auth_header(reporter),
        )
        assert res.status_code == 200
        assert res.json()["assigned_to"] == str(developer.id)

        result = await db.execute(
            select(Notification).where(
                Notification.user_id == developer.id,
                Notification.type == "assignment",
            )
        )
        notification = result.scalar_one()
        assert notification.related_issue_id == issue.id
        assert "Checkout page crashes" in notification.message

    async def test_unassign(self, client: AsyncClient, db: AsyncSession, reporter, developer):
        issue = await make_issue(db, reporter, assigned_to=developer.id)
        res = await client.patch(
            f"{ISSUES_URL}/{issue.id}", json={"assigned_to": None}, headers=auth_header(reporter)
        )
        assert res.status_code == 200
        assert res.json()["assigned_to"] is None


class TestTableConstraints:
    """모델에 선언된 CHECK 제약 (Enum and hour columns are checked by the database too)."""

    async def test_unknown_status_rejected(self, db: AsyncSession, reporter):
        from sqlalchemy.exc import IntegrityError
        with pytest.raises(IntegrityError):
            await make_issue(db, reporter, status="archived")

    async def test_non_positive_hours_rejected(self, db: AsyncSession, reporter):
        from sqlalchemy.exc import IntegrityError
        with pytest.raises(IntegrityError):
            await make_issue(db, reporter, actual_hours=0)
