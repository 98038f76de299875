"""이슈 코멘트 API 테스트.

Comment API tests: create, list (internal filtering), edit by the author
and deletion by the author or a product manager.
"""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import auth_header
from tests.test_issues_api import make_issue


ISSUES_URL = "/api/v1/issues"


async def post_comment(client: AsyncClient, issue_id, user, content: str = "Reproduced on staging", **extra):
    return await client.post(
        f"{ISSUES_URL}/{issue_id}/comments",
        json={"content": content, **extra},
        headers=auth_header(user),
    )


class TestCreateComment:

    async def test_create_comment(self, client: AsyncClient, db: AsyncSession, reporter, developer):
        issue = await make_issue(db, reporter)
        res = await post_comment(client, issue.id, developer, "  Reproduced on staging  ")
        assert res.status_code == 201
        data = res.json()
        assert data["content"] == "Reproduced on staging"
        assert data["author_id"] == str(developer.id)
        assert data["author_name"] == "Test Developer"
        assert data["is_internal"] is False
        assert data["edited"] is False
        assert data["workflow_step_id"] is None

    async def test_blank_content_rejected(self, client: AsyncClient, db: AsyncSession, reporter):
        issue = await make_issue(db, reporter)
        res = await post_comment(client, issue.id, reporter, "    ")
        assert res.status_code == 422

    async def test_content_too_long(self, client: AsyncClient, db: AsyncSession, reporter):
        issue = await make_issue(db, reporter)
        res = await post_comment(client, issue.id, reporter, "x" * 2001)
        assert res.status_code == 422

    async def test_missing_issue(self, client: AsyncClient, reporter):
        res = await post_comment(client, "00000000-0000-0000-0000-000000000000", reporter)
        assert res.status_code == 404

    async def test_linked_to_workflow_step(
        self, client: AsyncClient, db: AsyncSession, pm_user, developer
    ):
        issue = await make_issue(db, pm_user, status="in_progress")
        res = await client.post(
            f"{ISSUES_URL}/{issue.id}/transitions",
            json={"to_status": "dev_review"},
            headers=auth_header(pm_user),
        )
        step_id = res.json()["workflow_step"]["id"]

        res = await post_comment(client, issue.id, developer, "Looking at the diff", workflow_step_id=step_id)
        assert res.status_code == 201
        assert res.json()["workflow_step_id"] == step_id

    async def test_step_of_other_issue_rejected(
        self, client: AsyncClient, db: AsyncSession, pm_user, developer
    ):
        reviewed = await make_issue(db, pm_user, status="in_progress")
        res = await client.post(
            f"{ISSUES_URL}/{reviewed.id}/transitions",
            json={"to_status": "dev_review"},
            headers=auth_header(pm_user),
        )
        step_id = res.json()["workflow_step"]["id"]

        other = await make_issue(db, pm_user, title="Unrelated crash report")
        res = await post_comment(client, other.id, developer, workflow_step_id=step_id)
        assert res.status_code == 400


class TestListComments:

    async def test_internal_comments_hidden_by_default(
        self, client: AsyncClient, db: AsyncSession, reporter, qa_user
    ):
        issue = await make_issue(db, reporter)
        await post_comment(client, issue.id, reporter, "Customer can reproduce")
        await post_comment(client, issue.id, qa_user, "Flaky on CI too", is_internal=True)

        res = await client.get(f"{ISSUES_URL}/{issue.id}/comments", headers=auth_header(reporter))
        assert res.status_code == 200
        assert [c["content"] for c in res.json()] == ["Customer can reproduce"]

        res = await client.get(
            f"{ISSUES_URL}/{issue.id}/comments",
            params={"include_internal": "true"},
            headers=auth_header(reporter),
        )
        assert [c["content"] for c in res.json()] == ["Customer can reproduce", "Flaky on CI too"]

    async def test_missing_issue(self, client: AsyncClient, reporter):
        res = await client.get(
            f"{ISSUES_URL}/00000000-0000-0000-0000-000000000000/comments", headers=auth_header(reporter)
        )
        assert res.status_code == 404


class TestUpdateComment:

    async def test_author_edits(self, client: AsyncClient, db: AsyncSession, reporter):
        issue = await make_issue(db, reporter)
        comment_id = (await post_comment(client, issue.id, reporter)).json()["id"]

        res = await client.patch(
            f"{ISSUES_URL}/{issue.id}/comments/{comment_id}",
            json={"content": "Reproduced on staging and prod"},
            headers=auth_header(reporter),
        )
        assert res.status_code == 200
        assert res.json()["content"] == "Reproduced on staging and prod"
        assert res.json()["edited"] is True

    async def test_only_author_edits(self, client: AsyncClient, db: AsyncSession, reporter, pm_user):
        issue = await make_issue(db, reporter)
        comment_id = (await post_comment(client, issue.id, reporter)).json()["id"]

        res = await client.patch(
            f"{ISSUES_URL}/{issue.id}/comments/{comment_id}",
            json={"content": "Rewritten by someone else"},
            headers=auth_header(pm_user),
        )
        assert res.status_code == 403

    async def test_comment_of_other_issue(self, client: AsyncClient, db: AsyncSession, reporter):
        issue = await make_issue(db, reporter)
        other = await make_issue(db, reporter, title="Another broken page")
        comment_id = (await post_comment(client, issue.id, reporter)).json()["id"]

        res = await client.patch(
            f"{ISSUES_URL}/{other.id}/comments/{comment_id}",
            json={"content": "Wrong issue"},
            headers=auth_header(reporter),
        )
        assert res.status_code == 404


class TestDeleteComment:

    async def test_author_deletes(self, client: AsyncClient, db: AsyncSession, reporter):
        issue = await make_issue(db, reporter)
        comment_id = (await post_comment(client, issue.id, reporter)).json()["id"]

        res = await client.delete(f"{ISSUES_URL}/{issue.id}/comments/{comment_id}", headers=auth_header(reporter))
        assert res.status_code == 200
        assert res.json() == {"message": "Comment deleted"}

        res = await client.get(f"{ISSUES_URL}/{issue.id}/comments", headers=auth_header(reporter))
        assert res.json() == []

    async def test_product_manager_deletes(self, client: AsyncClient, db: AsyncSession, reporter, pm_user):
        issue = await make_issue(db, reporter)
        comment_id = (await post_comment(client, issue.id, reporter)).json()["id"]

        res = await client.delete(f"{ISSUES_URL}/{issue.id}/comments/{comment_id}", headers=auth_header(pm_user))
        assert res.status_code == 200

    async def test_others_forbidden(self, client: AsyncClient, db: AsyncSession, reporter, qa_user):
        issue = await make_issue(db, reporter)
        comment_id = (await post_comment(client, issue.id, reporter)).json()["id"]

        res = await client.delete(f"{ISSUES_URL}/{issue.id}/comments/{comment_id}", headers=auth_header(qa_user))
        assert res.status_code == 403

        res = await client.get(f"{ISSUES_URL}/{issue.id}/comments", headers=auth_header(reporter))
        assert len(res.json()) == 1
