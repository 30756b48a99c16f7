"""Tests for the v1 HTTP routes.

Routes run against the real app with the store dependency pointed at an
in-memory database; tokens come from the local identity provider.
"""

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from api.auth.dependencies import get_store
from api.main import app
from studio.db.models import PostStatus, Profile


@pytest.fixture
def http(store):
    app.dependency_overrides[get_store] = lambda: store
    yield AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")
    app.dependency_overrides.clear()


@pytest.fixture
def auth(token_for):
    def _auth(profile):
        return {"Authorization": f"Bearer {token_for(profile)}"}

    return _auth


class TestAuthentication:

    @pytest.mark.asyncio
    async def test_health_needs_no_auth(self, http):
        async with http:
            response = await http.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_missing_token(self, http):
        async with http:
            response = await http.get("/api/v1/me")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTHENTICATION_FAILED"

    @pytest.mark.asyncio
    async def test_invalid_token(self, http):
        async with http:
            response = await http.get("/api/v1/me", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"


class TestMe:

    @pytest.mark.asyncio
    async def test_me_for_approver(self, http, auth, scenario):
        async with http:
            response = await http.get("/api/v1/me", headers=auth(scenario.approver))

        assert response.status_code == 200
        data = response.json()
        assert data["account"]["email"] == "approver@acme.test"
        assert data["global_role"] == "user"
        assert data["memberships"][0]["workspace_id"] == str(scenario.w1.id)
        assert data["memberships"][0]["role"] == "client_approver"
        assert data["primary_client_workspace_id"] == str(scenario.w1.id)
        assert data["navigation"]["show_approvals"] is True
        assert data["navigation"]["show_team"] is False
        assert data["degraded"] is False

    @pytest.mark.asyncio
    async def test_me_without_profile_row(self, http, token_for):
        ghost = Profile(id=uuid4(), email="ghost@example.test")
        async with http:
            response = await http.get(
                "/api/v1/me", headers={"Authorization": f"Bearer {token_for(ghost)}"}
            )
        assert response.status_code == 200
        assert response.json()["global_role"] == "user"
        assert response.json()["memberships"] == []


class TestScopedLists:

    @pytest.mark.asyncio
    async def test_workspaces_for_admin(self, http, auth, scenario):
        async with http:
            response = await http.get("/api/v1/workspaces", headers=auth(scenario.admin))
        names = [w["name"] for w in response.json()["items"]]
        assert names == ["Birch Outdoors", "Acme Coffee"]

    @pytest.mark.asyncio
    async def test_posts_for_client(self, http, auth, scenario):
        async with http:
            response = await http.get("/api/v1/posts", headers=auth(scenario.viewer))
        assert [p["id"] for p in response.json()["items"]] == [str(scenario.p1.id)]

    @pytest.mark.asyncio
    async def test_foreign_workspace_filter_is_empty(self, http, auth, scenario):
        async with http:
            response = await http.get(
                "/api/v1/posts",
                params={"workspace_id": str(scenario.w2.id)},
                headers=auth(scenario.approver),
            )
        assert response.status_code == 200
        assert response.json()["items"] == []

    @pytest.mark.asyncio
    async def test_social_accounts_platform_filter(self, http, auth, factory, scenario):
        factory.social_account(scenario.w1, "instagram", "@acme")
        tiktok = factory.social_account(scenario.w1, "tiktok", "@acme.tt")
        async with http:
            response = await http.get(
                "/api/v1/social-accounts",
                params={"platform": "tiktok"},
                headers=auth(scenario.manager),
            )
        assert [a["id"] for a in response.json()["items"]] == [str(tiktok.id)]

    @pytest.mark.asyncio
    async def test_bad_uuid_query_is_validation_error(self, http, auth, scenario):
        async with http:
            response = await http.get(
                "/api/v1/posts",
                params={"workspace_id": "w1"},
                headers=auth(scenario.admin),
            )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestReviewFlow:

    @pytest.mark.asyncio
    async def test_review_panel_controls(self, http, auth, scenario):
        async with http:
            response = await http.get(
                f"/api/v1/posts/{scenario.p1.id}/review", headers=auth(scenario.approver)
            )
        assert response.status_code == 200
        assert response.json()["kind"] == "controls"
        assert response.json()["state"] == "awaiting_review"

    @pytest.mark.asyncio
    async def test_review_panel_hides_foreign_post(self, http, auth, scenario):
        async with http:
            response = await http.get(
                f"/api/v1/posts/{scenario.p1.id}/review", headers=auth(scenario.other_approver)
            )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_approve(self, http, auth, scenario):
        async with http:
            response = await http.post(
                f"/api/v1/posts/{scenario.p1.id}/approve", headers=auth(scenario.approver)
            )
            audit = await http.get(
                f"/api/v1/posts/{scenario.p1.id}/audit", headers=auth(scenario.viewer)
            )

        assert response.status_code == 200
        data = response.json()
        assert data["post"]["approval_status"] == "approved"
        assert data["verdict"] == "approved"
        assert data["changed"] is True
        assert data["audit_entry"]["details"] == {
            "action": "Post approved",
            "approved_by": "approver@acme.test",
        }
        assert [e["action"] for e in audit.json()] == ["approved"]

    @pytest.mark.asyncio
    async def test_request_changes_with_reason(self, http, auth, scenario):
        async with http:
            response = await http.post(
                f"/api/v1/posts/{scenario.p1.id}/request-changes",
                json={"reason": "fix the caption"},
                headers=auth(scenario.approver),
            )
        data = response.json()
        assert response.status_code == 200
        assert data["post"]["approval_status"] == "changes_requested"
        assert data["comment"]["content"] == "Changes requested: fix the caption"
        assert data["comment_error"] is None

    @pytest.mark.asyncio
    async def test_viewer_gets_403(self, http, auth, scenario):
        async with http:
            response = await http.post(
                f"/api/v1/posts/{scenario.p1.id}/approve", headers=auth(scenario.viewer)
            )
        assert response.status_code == 403
        assert response.json()["error"]["message"] == "You do not have access to this action"

    @pytest.mark.asyncio
    async def test_stale_version_gets_409(self, http, auth, scenario):
        async with http:
            first = await http.post(
                f"/api/v1/posts/{scenario.p1.id}/approve",
                json={"expected_version": 0},
                headers=auth(scenario.approver),
            )
            second = await http.post(
                f"/api/v1/posts/{scenario.p1.id}/request-changes",
                json={"reason": "too late", "expected_version": 0},
                headers=auth(scenario.admin),
            )
        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json()["error"]["message"] == "This post was already reviewed, please refresh"

    @pytest.mark.asyncio
    async def test_draft_gets_409(self, http, auth, factory, scenario):
        draft = factory.post(scenario.w1, status=PostStatus.draft)
        async with http:
            response = await http.post(
                f"/api/v1/posts/{draft.id}/approve", headers=auth(scenario.approver)
            )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_reopen_by_manager(self, http, auth, scenario):
        async with http:
            await http.post(
                f"/api/v1/posts/{scenario.p1.id}/approve", headers=auth(scenario.approver)
            )
            response = await http.post(
                f"/api/v1/posts/{scenario.p1.id}/reopen", headers=auth(scenario.manager)
            )
        assert response.status_code == 200
        assert response.json()["post"]["approval_status"] == "none"
        assert response.json()["audit_entry"]["action"] == "review_reopened"

    @pytest.mark.asyncio
    async def test_actions_on_foreign_post_get_404(self, http, auth, scenario):
        async with http:
            approve = await http.post(
                f"/api/v1/posts/{scenario.p2.id}/approve", headers=auth(scenario.approver)
            )
            reopen = await http.post(
                f"/api/v1/posts/{scenario.p2.id}/reopen", headers=auth(scenario.manager)
            )

        for response in (approve, reopen):
            assert response.status_code == 404
            assert response.json()["error"]["code"] == "NOT_FOUND"
            assert str(scenario.w2.id) not in response.text

    @pytest.mark.asyncio
    async def test_unknown_post_gets_404(self, http, auth, scenario):
        async with http:
            response = await http.post(
                "/api/v1/posts/00000000-0000-0000-0000-000000000000/approve",
                headers=auth(scenario.admin),
            )
        assert response.status_code == 404
