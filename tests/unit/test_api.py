"""Tests for the HTTP API using the in-memory repositories."""

import asyncio
import uuid

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.db.models import User, UserRole
from app.main import create_app

TEMPLATE_PAYLOAD = {
    "title": "Fatura Şablonu",
    "description": "Serbest çalışanlar için sade ve anlaşılır fatura şablonu.",
    "body": "Hello {name}, total: {amount}",
    "placeholders": {
        "name": {"type": "string", "label": "Ad Soyad", "required": True, "order": 0},
        "amount": {"type": "number", "label": "Tutar", "required": True, "order": 1},
    },
    "price": "0",
}
VALID_REASON = "Description does not match the content"


def _headers(user: User) -> dict[str, str]:
    return {"X-User-ID": str(user.id)}


@pytest.fixture
def app():
    return create_app(Settings(repository_type="memory", strict_placeholder_resolution=False))


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def users(app):
    """Seed one account per role."""
    repository = app.state.factory.get_user_repository()

    def add(role: UserRole) -> User:
        user = User(
            email=f"{role.value}-{uuid.uuid4().hex[:6]}@example.com",
            full_name=role.value.title(),
            hashed_password="not-used",
            role=role,
        )
        return asyncio.run(repository.add(user))

    return {
        "user": add(UserRole.USER),
        "creator": add(UserRole.CREATOR),
        "other_creator": add(UserRole.CREATOR),
        "admin": add(UserRole.ADMIN),
    }


@pytest.fixture
def template_id(client, users):
    response = client.post("/templates", json=TEMPLATE_PAYLOAD, headers=_headers(users["creator"]))
    assert response.status_code == 201
    return response.json()["id"]


# =============================================================================
# Health and Users
# =============================================================================


class TestHealthAndUsers:
    """Test suite for health and user endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_each_app_has_its_own_factory(self, app, users):
        """Test that apps do not share repositories through a global factory."""
        other = create_app(Settings(repository_type="memory"))

        assert other.state.factory is not app.state.factory
        assert other.state.factory.get_user_repository() is not app.state.factory.get_user_repository()
        response = TestClient(other).get(f"/users/{users['admin'].id}", headers=_headers(users["admin"]))
        assert response.status_code == 401

    def test_register_creator(self, client):
        response = client.post(
            "/users",
            json={
                "email": "ayse@example.com",
                "full_name": "Ayşe Yılmaz",
                "password": "securepassword123",
                "role": "creator",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["role"] == "creator"
        assert "hashed_password" not in body

    def test_duplicate_email(self, client):
        payload = {"email": "dup@example.com", "full_name": "Dup", "password": "securepassword123"}

        assert client.post("/users", json=payload).status_code == 201
        assert client.post("/users", json=payload).status_code == 409

    def test_admin_role_cannot_be_self_registered(self, client):
        response = client.post(
            "/users",
            json={
                "email": "root@example.com",
                "full_name": "Root",
                "password": "securepassword123",
                "role": "admin",
            },
        )

        assert response.status_code == 422

    def test_read_own_profile_only(self, client, users):
        own = client.get(f"/users/{users['user'].id}", headers=_headers(users["user"]))
        other = client.get(f"/users/{users['creator'].id}", headers=_headers(users["user"]))
        as_admin = client.get(f"/users/{users['creator'].id}", headers=_headers(users["admin"]))

        assert own.status_code == 200
        assert other.status_code == 403
        assert as_admin.status_code == 200


# =============================================================================
# Templates
# =============================================================================


class TestTemplateEndpoints:
    """Test suite for template creation, forms and processing."""

    def test_create_starts_pending(self, client, users):
        response = client.post("/templates", json=TEMPLATE_PAYLOAD, headers=_headers(users["creator"]))

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["created_by"] == str(users["creator"].id)
        assert body["currency"] == "TRY"

    def test_create_requires_identity(self, client):
        assert client.post("/templates", json=TEMPLATE_PAYLOAD).status_code == 401

    def test_create_requires_creator_role(self, client, users):
        response = client.post("/templates", json=TEMPLATE_PAYLOAD, headers=_headers(users["user"]))

        assert response.status_code == 403

    def test_create_with_structure_errors(self, client, users):
        payload = {
            **TEMPLATE_PAYLOAD,
            "placeholders": {
                **TEMPLATE_PAYLOAD["placeholders"],
                "choice": {"type": "select", "label": "Seçim", "options": ["a"], "order": 2},
            },
        }

        response = client.post("/templates", json=payload, headers=_headers(users["creator"]))

        assert response.status_code == 422
        assert response.json()["errors"] == [
            {"field": "choice", "message": "Placeholder 'choice' defined but not used in body"}
        ]

    @pytest.mark.parametrize("price", ["3", "500.01", "-1"])
    def test_create_with_invalid_price(self, client, users, price):
        payload = {**TEMPLATE_PAYLOAD, "price": price}

        response = client.post("/templates", json=payload, headers=_headers(users["creator"]))

        assert response.status_code == 422

    def test_pending_template_hidden_from_others(self, client, users, template_id):
        owner = client.get(f"/templates/{template_id}", headers=_headers(users["creator"]))
        stranger = client.get(f"/templates/{template_id}", headers=_headers(users["user"]))

        assert owner.status_code == 200
        assert stranger.status_code == 404

    def test_form_config(self, client, users, template_id):
        response = client.get(f"/templates/{template_id}/form", headers=_headers(users["creator"]))

        assert response.status_code == 200
        fields = response.json()["fields"]
        assert [f["key"] for f in fields] == ["name", "amount"]
        assert [f["type"] for f in fields] == ["text", "number"]

    def test_process(self, client, users, template_id):
        response = client.post(
            f"/templates/{template_id}/process",
            json={"user_data": {"name": "Ayşe", "amount": 1500}},
            headers=_headers(users["creator"]),
        )

        assert response.status_code == 200
        assert response.json()["processed_body"] == "Hello Ayşe, total: 1.500"

    def test_process_with_missing_value(self, client, users, template_id):
        response = client.post(
            f"/templates/{template_id}/process",
            json={"user_data": {"name": "Ayşe"}},
            headers=_headers(users["creator"]),
        )

        assert response.status_code == 422
        body = response.json()
        assert body["errors"] == [{"field": "amount", "message": "Field 'Tutar' is required"}]
        assert "Tutar" in body["detail"]

    def test_preview_reports_errors_without_failing(self, client, users, template_id):
        response = client.post(
            f"/templates/{template_id}/preview",
            json={"user_data": {}},
            headers=_headers(users["creator"]),
        )

        assert response.status_code == 200
        assert len(response.json()["errors"]) == 2

    def test_validate_stored_template(self, client, users, template_id):
        response = client.get(f"/templates/{template_id}/validate", headers=_headers(users["creator"]))

        assert response.status_code == 200
        assert response.json()["is_valid"] is True

    def test_update_revalidates(self, client, users, template_id):
        response = client.put(
            f"/templates/{template_id}",
            json={"body": "Hello {name}"},
            headers=_headers(users["creator"]),
        )

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "amount"

    def test_update_by_non_owner(self, client, users, template_id):
        response = client.put(
            f"/templates/{template_id}",
            json={"title": "Başkasının Şablonu"},
            headers=_headers(users["other_creator"]),
        )

        assert response.status_code == 403


# =============================================================================
# Moderation
# =============================================================================


class TestAdminEndpoints:
    """Test suite for moderation endpoints."""

    def test_pending_list(self, client, users, template_id):
        response = client.get("/admin/templates/pending", headers=_headers(users["admin"]))

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["templates"][0]["id"] == template_id

    def test_pending_list_requires_admin(self, client, users, template_id):
        response = client.get("/admin/templates/pending", headers=_headers(users["creator"]))

        assert response.status_code == 403

    def test_review(self, client, users, template_id):
        response = client.get(f"/admin/templates/{template_id}/review", headers=_headers(users["admin"]))

        assert response.status_code == 200
        assert "Template content must be at least 50 characters" in response.json()["issues"]

    def test_approve_then_approve_again(self, client, users, template_id):
        url = f"/admin/templates/{template_id}/approve"

        first = client.put(url, json={"is_verified": True}, headers=_headers(users["admin"]))
        second = client.put(url, json={}, headers=_headers(users["admin"]))

        assert first.status_code == 200
        assert first.json()["status"] == "published"
        assert first.json()["is_verified"] is True
        assert second.status_code == 409

    def test_published_template_visible_and_update_keeps_status(self, client, users, template_id):
        client.put(f"/admin/templates/{template_id}/approve", json={}, headers=_headers(users["admin"]))

        visible = client.get(f"/templates/{template_id}", headers=_headers(users["user"]))
        updated = client.put(
            f"/templates/{template_id}",
            json={"title": "Güncel Fatura Şablonu"},
            headers=_headers(users["creator"]),
        )

        assert visible.status_code == 200
        assert updated.status_code == 200
        assert updated.json()["status"] == "published"

    def test_approve_by_creator_is_forbidden(self, client, users, template_id):
        response = client.put(
            f"/admin/templates/{template_id}/approve", json={}, headers=_headers(users["creator"])
        )

        assert response.status_code == 403

    def test_approve_unknown_template(self, client, users):
        response = client.put(
            f"/admin/templates/{uuid.uuid4()}/approve", json={}, headers=_headers(users["admin"])
        )

        assert response.status_code == 404

    def test_reject(self, client, users, template_id):
        response = client.put(
            f"/admin/templates/{template_id}/reject",
            json={"reason": VALID_REASON},
            headers=_headers(users["admin"]),
        )

        assert response.status_code == 200
        assert response.json()["status"] == "rejected"
        assert response.json()["rejection_reason"] == VALID_REASON

    def test_reject_with_short_reason(self, client, users, template_id):
        response = client.put(
            f"/admin/templates/{template_id}/reject",
            json={"reason": "  no  "},
            headers=_headers(users["admin"]),
        )

        assert response.status_code == 422
