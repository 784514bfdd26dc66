from sqlalchemy import select

from app.core.security import PasswordHasher
from app.models import User
from app.services.auth_service import AuthService
from tests.helpers import PASSWORD, auth, count_rows, register_user


class TestRegister:
    async def test_register_returns_user_and_token(self, client):
        response = await client.post(
            "/api/auth/register",
            json={
                "username": "jane",
                "email": "jane@example.com",
                "password": PASSWORD,
                "role": "Customer",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Registration successful"
        assert data["user"]["username"] == "jane"
        assert data["user"]["email"] == "jane@example.com"
        assert data["user"]["role"] == "Customer"
        assert data["token"]
        assert "password" not in str(data["user"]).lower()

    async def test_password_is_stored_hashed(self, client, db):
        await register_user(client, "jane")

        user = (await db.execute(select(User).where(User.email == "jane@example.com"))).scalar_one()
        assert user.password_hash != PASSWORD
        assert user.password_hash.startswith("$2")

    async def test_duplicate_email_is_rejected(self, client, db):
        first = await register_user(client, "jane", email="jane@example.com")

        response = await client.post(
            "/api/auth/register",
            json={
                "username": "impostor",
                "email": "jane@example.com",
                "password": "different-password",
                "role": "Admin",
            },
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Email already registered"

        users = (await db.execute(select(User))).scalars().all()
        assert len(users) == 1
        assert users[0].id == first["id"]
        assert users[0].username == "jane"
        assert users[0].role == "Customer"

        login = await client.post(
            "/api/auth/login", json={"email": "jane@example.com", "password": PASSWORD}
        )
        assert login.status_code == 200

    async def test_invalid_role_creates_no_user(self, client, session_maker):
        response = await client.post(
            "/api/auth/register",
            json={
                "username": "mallory",
                "email": "mallory@example.com",
                "password": PASSWORD,
                "role": "SuperAdmin",
            },
        )

        assert response.status_code == 400
        assert "Invalid role" in response.json()["message"]
        assert await count_rows(session_maker, User) == 0

    async def test_role_defaults_to_customer(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"username": "sam", "email": "sam@example.com", "password": PASSWORD},
        )
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "Customer"

    async def test_malformed_body_is_400(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"username": "sam", "email": "not-an-email", "password": PASSWORD},
        )
        assert response.status_code == 400
        assert "email" in response.json()["message"]

    async def test_short_password_is_400(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"username": "sam", "email": "sam@example.com", "password": "123"},
        )
        assert response.status_code == 400


class TestLogin:
    async def test_login_with_correct_credentials(self, client, customer):
        response = await client.post(
            "/api/auth/login", json={"email": customer["email"], "password": PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Login successful"
        assert data["user"]["id"] == customer["id"]
        assert data["token"]

    async def test_wrong_password_is_401(self, client, customer):
        response = await client.post(
            "/api/auth/login", json={"email": customer["email"], "password": "wrong-password"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    async def test_unknown_email_is_401(self, client):
        response = await client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": PASSWORD}
        )
        assert response.status_code == 401

    async def test_login_token_authenticates(self, client, customer):
        response = await client.post(
            "/api/auth/login", json={"email": customer["email"], "password": PASSWORD}
        )
        token = response.json()["token"]

        orders = await client.get(f"/api/orders/customer/{customer['id']}", headers=auth(token))
        assert orders.status_code == 200


class TestAuthService:
    async def test_validate_credentials_returns_none_on_mismatch(self, db):
        service = AuthService(db, PasswordHasher(rounds=4))
        result = await service.register("jane", "jane@example.com", PASSWORD, "Customer")
        assert result.success

        assert await service.validate_credentials("jane@example.com", "nope") is None
        assert await service.validate_credentials("nobody@example.com", PASSWORD) is None
        user = await service.validate_credentials("jane@example.com", PASSWORD)
        assert user is not None
        assert user.id == result.user.id

    async def test_register_reports_error_codes(self, db):
        service = AuthService(db, PasswordHasher(rounds=4))
        await service.register("jane", "jane@example.com", PASSWORD, "Customer")

        duplicate = await service.register("jane2", "jane@example.com", PASSWORD, "Customer")
        assert not duplicate.success
        assert duplicate.error_code == "duplicate_email"

        invalid = await service.register("bob", "bob@example.com", PASSWORD, "SuperAdmin")
        assert not invalid.success
        assert invalid.error_code == "invalid_role"
        assert invalid.user is None


class TestTokenBoundary:
    async def test_missing_token_is_401(self, client):
        response = await client.get("/api/orders")
        assert response.status_code == 401

    async def test_garbage_token_is_401(self, client):
        response = await client.get("/api/orders", headers=auth("garbage"))
        assert response.status_code == 401
