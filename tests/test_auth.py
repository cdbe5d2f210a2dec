"""Testes para autenticação, sessões e hash de senha."""

from datetime import UTC, datetime, timedelta

import pytest

from rastreios.config import settings
from rastreios.models import UserSession
from rastreios.services.auth import (
    AuthService,
    create_session_token,
    decode_session_token,
    hash_password,
    verify_password,
)


class TestPasswordHash:
    """Testes para hash e verificação de senha."""

    def test_format_hash_and_salt(self):
        """Hash gravado como <hashHex>.<saltHex>."""
        stored = hash_password("segredo")
        hashed, salt = stored.split(".")
        assert len(hashed) == 128  # 64 bytes
        assert len(salt) == 32  # 16 bytes
        int(hashed, 16)
        int(salt, 16)

    def test_verify_correct_password(self):
        assert verify_password("segredo", hash_password("segredo")) is True

    def test_verify_wrong_password(self):
        assert verify_password("outra", hash_password("segredo")) is False

    def test_salt_is_unique(self):
        assert hash_password("segredo") != hash_password("segredo")

    @pytest.mark.parametrize("stored", ["", "semseparador", ".abc", "abc.", "zz.abcd"])
    def test_malformed_hash_never_matches(self, stored):
        assert verify_password("segredo", stored) is False


class TestSessionToken:
    def test_roundtrip(self):
        expires = datetime.now(UTC) + timedelta(hours=1)
        payload = decode_session_token(create_session_token("u1", "s1", expires))
        assert payload["sub"] == "u1"
        assert payload["sid"] == "s1"

    def test_expired_token(self):
        expires = datetime.now(UTC) - timedelta(minutes=1)
        assert decode_session_token(create_session_token("u1", "s1", expires)) is None

    def test_tampered_token(self):
        token = create_session_token("u1", "s1", datetime.now(UTC) + timedelta(hours=1))
        forged = token.rsplit(".", 1)[0] + ".assinatura"
        assert decode_session_token(forged) is None


class TestLogin:
    """Testes para POST /api/login."""

    def test_login_sets_http_only_cookie(self, client, make_user):
        make_user(login="ana")
        response = client.post(
            "/api/login",
            json={"empresa": "insider", "login": "ana", "senha": "123"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["login"] == "ana"
        assert "password" not in data

        cookie = response.headers["set-cookie"]
        assert cookie.startswith(f"{settings.session_cookie_name}=")
        assert "HttpOnly" in cookie
        assert "samesite=lax" in cookie.lower()

    def test_login_persists_session(self, client, db_session, make_user):
        user = make_user(login="ana")
        client.post("/api/login", json={"empresa": "insider", "login": "ana", "senha": "123"})
        sessions = db_session.query(UserSession).filter(UserSession.user_id == user.id).all()
        assert len(sessions) == 1

    def test_wrong_password(self, client, make_user):
        make_user(login="ana")
        response = client.post(
            "/api/login",
            json={"empresa": "insider", "login": "ana", "senha": "errada"},
        )
        assert response.status_code == 401
        assert settings.session_cookie_name not in response.cookies

    def test_unknown_login(self, client):
        response = client.post(
            "/api/login",
            json={"empresa": "insider", "login": "ninguem", "senha": "123"},
        )
        assert response.status_code == 401

    def test_missing_fields(self, client):
        response = client.post("/api/login", json={"empresa": "insider", "login": ""})
        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert {"login", "senha"} <= fields

    def test_invalid_empresa(self, client):
        response = client.post(
            "/api/login",
            json={"empresa": "outra", "login": "ana", "senha": "123"},
        )
        assert response.status_code == 400


class TestCurrentUser:
    """Testes para GET /api/user e POST /api/logout."""

    def test_requires_session(self, client):
        assert client.get("/api/user").status_code == 401

    def test_login_then_current_user(self, client, make_user, login):
        user = make_user(login="ana")
        login("ana")

        response = client.get("/api/user")
        assert response.status_code == 200
        assert response.json()["id"] == user.id

    def test_logout_ends_session(self, client, db_session, make_user, login):
        make_user(login="ana")
        login("ana")

        response = client.post("/api/logout")
        assert response.status_code == 200
        assert client.get("/api/user").status_code == 401
        assert db_session.query(UserSession).count() == 0

    def test_logout_without_session(self, client):
        assert client.post("/api/logout").status_code == 200

    def test_stale_cookie_after_logout(self, client, make_user, login):
        """Cookie antigo não vale depois que a sessão foi removida do banco."""
        make_user(login="ana")
        login("ana")
        token = client.cookies.get(settings.session_cookie_name)

        client.post("/api/logout")
        response = client.get(
            "/api/user",
            headers={"Cookie": f"{settings.session_cookie_name}={token}"},
        )
        assert response.status_code == 401

    def test_expired_session_row(self, client, db_session, make_user, login):
        make_user(login="ana")
        login("ana")
        session = db_session.query(UserSession).one()
        session.expires_at = datetime.now(UTC) - timedelta(minutes=1)
        db_session.commit()

        assert client.get("/api/user").status_code == 401

    def test_garbage_cookie(self, client):
        response = client.get(
            "/api/user",
            headers={"Cookie": f"{settings.session_cookie_name}=lixo"},
        )
        assert response.status_code == 401


class TestAdminLogin:
    """Testes para POST /api/admin-login."""

    def test_admin_login(self, client, make_user):
        make_user(login=settings.admin_login, senha="admin")
        response = client.post("/api/admin-login", json={"login": "admin", "senha": "admin"})
        assert response.status_code == 200
        assert client.get("/api/user").json()["login"] == "admin"

    def test_non_admin_gets_403_without_session(self, client, db_session, make_user):
        """Credenciais válidas de operador não abrem o painel nem criam sessão."""
        make_user(login="ana")
        response = client.post("/api/admin-login", json={"login": "ana", "senha": "123"})
        assert response.status_code == 403
        assert db_session.query(UserSession).count() == 0
        assert client.get("/api/user").status_code == 401

    def test_admin_wrong_password(self, client, make_user):
        make_user(login=settings.admin_login, senha="admin")
        response = client.post("/api/admin-login", json={"login": "admin", "senha": "x"})
        assert response.status_code == 401


class TestAuthService:
    def test_purge_expired_sessions(self, db_session, make_user):
        user = make_user(login="ana")
        service = AuthService(db_session)
        session, _ = service.create_session(user)
        session.expires_at = datetime.now(UTC) - timedelta(hours=1)
        db_session.commit()
        service.create_session(user)

        assert service.purge_expired_sessions() == 1
        assert db_session.query(UserSession).count() == 1
