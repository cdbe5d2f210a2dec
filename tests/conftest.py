"""Configuração de fixtures para testes."""

import os

# Precisa vir antes de importar a aplicação (settings são lidas no import)
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("TIMEZONE", "UTC")

from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rastreios.database import Base, get_db
from rastreios.main import app
from rastreios.models import Tracking, User
from rastreios.routers.auth import limiter
from rastreios.services.auth import hash_password


# Banco de dados em memória para testes
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Cria uma sessão de banco de dados para testes."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Cria um cliente de teste com banco de dados isolado."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def make_user(db_session):
    """Fábrica de usuários já gravados no banco."""

    def _make(login="operador", senha="123", empresa="insider", name=None):
        user = User(
            name=name or login.title(),
            login=login,
            password=hash_password(senha),
            empresa=empresa,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def login(client):
    """Faz login pelo endpoint e mantém o cookie no cliente."""

    def _login(login="operador", senha="123", empresa="insider"):
        response = client.post(
            "/api/login",
            json={"empresa": empresa, "login": login, "senha": senha},
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _login


def build_tracking(
    code="BR123",
    status="PENDENTE",
    status_rastreio="normal",
    received_at=None,
    completed_at=None,
    quantity=0,
    user=None,
    empresa="DEFAULT",
):
    """Rastreio transitório (sem banco) para testar as agregações."""
    return Tracking(
        id=f"id-{code}",
        tracking_code=code,
        status=status,
        status_rastreio=status_rastreio,
        received_at=received_at or datetime(2026, 10, 19, 12, 0, tzinfo=UTC),
        completed_at=completed_at,
        quantity=quantity,
        user=user,
        empresa=empresa,
    )


@pytest.fixture
def sample_tracking_payload():
    """Payload de entrada de um rastreio."""
    return {"trackingCode": "BR123456789", "statusRastreio": "normal"}


@pytest.fixture
def tracking_factory():
    return build_tracking
