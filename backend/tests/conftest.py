"""Configuração de fixtures para testes."""

import os

# Precisa valer antes de importar a aplicação (settings é carregado no import)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

from datetime import UTC, datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from minhascompras.database import Base, get_db  # noqa: E402
from minhascompras.main import app  # noqa: E402
from minhascompras.models import User, UserSession  # noqa: E402
from minhascompras.services.auth import UserContext, hash_password  # noqa: E402


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
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_context(db_session, email: str, name: str) -> UserContext:
    user = User(email=email, password_hash=hash_password("secret123"), display_name=name)
    db_session.add(user)
    db_session.flush()
    session = UserSession(user_id=user.id, expires_at=datetime(2999, 1, 1, tzinfo=UTC))
    db_session.add(session)
    db_session.commit()
    return UserContext(user_id=user.id, display_name=name, email=email, session_id=session.id)


@pytest.fixture
def ctx(db_session):
    """Contexto de um usuário autenticado (para testes de serviço)."""
    return _make_context(db_session, "ana@example.com", "Ana")


@pytest.fixture
def other_ctx(db_session):
    """Contexto de um segundo usuário."""
    return _make_context(db_session, "bruno@example.com", "Bruno")


@pytest.fixture
def credentials():
    """Dados de cadastro para testes de API."""
    return {
        "email": "carla@example.com",
        "password": "senha-forte",
        "display_name": "Carla",
    }


@pytest.fixture
def auth_headers(client, credentials):
    """Cadastra, faz login e devolve o header Authorization."""
    client.post("/auth/register", json=credentials)
    response = client.post(
        "/auth/login",
        json={"email": credentials["email"], "password": credentials["password"]},
    )
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}
