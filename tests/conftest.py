"""
tests/conftest.py

Fixtures compartilhadas: banco SQLite temporário por teste, cliente HTTP
apontando para o app com get_db substituído e um usuário autenticado.
"""
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

import backoffice.models  # noqa: F401
from backoffice.core.rate_limit import limiter
from backoffice.core.security import get_password_hash
from backoffice.core.session import Session
from backoffice.database import Base, build_engine, get_db
from backoffice.main import app
from backoffice.models import User
from backoffice.services.storage_service import storage_service

ADMIN = {"email": "maria@empresa.com.br", "password": "segredo123", "name": "Maria Admin"}


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def actor(db) -> Session:
    """Usuário gravado no banco e a sessão correspondente"""
    user = User(
        email="ana@empresa.com.br",
        hashed_password=get_password_hash("segredo123"),
        name="Ana Souza",
    )
    db.add(user)
    await db.commit()
    return Session(user_id=user.id, email=user.email, name=user.name)


@pytest.fixture
async def client(session_factory, tmp_path, monkeypatch):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()
    monkeypatch.setattr(storage_service, "base_dir", tmp_path / "uploads")

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def admin_credentials() -> dict:
    return dict(ADMIN)


@pytest.fixture
async def auth_headers(client):
    response = await client.post("/api/auth/register", json=ADMIN)
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
