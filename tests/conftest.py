import pytest
from fastapi.testclient import TestClient
from social_feed.config import Settings
from social_feed.database import build_engine, build_sessionmaker, init_models
from social_feed.main import create_app

# Smallest thing that looks like a PNG to the upload checks
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'feed.db'}",
        jwt_secret="test-secret",
        media_root=str(tmp_path / "media"),
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def register(client):
    def _register(username, email, password="pw123"):
        res = client.post("/auth/register", json={"username": username, "email": email, "password": password})
        assert res.status_code == 201, res.text
        body = res.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}
    return _register


@pytest.fixture
def make_post(client):
    def _make_post(headers, caption=""):
        res = client.post(
            "/posts",
            headers=headers,
            files={"image": ("photo.png", PNG_BYTES, "image/png")},
            data={"caption": caption},
        )
        assert res.status_code == 201, res.text
        return res.json()["post"]
    return _make_post


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def session_factory(settings):
    engine = build_engine(settings)
    await init_models(engine)
    yield build_sessionmaker(engine)
    await engine.dispose()


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s
