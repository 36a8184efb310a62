import asyncio
import json
import os
import tempfile

import httpx
import pytest

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("MODE", "test")
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'memoraize-test.db')}",
)
os.environ.setdefault("GENERATION_BASE_URL", "http://generation.test/api")

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from memoraize.core.db.base import Base
from memoraize.core.db import schemas  # noqa: F401  (registers tables)
from memoraize.core.store import SqlDocumentStore
from memoraize.modules.auth.identity import Identity
from memoraize.modules.generation.client import GenerationClient


USER_ID = "user-1"

GENERATED = [
    {"front": "The sun is a star.", "back": "True"},
    {"front": "Water boils at 50C at sea level.", "back": "False"},
    {"front": "Mars is called the red planet.", "back": "True"},
]


@pytest.fixture
def engine(tmp_path):
    eng = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'store.db'}", poolclass=NullPool
    )

    async def _create():
        async with eng.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_create())
    yield eng
    asyncio.run(eng.dispose())


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def store(session_maker):
    return SqlDocumentStore(session_maker)


@pytest.fixture
def identity():
    return Identity(id=USER_ID, is_signed_in=True)


@pytest.fixture
def anonymous():
    return Identity.anonymous()


class GenerationStub:
    """Programmable stand-in for the generation service behind ``httpx.MockTransport``."""

    def __init__(self):
        self.cards = list(GENERATED)
        self.topic = "Astronomy basics"
        self.fail = False
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            return httpx.Response(500, json={"error": "Failed to generate flashcards"})
        if request.method == "GET":
            return httpx.Response(200, json={"recommendedTopic": self.topic})
        return httpx.Response(200, json={"flashcards": self.cards})

    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def generation_stub():
    return GenerationStub()


@pytest.fixture
def generation_client(generation_stub):
    return GenerationClient(
        "http://generation.test/api", transport=httpx.MockTransport(generation_stub)
    )
