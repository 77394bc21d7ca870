"""
Conftest

In-memory fakes for the directory, session storage and router.
"""

import asyncio
from typing import AsyncGenerator, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from unittest.mock import AsyncMock

from matchchats.core.deps import get_aggregator, get_storage
from matchchats.infra.redis import get_redis
from matchchats.main import app
from matchchats.schemas.chat import Chat, Match, Message, UserProfile
from matchchats.services.aggregation import ChatAggregator


class FakeDirectory:
    """
    Dict-backed DirectoryClient.

    matches / users values may be an Exception instance, which is raised.
    delays maps ("match" | "user", id) to a sleep in seconds.
    """

    def __init__(
        self,
        chats: Optional[Dict[int, List[Chat]]] = None,
        matches: Optional[Dict[int, object]] = None,
        users: Optional[Dict[int, object]] = None,
        delays: Optional[Dict[tuple, float]] = None,
    ):
        self.chats = chats or {}
        self.matches = matches or {}
        self.users = users or {}
        self.delays = delays or {}
        self.chat_list_error: Optional[Exception] = None
        self.calls: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _lookup(self, kind: str, key: int, table: Dict[int, object]):
        self.calls.append((kind, key))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get((kind, key), 0))
        finally:
            self.in_flight -= 1
        value = table.get(key)
        if isinstance(value, Exception):
            raise value
        return value

    async def get_chats_for_user(self, user_id: int) -> List[Chat]:
        self.calls.append(("chats", user_id))
        if self.chat_list_error is not None:
            raise self.chat_list_error
        return list(self.chats.get(user_id, []))

    async def get_match_by_id(self, match_id: int) -> Optional[Match]:
        return await self._lookup("match", match_id, self.matches)

    async def get_user(self, user_id: int) -> Optional[UserProfile]:
        return await self._lookup("user", user_id, self.users)

    def count(self, kind: str) -> int:
        return sum(1 for k, _ in self.calls if k == kind)


class FakeStorage:
    def __init__(self, documents: Optional[dict] = None):
        self.documents = documents or {}
        self.reads: List[str] = []

    async def get_from_storage(self, key: str):
        self.reads.append(key)
        return self.documents.get(key)


class FakeRouter:
    def __init__(self):
        self.pushed: List[tuple] = []
        self.replaced: List[str] = []

    def push(self, pathname, params):
        self.pushed.append((pathname, dict(params)))

    def replace(self, pathname):
        self.replaced.append(pathname)


def make_chat(chat_id: int, match_id: int, *contents: str) -> Chat:
    return Chat(
        chat_id=chat_id,
        match_id=match_id,
        messages=[Message(content=c) for c in contents],
    )


@pytest.fixture
def ana_directory() -> FakeDirectory:
    """User 7 has one chat (match 100) with user 9, Ana Lee"""
    return FakeDirectory(
        chats={7: [make_chat(1, 100, "hi")]},
        matches={100: Match(match_id=100, user1_id=7, user2_id=9)},
        users={9: UserProfile(user_id=9, first_name="Ana", last_name="Lee", avatar_image=None)},
    )


@pytest.fixture
def multi_directory() -> FakeDirectory:
    """
    User 7 with four chats:
    1 -> match 100 (user 9, resolves)
    2 -> match 200 (match missing)
    3 -> match 300 (user 7 is user2; user 11 resolves, has avatar)
    4 -> match 400 (profile fetch raises)
    """
    return FakeDirectory(
        chats={
            7: [
                make_chat(1, 100, "hi", "how are you?"),
                make_chat(2, 200),
                make_chat(3, 300, "hey"),
                make_chat(4, 400, "yo"),
            ]
        },
        matches={
            100: Match(match_id=100, user1_id=7, user2_id=9),
            300: Match(match_id=300, user1_id=11, user2_id=7),
            400: Match(match_id=400, user1_id=7, user2_id=12),
        },
        users={
            9: UserProfile(user_id=9, first_name="Ana", last_name="Lee"),
            11: UserProfile(user_id=11, first_name="Bo", last_name="Kim", avatar_image="aGVsbG8="),
            12: RuntimeError("profile service down"),
        },
    )


@pytest.fixture
def fake_router() -> FakeRouter:
    return FakeRouter()


@pytest.fixture
def mock_redis() -> AsyncMock:
    redis = AsyncMock()
    redis.ping.return_value = True
    return redis


@pytest.fixture
async def client(multi_directory, mock_redis) -> AsyncGenerator[AsyncClient, None]:
    storage = FakeStorage({"user": {"user": {"userId": 7, "email": "u7@example.com"}, "token": "t"}})

    app.dependency_overrides[get_aggregator] = lambda: ChatAggregator(multi_directory)
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_redis] = lambda: mock_redis

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
