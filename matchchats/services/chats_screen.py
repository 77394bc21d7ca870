"""
Chats screen view-model

Drives one screen instance: reads the session, runs the aggregation,
publishes rows and handles row selection. Results of a load that was
superseded by a newer load, or that finished after close(), are dropped.
"""

from enum import Enum
from typing import List, Mapping, Optional, Protocol

from matchchats.core.config import settings
from matchchats.core.errors import ChatListUnavailableError, SessionError
from matchchats.core.logging import get_logger
from matchchats.infra.storage import SessionStorage, load_session
from matchchats.schemas.presentation import (
    LOAD_FAILED_TEXT,
    NO_CHATS_TEXT,
    ChatRow,
    NavigationPayload,
)
from matchchats.schemas.session import Session
from matchchats.services.aggregation import ChatAggregator
from matchchats.services.presentation import build_rows, navigation_payload

logger = get_logger(__name__)

LOGIN_ROUTE = "/login"
CHAT_DETAIL_ROUTE = "/chatscreen"


class Router(Protocol):
    def push(self, pathname: str, params: Mapping[str, str]) -> None: ...

    def replace(self, pathname: str) -> None: ...


class ScreenState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"
    ERROR = "error"
    UNAUTHENTICATED = "unauthenticated"


class ChatsScreen:
    def __init__(
        self,
        storage: SessionStorage,
        aggregator: ChatAggregator,
        router: Router,
        session_key: Optional[str] = None,
    ):
        self.storage = storage
        self.aggregator = aggregator
        self.router = router
        self.session_key = session_key or settings.session_key

        self.state = ScreenState.IDLE
        self.rows: List[ChatRow] = []
        self.message: Optional[str] = None
        self.session: Optional[Session] = None

        self._generation = 0
        self._closed = False

    def _is_stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    async def load(self) -> bool:
        """
        (Re)load the screen.

        Returns True if this call's outcome was applied to the screen,
        False if it was discarded as stale.
        """
        if self._closed:
            return False

        self._generation += 1
        generation = self._generation
        self.state = ScreenState.LOADING

        try:
            session = await load_session(self.storage, self.session_key)
        except SessionError as e:
            if self._is_stale(generation):
                return False
            logger.error(f"Unusable session: {e.message}")
            self.session = None
            self._apply_failure(LOAD_FAILED_TEXT)
            return True

        if session is None:
            if self._is_stale(generation):
                return False
            self.session = None
            self.rows = []
            self.message = None
            self.state = ScreenState.UNAUTHENTICATED
            self.router.replace(LOGIN_ROUTE)
            return True

        try:
            result = await self.aggregator.aggregate(session.user_id)
        except ChatListUnavailableError as e:
            if self._is_stale(generation):
                return False
            logger.error(f"Chats screen load failed: {e.message}")
            self.session = session
            self._apply_failure(LOAD_FAILED_TEXT)
            return True

        if self._is_stale(generation):
            logger.debug(f"Discarding stale chats result (load {generation}, current {self._generation})")
            return False

        self.session = session
        self.rows = build_rows(result.chats, result.counterpart_by_match, result.unresolved)
        if result.is_empty:
            self.state = ScreenState.EMPTY
            self.message = NO_CHATS_TEXT
        else:
            self.state = ScreenState.READY
            self.message = None
        return True

    def _apply_failure(self, message: str) -> None:
        self.rows = []
        self.state = ScreenState.ERROR
        self.message = message

    def select(self, chat_id: int) -> NavigationPayload:
        """Navigate to the chat detail screen with whatever is resolved right now"""
        row = next((r for r in self.rows if r.chat_id == chat_id), None)
        if row is None:
            raise KeyError(f"No chat {chat_id} on screen")
        payload = navigation_payload(row)
        self.router.push(CHAT_DETAIL_ROUTE, payload.model_dump(by_alias=True))
        return payload

    def close(self) -> None:
        """Screen torn down; any in-flight load is discarded when it finishes"""
        self._closed = True
