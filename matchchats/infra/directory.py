"""
Remote Directory client

Read-only access to chats, matches and user profiles over HTTP.
"""

from typing import Any, List, Optional, Protocol

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from matchchats.core.config import settings
from matchchats.core.errors import (
    DirectoryNetworkError,
    DirectoryNotFoundError,
    DirectoryResponseError,
)
from matchchats.core.logging import get_logger
from matchchats.schemas.chat import Chat, Match, UserProfile

logger = get_logger(__name__)

_chat_list = TypeAdapter(List[Chat])


class DirectoryClient(Protocol):
    async def get_chats_for_user(self, user_id: int) -> List[Chat]: ...

    async def get_match_by_id(self, match_id: int) -> Optional[Match]: ...

    async def get_user(self, user_id: int) -> Optional[UserProfile]: ...


class HttpDirectoryClient:
    """
    httpx-backed DirectoryClient.

    Owns one AsyncClient; use as an async context manager or call aclose().
    A 404 on a match or user is a normal "absent" outcome, a 404 on the
    chat list is an error.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.directory_api_url).rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.directory_timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "HttpDirectoryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _get_json(self, path: str, allow_missing: bool) -> Optional[Any]:
        try:
            response = await self.client.get(path)
        except httpx.HTTPError as e:
            logger.error(f"Directory request GET {path} failed: {e}")
            raise DirectoryNetworkError(f"GET {path} failed: {e}") from e

        if response.status_code == httpx.codes.NOT_FOUND:
            if allow_missing:
                return None
            raise DirectoryNotFoundError(f"GET {path} returned 404")

        if response.is_error:
            logger.error(f"Directory request GET {path} returned {response.status_code}")
            raise DirectoryResponseError(f"GET {path} returned {response.status_code}")

        # Some backends answer "no such row" with 200 and an empty body
        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise DirectoryResponseError(f"GET {path} returned invalid JSON") from e

    async def get_chats_for_user(self, user_id: int) -> List[Chat]:
        path = f"/chat/user/{user_id}"
        data = await self._get_json(path, allow_missing=False)
        if data is None:
            return []
        try:
            return _chat_list.validate_python(data)
        except PydanticValidationError as e:
            raise DirectoryResponseError(f"GET {path} returned an unexpected chat list") from e

    async def get_match_by_id(self, match_id: int) -> Optional[Match]:
        path = f"/match/{match_id}"
        data = await self._get_json(path, allow_missing=True)
        if data is None:
            return None
        try:
            return Match.model_validate(data)
        except PydanticValidationError as e:
            raise DirectoryResponseError(f"GET {path} returned an unexpected match") from e

    async def get_user(self, user_id: int) -> Optional[UserProfile]:
        path = f"/user/{user_id}"
        data = await self._get_json(path, allow_missing=True)
        if data is None:
            return None
        try:
            return UserProfile.model_validate(data)
        except PydanticValidationError as e:
            raise DirectoryResponseError(f"GET {path} returned an unexpected user") from e
