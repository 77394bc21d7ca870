"""
Chat Aggregation Service

Fetches a user's chats and resolves every chat's counterpart concurrently.
"""

import asyncio
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Set, Tuple

from matchchats.core.config import settings
from matchchats.core.errors import ChatListUnavailableError
from matchchats.core.logging import get_logger
from matchchats.infra.directory import DirectoryClient
from matchchats.schemas.chat import Chat, CounterpartInfo
from matchchats.schemas.presentation import ResolutionStatus
from matchchats.services.match_resolver import MatchResolver, Resolution

logger = get_logger(__name__)


@dataclass(frozen=True)
class AggregationResult:
    """Snapshot handed to the caller; never mutated after hand-off"""

    chats: Tuple[Chat, ...]
    counterpart_by_match: Mapping[int, CounterpartInfo] = field(
        default_factory=lambda: MappingProxyType({})
    )
    unresolved: FrozenSet[int] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.chats


class ChatAggregator:
    def __init__(
        self,
        directory: DirectoryClient,
        resolver: Optional[MatchResolver] = None,
        max_concurrency: Optional[int] = None,
    ):
        self.directory = directory
        self.resolver = resolver or MatchResolver(directory)
        if max_concurrency is None:
            max_concurrency = settings.resolver_max_concurrency
        self.max_concurrency = max_concurrency

    async def aggregate(self, requesting_user_id: int) -> AggregationResult:
        """
        Load chats and counterparts for requesting_user_id.

        Raises:
            ChatListUnavailableError: the chat list itself could not be fetched
        """
        try:
            chats = await self.directory.get_chats_for_user(requesting_user_id)
        except Exception as e:
            logger.error(f"Chat list for user {requesting_user_id} failed: {e}")
            raise ChatListUnavailableError(requesting_user_id, e) from e

        chats = tuple(chats)
        if not chats:
            return AggregationResult(chats=chats)

        outcomes = await self._resolve_all(chats, requesting_user_id)

        counterparts: Dict[int, CounterpartInfo] = {}
        failed: Set[int] = set()
        for chat, outcome in zip(chats, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Resolution for chat {chat.chat_id} raised: {outcome!r}")
                failed.add(chat.match_id)
            elif outcome.status == ResolutionStatus.RESOLVED:
                counterparts[outcome.match_id] = outcome.counterpart
            else:
                failed.add(outcome.match_id)

        unresolved = frozenset(failed - counterparts.keys())
        logger.info(
            f"Aggregated {len(chats)} chats for user {requesting_user_id}: "
            f"{len(counterparts)} resolved, {len(unresolved)} unresolved"
        )
        return AggregationResult(
            chats=chats,
            counterpart_by_match=MappingProxyType(counterparts),
            unresolved=unresolved,
        )

    async def _resolve_all(self, chats: Tuple[Chat, ...], user_id: int) -> List:
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async def resolve_one(chat: Chat) -> Resolution:
            if semaphore is None:
                return await self.resolver.resolve_outcome(chat.match_id, user_id)
            async with semaphore:
                return await self.resolver.resolve_outcome(chat.match_id, user_id)

        # One task per chat, joined together; results come back in chat order
        return await asyncio.gather(
            *(resolve_one(chat) for chat in chats),
            return_exceptions=True,
        )
