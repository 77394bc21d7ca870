"""
Match Resolver

Turns one chat's match id into the counterpart's display identity.
Every failure is contained here; callers only ever see an outcome.
"""

from dataclasses import dataclass
from typing import Optional

from matchchats.core.logging import get_logger
from matchchats.infra.directory import DirectoryClient
from matchchats.schemas.chat import CounterpartInfo
from matchchats.schemas.presentation import ResolutionStatus

logger = get_logger(__name__)


@dataclass(frozen=True)
class Resolution:
    match_id: int
    status: ResolutionStatus
    counterpart: Optional[CounterpartInfo] = None
    reason: Optional[str] = None

    @classmethod
    def resolved(cls, counterpart: CounterpartInfo) -> "Resolution":
        return cls(counterpart.match_id, ResolutionStatus.RESOLVED, counterpart)

    @classmethod
    def unresolved(cls, match_id: int, reason: str) -> "Resolution":
        return cls(match_id, ResolutionStatus.UNRESOLVED, None, reason)


class MatchResolver:
    def __init__(self, directory: DirectoryClient):
        self.directory = directory

    async def resolve(self, match_id: int, requesting_user_id: int) -> Optional[CounterpartInfo]:
        """Counterpart for match_id as seen by requesting_user_id, or None"""
        outcome = await self.resolve_outcome(match_id, requesting_user_id)
        return outcome.counterpart

    async def resolve_outcome(self, match_id: int, requesting_user_id: int) -> Resolution:
        """
        Resolve a match into a tagged outcome.

        The requesting user is assumed to be one of the two participants.
        A missing or failing match or profile yields an unresolved outcome;
        no partially filled counterpart is ever produced.
        """
        try:
            match = await self.directory.get_match_by_id(match_id)
        except Exception as e:
            logger.warning(f"Match {match_id} fetch failed: {e}")
            return Resolution.unresolved(match_id, "match_fetch_failed")

        if match is None:
            logger.info(f"Match {match_id} no longer exists")
            return Resolution.unresolved(match_id, "match_absent")

        if not match.includes(requesting_user_id):
            logger.debug(
                f"User {requesting_user_id} is not a participant of match {match_id}; "
                f"using user {match.counterpart_of(requesting_user_id)}"
            )
        counterpart_id = match.counterpart_of(requesting_user_id)

        try:
            profile = await self.directory.get_user(counterpart_id)
        except Exception as e:
            logger.warning(f"Profile {counterpart_id} for match {match_id} fetch failed: {e}")
            return Resolution.unresolved(match_id, "profile_fetch_failed")

        if profile is None:
            logger.info(f"Profile {counterpart_id} for match {match_id} not found")
            return Resolution.unresolved(match_id, "profile_absent")

        return Resolution.resolved(CounterpartInfo.from_profile(match_id, profile))
