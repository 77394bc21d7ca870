"""
Chat list endpoints

Serve the aggregated chat rows for a user.
"""

from fastapi import APIRouter

from matchchats.core.deps import AggregatorDep, StorageDep
from matchchats.core.errors import NotAuthenticatedError
from matchchats.infra.storage import load_session
from matchchats.schemas.presentation import NO_CHATS_TEXT, ChatListResponse
from matchchats.services.aggregation import AggregationResult
from matchchats.services.presentation import build_rows

router = APIRouter()


def _to_response(result: AggregationResult) -> ChatListResponse:
    return ChatListResponse(
        rows=build_rows(result.chats, result.counterpart_by_match, result.unresolved),
        empty_message=NO_CHATS_TEXT if result.is_empty else None,
    )


@router.get("/users/{user_id}/chats", response_model=ChatListResponse)
async def get_user_chats(user_id: int, aggregator: AggregatorDep):
    """Chats for user_id with counterpart identity and last message preview"""
    result = await aggregator.aggregate(user_id)
    return _to_response(result)


@router.get("/session/chats", response_model=ChatListResponse)
async def get_session_chats(storage: StorageDep, aggregator: AggregatorDep):
    """Chats for the user of the persisted session"""
    session = await load_session(storage)
    if session is None:
        raise NotAuthenticatedError("No session stored")
    result = await aggregator.aggregate(session.user_id)
    return _to_response(result)
