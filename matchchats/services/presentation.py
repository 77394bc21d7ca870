"""
Presentation adapter

Joins chats with resolved counterparts into view rows.
"""

from typing import AbstractSet, List, Mapping, Sequence

from matchchats.schemas.chat import Chat, CounterpartInfo, Message
from matchchats.schemas.presentation import (
    NO_MESSAGES_TEXT,
    ChatRow,
    NavigationPayload,
    ResolutionStatus,
)


def last_message_preview(messages: Sequence[Message]) -> str:
    if not messages:
        return NO_MESSAGES_TEXT
    return messages[-1].content


def build_rows(
    chats: Sequence[Chat],
    counterpart_by_match: Mapping[int, CounterpartInfo],
    unresolved: AbstractSet[int] = frozenset(),
) -> List[ChatRow]:
    """
    One row per chat, in the given order.

    Chats without a counterpart still get a row: pending while resolution
    may still arrive, unresolved once it is known to have failed.
    """
    rows = []
    for chat in chats:
        counterpart = counterpart_by_match.get(chat.match_id)
        if counterpart is not None:
            status = ResolutionStatus.RESOLVED
        elif chat.match_id in unresolved:
            status = ResolutionStatus.UNRESOLVED
        else:
            status = ResolutionStatus.PENDING
        rows.append(
            ChatRow(
                chat_id=chat.chat_id,
                match_id=chat.match_id,
                counterpart=counterpart,
                last_message_preview=last_message_preview(chat.messages),
                status=status,
            )
        )
    return rows


def navigation_payload(row: ChatRow) -> NavigationPayload:
    counterpart = row.counterpart
    return NavigationPayload(
        chat_id=str(row.chat_id),
        match_id=str(row.match_id),
        first_name=counterpart.first_name if counterpart else "",
        last_name=counterpart.last_name if counterpart else "",
        avatar_image=(counterpart.avatar_image or "") if counterpart else "",
    )
