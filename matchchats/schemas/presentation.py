"""
Presentation Schemas

Row descriptors and navigation payloads handed to the view layer.
"""

from enum import Enum
from typing import List, Optional

from pydantic import computed_field

from matchchats.schemas.chat import CounterpartInfo, DirectoryModel

NO_MESSAGES_TEXT = "No messages yet"
NO_CHATS_TEXT = "No chats available"
LOAD_FAILED_TEXT = "Could not load chats"
LOADING_TEXT = "Loading..."
UNAVAILABLE_TEXT = "Unavailable"


class ResolutionStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


class ChatRow(DirectoryModel):
    chat_id: int
    match_id: int
    counterpart: Optional[CounterpartInfo] = None
    last_message_preview: str
    status: ResolutionStatus = ResolutionStatus.PENDING

    @computed_field(alias="displayName")
    @property
    def display_name(self) -> str:
        if self.counterpart is not None:
            return f"{self.counterpart.first_name} {self.counterpart.last_name}"
        if self.status == ResolutionStatus.UNRESOLVED:
            return UNAVAILABLE_TEXT
        return LOADING_TEXT

    @computed_field(alias="avatarUri")
    @property
    def avatar_uri(self) -> Optional[str]:
        """Inline data URI, or None for the neutral placeholder avatar"""
        if self.counterpart is None or not self.counterpart.avatar_image:
            return None
        return f"data:image/jpeg;base64,{self.counterpart.avatar_image}"


class NavigationPayload(DirectoryModel):
    """Route params for the chat detail screen; always plain text"""

    chat_id: str
    match_id: str
    first_name: str = ""
    last_name: str = ""
    avatar_image: str = ""


class ChatListResponse(DirectoryModel):
    rows: List[ChatRow]
    empty_message: Optional[str] = None
