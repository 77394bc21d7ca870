"""
Chat / Match / User Schemas

Shapes returned by the remote directory. Wire names are camelCase.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DirectoryModel(BaseModel):
    """Accepts both camelCase (wire) and snake_case (python) field names"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Message(DirectoryModel):
    content: str


class Chat(DirectoryModel):
    chat_id: int
    match_id: int
    # chronological
    messages: List[Message] = Field(default_factory=list)


class Match(DirectoryModel):
    match_id: int
    user1_id: int
    user2_id: int

    def counterpart_of(self, user_id: int) -> int:
        """The participant that is not user_id (user1 unless user_id is user1)"""
        return self.user2_id if self.user1_id == user_id else self.user1_id

    def includes(self, user_id: int) -> bool:
        return user_id in (self.user1_id, self.user2_id)


class UserProfile(DirectoryModel):
    user_id: int
    first_name: str
    last_name: str
    avatar_image: Optional[str] = Field(default=None, alias="imageBase64")


class CounterpartInfo(DirectoryModel):
    """Display identity of the other participant in a match"""

    model_config = ConfigDict(frozen=True)

    match_id: int
    first_name: str
    last_name: str
    avatar_image: Optional[str] = Field(default=None, alias="imageBase64")

    @classmethod
    def from_profile(cls, match_id: int, profile: UserProfile) -> "CounterpartInfo":
        return cls(
            match_id=match_id,
            first_name=profile.first_name,
            last_name=profile.last_name,
            avatar_image=profile.avatar_image,
        )
