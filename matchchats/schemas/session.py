"""
Session Schemas

Typed view of the persisted login session.
"""

import json
from typing import Any, Optional

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from matchchats.core.errors import CorruptSessionError
from matchchats.schemas.chat import DirectoryModel


class Session(DirectoryModel):
    user_id: int = Field(gt=0)
    email: Optional[str] = None
    token: Optional[str] = None

    @classmethod
    def from_storage(cls, payload: Any) -> "Session":
        """
        Build a Session from whatever the storage returned.

        Accepts a flat document ({"userId": 7}) or the nested one the
        mobile client persists after login ({"user": {"userId": 7, ...}}),
        either as a dict or as its JSON text.

        Raises:
            CorruptSessionError: payload has no usable user id
        """
        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as e:
                raise CorruptSessionError(f"Session is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise CorruptSessionError(f"Session must be an object, got {type(payload).__name__}")

        document = payload
        nested = payload.get("user")
        if isinstance(nested, dict):
            document = {**nested}
            # token is usually stored beside the user object
            for key in ("token", "accessToken"):
                if key in payload and "token" not in document:
                    document["token"] = payload[key]

        try:
            return cls.model_validate(document)
        except PydanticValidationError as e:
            raise CorruptSessionError(f"Session has no valid user id: {e.errors()[0]['msg']}") from e
