from pydantic import BaseModel, ConfigDict
from typing import Any, Optional

# Broadcast scopes
ROOM = "room"
OTHERS = "others"
SENDER = "sender"


class Session(BaseModel):
    sid: str
    room_id: Optional[str] = None
    user_name: Optional[str] = None

    @property
    def joined(self) -> bool:
        return self.room_id is not None and self.user_name is not None


class Outbound(BaseModel):
    model_config = ConfigDict(frozen=True)

    event: str
    data: Any
    room_id: str
    scope: str = ROOM
    sender: Optional[str] = None
