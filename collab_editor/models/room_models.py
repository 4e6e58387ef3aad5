from pydantic import BaseModel
from typing import List, Optional


class RoomDocument(BaseModel):
    code: Optional[str] = None
    language: Optional[str] = None


class Room(BaseModel):
    room_id: str
    members: List[str]  # display names, in join order
    code: Optional[str] = None
    language: Optional[str] = None
