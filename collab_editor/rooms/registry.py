import logging
from typing import Dict, List, Optional, Tuple

from collab_editor.models.room_models import Room, RoomDocument

logger = logging.getLogger(__name__)


class RoomRegistry:
    """In-memory room membership, keyed by room id.

    Membership is by display name, so two connections using the same name in
    one room share a single entry. Rooms are created on first join and are
    never removed, even once empty.

    The registry also remembers the last code and language relayed in each
    room so a late joiner can be handed a snapshot. That copy is never used
    to arbitrate between concurrent edits.
    """

    def __init__(
        self,
        store: Optional[Dict[str, List[str]]] = None,
        documents: Optional[Dict[str, RoomDocument]] = None,
    ):
        self.store: Dict[str, List[str]] = store if store is not None else {}
        self.documents: Dict[str, RoomDocument] = documents if documents is not None else {}

    def join(
        self,
        room_id: str,
        name: str,
        previous: Optional[Tuple[str, str]] = None,
    ) -> List[str]:
        if previous is not None and previous != (room_id, name):
            self.leave(*previous)

        members = self.store.setdefault(room_id, [])
        if name not in members:
            members.append(name)
            logger.info(f"{name} joined room {room_id} | members: {len(members)}")
        return list(members)

    def leave(self, room_id: str, name: str) -> List[str]:
        members = self.store.get(room_id)
        if members is None:
            return []
        if name in members:
            members.remove(name)
            logger.info(f"{name} left room {room_id} | members: {len(members)}")
        return list(members)

    def members(self, room_id: str) -> List[str]:
        return list(self.store.get(room_id, []))

    def has_room(self, room_id: str) -> bool:
        return room_id in self.store

    def update_code(self, room_id: str, code: str) -> None:
        self.documents.setdefault(room_id, RoomDocument()).code = code

    def update_language(self, room_id: str, language: str) -> None:
        self.documents.setdefault(room_id, RoomDocument()).language = language

    def document(self, room_id: str) -> Optional[RoomDocument]:
        return self.documents.get(room_id)

    def snapshot(self, room_id: str) -> Room:
        document = self.documents.get(room_id) or RoomDocument()
        return Room(
            room_id=room_id,
            members=self.members(room_id),
            code=document.code,
            language=document.language,
        )
