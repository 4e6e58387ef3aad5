"""Event handlers for the shared editor.

Each inbound event maps to one handler taking ``(session, payload)`` and
returning the broadcasts it causes as ``Outbound`` instructions. Handlers
never touch sockets; ``ConnectionManager.deliver`` does the sending.

Broadcast scope matters here: presence and language updates go to the whole
room, including the sender, while code edits and typing notices skip the
sender, whose editor already shows the change.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from collab_editor.code_editor.execution import ExecutionGateway
from collab_editor.models.event_models import (
    CodeChangePayload,
    CompilePayload,
    JoinPayload,
    LanguageChangePayload,
)
from collab_editor.models.session_models import OTHERS, ROOM, SENDER, Outbound, Session
from collab_editor.rooms.registry import RoomRegistry

logger = logging.getLogger(__name__)

# Events the browser may send; "disconnect" only comes from the transport.
CLIENT_EVENTS = {"join", "codeChange", "languageChange", "typing", "leaveRoom", "compileCode"}


Handler = Callable[[Session, Any], Awaitable[List[Outbound]]]


def _parse(model: type, payload: Any) -> Optional[BaseModel]:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.debug(f"Ignoring malformed {model.__name__}: {e.errors()}")
        return None


class Relay:
    def __init__(self, registry: RoomRegistry, gateway: ExecutionGateway):
        self.registry = registry
        self.gateway = gateway
        self.handlers: Dict[str, Handler] = {
            "join": self.on_join,
            "codeChange": self.on_code_change,
            "languageChange": self.on_language_change,
            "typing": self.on_typing,
            "leaveRoom": self.on_leave,
            "disconnect": self.on_leave,
            "compileCode": self.on_compile,
        }

    async def dispatch(self, session: Session, event: str, payload: Any = None) -> List[Outbound]:
        handler = self.handlers.get(event)
        if handler is None:
            logger.warning(f"⚠️ Unknown event '{event}' from {session.sid}")
            return []
        return await handler(session, payload)

    def _presence(self, room_id: str, members: List[str]) -> Outbound:
        return Outbound(event="userJoined", data=members, room_id=room_id, scope=ROOM)

    async def on_join(self, session: Session, payload: Any) -> List[Outbound]:
        join = _parse(JoinPayload, payload)
        if join is None:
            return []

        outbound = []
        previous = (session.room_id, session.user_name) if session.joined else None
        members = self.registry.join(join.room_id, join.user_name, previous=previous)

        if previous is not None and previous[0] != join.room_id:
            outbound.append(self._presence(previous[0], self.registry.members(previous[0])))

        session.room_id = join.room_id
        session.user_name = join.user_name
        outbound.append(self._presence(join.room_id, members))

        document = self.registry.document(join.room_id)
        if document is not None:
            outbound.append(Outbound(
                event="roomState",
                data=document.model_dump(),
                room_id=join.room_id,
                scope=SENDER,
                sender=session.sid,
            ))
        return outbound

    async def on_code_change(self, session: Session, payload: Any) -> List[Outbound]:
        change = _parse(CodeChangePayload, payload)
        if change is None or not session.joined:
            return []
        self.registry.update_code(session.room_id, change.code)
        return [Outbound(
            event="codeUpdate", data=change.code, room_id=session.room_id, scope=OTHERS, sender=session.sid
        )]

    async def on_language_change(self, session: Session, payload: Any) -> List[Outbound]:
        change = _parse(LanguageChangePayload, payload)
        if change is None or not session.joined:
            return []
        self.registry.update_language(session.room_id, change.language)
        return [Outbound(
            event="languageUpdate", data=change.language, room_id=session.room_id, scope=ROOM, sender=session.sid
        )]

    async def on_typing(self, session: Session, payload: Any) -> List[Outbound]:
        if not session.joined:
            return []
        return [Outbound(
            event="userTyping", data=session.user_name, room_id=session.room_id, scope=OTHERS, sender=session.sid
        )]

    async def on_leave(self, session: Session, payload: Any) -> List[Outbound]:
        if not session.joined:
            return []
        room_id = session.room_id
        members = self.registry.leave(room_id, session.user_name)
        session.room_id = None
        session.user_name = None
        return [self._presence(room_id, members)]

    async def on_compile(self, session: Session, payload: Any) -> List[Outbound]:
        request = _parse(CompilePayload, payload)
        if request is None or not session.joined:
            return []
        # Captured before awaiting: the requester may leave mid-flight.
        room_id = session.room_id
        result = await self.gateway.execute(
            request.code, request.language, request.version, request.stdin
        )
        return [Outbound(
            event="codeResponse", data=result, room_id=room_id, scope=ROOM, sender=session.sid
        )]
