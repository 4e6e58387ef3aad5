import asyncio
import logging
from typing import Any, Coroutine, Dict, Iterable, List, Set
from uuid import uuid4

from fastapi import WebSocket

from collab_editor.models.session_models import OTHERS, SENDER, Outbound, Session

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks open sockets and fans out relay broadcasts.

    A connection is subscribed to whatever room its session currently names,
    so switching rooms never leaves it subscribed to two at once.
    """

    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}
        self.sessions: Dict[str, Session] = {}
        self.tasks: Set[asyncio.Task] = set()

    async def connect(self, websocket: WebSocket) -> Session:
        await websocket.accept()
        session = Session(sid=uuid4().hex)
        self.active_connections[session.sid] = websocket
        self.sessions[session.sid] = session
        logger.info(f"🔌 Connection {session.sid} opened | total: {len(self.active_connections)}")
        return session

    def disconnect(self, session: Session):
        self.active_connections.pop(session.sid, None)
        self.sessions.pop(session.sid, None)
        logger.info(f"🧹 Connection {session.sid} closed | total: {len(self.active_connections)}")

    def recipients(self, outbound: Outbound) -> List[str]:
        if outbound.scope == SENDER:
            return [outbound.sender] if outbound.sender in self.active_connections else []
        return [
            sid
            for sid, session in self.sessions.items()
            if session.room_id == outbound.room_id
            and not (outbound.scope == OTHERS and sid == outbound.sender)
        ]

    async def send(self, sid: str, event: str, data: Any):
        websocket = self.active_connections.get(sid)
        if websocket is None:
            return
        try:
            await websocket.send_json({"event": event, "data": data})
        except Exception as e:
            # The socket died under us; its own receive loop finishes cleanup.
            logger.warning(f"❌ Failed to send '{event}' to {sid}: {e}")
            self.active_connections.pop(sid, None)

    async def deliver(self, outbound: Iterable[Outbound]):
        for message in outbound:
            for sid in self.recipients(message):
                await self.send(sid, message.event, message.data)

    def spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)
        return task
