# collab_editor/code_editor/router.py

import json
import logging

from fastapi import APIRouter, HTTPException, Request, WebSocket, WebSocketDisconnect

from collab_editor.code_editor.manager import ConnectionManager
from collab_editor.code_editor.relay import CLIENT_EVENTS, Relay
from collab_editor.models.session_models import Session
from collab_editor.models.room_models import Room

logger = logging.getLogger(__name__)

router = APIRouter()


async def _relay_compile(manager: ConnectionManager, relay: Relay, session: Session, payload):
    outbound = await relay.dispatch(session, "compileCode", payload)
    await manager.deliver(outbound)


@router.websocket("/ws")
async def editor_socket(websocket: WebSocket):
    manager: ConnectionManager = websocket.app.state.manager
    relay: Relay = websocket.app.state.relay

    session = await manager.connect(websocket)
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            data = frame.get("text")
            if data is None:
                logger.warning(f"⚠️ Dropping binary frame from {session.sid}")
                continue
            try:
                message = json.loads(data)
            except ValueError:
                logger.warning(f"⚠️ Dropping non-JSON frame from {session.sid}")
                continue
            if not isinstance(message, dict):
                logger.warning(f"⚠️ Dropping non-object frame from {session.sid}")
                continue

            event = message.get("event")
            payload = message.get("data")
            if event not in CLIENT_EVENTS:
                logger.warning(f"⚠️ Unknown event '{event}' from {session.sid}")
                continue

            logger.debug(f"📩 Received '{event}' from {session.sid}")
            if event == "compileCode":
                # Execution can take seconds; keep serving this socket meanwhile.
                # The task gets a copy so the target room is fixed now.
                manager.spawn(_relay_compile(manager, relay, session.model_copy(), payload))
                continue
            await manager.deliver(await relay.dispatch(session, event, payload))

    except WebSocketDisconnect:
        logger.info(f"Connection {session.sid} disconnected")
    finally:
        manager.disconnect(session)
        await manager.deliver(await relay.dispatch(session, "disconnect"))


@router.get("/api/rooms/{room_id}", response_model=Room)
async def get_room(room_id: str, request: Request):
    registry = request.app.state.registry
    if not registry.has_room(room_id):
        raise HTTPException(status_code=404, detail="Room not found")
    return registry.snapshot(room_id)
