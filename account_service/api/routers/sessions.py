from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from account_service.api.deps import get_session_registry


logger = logging.getLogger(__name__)

router = APIRouter()


async def _forward(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        message = await queue.get()
        await websocket.send_text(message)


@router.websocket("/ws/{session_handle}")
async def session_socket(websocket: WebSocket, session_handle: str):
    registry = get_session_registry()
    await websocket.accept()
    queue = registry.subscribe(session_handle)
    sender = asyncio.create_task(_forward(websocket, queue))
    try:
        # inbound frames are ignored; receiving is how a disconnect is noticed
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("sessions: socket_disconnected")
    finally:
        sender.cancel()
        registry.unsubscribe(session_handle, queue)
