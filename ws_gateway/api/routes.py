"""
WebSocket management router.

Thin router delegating to the ConnectionManager opened by the application
lifespan. Used for operational checks and to push messages from other
services without going through a client connection.
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ws_gateway.components.core.dependencies import get_manager
from ws_gateway.connection_manager import ConnectionManager

router = APIRouter(prefix="/websocket", tags=["websocket"])


class OutboundMessage(BaseModel):
    """Body of broadcast and send requests."""

    message: str = Field(..., description="Message text delivered to the client")
    type: str | None = Field(default=None, description="Optional message type")


@router.get("/status")
async def status(manager: ConnectionManager = Depends(get_manager)) -> dict[str, Any]:
    """Liveness plus the current Connection Set."""
    return {
        "status": "running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "connections": await manager.get_all_connections(),
    }


@router.get("/connections")
async def connections(manager: ConnectionManager = Depends(get_manager)) -> dict[str, Any]:
    ids = await manager.get_all_connections()
    return {"connections": ids, "count": len(ids)}


@router.get("/stats")
async def stats(manager: ConnectionManager = Depends(get_manager)) -> dict[str, Any]:
    return await manager.get_stats()


@router.post("/broadcast")
async def broadcast(
    body: OutboundMessage,
    manager: ConnectionManager = Depends(get_manager),
) -> dict[str, Any]:
    """Send a message to every open connection."""
    result = await manager.broadcast(body.model_dump())
    return {"message": "Broadcast sent", "result": result}


@router.post("/send/{connection_id}")
async def send(
    connection_id: str,
    body: OutboundMessage,
    manager: ConnectionManager = Depends(get_manager),
) -> dict[str, Any]:
    """Send a message to one connection."""
    success = await manager.send_to_connection(connection_id, body.model_dump())
    return {
        "message": "Message sent" if success else "Failed to send message",
        "success": success,
    }
