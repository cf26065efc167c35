"""WebSocket flux de modifications / Real-time change feed WebSocket."""

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from sqlalchemy.ext.asyncio import AsyncSession

from install_tracker.services.data_service import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()


class ChangeFeedManager:
    """Gestionnaire de connexions WebSocket / WebSocket connection manager."""

    def __init__(self):
        self.active_connections: list[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def broadcast(self, message: dict):
        """Envoyer a tous les clients connectes / Broadcast to all connected clients."""
        data = json.dumps(message, ensure_ascii=False)
        disconnected = []
        for connection in self.active_connections:
            try:
                await connection.send_text(data)
            except Exception:
                logger.debug("Dropping change feed client after send failure", exc_info=True)
                disconnected.append(connection)
        for conn in disconnected:
            self.disconnect(conn)


# Singleton global / Global singleton
manager = ChangeFeedManager()


PENDING_CHANGES_KEY = "pending_changes"


def queue_change(db: AsyncSession, table: str, event: str, row_id=None):
    """
    Mettre en attente une modification de ligne (INSERT, UPDATE, DELETE) / Queue a row change.
    Publiee par get_db une fois la transaction validee, ignoree en cas de rollback.
    Published by get_db once the transaction is committed, dropped on rollback.
    """
    db.info.setdefault(PENDING_CHANGES_KEY, []).append({
        "table": table,
        "event": event,
        "id": row_id,
        "timestamp": utc_now(),
    })


def discard_changes(db: AsyncSession):
    db.info.pop(PENDING_CHANGES_KEY, None)


async def publish_changes(db: AsyncSession):
    """Diffuser les modifications validees / Broadcast committed changes."""
    for message in db.info.pop(PENDING_CHANGES_KEY, []):
        await manager.broadcast(message)


@router.websocket("/ws/changes")
async def websocket_changes(websocket: WebSocket):
    """Abonnement aux modifications / Subscribe to row changes.

    Messages : {table, event, id, timestamp}, plus cache_clear cote admin.
    """
    await manager.connect(websocket)
    try:
        while True:
            # Garder la connexion ouverte, recevoir pings / Keep connection alive
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(websocket)
