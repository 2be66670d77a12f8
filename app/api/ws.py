"""
WebSocket manager for live availability updates
"""

import json
import logging
from datetime import date
from typing import Dict, List
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.services.availability_service import AvailabilityService
from app.services.repositories import UserRepo

logger = logging.getLogger(__name__)

class WebSocketManager:
    """Manages WebSocket connections, one room per booking date"""

    def __init__(self):
        # ISO date -> list of websockets
        self.active_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, room: str):
        """Accept WebSocket connection and add it to a date room"""
        await websocket.accept()

        if room not in self.active_connections:
            self.active_connections[room] = []

        self.active_connections[room].append(websocket)
        logger.info(f"WebSocket connected to {room}. Total connections: {len(self.active_connections[room])}")

    def disconnect(self, websocket: WebSocket, room: str):
        """Remove WebSocket connection from a date room"""
        if room in self.active_connections:
            try:
                self.active_connections[room].remove(websocket)
                logger.info(f"WebSocket disconnected from {room}. Remaining connections: {len(self.active_connections[room])}")

                # Clean up empty rooms
                if not self.active_connections[room]:
                    del self.active_connections[room]
            except ValueError:
                # WebSocket was not in the list
                pass

    async def send_personal_message(self, message: dict, websocket: WebSocket):
        """Send message to specific WebSocket"""
        try:
            await websocket.send_text(json.dumps(message))
        except Exception as e:
            logger.error(f"Error sending personal message: {e}")

    async def broadcast(self, room: str, message: dict):
        """Broadcast message to all WebSockets watching a date"""
        if room not in self.active_connections:
            return

        # Create list copy to avoid modification during iteration
        connections = self.active_connections[room].copy()

        disconnected = []
        for websocket in connections:
            try:
                await websocket.send_text(json.dumps(message))
            except Exception as e:
                logger.error(f"Error broadcasting to websocket: {e}")
                disconnected.append(websocket)

        for websocket in disconnected:
            self.disconnect(websocket, room)

    def get_connection_count(self, room: str) -> int:
        return len(self.active_connections.get(room, []))


# Router for WebSocket endpoints
router = APIRouter()

@router.websocket("/availability/{booking_date}")
async def availability_socket(websocket: WebSocket, booking_date: date):
    """Push the availability of one date whenever a booking on it changes"""
    store = websocket.app.state.store
    manager: WebSocketManager = websocket.app.state.websocket_manager
    room = booking_date.isoformat()

    db = store.session()
    try:
        user_id = websocket.session.get("user_id")
        if user_id is None or UserRepo.get(db, user_id) is None:
            await websocket.close(code=4401, reason="Not authenticated")
            return

        await manager.connect(websocket, room)
        await manager.send_personal_message({
            "type": "availability_update",
            "date": room,
            "tables": AvailabilityService.snapshot(db, booking_date)
        }, websocket)
    finally:
        db.close()

    try:
        while True:
            data = await websocket.receive_text()
            try:
                client_message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON received from WebSocket: {data}")
                continue

            # Handle heartbeat/ping
            if client_message.get("type") == "ping":
                await manager.send_personal_message({
                    "type": "pong",
                    "timestamp": client_message.get("timestamp")
                }, websocket)
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket, room)
