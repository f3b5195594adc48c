"""
Менеджер WebSocket: подключения по conn_id, подписки на игры
и рассылка состояния игры подписчикам.
"""
import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class Connection:
    def __init__(self, ws: WebSocket, conn_id: str):
        self.ws = ws
        self.conn_id = conn_id


class WSManager:
    def __init__(self):
        self._by_id: dict[str, Connection] = {}
        self._subscribers: dict[str, set[str]] = defaultdict(set)

    def connect(self, ws: WebSocket, conn_id: str) -> Connection:
        conn = Connection(ws, conn_id)
        self._by_id[conn_id] = conn
        return conn

    def disconnect(self, conn_id: str) -> None:
        self._by_id.pop(conn_id, None)
        for subs in self._subscribers.values():
            subs.discard(conn_id)

    def subscribe(self, conn_id: str, game_id: str) -> None:
        self._subscribers[game_id].add(conn_id)

    async def send_to(self, conn_id: str, payload: dict[str, Any]) -> bool:
        conn = self._by_id.get(conn_id)
        if not conn:
            return False
        try:
            await conn.ws.send_json(payload)
            return True
        except Exception as e:
            logger.warning("send_to %s: %s", conn_id, e)
            return False

    async def broadcast_game(self, game_id: str, payload: dict[str, Any]) -> None:
        dead = []
        for conn_id in list(self._subscribers.get(game_id, ())):
            if not await self.send_to(conn_id, payload):
                dead.append(conn_id)
        for conn_id in dead:
            self.disconnect(conn_id)


manager = WSManager()
