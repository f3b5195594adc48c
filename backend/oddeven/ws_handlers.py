"""
Обработка сообщений WebSocket: create_game, join, submit_guess, withdraw,
запросы и подписка на игру. После каждого успешного изменения
состояние игры рассылается подписчикам.
"""
import json
import logging
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

from .auth import Badge, Proof
from .config import get_config
from .errors import GameError
from .escrow import Funds, check_amount
from .lobby import create_game, game_state_payload, get_game
from .ws_manager import manager

logger = logging.getLogger(__name__)


class BadRequest(ValueError):
    pass


def _parse_amount(value: Any) -> Decimal:
    try:
        amount = Decimal(str(value))
    except InvalidOperation as e:
        raise BadRequest(f"Invalid amount: {value!r}") from e
    try:
        return check_amount(amount)
    except ValueError as e:
        raise BadRequest(str(e)) from e


def _parse_currency(value: Any) -> str:
    if value is None:
        return get_config().currency
    if not isinstance(value, str) or not value.strip():
        raise BadRequest(f"Invalid currency: {value!r}")
    return value


def _parse_funds(data: Any) -> Funds:
    if not isinstance(data, dict) or "amount" not in data:
        raise BadRequest("funds must be an object with amount")
    return Funds(
        amount=_parse_amount(data["amount"]),
        currency=_parse_currency(data.get("currency")),
    )


def _parse_proof(data: Any) -> Proof:
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise BadRequest("proof must be a list of badges")
    return Proof(badges=tuple(Badge.from_dict(b) for b in data))


def _error(code: str, message: str) -> dict:
    return {"type": "error", "code": code, "message": message}


async def _dispatch(data: dict, conn_id: str) -> dict | None:
    """
    Выполняет одну операцию. Возвращает ответ отправителю;
    ошибки игры и некорректный ввод пробрасываются вызывающему.
    """
    t = data.get("type")
    if t == "create_game":
        stake = _parse_amount(data.get("stake", get_config().default_stake))
        if stake <= 0:
            raise BadRequest("stake must be positive")
        game, resource = create_game(stake, _parse_currency(data.get("currency")))
        manager.subscribe(conn_id, game.id)
        return {
            "type": "game_created",
            "game_id": game.id,
            "badge_resource": resource,
            "stake": str(stake),
            "currency": game.currency,
        }

    game_id = data.get("game_id")
    if not game_id:
        raise BadRequest("game_id is required")
    g = get_game(str(game_id))

    if t == "subscribe_game":
        manager.subscribe(conn_id, g.id)
        return game_state_payload(g)
    if t == "total_wagered":
        return {"type": "total_wagered", "game_id": g.id, "amount": str(g.total_wagered())}
    if t == "stake_amount":
        return {"type": "stake_amount", "game_id": g.id, "amount": str(g.stake_amount())}
    if t == "join":
        badge, change = g.join(_parse_funds(data.get("funds")))
        manager.subscribe(conn_id, g.id)
        await manager.broadcast_game(g.id, game_state_payload(g))
        return {"type": "joined", "game_id": g.id, "badge": badge.to_dict(), "change": change.to_dict()}
    if t == "submit_guess":
        guess = data.get("guess")
        proof = _parse_proof(data.get("proof"))
        g.submit_guess(proof, guess)
        await manager.broadcast_game(g.id, game_state_payload(g))
        return {"type": "guess_registered", "game_id": g.id, "guess": guess}
    if t == "withdraw":
        payout, message = g.withdraw(_parse_proof(data.get("proof")))
        await manager.broadcast_game(g.id, game_state_payload(g))
        return {"type": "payout", "game_id": g.id, "funds": payout.to_dict(), "message": message}
    raise BadRequest(f"Unknown message type: {t!r}")


async def handle_ws_message(ws: WebSocket, raw: str, conn_id: str) -> bool:
    """
    Обрабатывает одно сообщение клиента.
    Возвращает False если соединение нужно закрыть.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("WS: invalid JSON from %s: %s", conn_id, e)
        await manager.send_to(conn_id, _error("bad_request", "invalid JSON"))
        return True
    if not isinstance(data, dict):
        await manager.send_to(conn_id, _error("bad_request", "message must be an object"))
        return True
    logger.info("WS: msg from %s type=%s", conn_id, data.get("type"))
    try:
        reply = await _dispatch(data, conn_id)
    except GameError as e:
        logger.info("WS: %s rejected for %s: %s", data.get("type"), conn_id, e)
        reply = _error(e.code, str(e))
    except BadRequest as e:
        reply = _error("bad_request", str(e))
    if reply is not None:
        await manager.send_to(conn_id, reply)
    return True


async def ws_loop(ws: WebSocket) -> None:
    """Цикл приёма сообщений одного подключения."""
    conn_id = uuid.uuid4().hex
    try:
        await ws.accept()
        manager.connect(ws, conn_id)
        logger.info("WS: accepted conn_id=%s", conn_id)
        while True:
            msg = await ws.receive_text()
            if not await handle_ws_message(ws, msg, conn_id):
                break
    except WebSocketDisconnect as e:
        logger.info("WS: client disconnected code=%s reason=%s conn_id=%s", e.code, e.reason or "", conn_id)
    except Exception as e:
        logger.exception("WS: error conn_id=%s: %s", conn_id, e)
    finally:
        manager.disconnect(conn_id)
        logger.info("WS: disconnected conn_id=%s", conn_id)
