"""
Реестр игр (in-memory): создание партии с выпуском бейджей,
поиск по id и снимок состояния для клиентов.
"""
import logging
from decimal import Decimal

from .constants import BADGE_RESOURCE_NAME, BADGE_RESOURCE_SYMBOL
from .errors import GameNotFound
from .escrow import EscrowAdapter
from .game import Game

logger = logging.getLogger(__name__)

# Глобальное состояние (in-memory)
_games: dict[str, Game] = {}


def create_game(stake_amount: Decimal, currency: str | None = None) -> tuple[Game, str]:
    """
    Создать игру с фиксированной ставкой. Выпускает два бейджа в пул игры.
    Возвращает игру и адрес ресурса бейджей.
    """
    escrow = EscrowAdapter(currency=currency)
    escrow.mint_two_identities()
    game = Game(stake_amount, escrow)
    _games[game.id] = game
    logger.info(
        "Created game %s (%s/%s), stake %s %s",
        game.id, BADGE_RESOURCE_NAME, BADGE_RESOURCE_SYMBOL, stake_amount, escrow.currency,
    )
    return game, escrow.badge_resource


def get_game(game_id: str) -> Game:
    g = _games.get(game_id)
    if g is None:
        raise GameNotFound(f"Game {game_id} not found")
    return g


def list_games() -> list[Game]:
    return list(_games.values())


def clear_games() -> None:
    _games.clear()


def game_state_payload(g: Game) -> dict:
    """Собрать payload game_state для отправки клиенту."""
    return {
        "type": "game_state",
        "game_id": g.id,
        "phase": g.phase.name,
        "stake": str(g.stake_amount()),
        "currency": g.currency,
        "badge_resource": g.badge_resource,
        "total_wagered": str(g.total_wagered()),
        "participants": [
            {"id": badge_id, "side": p.side.value, "has_guessed": p.has_guessed}
            for badge_id, p in sorted(g.participants.items())
        ],
        "winner_id": g.winner_id or None,
    }
