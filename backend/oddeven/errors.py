"""
Ошибки игры. Все обнаруживаются до любых изменений состояния;
code уходит клиенту в сообщении об ошибке.
"""


class GameError(Exception):
    code = "game_error"


class PhaseMismatch(GameError):
    code = "phase_mismatch"


class InsufficientStake(GameError):
    code = "insufficient_stake"


class GameFull(GameError):
    code = "game_full"


class InvalidIdentity(GameError):
    code = "invalid_identity"


class UnknownParticipant(GameError):
    code = "unknown_participant"


class NotWinner(GameError):
    code = "not_winner"


class InvalidGuess(GameError):
    code = "invalid_guess"


class GameNotFound(GameError):
    code = "game_not_found"
