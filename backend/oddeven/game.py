"""
Движок игры «чёт или нечет»: машина фаз, таблица участников,
выбор победителя и выплата банка.

Фазы идут строго вперёд:
    ACCEPTING_PARTICIPANTS — ещё нет двух участников
    GUESS_COLLECTION — участники присылают числа
    WINNER_SELECTION — победитель вычисляется
    PAYOUT — победитель может забрать банк
    ENDED — банк выплачен
"""
import logging
import uuid
from dataclasses import dataclass, replace
from decimal import Decimal

from .auth import Badge, Proof
from .constants import MAX_PARTICIPANTS, UNSET_WINNER_ID, Phase, Side
from .errors import (
    GameFull,
    InsufficientStake,
    InvalidGuess,
    NotWinner,
    PhaseMismatch,
    UnknownParticipant,
)
from .escrow import EscrowAdapter, Funds, check_amount

logger = logging.getLogger(__name__)


@dataclass
class Participant:
    side: Side
    guess: int | None = None  # None — число ещё не прислано

    @property
    def has_guessed(self) -> bool:
        return self.guess is not None


def select_winner(participants: dict[int, Participant]) -> int:
    """
    Свёртка по участникам в порядке возрастания id бейджа: к сумме
    прибавляется число участника, и если сумма чётная — он кандидат.
    Побеждает последний такой кандидат. Если ни одна частичная сумма
    не чётная, возвращает UNSET_WINNER_ID.
    """
    winner = UNSET_WINNER_ID
    total = 0
    for badge_id in sorted(participants):
        total += participants[badge_id].guess
        if total % 2 == 0:
            winner = badge_id
    return winner


class Game:
    def __init__(self, stake_amount: Decimal, escrow: EscrowAdapter, game_id: str | None = None):
        if check_amount(stake_amount) <= 0:
            raise ValueError(f"Stake must be positive, got {stake_amount}")
        self.id = game_id or str(uuid.uuid4())
        self._stake_amount = stake_amount
        self._escrow = escrow
        self._phase = Phase.ACCEPTING_PARTICIPANTS
        self._participants: dict[int, Participant] = {}
        self._winner_id = UNSET_WINNER_ID
        self._paid_out = False

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def participants(self) -> dict[int, Participant]:
        # копии: число меняется только через submit_guess
        return {badge_id: replace(p) for badge_id, p in self._participants.items()}

    @property
    def winner_id(self) -> int:
        return self._winner_id

    @property
    def currency(self) -> str:
        return self._escrow.currency

    @property
    def badge_resource(self) -> str:
        return self._escrow.badge_resource

    def both_guessed(self) -> bool:
        if len(self._participants) != MAX_PARTICIPANTS:
            return False
        return all(p.has_guessed for p in self._participants.values())

    # ---- Переходы ----

    def _set_phase(self, phase: Phase) -> None:
        if phase != self._phase + 1:
            raise RuntimeError(f"Illegal transition {self._phase.name} -> {phase.name}")
        logger.info("Game %s: %s -> %s", self.id, self._phase.name, phase.name)
        self._phase = phase

    def advance(self) -> bool:
        """
        Один шаг машины фаз. Смотрит только условие выхода из текущей фазы;
        если оно не выполнено — ничего не меняет. Возвращает True при переходе.
        """
        if self._phase == Phase.ACCEPTING_PARTICIPANTS:
            if len(self._participants) == MAX_PARTICIPANTS:
                self._set_phase(Phase.GUESS_COLLECTION)
                return True
        elif self._phase == Phase.GUESS_COLLECTION:
            if self.both_guessed():
                self._set_phase(Phase.WINNER_SELECTION)
                return True
        elif self._phase == Phase.WINNER_SELECTION:
            winner = select_winner(self._participants)
            if winner != UNSET_WINNER_ID:
                self._winner_id = winner
                logger.info("Game %s: winner is badge #%s", self.id, winner)
                self._set_phase(Phase.PAYOUT)
                return True
        elif self._phase == Phase.PAYOUT:
            if self._paid_out:
                self._set_phase(Phase.ENDED)
                return True
        return False

    def _run_transitions(self) -> None:
        while self.advance():
            pass

    def _require_phase(self, phase: Phase, message: str) -> None:
        if self._phase != phase:
            logger.warning("Game %s: %s (phase %s)", self.id, message, self._phase.name)
            raise PhaseMismatch(message)

    # ---- Операции ----

    def join(self, stake: Funds) -> tuple[Badge, Funds]:
        """
        Войти в игру со ставкой. Вносит ровно stake_amount в эскроу,
        выдаёт бейдж участника и возвращает сдачу.
        """
        if len(self._participants) >= MAX_PARTICIPANTS:
            logger.warning("Game %s: join rejected, game is full", self.id)
            raise GameFull("This game is full!")
        self._require_phase(Phase.ACCEPTING_PARTICIPANTS, "Not accepting participants!")
        if stake.currency != self.currency or stake.amount < self._stake_amount:
            logger.warning("Game %s: join rejected, stake %s %s", self.id, stake.amount, stake.currency)
            raise InsufficientStake(
                f"Not enough {self.currency} wagered! Minimum is {self._stake_amount}"
            )

        badge = self._escrow.take_identity()
        deposit, change = stake.split(self._stake_amount)
        self._escrow.deposit(deposit)
        self._participants[badge.id] = Participant(side=badge.side)
        logger.info("Game %s: badge #%s (%s) joined", self.id, badge.id, badge.side.value)

        self._run_transitions()
        return badge, change

    def submit_guess(self, proof: Proof, guess: int) -> None:
        badge = self._escrow.verify_identity(proof)
        self._require_phase(Phase.GUESS_COLLECTION, "It's not the time to pick a number!")
        participant = self._participants.get(badge.id)
        if participant is None:
            raise UnknownParticipant(f"Badge #{badge.id} has not joined this game")
        if isinstance(guess, bool) or not isinstance(guess, int) or guess < 0:
            raise InvalidGuess(f"Guess must be a non-negative integer, got {guess!r}")

        participant.guess = guess
        logger.info("Your number %s was registered!", guess)

        self._run_transitions()
        if self._phase == Phase.WINNER_SELECTION:
            logger.warning("Game %s: no even partial sum, winner cannot be selected", self.id)

    def withdraw(self, proof: Proof) -> tuple[Funds, str]:
        """Победитель забирает весь банк одним переводом."""
        badge = self._escrow.verify_identity(proof)
        self._require_phase(Phase.PAYOUT, f"It's not time to withdraw {self.currency}!")
        if badge.id != self._winner_id:
            logger.warning("Game %s: withdrawal by non-winner badge #%s", self.id, badge.id)
            raise NotWinner(
                f"You can't withdraw {self.currency} because you didn't win. Better luck next time :)"
            )

        winnings = self._escrow.total_balance()
        payout = self._escrow.withdraw(winnings)
        self._paid_out = True
        self._run_transitions()
        return payout, f"You withdrew {winnings} {self.currency}. Congratulations!"

    # ---- Запросы ----

    def total_wagered(self) -> Decimal:
        amount = self._escrow.total_balance()
        logger.info("Total wagered amount is %s", amount)
        return amount

    def stake_amount(self) -> Decimal:
        logger.info("Wager amount is %s", self._stake_amount)
        return self._stake_amount
