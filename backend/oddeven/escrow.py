"""
Эскроу и пул бейджей одной игры: хранит общий банк ставок
и два заранее выпущенных бейджа до их выдачи участникам.
"""
import logging
from dataclasses import dataclass
from decimal import Context, Decimal, DecimalException, Inexact, InvalidOperation, localcontext

from .auth import Badge, BadgeMint, Proof
from .config import get_config

logger = logging.getLogger(__name__)

# Суммы в валюте: не больше 18 знаков после точки и меньше 10**40
AMOUNT_QUANTUM = Decimal(1).scaleb(-18)
MAX_AMOUNT = Decimal(10) ** 40


def _exact() -> Context:
    # 60 знаков вмещают сумму двух допустимых сумм без округления
    return Context(prec=60, traps=[Inexact, InvalidOperation])


def check_amount(amount: Decimal) -> Decimal:
    """Сумма, которую эскроу хранит без округления, иначе ValueError."""
    if not isinstance(amount, Decimal):
        raise ValueError(f"Amount must be a Decimal, got {amount!r}")
    if not amount.is_finite() or amount < 0 or amount >= MAX_AMOUNT:
        raise ValueError(f"Amount out of range: {amount}")
    try:
        amount.quantize(AMOUNT_QUANTUM, context=_exact())
    except DecimalException as e:
        raise ValueError(f"Amount {amount} has more than 18 decimal places") from e
    return amount


@dataclass(frozen=True)
class Funds:
    amount: Decimal
    currency: str

    def __post_init__(self):
        check_amount(self.amount)

    def split(self, amount: Decimal) -> tuple["Funds", "Funds"]:
        """Отделить amount. Возвращает (отделённое, остаток)."""
        if amount < 0 or amount > self.amount:
            raise ValueError(f"Cannot take {amount} from {self.amount} {self.currency}")
        with localcontext(_exact()):
            rest = self.amount - amount
        return (
            Funds(amount=amount, currency=self.currency),
            Funds(amount=rest, currency=self.currency),
        )

    def to_dict(self) -> dict:
        return {"amount": str(self.amount), "currency": self.currency}


class Vault:
    def __init__(self, currency: str):
        self.currency = currency
        self._amount = Decimal(0)

    @property
    def amount(self) -> Decimal:
        return self._amount

    def put(self, funds: Funds) -> None:
        if funds.currency != self.currency:
            raise ValueError(f"Vault holds {self.currency}, got {funds.currency}")
        with localcontext(_exact()):
            self._amount += funds.amount

    def take(self, amount: Decimal) -> Funds:
        if amount < 0 or amount > self._amount:
            raise ValueError(f"Cannot take {amount} from vault with {self._amount}")
        with localcontext(_exact()):
            self._amount -= amount
        return Funds(amount=amount, currency=self.currency)


class EscrowAdapter:
    """Хранение ставок и выдача/проверка бейджей для движка игры."""

    def __init__(self, currency: str | None = None, mint: BadgeMint | None = None):
        self.currency = currency or get_config().currency
        self._vault = Vault(self.currency)
        self._mint = mint or BadgeMint()
        self._pool: list[Badge] = []

    @property
    def badge_resource(self) -> str:
        return self._mint.resource

    def mint_two_identities(self) -> list[Badge]:
        badges = self._mint.mint_two()
        self._pool.extend(badges)
        logger.info("Minted badges %s for %s", [b.id for b in badges], self.badge_resource)
        return list(badges)

    def take_identity(self) -> Badge:
        """Первый ещё не выданный бейдж."""
        if not self._pool:
            raise LookupError(f"No badges left in {self.badge_resource}")
        self._pool.sort(key=lambda b: b.id)
        return self._pool.pop(0)

    def deposit(self, funds: Funds) -> None:
        self._vault.put(funds)

    def total_balance(self) -> Decimal:
        return self._vault.amount

    def withdraw(self, amount: Decimal) -> Funds:
        return self._vault.take(amount)

    def verify_identity(self, proof: Proof) -> Badge:
        return self._mint.verify(proof)
