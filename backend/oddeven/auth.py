"""
Бейджи участников и проверка предъявленных доказательств (proof).
Бейдж подписан HMAC-SHA256 по адресу ресурса и id — подделать или
перенести его в другую игру нельзя.
"""
import hashlib
import hmac
import uuid
from dataclasses import dataclass

from .config import get_config
from .constants import BADGE_SPECS, Side
from .errors import InvalidIdentity


@dataclass(frozen=True)
class Badge:
    resource: str
    id: int
    side: Side
    name: str
    signature: str

    def to_dict(self) -> dict:
        return {
            "resource": self.resource,
            "id": self.id,
            "side": self.side.value,
            "name": self.name,
            "signature": self.signature,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Badge":
        """Разбор бейджа из JSON. Некорректные поля — InvalidIdentity."""
        try:
            return cls(
                resource=str(data["resource"]),
                id=int(data["id"]),
                side=Side(data["side"]),
                name=str(data.get("name", "")),
                signature=str(data["signature"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidIdentity(f"Malformed badge: {e}") from e


@dataclass(frozen=True)
class Proof:
    """Предъявление бейджей без передачи владения."""
    badges: tuple[Badge, ...]

    @property
    def amount(self) -> int:
        return len(self.badges)

    @classmethod
    def of(cls, *badges: Badge) -> "Proof":
        return cls(badges=tuple(badges))


class BadgeMint:
    """Выпускает ровно два бейджа одного ресурса и проверяет их."""

    def __init__(self, secret: str | None = None):
        self.resource = f"resource_{uuid.uuid4().hex}"
        key = (secret or get_config().badge_secret).encode()
        self._key = hmac.new(b"OddEvenBadge", key, hashlib.sha256).digest()
        self._minted = False

    def _sign(self, badge_id: int, side: Side) -> str:
        message = f"{self.resource}:{badge_id}:{side.value}".encode()
        return hmac.new(self._key, message, hashlib.sha256).hexdigest()

    def mint_two(self) -> list[Badge]:
        if self._minted:
            raise RuntimeError(f"Badges of {self.resource} are already minted")
        self._minted = True
        return [
            Badge(
                resource=self.resource,
                id=spec["id"],
                side=spec["side"],
                name=spec["name"],
                signature=self._sign(spec["id"], spec["side"]),
            )
            for spec in BADGE_SPECS
        ]

    def verify(self, proof: Proof) -> Badge:
        """
        Проверяет proof: ровно один бейдж, ресурс этой игры, подпись верна.
        Возвращает подтверждённый бейдж, иначе InvalidIdentity.
        """
        if proof.amount != 1:
            raise InvalidIdentity("Invalid badge amount provided")
        badge = proof.badges[0]
        if badge.resource != self.resource:
            raise InvalidIdentity("Wrong badge provided")
        calculated = self._sign(badge.id, badge.side)
        if not hmac.compare_digest(calculated, badge.signature):
            raise InvalidIdentity("Wrong badge provided")
        return badge
