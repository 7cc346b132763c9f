"""Domain models for the working-capital dashboard.

Snapshots carry raw per-entity quarterly balances; turnover metrics are
derived from them and never stored on their own.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from .errors import InvalidSnapshot, UnknownEntity
from .quarters import FiscalQuarter, QuarterLike, parse

ZERO = Decimal("0")


class Entity(str, Enum):
    """Reporting entities; ``CONSOLIDATED`` is the group-level aggregate."""

    DOMESTIC = "국내(OC)"
    CHINA = "중국"
    HONG_KONG = "홍콩"
    US = "ST(미국)"
    OTHER = "기타"
    CONSOLIDATED = "연결"

    @property
    def is_consolidated(self) -> bool:
        return self is Entity.CONSOLIDATED

    @classmethod
    def parse(cls, value: "str | Entity") -> "Entity":
        if isinstance(value, Entity):
            return value
        text = str(value).strip() if value is not None else ""
        for member in cls:
            if text == member.value:
                return member
        alias = ENTITY_ALIASES.get(text.upper().replace(" ", "").replace("_", ""))
        if alias is not None:
            return alias
        raise UnknownEntity(value, [member.value for member in cls])

    @classmethod
    def business_units(cls) -> tuple["Entity", ...]:
        return tuple(member for member in cls if not member.is_consolidated)


ENTITY_ALIASES = {
    "DOMESTIC": Entity.DOMESTIC,
    "OC": Entity.DOMESTIC,
    "CHINA": Entity.CHINA,
    "HONGKONG": Entity.HONG_KONG,
    "US": Entity.US,
    "ST": Entity.US,
    "OTHER": Entity.OTHER,
    "CONSOLIDATED": Entity.CONSOLIDATED,
}


@dataclass(frozen=True)
class SnapshotKey:
    quarter: FiscalQuarter
    entity: Entity

    def __str__(self) -> str:
        return f"{self.quarter} / {self.entity.value}"


@dataclass(frozen=True)
class EntitySnapshot:
    """One entity's financial state for one fiscal quarter.

    ``quarterly_cogs``, ``ytd_revenue`` and ``ytd_cogs`` are ``None`` when the
    source had no figure; a zero there means a reported zero.
    """

    quarter: FiscalQuarter
    entity: Entity
    quarterly_revenue: Decimal
    receivables: Decimal
    inventory: Decimal
    payables: Decimal
    quarterly_cogs: Decimal | None = None
    ytd_revenue: Decimal | None = None
    ytd_cogs: Decimal | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.quarter, FiscalQuarter):
            object.__setattr__(self, "quarter", parse(self.quarter))
        if not isinstance(self.entity, Entity):
            object.__setattr__(self, "entity", Entity.parse(self.entity))
        for name in ("quarterly_revenue", "receivables", "inventory", "payables"):
            value = getattr(self, name)
            if value is None:
                raise InvalidSnapshot(f"{name} is required")
            if value < 0:
                raise InvalidSnapshot(f"{name} cannot be negative: {value}")
        for name in ("quarterly_cogs", "ytd_revenue", "ytd_cogs"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise InvalidSnapshot(f"{name} cannot be negative: {value}")

    @classmethod
    def create(
        cls,
        quarter: QuarterLike,
        entity: "str | Entity",
        quarterly_revenue: object,
        receivables: object,
        inventory: object,
        payables: object,
        quarterly_cogs: object = None,
        ytd_revenue: object = None,
        ytd_cogs: object = None,
    ) -> "EntitySnapshot":
        """Build a snapshot from loosely typed values (labels, ints, floats)."""
        return cls(
            quarter=parse(quarter),
            entity=Entity.parse(entity),
            quarterly_revenue=_to_decimal(quarterly_revenue),
            receivables=_to_decimal(receivables),
            inventory=_to_decimal(inventory),
            payables=_to_decimal(payables),
            quarterly_cogs=_to_optional_decimal(quarterly_cogs),
            ytd_revenue=_to_optional_decimal(ytd_revenue),
            ytd_cogs=_to_optional_decimal(ytd_cogs),
        )

    @property
    def key(self) -> SnapshotKey:
        return SnapshotKey(quarter=self.quarter, entity=self.entity)

    @property
    def working_capital(self) -> Decimal:
        return self.receivables + self.inventory - self.payables

    @classmethod
    def placeholder(cls, quarter: QuarterLike, entity: Entity) -> "EntitySnapshot":
        return cls(
            quarter=parse(quarter),
            entity=entity,
            quarterly_revenue=ZERO,
            receivables=ZERO,
            inventory=ZERO,
            payables=ZERO,
        )


@dataclass(frozen=True)
class TurnoverMetrics:
    dso: int
    dio: int
    dpo: int
    ccc: int
    annual_revenue: Decimal
    annual_cogs: Decimal
    revenue_basis: str
    cogs_basis: str

    @classmethod
    def zero(cls) -> "TurnoverMetrics":
        return cls(
            dso=0,
            dio=0,
            dpo=0,
            ccc=0,
            annual_revenue=ZERO,
            annual_cogs=ZERO,
            revenue_basis="none",
            cogs_basis="none",
        )


@dataclass(frozen=True)
class EnrichedSnapshot:
    snapshot: EntitySnapshot
    metrics: TurnoverMetrics

    @property
    def quarter(self) -> FiscalQuarter:
        return self.snapshot.quarter

    @property
    def entity(self) -> Entity:
        return self.snapshot.entity

    @property
    def key(self) -> SnapshotKey:
        return self.snapshot.key

    @property
    def working_capital(self) -> Decimal:
        return self.snapshot.working_capital


def _to_decimal(value: object) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _to_optional_decimal(value: object) -> Decimal | None:
    if value is None:
        return None
    return _to_decimal(value)
