from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from networth.settings import (
    FUTURE_PURCHASE_REJECT,
    get_future_purchase_policy,
    normalize_future_purchase_policy,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
DAYS_PER_YEAR = Decimal("365.25")
SECONDS_PER_DAY = Decimal("86400")
MICROSECONDS_PER_DAY = Decimal("86400000000")

STRAIGHT_LINE_PARAMETER_ERROR = (
    "Useful life is required and must be greater than 0 for STRAIGHT_LINE depreciation"
)
PERCENTAGE_PARAMETER_ERROR = (
    "Depreciation rate is required and must be greater than 0 for PERCENTAGE depreciation"
)


class ValidationError(ValueError):
    """Raised when a depreciable asset carries unusable method parameters."""


class DepreciationMethod:
    STRAIGHT_LINE = "STRAIGHT_LINE"
    PERCENTAGE = "PERCENTAGE"
    NONE = "NONE"
    values = {STRAIGHT_LINE, PERCENTAGE, NONE}

    @classmethod
    def validate(cls, value: str) -> str:
        if not isinstance(value, str):
            raise ValidationError("Depreciation method required.")
        normalized = value.strip().upper()
        if normalized not in cls.values:
            raise ValidationError(f"Unsupported depreciation method: {value}")
        return normalized


@dataclass(frozen=True)
class DepreciableAsset:
    purchase_price: Decimal
    purchase_date: Union[date, datetime]
    depreciation_method: str = DepreciationMethod.NONE
    useful_life: Optional[int] = None
    rate: Optional[Decimal] = None
    salvage_value: Optional[Decimal] = None
    is_depreciation_enabled: bool = True
    current_value: Optional[Decimal] = None


@dataclass(frozen=True)
class StraightLine:
    useful_life: int

    def __post_init__(self) -> None:
        if self.useful_life <= 0:
            raise ValidationError(STRAIGHT_LINE_PARAMETER_ERROR)

    def value_at(self, purchase_price: Decimal, years: Decimal) -> Decimal:
        # Not capped at the useful life; the salvage floor takes over instead.
        annual_depreciation = purchase_price / Decimal(self.useful_life)
        return purchase_price - annual_depreciation * years


@dataclass(frozen=True)
class Percentage:
    rate: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "rate", _coerce_amount(self.rate))
        if self.rate <= ZERO:
            raise ValidationError(PERCENTAGE_PARAMETER_ERROR)

    def value_at(self, purchase_price: Decimal, years: Decimal) -> Decimal:
        if years == ZERO:
            return purchase_price
        factor = ONE - self.rate / HUNDRED
        if factor <= ZERO:
            return ZERO
        return purchase_price * factor**years


@dataclass(frozen=True)
class NoDepreciation:
    def value_at(self, purchase_price: Decimal, years: Decimal) -> Decimal:
        return purchase_price


DepreciationSchedule = Union[StraightLine, Percentage, NoDepreciation]


def resolve_schedule(asset: DepreciableAsset) -> DepreciationSchedule:
    """Build the schedule variant for a flat asset record.

    Raises ValidationError when the method is unknown or its required
    parameter is missing or non-positive.
    """
    method = DepreciationMethod.validate(asset.depreciation_method)
    if method == DepreciationMethod.STRAIGHT_LINE:
        if asset.useful_life is None:
            raise ValidationError(STRAIGHT_LINE_PARAMETER_ERROR)
        useful_life = _coerce_amount(asset.useful_life)
        if useful_life != useful_life.to_integral_value():
            raise ValidationError("Useful life must be a whole number of years.")
        return StraightLine(useful_life=int(useful_life))
    if method == DepreciationMethod.PERCENTAGE:
        if asset.rate is None:
            raise ValidationError(PERCENTAGE_PARAMETER_ERROR)
        return Percentage(rate=asset.rate)
    return NoDepreciation()


def validate_parameters(
    asset: DepreciableAsset,
    *,
    now: Optional[Union[date, datetime]] = None,
    future_purchase_policy: Optional[str] = None,
) -> None:
    if future_purchase_policy is not None:
        policy = normalize_future_purchase_policy(future_purchase_policy)
    else:
        policy = get_future_purchase_policy()
    if policy == FUTURE_PURCHASE_REJECT:
        reference = _to_datetime(now) if now is not None else datetime.now(timezone.utc)
        if _to_datetime(asset.purchase_date) > reference:
            raise ValidationError("Purchase date cannot be in the future.")

    if not asset.is_depreciation_enabled:
        return
    resolve_schedule(asset)


def years_elapsed(
    purchase_date: Union[date, datetime], now: Union[date, datetime]
) -> Decimal:
    start = _to_datetime(purchase_date)
    end = _to_datetime(now)
    if end < start:
        logger.debug("Purchase date %s is after %s, using absolute elapsed time", start, end)
    delta = abs(end - start)
    days = (
        Decimal(delta.days)
        + Decimal(delta.seconds) / SECONDS_PER_DAY
        + Decimal(delta.microseconds) / MICROSECONDS_PER_DAY
    )
    return days / DAYS_PER_YEAR


def current_value(asset: DepreciableAsset, now: Union[date, datetime]) -> Decimal:
    """Book value of ``asset`` at ``now``, rounded to cents and floored at salvage."""
    if not asset.is_depreciation_enabled:
        if asset.current_value is not None:
            return _coerce_amount(asset.current_value)
        return _coerce_amount(asset.purchase_price)

    purchase_price = _coerce_amount(asset.purchase_price)
    years = years_elapsed(asset.purchase_date, now)
    value = _lenient_schedule(asset).value_at(purchase_price, years)

    floor = ZERO
    if asset.salvage_value is not None:
        floor = max(_coerce_amount(asset.salvage_value), ZERO)
    return max(_round_currency(value), floor)


def _lenient_schedule(asset: DepreciableAsset) -> DepreciationSchedule:
    try:
        return resolve_schedule(asset)
    except ValidationError as exc:
        logger.warning("Valuing asset without depreciation: %s", exc)
        return NoDepreciation()


def _to_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        moment = value
    else:
        moment = datetime.combine(value, time.min)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _round_currency(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _coerce_amount(amount: Decimal) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))
