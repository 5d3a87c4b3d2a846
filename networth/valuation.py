from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional, Union

from networth.depreciation_engine import DepreciableAsset, current_value

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class ValuedAsset:
    asset: DepreciableAsset
    current_value: Decimal
    accumulated_depreciation: Decimal


@dataclass(frozen=True)
class ValuationSummary:
    asset_count: int
    total_purchase_price: Decimal
    total_current_value: Decimal
    total_depreciation: Decimal


def value_asset(
    asset: DepreciableAsset,
    now: Optional[Union[date, datetime]] = None,
) -> ValuedAsset:
    evaluated_at = now if now is not None else _utc_now()
    value = current_value(asset, evaluated_at)
    return ValuedAsset(
        asset=asset,
        current_value=value,
        accumulated_depreciation=_coerce_amount(asset.purchase_price) - value,
    )


def value_assets(
    assets: Iterable[DepreciableAsset],
    now: Optional[Union[date, datetime]] = None,
) -> List[ValuedAsset]:
    """Value every asset against one shared instant, keeping input order."""
    evaluated_at = now if now is not None else _utc_now()
    valued = [value_asset(asset, evaluated_at) for asset in assets]
    logger.debug("Valued %d depreciating assets at %s", len(valued), evaluated_at)
    return valued


def summarize_valuations(valued: Iterable[ValuedAsset]) -> ValuationSummary:
    count = 0
    total_purchase_price = ZERO
    total_current_value = ZERO
    total_depreciation = ZERO
    for entry in valued:
        count += 1
        total_purchase_price += _coerce_amount(entry.asset.purchase_price)
        total_current_value += entry.current_value
        total_depreciation += entry.accumulated_depreciation
    return ValuationSummary(
        asset_count=count,
        total_purchase_price=total_purchase_price,
        total_current_value=total_current_value,
        total_depreciation=total_depreciation,
    )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_amount(amount: Decimal) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))
