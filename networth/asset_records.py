from __future__ import annotations

import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from networth.depreciation_engine import (
    DepreciableAsset,
    DepreciationMethod,
    ValidationError,
    validate_parameters,
)

logger = logging.getLogger(__name__)

CLEARED_WHEN_FALSY = ("useful_life", "rate", "salvage_value")
NOT_CLEARABLE = (
    "name",
    "purchase_price",
    "purchase_date",
    "depreciation_method",
    "is_depreciation_enabled",
)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _parse_purchase_date(value):
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        try:
            return datetime.combine(date.fromisoformat(value.strip()), time.min)
        except ValueError:
            return value
    return value


OptionalAmount = Annotated[Decimal | None, BeforeValidator(_blank_to_none)]
OptionalYears = Annotated[int | None, BeforeValidator(_blank_to_none)]
PurchaseDate = Annotated[datetime, BeforeValidator(_parse_purchase_date)]


class DepreciatingAssetPayload(BaseModel):
    """A depreciating asset as submitted for creation.

    Keys may be snake_case or camelCase. Blank optional numbers are read as
    missing, so form submissions can be passed through unchanged.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    type: str | None = None
    purchase_price: Decimal
    purchase_date: PurchaseDate
    depreciation_method: str = DepreciationMethod.NONE
    useful_life: OptionalYears = None
    rate: OptionalAmount = None
    salvage_value: OptionalAmount = None
    is_depreciation_enabled: bool = True
    current_value: OptionalAmount = None
    purchase_currency: str | None = None
    notes: str | None = None

    @classmethod
    def validate_payload(
        cls, payload: "DepreciatingAssetPayload"
    ) -> "DepreciatingAssetPayload":
        payload.name = payload.name.strip()
        if not payload.name:
            raise ValidationError("Asset name required.")
        payload.type = payload.type.strip() if payload.type else None
        payload.depreciation_method = DepreciationMethod.validate(payload.depreciation_method)
        if payload.purchase_currency is not None:
            payload.purchase_currency = payload.purchase_currency.strip().upper() or None
        payload.notes = payload.notes.strip() if payload.notes else None
        validate_parameters(payload.to_asset())
        return payload

    def to_asset(self) -> DepreciableAsset:
        return DepreciableAsset(
            purchase_price=self.purchase_price,
            purchase_date=self.purchase_date,
            depreciation_method=self.depreciation_method,
            useful_life=self.useful_life,
            rate=self.rate,
            salvage_value=self.salvage_value,
            is_depreciation_enabled=self.is_depreciation_enabled,
            current_value=self.current_value,
        )


class DepreciatingAssetUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = None
    type: str | None = None
    purchase_price: Decimal | None = None
    purchase_date: PurchaseDate | None = None
    depreciation_method: str | None = None
    useful_life: OptionalYears = None
    rate: OptionalAmount = None
    salvage_value: OptionalAmount = None
    is_depreciation_enabled: bool | None = None
    current_value: OptionalAmount = None
    purchase_currency: str | None = None
    notes: str | None = None


def apply_update(
    existing: DepreciatingAssetPayload, update: DepreciatingAssetUpdate
) -> DepreciatingAssetPayload:
    """Merge the fields present on ``update`` into ``existing`` and revalidate.

    A zero or blank useful life, rate or salvage value clears the stored
    value instead of keeping the previous one.
    """
    changes = {
        field_name: value
        for field_name, value in update.model_dump(exclude_unset=True).items()
        if not (field_name in NOT_CLEARABLE and value is None)
    }
    for field_name in CLEARED_WHEN_FALSY:
        if field_name in changes and not changes[field_name]:
            changes[field_name] = None
    logger.debug("Applying asset update to fields: %s", sorted(changes))
    merged = existing.model_copy(update=changes)
    return DepreciatingAssetPayload.validate_payload(merged)
