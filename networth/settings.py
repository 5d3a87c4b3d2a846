from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

FUTURE_PURCHASE_CLAMP = "clamp"
FUTURE_PURCHASE_REJECT = "reject"
FUTURE_PURCHASE_POLICIES = {FUTURE_PURCHASE_CLAMP, FUTURE_PURCHASE_REJECT}
DEFAULT_FUTURE_PURCHASE_POLICY = FUTURE_PURCHASE_CLAMP


def normalize_future_purchase_policy(value: str) -> str:
    normalized = value.strip().lower()
    if normalized not in FUTURE_PURCHASE_POLICIES:
        raise ValueError("Future purchase policy must be 'clamp' or 'reject'.")
    return normalized


def get_future_purchase_policy() -> str:
    """How a purchase date later than the evaluation instant is treated.

    ``clamp`` measures elapsed time as an absolute difference, ``reject``
    makes parameter validation fail for such records.
    """
    raw = os.getenv("NETWORTH_FUTURE_PURCHASE_POLICY", DEFAULT_FUTURE_PURCHASE_POLICY)
    try:
        return normalize_future_purchase_policy(raw)
    except ValueError:
        logger.warning(
            "Ignoring invalid NETWORTH_FUTURE_PURCHASE_POLICY=%r, using %s",
            raw,
            DEFAULT_FUTURE_PURCHASE_POLICY,
        )
        return DEFAULT_FUTURE_PURCHASE_POLICY
