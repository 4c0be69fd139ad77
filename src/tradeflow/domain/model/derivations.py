"""Pure functions for the order's derived fields.

The order aggregate calls these on every read and mutation; nothing here
touches persistence, so each derivation can be tested in isolation.
"""

from __future__ import annotations

import random
import string
import time
from collections.abc import Iterable

from tradeflow.domain.model.value_objects import Money

_ORDER_NUMBER_ALPHABET = string.digits + string.ascii_uppercase


def compose_full_address(
    street: str,
    city: str,
    state: str,
    country: str,
    postal_code: str,
) -> str:
    """Join the non-blank address parts with ', '."""
    parts = [street, city, state, country, postal_code]
    return ", ".join(p.strip() for p in parts if p and p.strip())


def compute_total_amount(line_totals: Iterable[Money], currency: str = "USD") -> Money:
    result = Money.zero(currency)
    for amount in line_totals:
        result = result + amount
    return result


def compute_final_amount(total: Money, discounts: Money, tax_amount: Money) -> Money:
    """``total - discounts + tax``; raises ValidationError if that is negative."""
    return (total + tax_amount) - discounts


def generate_order_number(now_ms: int | None = None, rng: random.Random | None = None) -> str:
    """Build an order number like ``WO-1718000000000-7QX2K``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    rng = rng or random.SystemRandom()
    suffix = "".join(rng.choice(_ORDER_NUMBER_ALPHABET) for _ in range(5))
    return f"WO-{now_ms}-{suffix}"


def generate_sku(now_ms: int | None = None, rng: random.Random | None = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    rng = rng or random.SystemRandom()
    suffix = "".join(rng.choice(_ORDER_NUMBER_ALPHABET) for _ in range(9))
    return f"SUP-{now_ms}-{suffix}"
