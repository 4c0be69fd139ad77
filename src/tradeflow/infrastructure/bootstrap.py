"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from tradeflow.infrastructure.config import Settings, get_settings
from tradeflow.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from tradeflow.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)


def product_repository(settings: Settings | None = None) -> JsonProductRepository:
    settings = settings or get_settings()
    return JsonProductRepository(
        settings.products_file, lock_timeout=settings.lock_timeout_seconds
    )


def order_repository(settings: Settings | None = None) -> JsonOrderRepository:
    settings = settings or get_settings()
    return JsonOrderRepository(settings.orders_file)
