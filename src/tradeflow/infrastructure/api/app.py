"""FastAPI HTTP API: the role-scoped order endpoints.

The caller's identity comes from the ``X-Actor-Id`` and ``X-Actor-Role``
headers; an upstream gateway is expected to have authenticated it.
Every response is an envelope ``{"success", "message", ...}``; domain
errors are translated to status codes in one place.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tradeflow.application.add_order_note import AddOrderNoteHandler
from tradeflow.application.add_product import AddProductHandler, ListProductsHandler
from tradeflow.application.assign_transporter import AssignTransporterHandler
from tradeflow.application.change_order_status import ChangeOrderStatusHandler
from tradeflow.application.claim_return import ClaimReturnHandler
from tradeflow.application.create_order import CreateOrderHandler
from tradeflow.application.delete_order import DeleteOrderHandler
from tradeflow.application.dto import Actor, OrderItemSpec, ShippingAddressSpec
from tradeflow.application.list_orders import ListOpenReturnsHandler, ListOrdersHandler
from tradeflow.application.order_workflow import require_role
from tradeflow.application.set_order_pricing import SetOrderPricingHandler
from tradeflow.application.set_stock import AdjustStockHandler, SetStockHandler
from tradeflow.application.show_order import ShowOrderHandler
from tradeflow.application.transporter_status import TransporterStatusHandler
from tradeflow.domain.exceptions import (
    AlreadyAssigned,
    ConcurrencyConflict,
    DomainException,
    EntityNotFoundError,
    InsufficientStock,
    TransitionDenied,
    UnknownStatus,
    ValidationError,
)
from tradeflow.domain.model.status import ActorRole
from tradeflow.domain.repository.order_repository import OrderRepository
from tradeflow.domain.repository.product_repository import ProductRepository
from tradeflow.domain.service.order_state_machine import OrderStateMachine
from tradeflow.infrastructure import bootstrap
from tradeflow.infrastructure.api.schemas import (
    AssignTransporterRequest,
    CreateOrderRequest,
    CreateProductRequest,
    NoteRequest,
    PricingRequest,
    StatusChangeRequest,
    StockUpdateRequest,
    TransporterStatusRequest,
)
from tradeflow.infrastructure.config import Settings, get_settings
from tradeflow.infrastructure.logging_setup import configure_logging

logger = logging.getLogger(__name__)


# Map exception types to HTTP status codes; subclasses inherit their
# closest listed ancestor's code.
ERROR_STATUS_CODES: dict[type, int] = {
    ValidationError: 400,
    InsufficientStock: 400,
    TransitionDenied: 400,
    UnknownStatus: 400,
    AlreadyAssigned: 400,
    EntityNotFoundError: 404,
    ConcurrencyConflict: 409,
}


def status_code_for(exc: DomainException) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500


def _envelope(message: str, **payload: Any) -> dict[str, Any]:
    return {"success": True, "message": message, **payload}


# --- Dependencies ---


def current_actor(
    actor_id: str = Header(alias="X-Actor-Id"),
    actor_role: str = Header(alias="X-Actor-Role"),
) -> Actor:
    if not actor_id.strip():
        raise ValidationError("X-Actor-Id header is empty")
    return Actor(role=OrderStateMachine.parse_role(actor_role), id=actor_id.strip())


def order_repo(request: Request) -> OrderRepository:
    return request.app.state.order_repo


def product_repo(request: Request) -> ProductRepository:
    return request.app.state.product_repo


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="tradeflow API",
        description="Order lifecycle between wholesalers, suppliers and transporters",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.order_repo = bootstrap.order_repository(settings)
    app.state.product_repo = bootstrap.product_repository(settings)

    # --- Exception handlers ---

    @app.exception_handler(DomainException)
    async def domain_error_handler(request: Request, exc: DomainException) -> JSONResponse:
        """Map DomainException subclasses to appropriate HTTP responses."""
        return JSONResponse(
            status_code=status_code_for(exc),
            content={"success": False, "message": str(exc), "error": type(exc).__name__},
        )

    @app.exception_handler(RequestValidationError)
    async def request_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": f"{location}: {first.get('msg', 'invalid request')}",
                "error": "ValidationError",
            },
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content: dict[str, Any] = {
            "success": False,
            "message": "Internal server error",
            "error": "InternalError",
        }
        if settings.is_development:
            content["detail"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    # --- Health ---

    @app.get("/health")
    def health_check():
        return {"status": "ok", "environment": settings.environment}

    # --- Orders ---

    @app.post("/orders", status_code=201)
    def create_order(
        body: CreateOrderRequest,
        actor: Actor = Depends(current_actor),
        orders: OrderRepository = Depends(order_repo),
        products: ProductRepository = Depends(product_repo),
    ):
        require_role(actor, ActorRole.WHOLESALER)
        address = body.shipping_address
        dto = CreateOrderHandler(orders, products).handle(
            wholesaler_id=actor.id,
            supplier_id=body.supplier_id,
            item_specs=[OrderItemSpec(i.product_id, i.quantity) for i in body.items],
            shipping_address=ShippingAddressSpec(
                street=address.street,
                city=address.city,
                country=address.country,
                state=address.state,
                postal_code=address.postal_code,
            ),
            order_notes=body.order_notes,
        )
        return _envelope("Order created successfully", order=asdict(dto))

    @app.get("/orders")
    def list_orders(
        status: Optional[str] = None,
        actor: Actor = Depends(current_actor),
        orders: OrderRepository = Depends(order_repo),
    ):
        dtos = ListOrdersHandler(orders).handle(actor, status=status)
        return _envelope(
            f"{len(dtos)} order(s) found", orders=[asdict(d) for d in dtos]
        )

    @app.get("/orders/{order_id}")
    def get_order(
        order_id: int,
        actor: Actor = Depends(current_actor),
        orders: OrderRepository = Depends(order_repo),
    ):
        dto = ShowOrderHandler(orders).handle(order_id, actor)
        return _envelope("Order retrieved successfully", order=asdict(dto))

    @app.get("/orders/{order_id}/timeline")
    def get_timeline(
        order_id: int,
        actor: Actor = Depends(current_actor),
        orders: OrderRepository = Depends(order_repo),
    ):
        entries = ShowOrderHandler(orders).timeline(order_id, actor)
        return _envelope(
            "Order timeline retrieved successfully",
            timeline=[asdict(e) for e in entries],
        )

    @app.put("/orders/{order_id}/status")
    def change_status(
        order_id: int,
        body: StatusChangeRequest,
        actor: Actor = Depends(current_actor),
        orders: OrderRepository = Depends(order_repo),
        products: ProductRepository = Depends(product_repo),
    ):
        dto = ChangeOrderStatusHandler(orders, products).handle(
            order_id,
            actor,
            body.status,
            reason=body.reason,
            transporter_id=body.transporter_id,
            estimated_delivery_date=body.estimated_delivery_date,
        )
        return _envelope(f"Order status updated to {dto.status}", order=asdict(dto))

    @app.put("/orders/{order_id}/assign-transporter")
    def assign_transporter(
        order_id: int,
        body: AssignTransporterRequest,
        actor: Actor = Depends(current_actor),
        orders: OrderRepository = Depends(order_repo),
        products: ProductRepository = Depends(product_repo),
    ):
        dto = AssignTransporterHandler(orders, products).handle(
            order_id,
            actor,
            body.transporter_id,
            notes=body.notes,
            estimated_delivery_date=body.estimated_delivery_date,
        )
        return _envelope("Transporter assigned successfully", order=asdict(dto))

    @app.put("/orders/{order_id}/pricing")
    def set_pricing(
        order_id: int,
        body: PricingRequest,
        actor: Actor = Depends(current_actor),
        orders: OrderRepository = Depends(order_repo),
    ):
        dto = SetOrderPricingHandler(orders).handle(
            order_id, actor, discounts=str(body.discounts), tax_amount=str(body.tax_amount)
        )
        return _envelope("Order pricing updated", order=asdict(dto))

    @app.post("/orders/{order_id}/notes")
    def add_note(
        order_id: int,
        body: NoteRequest,
        actor: Actor = Depends(current_actor),
        orders: OrderRepository = Depends(order_repo),
    ):
        dto = AddOrderNoteHandler(orders).handle(order_id, actor, body.notes)
        return _envelope("Notes added successfully", order=asdict(dto))

    @app.delete("/orders/{order_id}")
    def delete_order(
        order_id: int,
        actor: Actor = Depends(current_actor),
        orders: OrderRepository = Depends(order_repo),
        products: ProductRepository = Depends(product_repo),
    ):
        DeleteOrderHandler(orders, products).handle(order_id, actor)
        return _envelope("Order deleted successfully")

    # --- Returns / transporters ---

    @app.get("/return-orders/available")
    def available_returns(
        actor: Actor = Depends(current_actor),
        orders: OrderRepository = Depends(order_repo),
    ):
        dtos = ListOpenReturnsHandler(orders).handle(actor)
        return _envelope(
            f"{len(dtos)} return order(s) available", orders=[asdict(d) for d in dtos]
        )

    @app.put("/return-orders/{order_id}/accept")
    def accept_return(
        order_id: int,
        actor: Actor = Depends(current_actor),
        orders: OrderRepository = Depends(order_repo),
        products: ProductRepository = Depends(product_repo),
    ):
        dto = ClaimReturnHandler(orders, products).handle(order_id, actor)
        return _envelope("Return order accepted successfully", order=asdict(dto))

    @app.put("/transporters/orders/{order_id}/status")
    def transporter_status(
        order_id: int,
        body: TransporterStatusRequest,
        actor: Actor = Depends(current_actor),
        orders: OrderRepository = Depends(order_repo),
        products: ProductRepository = Depends(product_repo),
    ):
        dto = TransporterStatusHandler(orders, products).handle(
            order_id, actor, body.status, notes=body.notes
        )
        return _envelope(f"Order status updated to {dto.status}", order=asdict(dto))

    # --- Products ---

    @app.post("/products", status_code=201)
    def create_product(
        body: CreateProductRequest,
        actor: Actor = Depends(current_actor),
        products: ProductRepository = Depends(product_repo),
    ):
        dto = AddProductHandler(products).handle(
            actor,
            name=body.name,
            selling_price=str(body.selling_price),
            production_price=str(body.production_price),
            quantity=body.quantity,
            min_order_quantity=body.min_order_quantity,
            low_stock_threshold=body.low_stock_threshold,
        )
        return _envelope("Product created successfully", product=asdict(dto))

    @app.get("/products")
    def list_products(
        actor: Actor = Depends(current_actor),
        products: ProductRepository = Depends(product_repo),
    ):
        supplier_id = actor.id if actor.role is ActorRole.SUPPLIER else None
        dtos = ListProductsHandler(products).handle(supplier_id=supplier_id)
        return _envelope(
            f"{len(dtos)} product(s) found", products=[asdict(d) for d in dtos]
        )

    @app.put("/products/{product_id}/stock")
    def update_stock(
        product_id: str,
        body: StockUpdateRequest,
        actor: Actor = Depends(current_actor),
        products: ProductRepository = Depends(product_repo),
    ):
        if body.operation == "set":
            dto = SetStockHandler(products).handle(product_id, actor, body.quantity)
        else:
            dto = AdjustStockHandler(products).handle(
                product_id, actor, body.operation, body.quantity
            )
        return _envelope("Stock updated successfully", product=asdict(dto))

    return app
