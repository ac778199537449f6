"""Device session endpoints: cart building and checkout."""
import logging
from decimal import Decimal
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from teapos.core.dependencies import (
    get_catalog_repository,
    get_order_service,
    get_session_registry,
)
from teapos.services.catalog.base import Money
from teapos.services.catalog.repository import CatalogRepository
from teapos.services.checkout.payment import PaymentMethod
from teapos.services.checkout.state import CheckoutState
from teapos.services.ordering.builder import build_line_item
from teapos.services.ordering.models import OrderLineItem
from teapos.services.persistence.orders import OrderPersistenceService
from teapos.services.session.manager import PosSession, SessionRegistry

router = APIRouter(prefix="/api/sessions")
logger = logging.getLogger(__name__)


class OpenSessionRequest(BaseModel):
    """Open session request."""
    device_id: str


class AddItemRequest(BaseModel):
    """Customized item to add to the cart."""
    menu_item_id: str
    size_id: Optional[str] = None
    sugar: Optional[str] = None
    ice: Optional[str] = None
    topping_ids: List[str] = []
    quantity: int = 1


class UpdateQuantityRequest(BaseModel):
    quantity: int = Field(ge=1)


class CheckoutRequest(BaseModel):
    """Checkout request. ``cash_received`` is required for cash."""
    payment_method: PaymentMethod
    cash_received: Optional[Union[float, str]] = None


class CartResponse(BaseModel):
    """Cart contents, totals and the checkout state."""
    device_id: str
    items: List[OrderLineItem]
    subtotal: Money
    tax: Money
    total: Money
    checkout: CheckoutState


class CheckoutPreview(BaseModel):
    """What the payment screen needs before the button is pressed."""
    state: CheckoutState
    total: Money
    can_checkout: bool
    change_due: Optional[Money] = None


def _cart_response(session: PosSession) -> CartResponse:
    cart = session.cart
    return CartResponse(
        device_id=session.device_id,
        items=cart.items,
        subtotal=cart.subtotal(),
        tax=cart.tax(),
        total=cart.total(),
        checkout=session.checkout.state,
    )


@router.post("", response_model=CartResponse)
async def open_session(
    request: OpenSessionRequest, registry: SessionRegistry = Depends(get_session_registry)
):
    """Open (or re-open) the session for a device, restoring its saved cart."""
    return _cart_response(registry.open(request.device_id))


@router.delete("/{device_id}")
async def close_session(device_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    registry.close(device_id)
    return {"success": True}


@router.get("/{device_id}/cart", response_model=CartResponse)
async def get_cart(device_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    return _cart_response(registry.get(device_id))


@router.post("/{device_id}/cart/items", response_model=CartResponse)
async def add_cart_item(
    device_id: str,
    request: AddItemRequest,
    registry: SessionRegistry = Depends(get_session_registry),
    catalog: CatalogRepository = Depends(get_catalog_repository),
):
    """Build a line item from catalog ids and append it to the cart."""
    session = registry.get(device_id)
    session.ensure_cart_editable()

    menu_item = await catalog.get_menu_item(request.menu_item_id)
    size = await catalog.get_size(request.size_id) if request.size_id else None
    toppings = await catalog.get_toppings(request.topping_ids)
    item = build_line_item(
        menu_item,
        size,
        await catalog.load_modifier_levels(),
        sugar=request.sugar,
        ice=request.ice,
        toppings=toppings,
        quantity=request.quantity,
    )
    # Refused by the cart itself if a checkout began during the lookups
    session.cart.add(item)
    logger.info(f"[CART] {device_id}: added {item.name} ({item.modifiers_summary}) {item.price}")
    return _cart_response(session)


@router.patch("/{device_id}/cart/items/{index}", response_model=CartResponse)
async def update_cart_item(
    device_id: str,
    index: int,
    request: UpdateQuantityRequest,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = registry.get(device_id)
    session.ensure_cart_editable()
    session.cart.update_quantity(index, request.quantity)
    return _cart_response(session)


@router.delete("/{device_id}/cart/items/{index}", response_model=CartResponse)
async def remove_cart_item(
    device_id: str, index: int, registry: SessionRegistry = Depends(get_session_registry)
):
    """Remove one row; an index past the end leaves the cart as it is."""
    session = registry.get(device_id)
    session.ensure_cart_editable()
    session.cart.remove_at(index)
    return _cart_response(session)


@router.delete("/{device_id}/cart", response_model=CartResponse)
async def clear_cart(device_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    session = registry.get(device_id)
    session.ensure_cart_editable()
    session.cart.clear()
    return _cart_response(session)


@router.get("/{device_id}/checkout", response_model=CheckoutPreview)
async def preview_checkout(
    device_id: str,
    payment_method: PaymentMethod = PaymentMethod.CASH,
    cash_received: Optional[Decimal] = None,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Current checkout state, whether checkout is allowed and the change due."""
    session = registry.get(device_id)
    flow = session.checkout
    change_due = None
    if payment_method is PaymentMethod.CASH and cash_received is not None:
        change_due = flow.change_due(cash_received)
    return CheckoutPreview(
        state=flow.state,
        total=session.cart.total(),
        can_checkout=flow.can_checkout(payment_method, cash_received),
        change_due=change_due,
    )


@router.post("/{device_id}/checkout", response_model=CheckoutState)
async def checkout(
    device_id: str,
    request: CheckoutRequest,
    http_request: Request,
    registry: SessionRegistry = Depends(get_session_registry),
    orders: OrderPersistenceService = Depends(get_order_service),
):
    """Pay for and submit the cart. Failures are reported in the returned state."""
    logger.info(
        f"[CHECKOUT] Request received - device: {device_id}, method: {request.payment_method}, "
        f"Client: {http_request.client.host if http_request.client else 'unknown'}"
    )
    session = registry.get(device_id)
    return await session.checkout.submit(orders, request.payment_method, request.cash_received)


@router.post("/{device_id}/checkout/acknowledge", response_model=CheckoutState)
async def acknowledge_checkout(
    device_id: str, registry: SessionRegistry = Depends(get_session_registry)
):
    """Dismiss the success/error alert."""
    return registry.get(device_id).checkout.acknowledge()
