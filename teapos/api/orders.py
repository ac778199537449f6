"""Order history and admin status endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from teapos.api.auth import require_auth
from teapos.core.config import settings
from teapos.core.dependencies import get_order_service
from teapos.services.checkout.payment import PaymentStatus, PaymentTransaction
from teapos.services.ordering.models import OrderRecord
from teapos.services.ordering.receipt import render_receipt
from teapos.services.ordering.status import OrderStatus
from teapos.services.persistence.orders import OrderPersistenceService, SalesSummary

router = APIRouter(prefix="/api/orders")
logger = logging.getLogger(__name__)


class StatusUpdateRequest(BaseModel):
    status: OrderStatus


class PaymentStatusUpdateRequest(BaseModel):
    payment_status: PaymentStatus


@router.get("", response_model=List[OrderRecord])
async def list_orders(
    request: Request,
    status: Optional[OrderStatus] = None,
    limit: int = Query(default=100, ge=1, le=1000),
    orders: OrderPersistenceService = Depends(get_order_service),
):
    """Get orders, newest first."""
    logger.info(
        f"[ORDERS] Request received - status: {status}, limit: {limit}, "
        f"Client: {request.client.host if request.client else 'unknown'}"
    )
    records = await orders.list_orders(status=status, limit=limit)
    logger.info(f"[ORDERS] Returning {len(records)} orders")
    return records


@router.get("/summary", response_model=SalesSummary)
async def get_summary(orders: OrderPersistenceService = Depends(get_order_service)):
    """Order count, revenue, per-status counts and best sellers."""
    return await orders.sales_summary()


@router.get(
    "/payment-attempts",
    response_model=List[PaymentTransaction],
    dependencies=[Depends(require_auth)],
)
async def list_payment_attempts(orders: OrderPersistenceService = Depends(get_order_service)):
    """Declined payments that never became orders."""
    return await orders.list_payment_attempts()


@router.get("/{order_id}", response_model=OrderRecord)
async def get_order(order_id: str, orders: OrderPersistenceService = Depends(get_order_service)):
    return await orders.get_order(order_id)


@router.get("/{order_id}/receipt", response_class=PlainTextResponse)
async def get_receipt(order_id: str, orders: OrderPersistenceService = Depends(get_order_service)):
    """Plain-text receipt."""
    order = await orders.get_order(order_id)
    return render_receipt(order, settings.store_name, settings.tax_rate, settings.currency_symbol)


@router.patch(
    "/{order_id}/status", response_model=OrderRecord, dependencies=[Depends(require_auth)]
)
async def update_status(
    order_id: str,
    request: StatusUpdateRequest,
    orders: OrderPersistenceService = Depends(get_order_service),
):
    """Move an order along its fulfillment lifecycle."""
    return await orders.update_status(order_id, request.status)


@router.patch(
    "/{order_id}/payment-status",
    response_model=OrderRecord,
    dependencies=[Depends(require_auth)],
)
async def update_payment_status(
    order_id: str,
    request: PaymentStatusUpdateRequest,
    orders: OrderPersistenceService = Depends(get_order_service),
):
    return await orders.update_payment_status(order_id, request.payment_status)
