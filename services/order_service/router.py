from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import CHECKOUT_RATE_LIMIT
from shared.responses import Page, SuccessResponse
from shared.security import CurrentUser, get_current_user, limiter, require_admin
from .schemas import AdminOrderResponse, OrderCreate, OrderData, OrderResponse, StatusUpdate
from .service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("/", response_model=SuccessResponse[Page[OrderResponse]])
async def list_orders(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    orders, pagination = await OrderService.list_orders(db, user.id, page, page_size)
    return SuccessResponse(data=Page[OrderResponse](data=orders, pagination=pagination))


@router.post("/", response_model=SuccessResponse[OrderData], status_code=status.HTTP_201_CREATED)
@limiter.limit(CHECKOUT_RATE_LIMIT)
async def create_order(
    request: Request,  # required by slowapi
    payload: OrderCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    order = await OrderService.create_order(db, user.id, payload)
    return SuccessResponse(data=OrderData(order=order))


# Admin routes are declared before /{order_id} so "admin" is not parsed as an id
@router.get("/admin", response_model=SuccessResponse[Page[AdminOrderResponse]])
async def list_all_orders(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
    status_filter: str | None = Query(default=None, alias="status"),
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    orders, pagination = await OrderService.list_all_orders(db, page, page_size, status_filter)
    return SuccessResponse(data=Page[AdminOrderResponse](data=orders, pagination=pagination))


@router.put("/admin/{order_id}/status", response_model=SuccessResponse[OrderData])
async def update_order_status(
    order_id: int,
    payload: StatusUpdate,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    order = await OrderService.update_status(db, order_id, payload.status)
    return SuccessResponse(data=OrderData(order=order))


@router.get("/{order_id}", response_model=SuccessResponse[OrderData])
async def get_order(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    order = await OrderService.get_order(db, user.id, order_id, is_admin=user.is_admin)
    return SuccessResponse(data=OrderData(order=order))


@router.put("/{order_id}/cancel", response_model=SuccessResponse[OrderData])
async def cancel_order(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    order = await OrderService.cancel_order(db, user.id, order_id)
    return SuccessResponse(data=OrderData(order=order))
