from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.responses import SuccessResponse
from shared.security.dependencies import CurrentUser, get_current_user

from .schemas import CartItemCreate, CartItemData, CartItemUpdate, CartResponse, MessageData
from .service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("/", response_model=SuccessResponse[CartResponse])
async def get_cart(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return SuccessResponse(data=await CartService.get_cart(db, user.id))


@router.post("/", response_model=SuccessResponse[CartItemData], status_code=status.HTTP_201_CREATED)
async def add_item(
    item: CartItemCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    saved = await CartService.add_item(db, user.id, item)
    return SuccessResponse(data=CartItemData(item=saved))


@router.put("/{item_id}", response_model=SuccessResponse[CartItemData])
async def update_item(
    item_id: int,
    payload: CartItemUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    saved = await CartService.update_item(db, user.id, item_id, payload.quantity)
    return SuccessResponse(data=CartItemData(item=saved))


@router.delete("/{item_id}", response_model=SuccessResponse[MessageData])
async def remove_item(
    item_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await CartService.remove_item(db, user.id, item_id)
    return SuccessResponse(data=MessageData(message="Item removed from cart"))


@router.delete("/", response_model=SuccessResponse[MessageData])
async def clear_cart(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await CartService.clear_cart(db, user.id)
    return SuccessResponse(data=MessageData(message="Cart cleared"))
