from decimal import Decimal
from typing import List

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.product_service.repository import ProductRepository
from shared.errors import InsufficientStockError, NotFoundError
from .models import CartItem
from .repository import CartRepository
from .schemas import CartItemCreate, CartLine, CartResponse

logger = structlog.get_logger(__name__)


class CartService:
    @staticmethod
    async def get_cart(db: AsyncSession, user_id: int) -> CartResponse:
        items = await CartRepository.get_items(db, user_id)
        subtotal = sum(
            (item.product.price * item.quantity for item in items if item.product),
            Decimal("0.00"),
        )
        return CartResponse(
            items=items,
            subtotal=subtotal.quantize(Decimal("0.01")),
            item_count=sum(item.quantity for item in items),
        )

    @staticmethod
    async def add_item(db: AsyncSession, user_id: int, data: CartItemCreate) -> CartItem:
        product = await ProductRepository.get_product_by_id(db, data.product_id)
        if not product:
            raise NotFoundError("Product")

        item = await CartRepository.get_item_for_product(db, user_id, data.product_id)
        quantity = data.quantity + (item.quantity if item else 0)
        if product.stock < quantity:
            raise InsufficientStockError(product.name)

        if item:
            item.quantity = quantity
        else:
            item = CartItem(user_id=user_id, product_id=data.product_id, quantity=quantity)
        item = await CartRepository.save_item(db, item)
        logger.info("cart_item_added", user_id=user_id, product_id=data.product_id, quantity=quantity)
        return item

    @staticmethod
    async def update_item(db: AsyncSession, user_id: int, item_id: int, quantity: int) -> CartItem:
        item = await CartRepository.get_item(db, user_id, item_id)
        if not item:
            raise NotFoundError("Cart item")

        product = await ProductRepository.get_product_by_id(db, item.product_id)
        if not product or product.stock < quantity:
            raise InsufficientStockError(product.name if product else None)

        item.quantity = quantity
        return await CartRepository.save_item(db, item)

    @staticmethod
    async def remove_item(db: AsyncSession, user_id: int, item_id: int) -> None:
        item = await CartRepository.get_item(db, user_id, item_id)
        if not item:
            raise NotFoundError("Cart item")
        await CartRepository.remove_item(db, item)

    @staticmethod
    async def clear_cart(db: AsyncSession, user_id: int) -> None:
        await CartRepository.clear_cart(db, user_id)
        await db.commit()

    # --- Checkout collaborator API (no commits) ---

    @staticmethod
    async def get_cart_lines(db: AsyncSession, user_id: int) -> List[CartLine]:
        items = await CartRepository.get_items(db, user_id)
        return [CartLine(product_id=i.product_id, quantity=i.quantity) for i in items]

    @staticmethod
    async def clear(db: AsyncSession, user_id: int) -> None:
        await CartRepository.clear_cart(db, user_id)
