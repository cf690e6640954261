from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from .models import CartItem

class CartRepository:
    @staticmethod
    async def get_items(db: AsyncSession, user_id: int):
        result = await db.execute(
            select(CartItem).where(CartItem.user_id == user_id).order_by(CartItem.id)
        )
        return result.scalars().all()

    @staticmethod
    async def get_item(db: AsyncSession, user_id: int, item_id: int):
        result = await db.execute(
            select(CartItem)
            .where(CartItem.id == item_id)
            .where(CartItem.user_id == user_id)
        )
        return result.scalars().first()

    @staticmethod
    async def get_item_for_product(db: AsyncSession, user_id: int, product_id: int):
        result = await db.execute(
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .where(CartItem.product_id == product_id)
        )
        return result.scalars().first()

    @staticmethod
    async def save_item(db: AsyncSession, item: CartItem):
        db.add(item)
        await db.commit()
        await db.refresh(item)
        await db.refresh(item, ["product"])
        return item

    @staticmethod
    async def remove_item(db: AsyncSession, item: CartItem):
        await db.delete(item)
        await db.commit()

    @staticmethod
    async def clear_cart(db: AsyncSession, user_id: int):
        """Deletes every line for the user without committing.

        Checkout calls this inside its own transaction.
        """
        await db.execute(delete(CartItem).where(CartItem.user_id == user_id))
