from typing import Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from .models import Product

class ProductRepository:

    @staticmethod
    async def create_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def get_all_products(db: AsyncSession, search: Optional[str] = None):
        stmt = select(Product).order_by(Product.id)
        if search:
            stmt = stmt.where(Product.name.ilike(f"%{search}%"))
        result = await db.execute(stmt)
        return result.scalars().all()

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int):
        result = await db.execute(select(Product).where(Product.id == product_id))
        return result.scalars().first()

    @staticmethod
    async def lock_products(db: AsyncSession, product_ids: Iterable[int]) -> dict[int, Product]:
        """Load products FOR UPDATE, always in ascending id order.

        A fixed lock order keeps two checkouts over the same products from
        deadlocking. SQLite ignores the row lock and relies on its single writer.
        """
        ids = sorted(set(product_ids))
        if not ids:
            return {}
        result = await db.execute(
            select(Product)
            .where(Product.id.in_(ids))
            .order_by(Product.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return {p.id: p for p in result.scalars().all()}

    @staticmethod
    async def adjust_stock(db: AsyncSession, product_id: int, delta: int) -> bool:
        """Apply ``delta`` to stock in a single UPDATE; does not commit.

        Negative deltas only apply while enough stock remains, so the check
        and the decrement cannot be split by a concurrent writer. Returns
        False when no row was changed.
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock + delta)
            .execution_options(synchronize_session=False)
        )
        if delta < 0:
            stmt = stmt.where(Product.stock >= -delta)
        result = await db.execute(stmt)
        return result.rowcount == 1
