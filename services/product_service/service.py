from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import NotFoundError
from .models import Product
from .repository import ProductRepository
from .schemas import ProductCreate

class ProductService:

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate):
        product = Product(
            name=data.name,
            price=data.price,
            stock=data.stock
        )
        return await ProductRepository.create_product(db, product)

    @staticmethod
    async def list_products(db: AsyncSession, search: str | None = None):
        return await ProductRepository.get_all_products(db, search)

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int):
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise NotFoundError("Product")
        return product

    @staticmethod
    async def restock(db: AsyncSession, product_id: int, quantity: int):
        if not await ProductRepository.adjust_stock(db, product_id, quantity):
            await db.rollback()
            raise NotFoundError("Product")
        await db.commit()
        return await ProductService.get_product_by_id(db, product_id)
