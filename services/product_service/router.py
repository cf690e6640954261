from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.responses import SuccessResponse
from shared.security.dependencies import require_admin
from .schemas import ProductCreate, ProductData, ProductListData, StockUpdate
from .service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("/", response_model=SuccessResponse[ProductListData])
async def list_products(
    search: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db)
):
    products = await ProductService.list_products(db, search)
    return SuccessResponse(data=ProductListData(products=products))


@router.get("/{product_id}", response_model=SuccessResponse[ProductData])
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    product = await ProductService.get_product_by_id(db, product_id)
    return SuccessResponse(data=ProductData(product=product))


@router.post(
    "/",
    response_model=SuccessResponse[ProductData],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_product(product: ProductCreate, db: AsyncSession = Depends(get_db)):
    created = await ProductService.create_product(db, product)
    return SuccessResponse(data=ProductData(product=created))


@router.post(
    "/{product_id}/restock",
    response_model=SuccessResponse[ProductData],
    dependencies=[Depends(require_admin)],
)
async def restock(product_id: int, payload: StockUpdate, db: AsyncSession = Depends(get_db)):
    product = await ProductService.restock(db, product_id, payload.quantity)
    return SuccessResponse(data=ProductData(product=product))
