from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import CHECKOUT_RATE_LIMIT
from shared.responses import SuccessResponse
from shared.security import CurrentUser, get_current_user, limiter

from .gateway import PaymentGateway, get_payment_gateway
from .schemas import PaymentCreate, PaymentMethodsData, PaymentResponse
from .service import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("/methods", response_model=SuccessResponse[PaymentMethodsData])
async def list_payment_methods():
    return SuccessResponse(data=PaymentMethodsData(methods=PaymentService.list_methods()))


@router.post("/process", response_model=SuccessResponse[PaymentResponse])
@limiter.limit(CHECKOUT_RATE_LIMIT)
async def process_payment(
    request: Request,  # required by slowapi
    payment: PaymentCreate,
    user: CurrentUser = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    db: AsyncSession = Depends(get_db),
):
    result = await PaymentService.process_payment(db, user.id, payment, gateway)
    return SuccessResponse(data=result)
