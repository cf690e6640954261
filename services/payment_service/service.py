import time
import uuid
from typing import List

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.models import PaymentStatus, utcnow
from services.order_service.repository import OrderRepository
from shared.config.transactions import retry_on_tx_failure
from shared.errors import AlreadyPaidError, NotFoundError, PaymentFailedError
from shared.observability import ecomm_payments_total
from .gateway import PaymentGateway
from .schemas import PaymentCreate, PaymentMethod, PaymentResponse

logger = structlog.get_logger(__name__)

PAYMENT_METHODS: List[PaymentMethod] = [
    PaymentMethod(
        id="credit_card",
        name="Credit Card",
        description="Pay with Visa, Mastercard, or American Express",
        icon="credit-card",
    ),
    PaymentMethod(
        id="paypal",
        name="PayPal",
        description="Pay with your PayPal account",
        icon="paypal",
    ),
    PaymentMethod(
        id="bank_transfer",
        name="Bank Transfer",
        description="Direct bank transfer",
        icon="building-bank",
    ),
]


def new_transaction_id() -> str:
    return f"TXN-{time.time_ns() // 1_000_000}-{uuid.uuid4().hex[:8]}"


class PaymentService:
    @staticmethod
    def list_methods() -> List[PaymentMethod]:
        return PAYMENT_METHODS

    @staticmethod
    @retry_on_tx_failure()
    async def process_payment(
        db: AsyncSession, user_id: int, data: PaymentCreate, gateway: PaymentGateway
    ) -> PaymentResponse:
        order = await OrderRepository.get_order(db, data.order_id)
        if not order or order.user_id != user_id:
            raise NotFoundError("Order")
        if order.payment_status == PaymentStatus.COMPLETED.value:
            raise AlreadyPaidError()

        decision = gateway.decide(order.id, order.total, data.payment_details)

        if not decision.approved:
            if not await OrderRepository.mark_payment_failed(db, order.id, utcnow()):
                await db.rollback()
                raise AlreadyPaidError()
            await db.commit()
            ecomm_payments_total.labels(status="failed").inc()
            logger.info("payment_declined", order_id=order.id, user_id=user_id, reason=decision.reason)
            raise PaymentFailedError(decision.reason)

        # Guarded on payment status so a concurrent charge cannot land twice
        if not await OrderRepository.mark_payment_completed(db, order.id, utcnow()):
            await db.rollback()
            raise AlreadyPaidError()
        await db.commit()

        transaction_id = new_transaction_id()
        ecomm_payments_total.labels(status="completed").inc()
        logger.info("payment_completed", order_id=order.id, user_id=user_id, transaction_id=transaction_id)
        order = await OrderRepository.get_order(db, order.id)
        return PaymentResponse(transaction_id=transaction_id, order=order)
