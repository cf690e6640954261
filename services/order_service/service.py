import time

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.cart_service.service import CartService
from services.product_service.repository import ProductRepository
from shared.config.transactions import retry_on_tx_failure
from shared.errors import (
    CannotCancelError,
    ConflictError,
    EmptyCartError,
    InsufficientStockError,
    InvalidStatusTransitionError,
    NotFoundError,
    StorefrontError,
)
from shared.observability import (
    ecomm_checkout_duration_seconds,
    ecomm_checkout_total,
    ecomm_order_cancellations_total,
    ecomm_stock_conflicts_total,
)
from shared.responses import Pagination
from .models import Order, OrderItem, OrderStatus, PaymentStatus, utcnow
from .pricing import compute_totals
from .repository import OrderRepository
from .schemas import OrderCreate
from .status import CANCELLABLE_STATUSES, can_transition

logger = structlog.get_logger(__name__)


class OrderService:
    @staticmethod
    @retry_on_tx_failure()
    async def create_order(db: AsyncSession, user_id: int, data: OrderCreate) -> Order:
        """Turn the user's cart into a pending order in one transaction.

        Stock is re-checked by the guarded decrement, so a checkout that
        loses a race for the last units fails with InsufficientStockError
        and leaves every product untouched.
        """
        started = time.perf_counter()
        try:
            lines = await CartService.get_cart_lines(db, user_id)
            if not lines:
                raise EmptyCartError()

            products = await ProductRepository.lock_products(db, [line.product_id for line in lines])
            for line in lines:
                product = products.get(line.product_id)
                if product is None or product.stock < line.quantity:
                    raise InsufficientStockError(product.name if product else None)

            totals = compute_totals(products[line.product_id].price * line.quantity for line in lines)
            now = utcnow()
            order = Order(
                user_id=user_id,
                status=OrderStatus.PENDING.value,
                payment_status=PaymentStatus.PENDING.value,
                subtotal=totals.subtotal,
                tax=totals.tax,
                shipping=totals.shipping,
                total=totals.total,
                shipping_address=data.shipping_address,
                billing_address=data.billing_address,
                payment_method=data.payment_method,
                notes=data.notes,
                created_at=now,
                updated_at=now,
                items=[
                    OrderItem(
                        product_id=line.product_id,
                        name=products[line.product_id].name,
                        price=products[line.product_id].price,
                        quantity=line.quantity,
                    )
                    for line in lines
                ],
            )

            for line in lines:
                if not await ProductRepository.adjust_stock(db, line.product_id, -line.quantity):
                    ecomm_stock_conflicts_total.inc()
                    raise InsufficientStockError(products[line.product_id].name)

            await CartService.clear(db, user_id)
            await OrderRepository.add_order(db, order)
            await db.commit()
        except StorefrontError as e:
            await db.rollback()
            ecomm_checkout_total.labels(status=e.code.lower()).inc()
            logger.info("checkout_rejected", user_id=user_id, code=e.code, reason=e.message)
            raise

        ecomm_checkout_total.labels(status="success").inc()
        ecomm_checkout_duration_seconds.observe(time.perf_counter() - started)
        logger.info(
            "order_created",
            order_id=order.id,
            user_id=user_id,
            items=len(order.items),
            total=str(order.total),
        )
        return await OrderRepository.get_order(db, order.id)

    @staticmethod
    async def get_order(db: AsyncSession, user_id: int, order_id: int, is_admin: bool = False) -> Order:
        order = await OrderRepository.get_order(db, order_id)
        # Someone else's order looks exactly like a missing one
        if not order or (order.user_id != user_id and not is_admin):
            raise NotFoundError("Order")
        return order

    @staticmethod
    @retry_on_tx_failure()
    async def cancel_order(db: AsyncSession, user_id: int, order_id: int) -> Order:
        try:
            order = await OrderRepository.get_order(db, order_id)
            if not order or order.user_id != user_id:
                raise NotFoundError("Order")
            if order.status not in {s.value for s in CANCELLABLE_STATUSES}:
                raise CannotCancelError(order.status)

            moved = await OrderRepository.transition_status(
                db,
                order.id,
                [s.value for s in CANCELLABLE_STATUSES],
                OrderStatus.CANCELLED.value,
                utcnow(),
            )
            if not moved:
                # Lost a race with another transition
                raise CannotCancelError(order.status)

            await OrderService._restock(db, order)
            await db.commit()
        except StorefrontError:
            await db.rollback()
            raise

        ecomm_order_cancellations_total.labels(source="customer").inc()
        logger.info("order_cancelled", order_id=order_id, user_id=user_id, source="customer")
        return await OrderRepository.get_order(db, order_id)

    @staticmethod
    @retry_on_tx_failure()
    async def update_status(db: AsyncSession, order_id: int, new_status: str) -> Order:
        try:
            order = await OrderRepository.get_order(db, order_id)
            if not order:
                raise NotFoundError("Order")
            current = order.status
            if not can_transition(current, new_status):
                raise InvalidStatusTransitionError(current, new_status)

            moved = await OrderRepository.transition_status(db, order.id, [current], new_status, utcnow())
            if not moved:
                raise ConflictError("Order status changed concurrently, please retry")

            if new_status == OrderStatus.CANCELLED.value:
                await OrderService._restock(db, order)
            await db.commit()
        except StorefrontError:
            await db.rollback()
            raise

        if new_status == OrderStatus.CANCELLED.value:
            ecomm_order_cancellations_total.labels(source="admin").inc()
        logger.info("order_status_updated", order_id=order_id, old_status=current, new_status=new_status)
        return await OrderRepository.get_order(db, order_id)

    @staticmethod
    async def list_orders(db: AsyncSession, user_id: int, page: int, page_size: int):
        orders, total = await OrderRepository.list_orders(
            db, offset=(page - 1) * page_size, limit=page_size, user_id=user_id
        )
        return orders, Pagination.build(page, page_size, total)

    @staticmethod
    async def list_all_orders(db: AsyncSession, page: int, page_size: int, status: str | None = None):
        orders, total = await OrderRepository.list_orders(
            db, offset=(page - 1) * page_size, limit=page_size, status=status, with_user=True
        )
        return orders, Pagination.build(page, page_size, total)

    @staticmethod
    async def _restock(db: AsyncSession, order: Order) -> None:
        # Restoring capacity needs no availability check; deleted products are skipped
        for item in order.items:
            restored = await ProductRepository.adjust_stock(db, item.product_id, item.quantity)
            if not restored:
                logger.warning("restock_skipped", order_id=order.id, product_id=item.product_id)
