from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .models import Order, OrderStatus, PaymentStatus


class OrderRepository:
    @staticmethod
    async def add_order(db: AsyncSession, order: Order) -> Order:
        """Stage the order and its items; the caller owns the commit."""
        db.add(order)
        await db.flush()
        return order

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Optional[Order]:
        result = await db.execute(
            select(Order)
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def list_orders(
        db: AsyncSession,
        offset: int,
        limit: int,
        user_id: Optional[int] = None,
        status: Optional[str] = None,
        with_user: bool = False,
    ) -> tuple[list[Order], int]:
        filters = []
        if user_id is not None:
            filters.append(Order.user_id == user_id)
        if status:
            filters.append(Order.status == status)

        total = await db.scalar(select(func.count()).select_from(Order).where(*filters))
        query = (
            select(Order)
            .where(*filters)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(offset)
            .limit(limit)
        )
        if with_user:
            query = query.options(selectinload(Order.user))
        result = await db.execute(query)
        return list(result.scalars().all()), total or 0

    @staticmethod
    async def transition_status(
        db: AsyncSession,
        order_id: int,
        from_statuses: Iterable[str],
        to_status: str,
        now: datetime,
    ) -> bool:
        """Move the order to ``to_status`` only if it is still in one of ``from_statuses``.

        The status check rides in the UPDATE itself, so two concurrent
        transitions cannot both succeed. Returns False when no row matched.
        """
        result = await db.execute(
            update(Order)
            .where(Order.id == order_id, Order.status.in_(list(from_statuses)))
            .values(status=to_status, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    async def mark_payment_failed(db: AsyncSession, order_id: int, now: datetime) -> bool:
        result = await db.execute(
            update(Order)
            .where(Order.id == order_id, Order.payment_status != PaymentStatus.COMPLETED.value)
            .values(payment_status=PaymentStatus.FAILED.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    async def mark_payment_completed(db: AsyncSession, order_id: int, now: datetime) -> bool:
        """Complete payment and advance a pending order to processing."""
        result = await db.execute(
            update(Order)
            .where(Order.id == order_id, Order.payment_status != PaymentStatus.COMPLETED.value)
            .values(
                payment_status=PaymentStatus.COMPLETED.value,
                status=case(
                    (Order.status == OrderStatus.PENDING.value, OrderStatus.PROCESSING.value),
                    else_=Order.status,
                ),
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
