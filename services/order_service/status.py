"""Order lifecycle rules.

``ORDER_TRANSITIONS`` lists, for each status, the statuses an administrator
may move an order to. Customers can only cancel, and only from the
statuses in ``CANCELLABLE_STATUSES``.
"""
from .models import OrderStatus

ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[OrderStatus] = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

CANCELLABLE_STATUSES: set[OrderStatus] = {OrderStatus.PENDING, OrderStatus.PROCESSING}


def can_transition(current: str, requested: str) -> bool:
    try:
        current_status = OrderStatus(current)
        requested_status = OrderStatus(requested)
    except ValueError:
        return False
    return requested_status in ORDER_TRANSITIONS[current_status]
