from .setup import setup_observability
from .metrics import (
    ecomm_checkout_total,
    ecomm_checkout_duration_seconds,
    ecomm_order_cancellations_total,
    ecomm_payments_total,
    ecomm_stock_conflicts_total
)
