from prometheus_client import Counter, Histogram

# Business Metrics
ecomm_checkout_total = Counter(
    "ecomm_checkout_total",
    "Total checkouts processed",
    ["status"] # Labels: 'success', 'empty_cart', 'insufficient_stock'
)

ecomm_checkout_duration_seconds = Histogram(
    "ecomm_checkout_duration_seconds",
    "Checkout duration in seconds"
)

ecomm_order_cancellations_total = Counter(
    "ecomm_order_cancellations_total",
    "Total orders cancelled with stock restored",
    ["source"] # Labels: 'customer', 'admin'
)

ecomm_payments_total = Counter(
    "ecomm_payments_total",
    "Total payment attempts",
    ["status"] # Labels: 'completed', 'failed'
)

ecomm_stock_conflicts_total = Counter(
    "ecomm_stock_conflicts_total",
    "Guarded stock decrements that lost the race to a concurrent checkout"
)
