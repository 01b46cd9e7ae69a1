from src.billing.storage_alerts import (
    FREE_STORAGE_DAYS,
    LOOKAHEAD_DAYS,
    compute_storage_alerts,
    evaluate_order,
    find_arrival_date,
    has_dispatch,
)

__all__ = [
    "FREE_STORAGE_DAYS",
    "LOOKAHEAD_DAYS",
    "compute_storage_alerts",
    "evaluate_order",
    "find_arrival_date",
    "has_dispatch",
]
