from src.data.inventory import filter_inventory, summarize_inventory
from src.data.order_repository import LogisticsRepository, parse_timestamp
from src.data.pagination import Page, page_window, paginate

__all__ = [
    "LogisticsRepository",
    "Page",
    "filter_inventory",
    "page_window",
    "paginate",
    "parse_timestamp",
    "summarize_inventory",
]
