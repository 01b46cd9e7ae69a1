"""Stok listesi filtreleme ve özet istatistikleri."""

from __future__ import annotations

from typing import Iterable, Optional

from src.models.logistics import InventoryItem, InventorySummary


def filter_inventory(
    items: Iterable[InventoryItem],
    client_id: Optional[str] = None,
    warehouse_id: Optional[str] = None,
    search: Optional[str] = None,
) -> list[InventoryItem]:
    """Müşteri, depo ve serbest metin (DO kodu, ürün, müşteri adı) filtresi."""
    result = list(items)

    if warehouse_id:
        result = [i for i in result if i.warehouse_id == warehouse_id]

    if client_id:
        result = [i for i in result if i.client_id == client_id]

    if search:
        needle = search.strip().lower()
        result = [
            i
            for i in result
            if needle in i.order_code.lower()
            or needle in i.product.lower()
            or needle in i.client_name.lower()
        ]

    return result


def summarize_inventory(items: Iterable[InventoryItem]) -> InventorySummary:
    """Toplam koli, toplam ağırlık (kg) ve referans (DO) sayısı."""
    items = list(items)
    return InventorySummary(
        total_packages=sum(int(i.packages) for i in items),
        total_weight=round(sum(float(i.current_weight) for i in items), 3),
        total_references=len(items),
    )
