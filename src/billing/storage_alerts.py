"""Depolama faturalama uyarıları.

Her aktif siparişin ilk giriş (intake) hareketinden bu yana geçen tam gün
sayısını hesaplar ve 30 günlük ücretsiz depolama sınırına yaklaşan veya bu
sınırı aşan siparişleri aciliyet sırasına göre döndürür.

- Herhangi bir çıkış (dispatch) hareketi olan sipariş uyarı üretmez
- Birden fazla giriş varsa sadece en erken giriş tarihi kullanılır
- Gecikmiş siparişler her zaman listelenir, sınıra yaklaşanlar 10 gün önceden
- Fonksiyon saf: saat okumaz, I/O yapmaz, `now` dışarıdan verilir
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from src.models.logistics import MovementKind, Order, StorageAlert, as_utc

FREE_STORAGE_DAYS = 30
LOOKAHEAD_DAYS = 10


def has_dispatch(order: Order) -> bool:
    return any(m.kind == MovementKind.DISPATCH for m in order.movements)


def find_arrival_date(order: Order) -> Optional[datetime]:
    """Siparişin en erken giriş hareketinin zamanını döndürür."""
    intakes = [m.timestamp for m in order.movements if m.kind == MovementKind.INTAKE]
    if not intakes:
        return None
    return min(intakes, key=as_utc)


def whole_days_between(start: datetime, end: datetime) -> int:
    # timedelta.days aşağı yuvarlar: 29 gün 23 saat -> 29, -12 saat -> -1
    return (as_utc(end) - as_utc(start)).days


def evaluate_order(order: Order, now: datetime) -> Optional[StorageAlert]:
    """Tek bir sipariş için uyarı üretir; uyarı gerekmiyorsa None."""
    if not order.active or has_dispatch(order):
        return None

    arrival_date = find_arrival_date(order)
    if arrival_date is None:
        return None

    days_elapsed = whole_days_between(arrival_date, now)
    days_to_boundary = FREE_STORAGE_DAYS - days_elapsed
    is_overdue = days_elapsed >= FREE_STORAGE_DAYS
    is_near_boundary = 0 <= days_to_boundary <= LOOKAHEAD_DAYS

    if not (is_overdue or is_near_boundary):
        return None

    return StorageAlert(
        order_id=order.order_id,
        order_code=order.code,
        client_name=order.client_name,
        arrival_date=arrival_date,
        days_elapsed=days_elapsed,
        days_to_boundary=days_to_boundary,
        months_billable=days_elapsed // FREE_STORAGE_DAYS,
        is_overdue=is_overdue,
        is_near_boundary=is_near_boundary,
    )


def _urgency_key(alert: StorageAlert) -> tuple[int, int]:
    # Önce gecikmişler (en eski başta), sonra sınıra en yakın olanlar
    if alert.is_overdue:
        return (0, -alert.days_elapsed)
    return (1, alert.days_to_boundary)


def compute_storage_alerts(orders: Iterable[Order], now: datetime) -> list[StorageAlert]:
    """Faturalama dikkati gerektiren siparişleri aciliyet sırasıyla döndürür.

    Sıralama kararlıdır; eşit aciliyetteki siparişler giriş sırasını korur.
    """
    alerts: list[StorageAlert] = []
    for order in orders:
        alert = evaluate_order(order, now)
        if alert is not None:
            alerts.append(alert)

    alerts.sort(key=_urgency_key)
    return alerts
