"""Storage Billing Agent - Depolama faturalama takibi.

- Aktif siparişleri ve depo hareketlerini tutar
- 30 günlük ücretsiz depolama sınırına yaklaşan / aşan siparişleri tespit eder
- Faturalanacak ay sayısını raporlar
- Günlük faturalama raporu üretir
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from src.agents.base_agent import BaseAgent
from src.billing.storage_alerts import compute_storage_alerts
from src.config import AGENT_MODEL_ID, REGION
from src.data.order_repository import LogisticsRepository, parse_timestamp
from src.data.pagination import Page, paginate
from src.models.logistics import Order, StorageAlert

logger = logging.getLogger(__name__)


def resolve_reference_date(reference_date: Optional[str] = None) -> datetime:
    """ISO referans tarihini çözer; verilmemişse şu anki UTC zamanı."""
    if not reference_date:
        return datetime.now(timezone.utc)
    moment = parse_timestamp(reference_date)
    if moment is None:
        raise ValueError(f"Geçersiz referans tarihi: {reference_date!r}")
    return moment


class StorageBillingAgent(BaseAgent):
    """Depolama faturalama sınırlarını izleyen agent."""

    def __init__(self, region_name: str = REGION, **kwargs: Any):
        super().__init__(
            agent_name="StorageBillingAgent",
            model_id=AGENT_MODEL_ID,
            region_name=region_name,
            **kwargs,
        )
        # Takip edilen siparişler: {order_id: Order}
        self._orders: dict[str, Order] = {}

    def set_order(self, order: Order) -> None:
        self._orders[order.order_id] = order

    def load_orders(self, orders: Iterable[Order]) -> int:
        """Mevcut anlık görüntüyü verilen siparişlerle değiştirir."""
        self._orders = {o.order_id: o for o in orders}
        return len(self._orders)

    def get_order(self, order_id: str) -> Optional[Order]:
        return self._orders.get(order_id)

    def get_all_orders(self) -> list[Order]:
        return list(self._orders.values())

    def refresh_from_store(self, repository: Optional[LogisticsRepository] = None) -> int:
        """Aktif siparişleri veri katmanından yeniden yükler."""
        repository = repository or LogisticsRepository(
            dynamodb_resource=self.dynamodb, tables=self.tables
        )
        count = self.load_orders(repository.list_active_orders())
        logger.info("%s: %d aktif sipariş yüklendi", self.agent_name, count)
        return count

    # --- Faturalama uyarıları ---

    def detect_billing_alerts(self, reference_date: Optional[str] = None) -> list[StorageAlert]:
        """Faturalama sınırına yaklaşan veya aşan siparişleri aciliyet sırasıyla döndürür."""
        now = resolve_reference_date(reference_date)
        alerts = compute_storage_alerts(self._orders.values(), now)

        if alerts:
            overdue = [a for a in alerts if a.is_overdue]
            self.log_decision(
                decision_type="storage_billing_alerts",
                input_data={"tracked_orders": len(self._orders), "reference_date": now.isoformat()},
                output_data={
                    "alert_count": len(alerts),
                    "overdue_count": len(overdue),
                    "orders": [
                        {"order_code": a.order_code, "days": a.days_elapsed, "months": a.months_billable}
                        for a in alerts
                    ],
                },
                reasoning=(
                    f"{len(overdue)} sipariş ücretsiz depolama süresini aştı, "
                    f"{len(alerts) - len(overdue)} sipariş sınıra yaklaşıyor."
                ),
            )

        return alerts

    def get_alert_page(
        self, page: int = 1, per_page: int = 10, reference_date: Optional[str] = None
    ) -> Page:
        return paginate(self.detect_billing_alerts(reference_date), page=page, per_page=per_page)

    def get_daily_billing_report(self, reference_date: Optional[str] = None) -> dict:
        """Günlük faturalama raporu oluşturur."""
        now = resolve_reference_date(reference_date)
        alerts = self.detect_billing_alerts(now.isoformat())
        overdue = [a for a in alerts if a.is_overdue]

        return {
            "report_date": now.isoformat(),
            "tracked_orders": len(self._orders),
            "alert_count": len(alerts),
            "overdue_count": len(overdue),
            "near_boundary_count": len(alerts) - len(overdue),
            "months_to_invoice": sum(a.months_billable for a in overdue),
            "alerts": [a.to_dict() for a in alerts],
        }

    def process(self, reference_date: Optional[str] = None) -> dict:
        """Ana işlem: günlük faturalama raporu."""
        return self.get_daily_billing_report(reference_date)
