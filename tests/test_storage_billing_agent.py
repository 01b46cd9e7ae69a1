"""Storage Billing Agent unit testleri."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from src.agents.storage_billing import StorageBillingAgent, resolve_reference_date
from src.models.logistics import Movement, MovementKind, Order

REFERENCE = "2025-03-31T12:00:00+00:00"
NOW = datetime(2025, 3, 31, 12, 0, tzinfo=timezone.utc)


def _create_agent() -> StorageBillingAgent:
    return StorageBillingAgent(
        bedrock_runtime_client=MagicMock(),
        dynamodb_resource=MagicMock(),
        s3_client=MagicMock(),
        log_bucket="test-bucket",
    )


def _order(order_id: str, days_ago: int, dispatched: bool = False) -> Order:
    movements = [Movement(f"{order_id}-IN", order_id, MovementKind.INTAKE, NOW - timedelta(days=days_ago))]
    if dispatched:
        movements.append(Movement(f"{order_id}-OUT", order_id, MovementKind.DISPATCH, NOW))
    return Order(order_id=order_id, code=f"DO-{order_id}", client_name="Trakya Makine", movements=movements)


class TestReferenceDate:

    def test_empty_reference_is_now(self):
        before = datetime.now(timezone.utc)
        assert resolve_reference_date(None) >= before

    def test_iso_with_z_suffix(self):
        assert resolve_reference_date("2025-03-31T12:00:00Z") == NOW

    def test_invalid_reference_raises(self):
        with pytest.raises(ValueError):
            resolve_reference_date("31/03/2025")


class TestOrderTracking:
    """Takip edilen sipariş anlık görüntüsü."""

    def test_load_orders_replaces_snapshot(self):
        agent = _create_agent()
        agent.set_order(_order("OLD", 40))
        assert agent.load_orders([_order("A", 10), _order("B", 20)]) == 2
        assert agent.get_order("OLD") is None
        assert {o.order_id for o in agent.get_all_orders()} == {"A", "B"}

    def test_refresh_from_store(self):
        agent = _create_agent()
        repository = MagicMock()
        repository.list_active_orders.return_value = [_order("A", 31), _order("B", 2)]

        assert agent.refresh_from_store(repository) == 2
        repository.list_active_orders.assert_called_once()
        assert agent.get_order("A") is not None


class TestBillingAlerts:
    """Faturalama uyarıları ve karar loglama."""

    def test_detect_alerts_sorted(self):
        agent = _create_agent()
        agent.load_orders([_order("NEAR", 25), _order("OVER", 45), _order("FRESH", 3)])

        alerts = agent.detect_billing_alerts(REFERENCE)
        assert [a.order_id for a in alerts] == ["OVER", "NEAR"]

    def test_alerts_logged_as_decision(self):
        agent = _create_agent()
        agent.load_orders([_order("OVER", 45)])

        agent.detect_billing_alerts(REFERENCE)

        agent.decisions_table.put_item.assert_called_once()
        item = agent.decisions_table.put_item.call_args.kwargs["Item"]
        assert item["decision_type"] == "storage_billing_alerts"
        assert json.loads(item["output_data"])["overdue_count"] == 1
        agent.s3.put_object.assert_called_once()
        assert agent.s3.put_object.call_args.kwargs["Bucket"] == "test-bucket"

    def test_no_alerts_no_decision(self):
        agent = _create_agent()
        agent.load_orders([_order("FRESH", 3), _order("GONE", 60, dispatched=True)])

        assert agent.detect_billing_alerts(REFERENCE) == []
        agent.decisions_table.put_item.assert_not_called()
        assert agent.get_decisions() == []

    def test_decision_table_error_does_not_break(self):
        from botocore.exceptions import ClientError

        agent = _create_agent()
        agent.decisions_table.put_item.side_effect = ClientError(
            {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}}, "PutItem"
        )
        agent.load_orders([_order("OVER", 45)])

        assert len(agent.detect_billing_alerts(REFERENCE)) == 1
        assert len(agent.get_decisions()) == 1

    def test_alert_page(self):
        agent = _create_agent()
        agent.load_orders([_order(f"O{i}", 30 + i) for i in range(12)])

        page = agent.get_alert_page(page=2, per_page=5, reference_date=REFERENCE)
        assert page.total_items == 12
        assert page.total_pages == 3
        assert len(page.items) == 5
        assert page.items[0].order_id == "O6"

    def test_daily_report(self):
        agent = _create_agent()
        agent.load_orders([_order("A", 45), _order("B", 75), _order("C", 25), _order("D", 2)])

        report = agent.get_daily_billing_report(REFERENCE)
        assert report["tracked_orders"] == 4
        assert report["alert_count"] == 3
        assert report["overdue_count"] == 2
        assert report["near_boundary_count"] == 1
        assert report["months_to_invoice"] == 3
        assert report["alerts"][0]["order_id"] == "B"

    def test_process_returns_report(self):
        agent = _create_agent()
        agent.load_orders([_order("A", 45)])
        assert agent.process(REFERENCE)["alert_count"] == 1

    def test_invalid_reference_raises(self):
        agent = _create_agent()
        with pytest.raises(ValueError):
            agent.detect_billing_alerts("dün")
