"""Logistics Data MCP server tool fonksiyonları testleri."""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

import mcp_servers.logistics_data_server as server
from src.models.logistics import InventoryItem, Movement, MovementKind, Order

NOW = datetime(2025, 3, 31, 12, 0, tzinfo=timezone.utc)


def _order(order_id: str, days_ago: int) -> Order:
    return Order(
        order_id=order_id,
        code=f"DO-{order_id}",
        client_name="Akdeniz Tekstil",
        movements=[Movement(f"{order_id}-IN", order_id, MovementKind.INTAKE, NOW - timedelta(days=days_ago))],
    )


@pytest.fixture
def repository(monkeypatch):
    repo = MagicMock()
    monkeypatch.setattr(server, "_repository", repo)
    return repo


class TestBillingAlertTool:

    def test_alerts_paged_and_sorted(self, repository):
        repository.list_active_orders.return_value = [
            _order("A", 25), _order("B", 45), _order("C", 2), _order("D", 31),
        ]

        result = server.get_storage_billing_alerts(NOW.isoformat(), page=1, per_page=2)
        assert result["success"] is True
        assert result["total_items"] == 3
        assert result["total_pages"] == 2
        assert result["overdue_count"] == 2
        assert [a["order_id"] for a in result["data"]] == ["B", "D"]

    def test_invalid_reference_date(self, repository):
        result = server.get_storage_billing_alerts("yarın")
        assert result["success"] is False
        repository.list_active_orders.assert_not_called()

    def test_repository_failure_reported(self, repository):
        repository.list_active_orders.side_effect = RuntimeError("boom")
        result = server.get_storage_billing_alerts(NOW.isoformat())
        assert result == {"success": False, "error": "boom"}


class TestOrderTools:

    def test_get_order_not_found(self, repository):
        repository.get_order.return_value = None
        assert server.get_order("NOPE") == {"success": False, "error": "Order not found"}

    def test_search_orders(self, repository):
        repository.list_orders.return_value = [_order(f"O{i}", 1) for i in range(15)]
        result = server.search_orders("DO", page=2, per_page=10)
        repository.list_orders.assert_called_once_with("DO")
        assert len(result["data"]) == 5
        assert result["data"][0]["movements"][0]["kind"] == "intake"


class TestInventoryTools:

    def test_inventory_filtered(self, repository):
        repository.list_inventory.return_value = [
            InventoryItem("WH001", "O1", 3, 10.0, order_code="DO-1", client_id="CLI001"),
            InventoryItem("WH001", "O2", 5, 20.0, order_code="DO-2", client_id="CLI002"),
        ]
        result = server.get_inventory(client_id="CLI002")
        assert [i["order_id"] for i in result["data"]] == ["O2"]

    def test_inventory_summary(self, repository):
        repository.list_inventory.return_value = [
            InventoryItem("WH001", "O1", 3, 10.5),
            InventoryItem("WH002", "O2", 5, 20.0),
        ]
        result = server.get_inventory_summary()
        assert result["data"] == {"total_packages": 8, "total_weight": 30.5, "total_references": 2}

    def test_unknown_entity_role(self, repository):
        assert server.list_entities("supplier")["success"] is False


class TestToolDispatch:

    def test_call_tool_returns_json_text(self, repository):
        repository.list_warehouses.return_value = []
        contents = asyncio.run(server.call_tool("list_warehouses", {}))
        assert json.loads(contents[0].text) == {"success": True, "count": 0, "data": []}

    def test_unknown_tool(self, repository):
        with pytest.raises(ValueError):
            asyncio.run(server.call_tool("drop_tables", {}))


class TestRegistryWriteTools:
    """Sipariş ve varlık kaydı araçları."""

    def test_save_order_passes_checkpoints(self, repository):
        repository.save_order.side_effect = lambda order: order
        result = server.save_order({
            "order_id": "O9", "code": "DO-9", "packages": 12,
            "checkpoints": {"zf_transfer": "03/05/2025"}, "storage_billing_date": "04/05/2025",
        })
        assert result["success"] is True
        order = repository.save_order.call_args.args[0]
        assert order.code == "DO-9"
        assert order.checkpoints == {"zf_transfer": "03/05/2025"}
        assert order.storage_billing_date == "04/05/2025"

    def test_save_order_validation_error(self, repository):
        repository.save_order.side_effect = ValueError("DO kodu zorunlu")
        assert server.save_order({"code": ""}) == {"success": False, "error": "DO kodu zorunlu"}

    def test_save_entity(self, repository):
        repository.save_entity.side_effect = lambda entity: entity
        result = server.save_entity({"entity_id": "AGN009", "name": "Liman Gümrük", "is_customs_agency": True})
        assert result == {"success": True, "entity_id": "AGN009"}
        assert repository.save_entity.call_args.args[0].is_customs_agency is True

    def test_delete_entity_via_dispatch(self, repository):
        contents = asyncio.run(server.call_tool("delete_entity", {"entity_id": "CLI003"}))
        assert json.loads(contents[0].text)["success"] is True
        repository.delete_entity.assert_called_once_with("CLI003")
