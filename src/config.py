"""Ortam değişkenlerinden okunan proje ayarları."""

from __future__ import annotations

import os
from dataclasses import dataclass

REGION = os.environ.get("AWS_DEFAULT_REGION", "us-west-2")

# Bedrock Nova inference profile'ları
ASSISTANT_MODEL_ID = os.environ.get("ASSISTANT_MODEL_ID", "us.amazon.nova-lite-v1:0")
AGENT_MODEL_ID = os.environ.get("AGENT_MODEL_ID", "us.amazon.nova-lite-v1:0")

# Boşsa hesap numarasından türetilir: logistics-portal-<account_id>
LOG_BUCKET = os.environ.get("LOG_BUCKET", "")


@dataclass(frozen=True)
class TableNames:
    orders: str = os.environ.get("ORDERS_TABLE", "Orders")
    movements: str = os.environ.get("MOVEMENTS_TABLE", "Movements")
    entities: str = os.environ.get("ENTITIES_TABLE", "Entities")
    warehouses: str = os.environ.get("WAREHOUSES_TABLE", "Warehouses")
    inventory: str = os.environ.get("INVENTORY_TABLE", "Inventory")
    decisions: str = os.environ.get("DECISIONS_TABLE", "AgentDecisions")


TABLES = TableNames()
