"""Üretilen tablo satırları - DynamoDB item şekilleri."""
from dataclasses import dataclass
from typing import Optional


@dataclass
class WarehouseRow:
    warehouse_id: str
    name: str
    code: str
    location: str


@dataclass
class EntityRow:
    entity_id: str
    name: str
    tax_id: str
    email: str
    phone: str
    is_client: bool = False
    is_customs_agency: bool = False


@dataclass
class OrderRow:
    order_id: str
    do_code: str
    product: str
    bl_number: str
    client_id: str
    customs_agency_id: str
    packages: int
    active: bool
    created_at: str  # ISO 8601
    notes: str = ""


@dataclass
class MovementRow:
    order_id: str
    movement_id: str
    kind: str  # intake | dispatch
    timestamp: str  # ISO 8601
    packages: int
    gross_weight: float
    warehouse_id: Optional[str] = None
