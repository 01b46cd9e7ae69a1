"""Lojistik portalı veri modelleri - siparişler, hareketler, stok ve uyarılar."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class MovementKind(str, Enum):
    INTAKE = "intake"
    DISPATCH = "dispatch"


class EntityRole(str, Enum):
    CLIENT = "client"
    CUSTOMS_AGENCY = "customs_agency"


def as_utc(moment: datetime) -> datetime:
    """Saat dilimi olmayan zaman damgalarını UTC kabul eder, diğerlerini UTC'ye çevirir."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _utc_date(moment: datetime) -> str:
    return as_utc(moment).strftime("%Y-%m-%d")


# Gümrük / serbest bölge süreç adımları; değerler serbest metin tarih (G/A/Y)
ORDER_CHECKPOINTS = (
    "intake_form",
    "bl_release",
    "transport_invoice_payment",
    "zf_form_delivery",
    "zf_transfer",
    "intake_legalization",
    "intake_proforma",
    "pre_inspection",
    "exit_form",
    "exit_loading",
)


@dataclass
class Movement:
    movement_id: str
    order_id: str
    kind: MovementKind
    timestamp: datetime
    packages: int = 0
    gross_weight: float = 0.0
    warehouse_id: Optional[str] = None


@dataclass
class Order:
    """Depoya giren tek bir sevkiyat partisi (DO)."""

    order_id: str
    code: str
    client_name: str
    active: bool = True
    movements: list[Movement] = field(default_factory=list)
    product: str = ""
    bl_number: str = ""
    client_id: Optional[str] = None
    customs_agency_id: Optional[str] = None
    customs_agency_name: str = ""
    packages: int = 0
    notes: str = ""
    created_at: Optional[str] = None
    checkpoints: dict[str, str] = field(default_factory=dict)
    storage_billing_date: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "code": self.code,
            "client_name": self.client_name,
            "active": self.active,
            "product": self.product,
            "bl_number": self.bl_number,
            "customs_agency_name": self.customs_agency_name,
            "packages": self.packages,
            "notes": self.notes,
            "created_at": self.created_at,
            "checkpoints": dict(self.checkpoints),
            "storage_billing_date": self.storage_billing_date,
            "movements": [
                {
                    "kind": m.kind.value,
                    "timestamp": m.timestamp.isoformat(),
                    "packages": m.packages,
                    "gross_weight": m.gross_weight,
                    "warehouse_id": m.warehouse_id,
                }
                for m in self.movements
            ],
        }


@dataclass
class Entity:
    entity_id: str
    name: str
    tax_id: str = ""
    email: str = ""
    phone: str = ""
    is_client: bool = False
    is_customs_agency: bool = False


@dataclass
class Warehouse:
    warehouse_id: str
    name: str
    code: str = ""
    location: str = ""


@dataclass
class InventoryItem:
    warehouse_id: str
    order_id: str
    packages: int
    current_weight: float
    updated_at: Optional[str] = None
    # Sorgu sırasında doldurulan join alanları
    warehouse_name: str = ""
    order_code: str = ""
    product: str = ""
    client_id: Optional[str] = None
    client_name: str = ""

    def to_dict(self) -> dict:
        return {
            "warehouse_id": self.warehouse_id,
            "warehouse_name": self.warehouse_name,
            "order_id": self.order_id,
            "order_code": self.order_code,
            "product": self.product,
            "client_name": self.client_name,
            "packages": self.packages,
            "current_weight": self.current_weight,
            "updated_at": self.updated_at,
        }


@dataclass
class StorageAlert:
    """Ücretsiz depolama sınırına yaklaşan veya aşan sipariş."""

    order_id: str
    order_code: str
    client_name: str
    arrival_date: datetime
    days_elapsed: int
    days_to_boundary: int
    months_billable: int
    is_overdue: bool
    is_near_boundary: bool

    @property
    def days_remaining(self) -> int:
        return max(self.days_to_boundary, 0)

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "order_code": self.order_code,
            "client_name": self.client_name,
            "arrival_date": _utc_date(self.arrival_date),
            "days_elapsed": self.days_elapsed,
            "days_remaining": self.days_remaining,
            "months_billable": self.months_billable,
            "is_overdue": self.is_overdue,
        }


@dataclass
class InventorySummary:
    total_packages: int
    total_weight: float
    total_references: int


@dataclass
class AgentDecision:
    decision_id: str
    agent_name: str
    decision_type: str
    input_data: dict
    output_data: dict
    reasoning: str
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
