"""DynamoDB veri erişim katmanı - siparişler, hareketler, varlıklar ve stok.

Okuma hatalarında boş ya da kısmi liste döner ve hatayı loglar; hesaplama
katmanı (faturalama uyarıları) her zaman iyi biçimli veri alır.
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from src.config import REGION, TABLES, TableNames
from src.models.logistics import (
    Entity,
    EntityRole,
    InventoryItem,
    ORDER_CHECKPOINTS,
    Movement,
    MovementKind,
    Order,
    Warehouse,
    as_utc,
)

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "---"


def _decimal_to_native(obj):
    if isinstance(obj, Decimal):
        return int(obj) if obj == int(obj) else float(obj)
    if isinstance(obj, dict):
        return {k: _decimal_to_native(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_decimal_to_native(i) for i in obj]
    return obj


def _native_to_decimal(obj):
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _native_to_decimal(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_native_to_decimal(i) for i in obj]
    return obj


# Postgres çıktısı: kısa ofset (+00, +0530) ve 1-9 haneli kesirli saniye
_FRACTION = re.compile(r"\.(\d+)")
_SHORT_OFFSET = re.compile(r"(\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?)([+-]\d{2})(\d{2})?$")


def _normalize_iso(text: str) -> str:
    text = _FRACTION.sub(lambda m: "." + m.group(1).ljust(6, "0")[:6], text, count=1)
    return _SHORT_OFFSET.sub(lambda m: f"{m.group(1)}{m.group(2)}:{m.group(3) or '00'}", text)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO 8601 zaman damgasını çözer; çözülemezse None."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(_normalize_iso(text))
    except ValueError:
        return None


def _collect(operation, **kwargs) -> list[dict]:
    """scan/query sonuçlarını LastEvaluatedKey bitene kadar toplar."""
    resp = operation(**kwargs)
    items = list(resp.get("Items", []))
    while resp.get("LastEvaluatedKey"):
        resp = operation(ExclusiveStartKey=resp["LastEvaluatedKey"], **kwargs)
        items.extend(resp.get("Items", []))
    return [_decimal_to_native(i) for i in items]


class LogisticsRepository:
    """Lojistik tablolarına okuma/yazma erişimi."""

    def __init__(
        self,
        dynamodb_resource: Optional[Any] = None,
        region_name: str = REGION,
        tables: TableNames = TABLES,
    ):
        self.dynamodb = dynamodb_resource or boto3.resource("dynamodb", region_name=region_name)
        self.tables = tables
        self.orders_table = self.dynamodb.Table(tables.orders)
        self.movements_table = self.dynamodb.Table(tables.movements)
        self.entities_table = self.dynamodb.Table(tables.entities)
        self.warehouses_table = self.dynamodb.Table(tables.warehouses)
        self.inventory_table = self.dynamodb.Table(tables.inventory)

    # --- Siparişler ---

    def list_active_orders(self) -> list[Order]:
        """Aktif siparişleri hareketleri ve müşteri adlarıyla birlikte döndürür."""
        try:
            items = _collect(self.orders_table.scan, FilterExpression=Attr("active").eq(True))
            names = self._entity_names()
        except ClientError as e:
            logger.error("Aktif siparişler okunamadı: %s", e)
            return []

        orders: list[Order] = []
        for item in items:
            try:
                movements = self._query_movements(item["order_id"])
            except ClientError as e:
                logger.warning("Hareketler okunamadı, sipariş atlanıyor [%s]: %s", item["order_id"], e)
                continue
            orders.append(self._to_order(item, names, movements))

        logger.info("%d aktif sipariş yüklendi", len(orders))
        return orders

    def list_orders(self, search: Optional[str] = None) -> list[Order]:
        """Tüm siparişler, en yeni önce; DO kodu, ürün veya BL numarasında arar."""
        try:
            items = _collect(self.orders_table.scan)
            names = self._entity_names()
        except ClientError as e:
            logger.error("Siparişler okunamadı: %s", e)
            return []

        if search:
            needle = search.strip().lower()
            items = [
                i
                for i in items
                if needle in str(i.get("do_code", "")).lower()
                or needle in str(i.get("product", "")).lower()
                or needle in str(i.get("bl_number", "")).lower()
            ]

        items.sort(key=lambda i: i.get("created_at") or "", reverse=True)
        return [self._to_order(i, names, []) for i in items]

    def get_order(self, order_id: str) -> Optional[Order]:
        try:
            resp = self.orders_table.get_item(Key={"order_id": order_id})
            if "Item" not in resp:
                return None
            item = _decimal_to_native(resp["Item"])
            movements = self._query_movements(order_id)
            names = self._entity_names()
        except ClientError as e:
            logger.error("Sipariş okunamadı [%s]: %s", order_id, e)
            return None
        return self._to_order(item, names, movements)

    def save_order(self, order: Order) -> Order:
        """Siparişi oluşturur veya günceller; `order_id` boşsa yeni kimlik atanır.

        Hareketler bu kayıtta tutulmaz, `record_movement` ile yazılır.
        """
        if not order.code.strip():
            raise ValueError("DO kodu zorunlu")
        unknown = set(order.checkpoints) - set(ORDER_CHECKPOINTS)
        if unknown:
            raise ValueError(f"Bilinmeyen süreç adımı: {', '.join(sorted(unknown))}")

        order.order_id = order.order_id or str(uuid.uuid4())
        order.created_at = order.created_at or datetime.now(timezone.utc).isoformat()
        item = {
            "order_id": order.order_id,
            "do_code": order.code.strip(),
            "product": order.product,
            "bl_number": order.bl_number,
            "client_id": order.client_id,
            "customs_agency_id": order.customs_agency_id,
            "packages": order.packages,
            "notes": order.notes,
            "active": order.active,
            "created_at": order.created_at,
            "checkpoints": {k: v for k, v in order.checkpoints.items() if v},
            "storage_billing_date": order.storage_billing_date,
        }
        try:
            self.orders_table.put_item(
                Item=_native_to_decimal({k: v for k, v in item.items() if v is not None})
            )
        except ClientError as e:
            logger.error("Sipariş kaydedilemedi [%s]: %s", order.code, e)
            raise
        logger.info("Sipariş kaydedildi: %s", order.code)
        return order

    # --- Hareketler ---

    def list_movements(self, order_id: str) -> list[Movement]:
        try:
            return self._query_movements(order_id)
        except ClientError as e:
            logger.error("Hareketler okunamadı [%s]: %s", order_id, e)
            return []

    def record_movement(
        self,
        order_id: str,
        kind: MovementKind,
        timestamp: datetime,
        packages: int = 0,
        gross_weight: float = 0.0,
        warehouse_id: Optional[str] = None,
    ) -> Movement:
        """Depo personelinin giriş/çıkış kaydını yazar."""
        movement = Movement(
            movement_id=str(uuid.uuid4()),
            order_id=order_id,
            kind=MovementKind(kind),
            timestamp=timestamp,
            packages=packages,
            gross_weight=gross_weight,
            warehouse_id=warehouse_id,
        )
        item = {
            "order_id": movement.order_id,
            "movement_id": movement.movement_id,
            "kind": movement.kind.value,
            "timestamp": movement.timestamp.isoformat(),
            "packages": movement.packages,
            "gross_weight": movement.gross_weight,
        }
        if warehouse_id:
            item["warehouse_id"] = warehouse_id
        try:
            self.movements_table.put_item(Item=_native_to_decimal(item))
        except ClientError as e:
            logger.error("Hareket kaydedilemedi [%s]: %s", order_id, e)
            raise
        logger.info("Hareket kaydedildi: %s %s", order_id, movement.kind.value)
        return movement

    def _query_movements(self, order_id: str) -> list[Movement]:
        items = _collect(
            self.movements_table.query,
            KeyConditionExpression=Key("order_id").eq(order_id),
        )
        movements: list[Movement] = []
        for item in items:
            timestamp = parse_timestamp(item.get("timestamp"))
            if timestamp is None:
                logger.warning(
                    "Geçersiz zaman damgası, hareket atlanıyor [%s/%s]: %r",
                    order_id, item.get("movement_id"), item.get("timestamp"),
                )
                continue
            try:
                kind = MovementKind(item.get("kind"))
            except ValueError:
                logger.warning("Bilinmeyen hareket tipi [%s]: %r", order_id, item.get("kind"))
                continue
            movements.append(
                Movement(
                    movement_id=item.get("movement_id", ""),
                    order_id=order_id,
                    kind=kind,
                    timestamp=timestamp,
                    packages=int(item.get("packages", 0)),
                    gross_weight=float(item.get("gross_weight", 0.0)),
                    warehouse_id=item.get("warehouse_id"),
                )
            )
        movements.sort(key=lambda m: as_utc(m.timestamp))
        return movements

    # --- Varlıklar ve depolar ---

    def list_entities(self, role: Optional[EntityRole] = None) -> list[Entity]:
        """Müşteri / gümrük acentesi kayıtları, ada göre sıralı."""
        try:
            items = _collect(self.entities_table.scan)
        except ClientError as e:
            logger.error("Varlıklar okunamadı: %s", e)
            return []

        entities = [
            Entity(
                entity_id=i["entity_id"],
                name=i.get("name", ""),
                tax_id=i.get("tax_id", ""),
                email=i.get("email", ""),
                phone=i.get("phone", ""),
                is_client=bool(i.get("is_client", False)),
                is_customs_agency=bool(i.get("is_customs_agency", False)),
            )
            for i in items
        ]
        if role == EntityRole.CLIENT:
            entities = [e for e in entities if e.is_client]
        elif role == EntityRole.CUSTOMS_AGENCY:
            entities = [e for e in entities if e.is_customs_agency]
        return sorted(entities, key=lambda e: e.name.lower())

    def save_entity(self, entity: Entity) -> Entity:
        """Müşteri / acente kaydını oluşturur veya günceller.

        Ad zorunludur ve kayıt en az bir role (müşteri veya gümrük acentesi) sahip olmalıdır.
        """
        if not entity.name.strip():
            raise ValueError("Varlık adı zorunlu")
        if not (entity.is_client or entity.is_customs_agency):
            raise ValueError("Varlık müşteri veya gümrük acentesi olmalı")

        entity.entity_id = entity.entity_id or str(uuid.uuid4())
        item = {
            "entity_id": entity.entity_id,
            "name": entity.name.strip(),
            "tax_id": entity.tax_id,
            "email": entity.email,
            "phone": entity.phone,
            "is_client": entity.is_client,
            "is_customs_agency": entity.is_customs_agency,
        }
        try:
            self.entities_table.put_item(Item=item)
        except ClientError as e:
            logger.error("Varlık kaydedilemedi [%s]: %s", entity.name, e)
            raise
        logger.info("Varlık kaydedildi: %s", entity.name)
        return entity

    def delete_entity(self, entity_id: str) -> None:
        try:
            self.entities_table.delete_item(Key={"entity_id": entity_id})
        except ClientError as e:
            logger.error("Varlık silinemedi [%s]: %s", entity_id, e)
            raise
        logger.info("Varlık silindi: %s", entity_id)

    def list_warehouses(self) -> list[Warehouse]:
        try:
            items = _collect(self.warehouses_table.scan)
        except ClientError as e:
            logger.error("Depolar okunamadı: %s", e)
            return []
        warehouses = [
            Warehouse(
                warehouse_id=i["warehouse_id"],
                name=i.get("name", i["warehouse_id"]),
                code=i.get("code", ""),
                location=i.get("location", ""),
            )
            for i in items
        ]
        return sorted(warehouses, key=lambda w: w.name)

    # --- Stok ---

    def list_inventory(self, warehouse_id: Optional[str] = None) -> list[InventoryItem]:
        """Pozitif stoklu kayıtlar; sipariş, müşteri ve depo adlarıyla birleştirilmiş."""
        try:
            if warehouse_id:
                items = _collect(
                    self.inventory_table.query,
                    KeyConditionExpression=Key("warehouse_id").eq(warehouse_id),
                )
            else:
                items = _collect(self.inventory_table.scan)
            orders = {o["order_id"]: o for o in _collect(self.orders_table.scan)}
            names = self._entity_names()
            warehouse_names = {w.warehouse_id: w.name for w in self.list_warehouses()}
        except ClientError as e:
            logger.error("Stok okunamadı: %s", e)
            return []

        result: list[InventoryItem] = []
        for item in items:
            packages = int(item.get("packages", 0))
            if packages <= 0:
                continue
            order = orders.get(item["order_id"], {})
            client_id = order.get("client_id")
            result.append(
                InventoryItem(
                    warehouse_id=item["warehouse_id"],
                    order_id=item["order_id"],
                    packages=packages,
                    current_weight=float(item.get("current_weight", 0.0)),
                    updated_at=item.get("updated_at"),
                    warehouse_name=warehouse_names.get(item["warehouse_id"], UNKNOWN_NAME),
                    order_code=order.get("do_code", ""),
                    product=order.get("product", ""),
                    client_id=client_id,
                    client_name=names.get(client_id, UNKNOWN_NAME),
                )
            )
        return result

    # --- Yardımcılar ---

    def _entity_names(self) -> dict[str, str]:
        return {i["entity_id"]: i.get("name", UNKNOWN_NAME) for i in _collect(self.entities_table.scan)}

    @staticmethod
    def _to_order(item: dict, names: dict[str, str], movements: list[Movement]) -> Order:
        return Order(
            order_id=item["order_id"],
            code=item.get("do_code", ""),
            client_name=names.get(item.get("client_id"), UNKNOWN_NAME),
            active=bool(item.get("active", True)),
            movements=movements,
            product=item.get("product", ""),
            bl_number=item.get("bl_number", ""),
            client_id=item.get("client_id"),
            customs_agency_id=item.get("customs_agency_id"),
            customs_agency_name=names.get(item.get("customs_agency_id"), UNKNOWN_NAME),
            packages=int(item.get("packages", 0)),
            notes=item.get("notes", ""),
            created_at=item.get("created_at"),
            checkpoints=dict(item.get("checkpoints") or {}),
            storage_billing_date=item.get("storage_billing_date"),
        )
