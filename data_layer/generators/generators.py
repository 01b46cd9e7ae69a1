"""Simülasyon verisi üretim modülü.

3 depo, 8 müşteri, 3 gümrük acentesi ve ~60 sipariş (DO) üretir. Her siparişin
giriş/çıkış hareketleri referans tarihe göre geriye doğru yerleştirilir.

Faturalama senaryoları (sabit, her üretimde bulunur):
- Ücretsiz süre sınırına yaklaşan siparişler (20-29 gün)
- Tam 30. günde olan sipariş
- Süresi aşılmış siparişler (45, 75 gün)
- Çıkışı yapılmış eski sipariş (uyarı üretmemeli)
- Birden fazla girişli sipariş (en erken giriş sayılmalı)
- Hiç hareketi olmayan sipariş
- Pasif sipariş
"""
import json
import os
import random
from dataclasses import asdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from .models import EntityRow, MovementRow, OrderRow, WarehouseRow


# --- SABİTLER ---

WAREHOUSES = [
    WarehouseRow("WH001", "Serbest Bölge Ana Depo", "ZF-01", "Serbest Bölge, Blok A"),
    WarehouseRow("WH002", "Soğuk Hava Deposu", "ZF-02", "Serbest Bölge, Blok C"),
    WarehouseRow("WH003", "Açık Saha", "ZF-03", "Serbest Bölge, Saha 2"),
]

CLIENTS = [
    "Anadolu İthalat A.Ş.",
    "Marmara Teknoloji Ltd.",
    "Ege Otomotiv Yedek Parça",
    "Karadeniz Gıda San.",
    "Boğaziçi Elektronik",
    "Akdeniz Tekstil",
    "Trakya Makine",
    "Kapadokya Mobilya",
]

CUSTOMS_AGENCIES = [
    "Liman Gümrük Müşavirliği",
    "Kuzey Gümrük Hizmetleri",
    "Delta Gümrükleme",
]

PRODUCTS = [
    "Elektronik Komponent", "Dizüstü Bilgisayar", "Yedek Lastik", "Tekstil Rulosu",
    "Endüstriyel Pompa", "Kuru Gıda", "Mobilya Aksamı", "Medikal Sarf Malzeme",
]

# (kod son eki, giriş günleri önce, çıkış günleri önce, aktif)
BILLING_SCENARIOS = [
    ("NEAR-05", [25], None, True),
    ("NEAR-01", [29], None, True),
    ("EDGE-20", [20], None, True),
    ("EDGE-19", [19], None, True),
    ("DUE-30", [30], None, True),
    ("OVER-45", [45], None, True),
    ("OVER-75", [75], None, True),
    ("DISPATCHED", [50], 5, True),
    ("MULTI", [50, 10], None, True),
    ("EMPTY", [], None, True),
    ("INACTIVE", [60], None, False),
]


# --- ÜRETİM FONKSİYONLARI ---

def generate_warehouses() -> List[dict]:
    return [asdict(w) for w in WAREHOUSES]


def generate_entities() -> List[dict]:
    """Müşteri ve gümrük acentesi kayıtlarını üretir."""
    entities = []
    for i, name in enumerate(CLIENTS, start=1):
        entities.append(asdict(EntityRow(
            entity_id=f"CLI{i:03d}",
            name=name,
            tax_id=f"{random.randint(1000000000, 9999999999)}",
            email=f"lojistik{i}@musteri.example",
            phone=f"+90 5{random.randint(10, 59)} {random.randint(100, 999)} {random.randint(1000, 9999)}",
            is_client=True,
        )))
    for i, name in enumerate(CUSTOMS_AGENCIES, start=1):
        entities.append(asdict(EntityRow(
            entity_id=f"AGN{i:03d}",
            name=name,
            tax_id=f"{random.randint(1000000000, 9999999999)}",
            email=f"operasyon{i}@acente.example",
            phone=f"+90 212 {random.randint(100, 999)} {random.randint(1000, 9999)}",
            is_customs_agency=True,
        )))
    return entities


def _movement(order_id: str, kind: str, moment: datetime, packages: int, weight: float) -> dict:
    return asdict(MovementRow(
        order_id=order_id,
        movement_id=f"{order_id}-{kind[:3].upper()}-{moment.strftime('%Y%m%d%H%M')}",
        kind=kind,
        timestamp=moment.isoformat(),
        packages=packages,
        gross_weight=weight,
        warehouse_id=random.choice(WAREHOUSES).warehouse_id,
    ))


def _order(order_id: str, code: str, created: datetime, active: bool, notes: str = "") -> dict:
    return asdict(OrderRow(
        order_id=order_id,
        do_code=code,
        product=random.choice(PRODUCTS),
        bl_number=f"BL-{random.randint(100000, 999999)}",
        client_id=f"CLI{random.randint(1, len(CLIENTS)):03d}",
        customs_agency_id=f"AGN{random.randint(1, len(CUSTOMS_AGENCIES)):03d}",
        packages=random.randint(5, 400),
        active=active,
        created_at=created.isoformat(),
        notes=notes,
    ))


def generate_orders(reference: datetime, random_orders: int = 50) -> Dict[str, List[dict]]:
    """Siparişleri ve hareketlerini üretir.

    Rastgele siparişlerin yaklaşık yarısı çıkış yapmış, kalanlar depoda bekler.
    """
    orders: List[dict] = []
    movements: List[dict] = []

    for n, (suffix, intake_days, dispatch_days, active) in enumerate(BILLING_SCENARIOS, start=1):
        order_id = f"DO-S{n:03d}"
        first = max(intake_days) if intake_days else 1
        orders.append(_order(order_id, f"DO-{suffix}", reference - timedelta(days=first + 2), active,
                             notes=f"Faturalama senaryosu: {suffix}"))
        for days in intake_days:
            # Saat bileşeni gün sayımını değiştirmemeli: aynı gün içinde biraz önce
            moment = reference - timedelta(days=days, hours=random.randint(0, 6))
            movements.append(_movement(order_id, "intake", moment, random.randint(5, 100),
                                       round(random.uniform(50, 5000), 1)))
        if dispatch_days is not None:
            moment = reference - timedelta(days=dispatch_days)
            movements.append(_movement(order_id, "dispatch", moment, random.randint(1, 50),
                                       round(random.uniform(20, 2000), 1)))

    for n in range(1, random_orders + 1):
        order_id = f"DO-{n:04d}"
        days_ago = random.randint(1, 120)
        arrival = reference - timedelta(days=days_ago, hours=random.randint(0, 23))
        orders.append(_order(order_id, f"DO-{reference.year}-{n:04d}", arrival - timedelta(days=2), True))
        movements.append(_movement(order_id, "intake", arrival, random.randint(5, 300),
                                   round(random.uniform(50, 8000), 1)))

        # Kademeli teslimat: bazı siparişlere ikinci giriş
        if random.random() < 0.2 and days_ago > 3:
            later = arrival + timedelta(days=random.randint(1, days_ago - 1))
            movements.append(_movement(order_id, "intake", later, random.randint(1, 50),
                                       round(random.uniform(10, 1000), 1)))

        if random.random() < 0.5 and days_ago > 2:
            out = arrival + timedelta(days=random.randint(1, days_ago - 1))
            movements.append(_movement(order_id, "dispatch", out, random.randint(1, 300),
                                       round(random.uniform(10, 8000), 1)))

    return {"orders": orders, "movements": movements}


def generate_inventory(orders: List[dict], movements: List[dict]) -> List[dict]:
    """Çıkışı olmayan siparişler için depo başına stok kaydı üretir."""
    dispatched = {m["order_id"] for m in movements if m["kind"] == "dispatch"}
    stock: Dict[tuple, dict] = {}
    for m in movements:
        if m["kind"] != "intake" or m["order_id"] in dispatched:
            continue
        key = (m["warehouse_id"], m["order_id"])
        row = stock.setdefault(key, {
            "warehouse_id": m["warehouse_id"],
            "order_id": m["order_id"],
            "packages": 0,
            "current_weight": 0.0,
            "updated_at": m["timestamp"],
        })
        row["packages"] += m["packages"]
        row["current_weight"] = round(row["current_weight"] + m["gross_weight"], 1)
        row["updated_at"] = max(row["updated_at"], m["timestamp"])
    return list(stock.values())


def save_json(data, filepath: str):
    os.makedirs(os.path.dirname(filepath), exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    print(f"  ✓ {filepath} ({len(data)} kayıt)")


def generate_all(output_dir: str = "data_layer/data", seed: int = 42,
                 reference: Optional[datetime] = None):
    """Tüm simülasyon verisini üretir ve JSON olarak kaydeder."""
    random.seed(seed)
    reference = reference or datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)

    print(f"🏭 Simülasyon verisi üretiliyor (referans: {reference.isoformat()})\n")
    warehouses = generate_warehouses()
    save_json(warehouses, f"{output_dir}/warehouses.json")

    entities = generate_entities()
    save_json(entities, f"{output_dir}/entities.json")

    generated = generate_orders(reference)
    save_json(generated["orders"], f"{output_dir}/orders.json")
    save_json(generated["movements"], f"{output_dir}/movements.json")

    inventory = generate_inventory(generated["orders"], generated["movements"])
    save_json(inventory, f"{output_dir}/inventory.json")

    print(f"\n{'='*60}")
    print("✅ Üretim tamamlandı!")
    print(f"   Depolar: {len(warehouses)}")
    print(f"   Müşteri/acente: {len(entities)}")
    print(f"   Siparişler: {len(generated['orders'])} ({len(BILLING_SCENARIOS)} faturalama senaryosu)")
    print(f"   Hareketler: {len(generated['movements'])}")
    print(f"   Stok kayıtları: {len(inventory)}")
    print(f"   Çıktı dizini: {output_dir}/")

    return {
        "warehouses": warehouses,
        "entities": entities,
        "orders": generated["orders"],
        "movements": generated["movements"],
        "inventory": inventory,
    }


if __name__ == "__main__":
    generate_all()
