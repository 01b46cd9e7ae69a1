"""DynamoDB tablo oluşturma ve veri yükleme.

6 tablo: Warehouses, Entities, Orders, Movements, Inventory, AgentDecisions
"""
import boto3
import json
import os
import sys
from decimal import Decimal
from botocore.exceptions import ClientError

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
import env_loader  # noqa: F401

from src.config import REGION, TABLES


TABLE_DEFINITIONS = [
    {
        "TableName": TABLES.warehouses,
        "KeySchema": [
            {"AttributeName": "warehouse_id", "KeyType": "HASH"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "warehouse_id", "AttributeType": "S"},
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": TABLES.entities,
        "KeySchema": [
            {"AttributeName": "entity_id", "KeyType": "HASH"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "entity_id", "AttributeType": "S"},
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": TABLES.orders,
        "KeySchema": [
            {"AttributeName": "order_id", "KeyType": "HASH"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "order_id", "AttributeType": "S"},
            {"AttributeName": "do_code", "AttributeType": "S"},
        ],
        "GlobalSecondaryIndexes": [
            {
                "IndexName": "CodeIndex",
                "KeySchema": [
                    {"AttributeName": "do_code", "KeyType": "HASH"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": TABLES.movements,
        "KeySchema": [
            {"AttributeName": "order_id", "KeyType": "HASH"},
            {"AttributeName": "movement_id", "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "order_id", "AttributeType": "S"},
            {"AttributeName": "movement_id", "AttributeType": "S"},
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": TABLES.inventory,
        "KeySchema": [
            {"AttributeName": "warehouse_id", "KeyType": "HASH"},
            {"AttributeName": "order_id", "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "warehouse_id", "AttributeType": "S"},
            {"AttributeName": "order_id", "AttributeType": "S"},
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": TABLES.decisions,
        "KeySchema": [
            {"AttributeName": "decision_id", "KeyType": "HASH"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "decision_id", "AttributeType": "S"},
            {"AttributeName": "agent_name", "AttributeType": "S"},
            {"AttributeName": "timestamp", "AttributeType": "S"},
        ],
        "GlobalSecondaryIndexes": [
            {
                "IndexName": "AgentTimeIndex",
                "KeySchema": [
                    {"AttributeName": "agent_name", "KeyType": "HASH"},
                    {"AttributeName": "timestamp", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
]

# Yerel JSON dosyası -> tablo adı
DATA_FILES = {
    "warehouses.json": TABLES.warehouses,
    "entities.json": TABLES.entities,
    "orders.json": TABLES.orders,
    "movements.json": TABLES.movements,
    "inventory.json": TABLES.inventory,
}


def create_tables(region: str = REGION):
    """Tüm DynamoDB tablolarını oluşturur."""
    dynamodb = boto3.client("dynamodb", region_name=region)

    for table_def in TABLE_DEFINITIONS:
        table_name = table_def["TableName"]
        try:
            dynamodb.describe_table(TableName=table_name)
            print(f"  ⏭️  {table_name} zaten mevcut, atlanıyor")
        except ClientError as e:
            if e.response["Error"]["Code"] == "ResourceNotFoundException":
                print(f"  🔨 {table_name} oluşturuluyor...")
                dynamodb.create_table(**table_def)
                # Tablonun aktif olmasını bekle
                waiter = dynamodb.get_waiter("table_exists")
                waiter.wait(TableName=table_name)
                print(f"  ✓  {table_name} oluşturuldu")
            else:
                raise


def convert_floats(obj):
    """DynamoDB float kabul etmez; Decimal'e çevirir, None alanları atar."""
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: convert_floats(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, list):
        return [convert_floats(i) for i in obj]
    return obj


def load_data_to_table(table_name: str, data: list, region: str = REGION, dynamodb_resource=None):
    """JSON verisini DynamoDB tablosuna batch write ile yükler."""
    dynamodb = dynamodb_resource or boto3.resource("dynamodb", region_name=region)
    table = dynamodb.Table(table_name)
    with table.batch_writer() as batch:
        for item in data:
            batch.put_item(Item=convert_floats(item))
    print(f"  ✓  {table_name}: {len(data)} kayıt yüklendi")


def _table_has_data(table_name: str, region: str = REGION) -> bool:
    """Tabloda veri var mı kontrol eder (hızlı scan, 1 item)."""
    dynamodb = boto3.client("dynamodb", region_name=region)
    resp = dynamodb.scan(TableName=table_name, Limit=1, Select="COUNT")
    return resp.get("Count", 0) > 0


def load_all_data(data_dir: str = "data_layer/data", region: str = REGION):
    """Tüm JSON verilerini DynamoDB'ye yükler (zaten yüklüyse atlar)."""
    print("\n📤 DynamoDB'ye veri yükleniyor...\n")

    for filename, table_name in DATA_FILES.items():
        if _table_has_data(table_name, region):
            print(f"  ⏭️  {table_name} zaten dolu, atlanıyor")
            continue
        path = os.path.join(data_dir, filename)
        if not os.path.exists(path):
            print(f"  ⚠️  {path} bulunamadı, atlanıyor")
            continue
        with open(path, "r", encoding="utf-8") as f:
            load_data_to_table(table_name, json.load(f), region)

    print("\n✅ Tüm veriler DynamoDB'ye yüklendi!")


def delete_tables(region: str = REGION):
    """Tüm tabloları siler (dikkatli kullan)."""
    dynamodb = boto3.client("dynamodb", region_name=region)
    for table_def in TABLE_DEFINITIONS:
        table_name = table_def["TableName"]
        try:
            dynamodb.delete_table(TableName=table_name)
            print(f"  🗑️  {table_name} silindi")
        except ClientError:
            print(f"  ⏭️  {table_name} bulunamadı, atlanıyor")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "--delete":
        print("🗑️  Tablolar siliniyor...")
        delete_tables()
    else:
        print("🏗️  DynamoDB tabloları oluşturuluyor...\n")
        create_tables()
        load_all_data()
