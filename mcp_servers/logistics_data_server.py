"""
Logistics Data MCP Server

Provides tools for orders, storage billing alerts, inventory and registry data stored in DynamoDB.
"""

import json
import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
import env_loader  # noqa: F401

from typing import Dict, List, Optional
from mcp.server import Server
from mcp.types import Tool, TextContent

from src.agents.storage_billing import resolve_reference_date
from src.billing.storage_alerts import compute_storage_alerts
from src.data.inventory import filter_inventory, summarize_inventory
from src.data.order_repository import LogisticsRepository
from src.data.pagination import paginate
from src.models.logistics import ORDER_CHECKPOINTS, Entity, EntityRole, Order

app = Server("logistics-data")

_repository: Optional[LogisticsRepository] = None


def get_repository() -> LogisticsRepository:
    global _repository
    if _repository is None:
        _repository = LogisticsRepository()
    return _repository


def _result(data):
    return [TextContent(type="text", text=json.dumps(data, indent=2, ensure_ascii=False, default=str))]


def _page_payload(page) -> Dict:
    return {
        "page": page.page,
        "per_page": page.per_page,
        "total_items": page.total_items,
        "total_pages": page.total_pages,
    }


_PAGING = {
    "page": {"type": "integer", "default": 1},
    "per_page": {"type": "integer", "default": 10},
}


@app.list_tools()
async def list_tools() -> List[Tool]:
    return [
        Tool(name="list_active_orders", description="List active orders with their warehouse movements",
             inputSchema={"type": "object", "properties": {}}),
        Tool(name="search_orders", description="Search orders by DO code, product or BL number (newest first)",
             inputSchema={"type": "object", "properties": {"search": {"type": "string"}, **_PAGING}}),
        Tool(name="get_order", description="Get a single order with its movements",
             inputSchema={"type": "object", "properties": {"order_id": {"type": "string"}}, "required": ["order_id"]}),
        Tool(name="get_storage_billing_alerts",
             description="Orders near or past the 30-day free storage limit, most urgent first",
             inputSchema={"type": "object", "properties": {
                 "reference_date": {"type": "string", "description": "Optional ISO 8601 evaluation time"},
                 **_PAGING}}),
        Tool(name="get_inventory", description="List positive stock, optionally filtered by warehouse, client or text",
             inputSchema={"type": "object", "properties": {
                 "warehouse_id": {"type": "string"},
                 "client_id": {"type": "string"},
                 "search": {"type": "string"},
                 **_PAGING}}),
        Tool(name="get_inventory_summary", description="Total packages, weight and references in stock",
             inputSchema={"type": "object", "properties": {"warehouse_id": {"type": "string"}}}),
        Tool(name="list_warehouses", description="List all warehouses",
             inputSchema={"type": "object", "properties": {}}),
        Tool(name="list_entities", description="List clients and customs agencies",
             inputSchema={"type": "object", "properties": {
                 "role": {"type": "string", "enum": [r.value for r in EntityRole]}}}),
        Tool(name="save_order", description="Create or update an order (DO) with its customs checkpoint dates",
             inputSchema={"type": "object", "properties": {
                 "order_id": {"type": "string", "description": "Omit to create a new order"},
                 "code": {"type": "string"},
                 "product": {"type": "string"},
                 "bl_number": {"type": "string"},
                 "client_id": {"type": "string"},
                 "customs_agency_id": {"type": "string"},
                 "packages": {"type": "integer"},
                 "notes": {"type": "string"},
                 "active": {"type": "boolean", "default": True},
                 "checkpoints": {"type": "object", "properties": {k: {"type": "string"} for k in ORDER_CHECKPOINTS}},
                 "storage_billing_date": {"type": "string"}},
                 "required": ["code"]}),
        Tool(name="save_entity", description="Create or update a client / customs agency",
             inputSchema={"type": "object", "properties": {
                 "entity_id": {"type": "string", "description": "Omit to create a new entity"},
                 "name": {"type": "string"},
                 "tax_id": {"type": "string"},
                 "email": {"type": "string"},
                 "phone": {"type": "string"},
                 "is_client": {"type": "boolean"},
                 "is_customs_agency": {"type": "boolean"}},
                 "required": ["name"]}),
        Tool(name="delete_entity", description="Delete a client / customs agency",
             inputSchema={"type": "object", "properties": {"entity_id": {"type": "string"}}, "required": ["entity_id"]}),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: dict) -> List[TextContent]:
    handlers = {
        "list_active_orders": lambda a: list_active_orders(),
        "search_orders": lambda a: search_orders(a.get("search"), a.get("page", 1), a.get("per_page", 10)),
        "get_order": lambda a: get_order(a["order_id"]),
        "get_storage_billing_alerts": lambda a: get_storage_billing_alerts(
            a.get("reference_date"), a.get("page", 1), a.get("per_page", 10)),
        "get_inventory": lambda a: get_inventory(
            a.get("warehouse_id"), a.get("client_id"), a.get("search"), a.get("page", 1), a.get("per_page", 10)),
        "get_inventory_summary": lambda a: get_inventory_summary(a.get("warehouse_id")),
        "list_warehouses": lambda a: list_warehouses(),
        "list_entities": lambda a: list_entities(a.get("role")),
        "save_order": lambda a: save_order(a),
        "save_entity": lambda a: save_entity(a),
        "delete_entity": lambda a: delete_entity(a["entity_id"]),
    }
    handler = handlers.get(name)
    if not handler:
        raise ValueError(f"Unknown tool: {name}")
    return _result(handler(arguments or {}))


# --- Implementation ---

def list_active_orders() -> Dict:
    try:
        orders = get_repository().list_active_orders()
        return {"success": True, "count": len(orders), "data": [o.to_dict() for o in orders]}
    except Exception as e:
        return {"success": False, "error": str(e)}


def search_orders(search: Optional[str] = None, page: int = 1, per_page: int = 10) -> Dict:
    try:
        orders = get_repository().list_orders(search)
        result = paginate(orders, page=page, per_page=per_page)
        return {"success": True, **_page_payload(result), "data": [o.to_dict() for o in result.items]}
    except Exception as e:
        return {"success": False, "error": str(e)}


def get_order(order_id: str) -> Dict:
    try:
        order = get_repository().get_order(order_id)
        if order is None:
            return {"success": False, "error": "Order not found"}
        return {"success": True, "data": order.to_dict()}
    except Exception as e:
        return {"success": False, "error": str(e)}


def get_storage_billing_alerts(reference_date: Optional[str] = None, page: int = 1, per_page: int = 10) -> Dict:
    try:
        now = resolve_reference_date(reference_date)
        alerts = compute_storage_alerts(get_repository().list_active_orders(), now)
        result = paginate(alerts, page=page, per_page=per_page)
        return {
            "success": True,
            "reference_date": now.isoformat(),
            "overdue_count": sum(1 for a in alerts if a.is_overdue),
            **_page_payload(result),
            "data": [a.to_dict() for a in result.items],
        }
    except Exception as e:
        return {"success": False, "error": str(e)}


def get_inventory(warehouse_id: Optional[str] = None, client_id: Optional[str] = None,
                  search: Optional[str] = None, page: int = 1, per_page: int = 10) -> Dict:
    try:
        items = get_repository().list_inventory(warehouse_id)
        items = filter_inventory(items, client_id=client_id, search=search)
        result = paginate(items, page=page, per_page=per_page)
        return {"success": True, **_page_payload(result), "data": [i.to_dict() for i in result.items]}
    except Exception as e:
        return {"success": False, "error": str(e)}


def get_inventory_summary(warehouse_id: Optional[str] = None) -> Dict:
    try:
        summary = summarize_inventory(get_repository().list_inventory(warehouse_id))
        return {"success": True, "data": summary.__dict__}
    except Exception as e:
        return {"success": False, "error": str(e)}


def list_warehouses() -> Dict:
    try:
        warehouses = get_repository().list_warehouses()
        return {"success": True, "count": len(warehouses), "data": [w.__dict__ for w in warehouses]}
    except Exception as e:
        return {"success": False, "error": str(e)}


def list_entities(role: Optional[str] = None) -> Dict:
    try:
        entities = get_repository().list_entities(EntityRole(role) if role else None)
        return {"success": True, "count": len(entities), "data": [e.__dict__ for e in entities]}
    except Exception as e:
        return {"success": False, "error": str(e)}


def save_order(fields: Dict) -> Dict:
    try:
        order = Order(
            order_id=fields.get("order_id", ""),
            code=fields.get("code", ""),
            client_name="",
            active=fields.get("active", True),
            product=fields.get("product", ""),
            bl_number=fields.get("bl_number", ""),
            client_id=fields.get("client_id"),
            customs_agency_id=fields.get("customs_agency_id"),
            packages=fields.get("packages", 0),
            notes=fields.get("notes", ""),
            checkpoints=fields.get("checkpoints") or {},
            storage_billing_date=fields.get("storage_billing_date"),
        )
        saved = get_repository().save_order(order)
        return {"success": True, "order_id": saved.order_id, "created_at": saved.created_at}
    except Exception as e:
        return {"success": False, "error": str(e)}


def save_entity(fields: Dict) -> Dict:
    try:
        entity = Entity(
            entity_id=fields.get("entity_id", ""),
            name=fields.get("name", ""),
            tax_id=fields.get("tax_id", ""),
            email=fields.get("email", ""),
            phone=fields.get("phone", ""),
            is_client=bool(fields.get("is_client", False)),
            is_customs_agency=bool(fields.get("is_customs_agency", False)),
        )
        saved = get_repository().save_entity(entity)
        return {"success": True, "entity_id": saved.entity_id}
    except Exception as e:
        return {"success": False, "error": str(e)}


def delete_entity(entity_id: str) -> Dict:
    try:
        get_repository().delete_entity(entity_id)
        return {"success": True, "entity_id": entity_id}
    except Exception as e:
        return {"success": False, "error": str(e)}


if __name__ == "__main__":
    import asyncio
    from mcp.server.stdio import stdio_server

    async def run():
        async with stdio_server() as (read, write):
            await app.run(read, write, app.create_initialization_options())

    asyncio.run(run())
