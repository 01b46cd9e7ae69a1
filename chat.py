"""
Lojistik asistani ile interaktif sohbet arayuzu - MCP Server entegrasyonlu.

MCP server subprocess olarak baslatilir, siparis/stok verisi MCP uzerinden okunur.
Kullanim:
    python chat.py
"""

import json
import os
import sys
import asyncio
import logging
from collections import defaultdict
from contextlib import AsyncExitStack

import env_loader  # noqa: F401

import boto3
from mcp.client.stdio import stdio_client, StdioServerParameters
from mcp.client.session import ClientSession

from src.agents.logistics_assistant import LogisticsAssistantAgent
from src.config import REGION

# Logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")
logger = logging.getLogger("chat")
# MCP log'larini biraz kisalim
logging.getLogger("mcp").setLevel(logging.WARNING)

MCP_SERVERS = {
    "logistics-data": "mcp_servers/logistics_data_server.py",
}


# ============================================================
# MCP Client Manager
# ============================================================

class MCPManager:
    """MCP server'lari subprocess olarak baslatir ve tool call yapar."""

    def __init__(self, servers: dict = None):
        self._servers = servers or MCP_SERVERS
        self._sessions: dict[str, ClientSession] = {}
        self._tools: dict[str, dict] = {}  # tool_name -> {server, schema}
        self._exit_stack = AsyncExitStack()

    async def start(self):
        """Tum MCP server'lari baslat."""
        for name, script in self._servers.items():
            try:
                params = StdioServerParameters(
                    command=sys.executable,
                    args=[script],
                    env={**os.environ, "AWS_DEFAULT_REGION": REGION},
                )
                read, write = await self._exit_stack.enter_async_context(stdio_client(params))
                session = await self._exit_stack.enter_async_context(ClientSession(read, write))
                await session.initialize()
                self._sessions[name] = session

                tools_resp = await session.list_tools()
                for tool in tools_resp.tools:
                    self._tools[tool.name] = {"server": name, "schema": tool.inputSchema, "description": tool.description}

                logger.info("MCP server baslatildi: %s (%d tool)", name, len(tools_resp.tools))
            except Exception as e:
                logger.error("MCP server baslatilamadi [%s]: %s", name, e)

    async def call_tool(self, tool_name: str, arguments: dict) -> dict:
        """Bir MCP tool'u cagir."""
        tool_info = self._tools.get(tool_name)
        if not tool_info:
            return {"success": False, "error": f"Unknown tool: {tool_name}"}

        session = self._sessions.get(tool_info["server"])
        if not session:
            return {"success": False, "error": f"Server not connected: {tool_info['server']}"}

        try:
            logger.info("MCP call: %s.%s(%s)", tool_info["server"], tool_name, json.dumps(arguments, ensure_ascii=False)[:200])
            result = await session.call_tool(tool_name, arguments)
            for content in result.content:
                if hasattr(content, "text"):
                    data = json.loads(content.text)
                    logger.info("MCP result: %s -> %s", tool_name, "OK" if data.get("success", True) else data.get("error", "?"))
                    return data
            return {"success": False, "error": "No text content in response"}
        except Exception as e:
            logger.error("MCP call error [%s]: %s", tool_name, e)
            return {"success": False, "error": str(e)}

    def list_tools(self) -> dict:
        return self._tools

    async def stop(self):
        """Tum server'lari kapat."""
        try:
            await self._exit_stack.aclose()
        except (asyncio.CancelledError, Exception) as e:
            logger.debug("MCP shutdown (beklenen): %s", e)


# ============================================================
# MCP uzerinden veri yukleme
# ============================================================

async def load_records_mcp(mcp: MCPManager) -> list:
    """Aktif siparisleri faturalama durumlariyla birlikte asistan baglami olarak yukler."""
    orders = await mcp.call_tool("list_active_orders", {})
    if not orders.get("success"):
        print(f"  ⚠️ Siparisler yuklenemedi: {orders.get('error')}")
        return []

    alerts = await mcp.call_tool("get_storage_billing_alerts", {"per_page": 1000})
    billing = {}
    if alerts.get("success"):
        billing = {a["order_id"]: a for a in alerts["data"]}

    records = []
    for order in orders["data"]:
        record = dict(order)
        if order["order_id"] in billing:
            record["storage_billing"] = billing[order["order_id"]]
        records.append(record)
    print(f"  {len(records)} aktif siparis yuklendi (MCP), {len(billing)} faturalama uyarisi")
    return records


def format_alerts(result: dict) -> str:
    """get_storage_billing_alerts sonucunu tablo metnine cevirir."""
    if not result.get("success"):
        return f"❌ Uyarilar alinamadi: {result.get('error')}"
    if not result["data"]:
        return "✅ Faturalama sinirina yaklasan siparis yok."

    lines = [
        f"📅 Depolama Faturalama Uyarilari ({result['total_items']} adet, "
        f"{result['overdue_count']} gecikmis) - sayfa {result['page']}/{result['total_pages']}",
        f"  {'DO':<14}{'Musteri':<28}{'Giris':<12}{'Gun':>5}{'Kalan':>7}{'Ay':>4}",
    ]
    for a in result["data"]:
        icon = "🔴" if a["is_overdue"] else "🟡"
        lines.append(
            f"{icon} {a['order_code']:<13}{a['client_name'][:27]:<28}{a['arrival_date']:<12}"
            f"{a['days_elapsed']:>5}{a['days_remaining']:>7}{a['months_billable']:>4}"
        )
    return "\n".join(lines)


# ============================================================
# Komut isleyiciler
# ============================================================

async def handle_command(cmd, mcp: MCPManager):
    """Sistem komutlari - geri kalan her sey asistana gider."""
    parts = cmd.strip().split()
    if not parts:
        return ""

    action = parts[0].lower()

    if action in ("uyarilar", "alerts"):
        page = int(parts[1]) if len(parts) >= 2 and parts[1].isdigit() else 1
        result = await mcp.call_tool("get_storage_billing_alerts", {"page": page, "per_page": 10})
        return format_alerts(result)

    if action == "stok":
        result = await mcp.call_tool("get_inventory_summary", {})
        if not result.get("success"):
            return f"❌ Stok ozeti alinamadi: {result.get('error')}"
        s = result["data"]
        return (f"📦 Toplam koli: {s['total_packages']:,}\n"
                f"⚖️  Toplam agirlik (kg): {s['total_weight']:,}\n"
                f"📄 Referans/DO: {s['total_references']}")

    if action == "mcp":
        tools = mcp.list_tools()
        lines = [f"🔧 MCP Tools ({len(tools)} adet):"]
        by_server = defaultdict(list)
        for name, info in tools.items():
            by_server[info["server"]].append(f"  {name}: {info['description']}")
        for server, tool_lines in by_server.items():
            lines.append(f"\n[{server}]")
            lines.extend(tool_lines)
        return "\n".join(lines)

    if action == "mcptest" and len(parts) >= 2:
        tool_name = parts[1]
        args = {}
        if len(parts) >= 3:
            try:
                args = json.loads(" ".join(parts[2:]))
            except json.JSONDecodeError:
                return "❌ JSON parse hatasi. Ornek: mcptest get_order {\"order_id\":\"DO-0001\"}"
        result = await mcp.call_tool(tool_name, args)
        return json.dumps(result, indent=2, ensure_ascii=False)[:2000]

    return None


# ============================================================
# Main
# ============================================================

HELP_TEXT = """
==========================================================
  🚚 Lojistik Portali - MCP + AI Asistan
----------------------------------------------------------
  Turkce yaz, asistan siparis verisiyle yanitlar.

  uyarilar [sayfa]  - Depolama faturalama uyarilari
  stok              - Stok ozeti (koli, agirlik, DO)
  mcp               - MCP tool listesini goster
  mcptest <tool> {} - MCP tool'u dogrudan test et
  yardim / help     - Bu menuyu goster
  cikis / exit      - Cikis
==========================================================
"""


async def main():
    print("🚚 Lojistik Portali - MCP Entegrasyonlu Asistan")
    print("=" * 58)

    mcp = MCPManager()
    try:
        print("🔌 MCP server'lar baslatiliyor...")
        await mcp.start()
        print(f"   {len(mcp.list_tools())} MCP tool hazir")

        print("📦 Veriler MCP uzerinden yukleniyor...")
        records = await load_records_mcp(mcp)

        bedrock = boto3.client("bedrock-runtime", region_name=REGION)
        dynamodb = boto3.resource("dynamodb", region_name=REGION)
        s3 = boto3.client("s3", region_name=REGION)
        assistant = LogisticsAssistantAgent(
            region_name=REGION, bedrock_runtime_client=bedrock, dynamodb_resource=dynamodb, s3_client=s3
        )
    except Exception as e:
        print(f"❌ Baslatma hatasi: {e}")
        await mcp.stop()
        sys.exit(1)

    print(HELP_TEXT)
    history = []

    try:
        while True:
            try:
                user_input = input("\n🧑 Sen: ").strip()
            except (EOFError, KeyboardInterrupt):
                print("\n👋 Gorusuruz!")
                break

            if not user_input:
                continue

            if user_input.lower() in ("cikis", "exit", "quit", "q"):
                print("👋 Gorusuruz!")
                break

            if user_input.lower() in ("yardim", "help", "h"):
                print(HELP_TEXT)
                continue

            cmd_result = await handle_command(user_input, mcp)
            if cmd_result is not None:
                print(f"\n🤖 Asistan: {cmd_result}")
                continue

            print("🤖 Asistan: dusunuyorum...")
            reply = assistant.answer(user_input, records, history)
            print(f"\n🤖 Asistan: {reply}")

            history.append({"role": "user", "text": user_input})
            history.append({"role": "assistant", "text": reply})

    finally:
        if assistant.get_decisions():
            print("\n📝 Asistan loglari S3'e yaziliyor...")
            assistant.log_to_s3(
                {
                    "agent": assistant.agent_name,
                    "decisions_count": len(assistant.get_decisions()),
                    "decisions": [
                        {"decision_id": d.decision_id, "type": d.decision_type, "timestamp": d.timestamp}
                        for d in assistant.get_decisions()[-20:]
                    ],
                },
                prefix="session-",
            )

        print("🔌 MCP server'lar kapatiliyor...")
        await mcp.stop()
        print("✅ Temiz cikis")


if __name__ == "__main__":
    asyncio.run(main())
