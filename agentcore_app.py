"""
AgentCore Runtime Entrypoint - Lojistik Portali.

Asistan ve faturalama agent'i BedrockAgentCoreApp ile sarmalanmistir.
MCP server yerine dogrudan DynamoDB erisimi kullanilir (AgentCore Runtime'da
subprocess MCP server calistirmak mumkun degildir).

Deploy:
    agentcore configure -e agentcore_app.py -r us-west-2
    agentcore deploy
"""

import logging
import uuid

import env_loader  # noqa: F401
import boto3

from bedrock_agentcore import BedrockAgentCoreApp

from src.agents.logistics_assistant import LogisticsAssistantAgent
from src.agents.storage_billing import StorageBillingAgent, resolve_reference_date
from src.billing.storage_alerts import compute_storage_alerts
from src.config import REGION
from src.data.order_repository import LogisticsRepository

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")
logger = logging.getLogger("agentcore_app")

app = BedrockAgentCoreApp()

# Global agent state - ilk invoke'da lazy init edilir
_agents = None


def init_agents() -> dict:
    global _agents
    if _agents is not None:
        return _agents

    dynamodb = boto3.resource("dynamodb", region_name=REGION)
    bedrock = boto3.client("bedrock-runtime", region_name=REGION)
    s3 = boto3.client("s3", region_name=REGION)
    clients = {"bedrock_runtime_client": bedrock, "dynamodb_resource": dynamodb, "s3_client": s3}

    _agents = {
        "repository": LogisticsRepository(dynamodb_resource=dynamodb),
        "billing": StorageBillingAgent(region_name=REGION, **clients),
        "assistant": LogisticsAssistantAgent(region_name=REGION, **clients),
    }
    logger.info("Agentlar hazir")
    return _agents


def build_records(agents: dict, reference_date=None) -> list:
    """Aktif siparisleri faturalama bilgisiyle asistan baglamina cevirir (karar loglamaz)."""
    billing = agents["billing"]
    billing.refresh_from_store(agents["repository"])
    orders = billing.get_all_orders()
    now = resolve_reference_date(reference_date)
    alerts = {a.order_id: a.to_dict() for a in compute_storage_alerts(orders, now)}

    records = []
    for order in orders:
        record = order.to_dict()
        if order.order_id in alerts:
            record["storage_billing"] = alerts[order.order_id]
        records.append(record)
    return records


def handle_payload(payload: dict, agents: dict) -> dict:
    session_id = payload.get("session_id", str(uuid.uuid4()))
    action = payload.get("action", "chat")
    reference_date = payload.get("reference_date")

    if action == "billing_alerts":
        billing = agents["billing"]
        billing.refresh_from_store(agents["repository"])
        return {"result": billing.get_daily_billing_report(reference_date), "session_id": session_id}

    user_message = payload.get("prompt", "Merhaba, nasil yardimci olabilirim?")
    records = build_records(agents, reference_date)
    reply = agents["assistant"].answer(user_message, records, payload.get("history", []))
    return {"result": reply, "session_id": session_id}


@app.entrypoint
def invoke(payload):
    """
    Beklenen payload:
        {"prompt": "...", "session_id": "...", "action": "chat" | "billing_alerts",
         "reference_date": "2025-03-01T00:00:00+00:00", "history": [...]}

    Donus:
        {"result": ..., "session_id": "..."}
    """
    try:
        return handle_payload(payload, init_agents())
    except ValueError as e:
        logger.warning("Gecersiz istek: %s", e)
        return {"result": f"Hata: {e}", "session_id": payload.get("session_id"), "error": True}
    except Exception as e:
        logger.error("Istek islenemedi: %s", e)
        return {"result": f"Hata: {e}", "session_id": payload.get("session_id"), "error": True}


if __name__ == "__main__":
    app.run()
