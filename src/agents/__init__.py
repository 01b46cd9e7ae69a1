from src.agents.base_agent import BaseAgent
from src.agents.logistics_assistant import LogisticsAssistantAgent
from src.agents.storage_billing import StorageBillingAgent

__all__ = [
    "BaseAgent",
    "LogisticsAssistantAgent",
    "StorageBillingAgent",
]
