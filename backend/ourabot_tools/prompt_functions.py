from __future__ import annotations

from ourabot_agent_core.models import TurnContext
from ourabot_agent_core.registry import PromptFunction, PromptFunctionHandler, PromptFunctionRegistry

from .health_data import HealthDataAccessor

PROMPT_FUNCTION_RESOURCES = {
    "dailyActivity": "daily_activity",
    "dailyReadiness": "daily_readiness",
    "dailySleep": "daily_sleep",
}


def _resource_handler(accessor: HealthDataAccessor, resource: str) -> PromptFunctionHandler:
    async def _handler(ctx: TurnContext) -> str:
        return await accessor.fetch_sanitized_json(resource)

    return _handler


def register_prompt_functions(registry: PromptFunctionRegistry, accessor: HealthDataAccessor) -> None:
    for name, resource in PROMPT_FUNCTION_RESOURCES.items():
        registry.register(PromptFunction(name, _resource_handler(accessor, resource)))
