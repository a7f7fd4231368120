from .models import ERROR_VALUE_TYPE, OutboundActivity, TurnContext, TurnResult
from .planner import ChatPlanner, PlannerConfig, PlannerError
from .prompts import PromptManager, PromptTemplate, PromptTemplateError, RenderedPrompt
from .registry import PromptFunction, PromptFunctionRegistry

__all__ = [
    "ERROR_VALUE_TYPE",
    "ChatPlanner",
    "OutboundActivity",
    "PlannerConfig",
    "PlannerError",
    "PromptFunction",
    "PromptFunctionRegistry",
    "PromptManager",
    "PromptTemplate",
    "PromptTemplateError",
    "RenderedPrompt",
    "TurnContext",
    "TurnResult",
]
