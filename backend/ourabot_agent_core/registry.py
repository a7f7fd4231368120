from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from .models import TurnContext

PromptFunctionHandler = Callable[[TurnContext], Awaitable[str]]


@dataclass
class PromptFunction:
    name: str
    handler: PromptFunctionHandler


class PromptFunctionRegistry:
    def __init__(self) -> None:
        self._functions: dict[str, PromptFunction] = {}

    def register(self, function: PromptFunction) -> None:
        self._functions[function.name] = function

    def resolve(self, name: str) -> PromptFunction:
        function = self._functions.get(name)
        if not function:
            raise KeyError(f"Prompt function not found: {name}")
        return function

    def list_names(self) -> list[str]:
        return sorted(self._functions.keys())
