from __future__ import annotations

import asyncio
import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .models import TurnContext
from .registry import PromptFunctionRegistry

_PLACEHOLDER_RE = re.compile(r"\{\{\s*(\$?)([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


class PromptTemplateError(Exception):
    pass


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    text: str
    config: dict[str, Any] = field(default_factory=dict)

    @property
    def completion(self) -> dict[str, Any]:
        completion = self.config.get("completion")
        return dict(completion) if isinstance(completion, dict) else {}

    def function_names(self) -> list[str]:
        names: list[str] = []
        for is_variable, name in _PLACEHOLDER_RE.findall(self.text):
            if not is_variable and name not in names:
                names.append(name)
        return names


@dataclass(frozen=True)
class RenderedPrompt:
    template: PromptTemplate
    text: str


class PromptManager:
    """Loads ``<prompts_dir>/<name>/skprompt.txt`` templates and renders them.

    ``{{$var}}`` is filled from the caller's variables, ``{{fnName}}`` from the
    awaited output of a registered prompt function.
    """

    def __init__(self, prompts_dir: str | Path, registry: PromptFunctionRegistry) -> None:
        self.prompts_dir = Path(prompts_dir)
        self.registry = registry
        self._cache: dict[str, PromptTemplate] = {}

    def load(self, name: str) -> PromptTemplate:
        cached = self._cache.get(name)
        if cached:
            return cached
        prompt_dir = self.prompts_dir / name
        try:
            text = (prompt_dir / "skprompt.txt").read_text(encoding="utf-8")
        except OSError as exc:
            raise PromptTemplateError(f"Prompt '{name}' not found under {self.prompts_dir}") from exc
        config: dict[str, Any] = {}
        config_path = prompt_dir / "config.json"
        if config_path.exists():
            try:
                config = json.loads(config_path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                raise PromptTemplateError(f"Prompt '{name}' has an invalid config.json: {exc}") from exc
        template = PromptTemplate(name=name, text=text, config=config)
        self._cache[name] = template
        return template

    async def render(
        self,
        name: str,
        ctx: TurnContext,
        variables: dict[str, str] | None = None,
    ) -> RenderedPrompt:
        template = self.load(name)
        values = dict(variables or {})

        function_names = template.function_names()
        try:
            functions = [self.registry.resolve(fn_name) for fn_name in function_names]
        except KeyError as exc:
            raise PromptTemplateError(f"Prompt '{name}' references {exc.args[0]}") from exc
        outputs = await asyncio.gather(*(function.handler(ctx) for function in functions))
        function_values = dict(zip(function_names, outputs))

        def _substitute(match: re.Match[str]) -> str:
            is_variable, key = match.group(1), match.group(2)
            if is_variable:
                return str(values.get(key, ""))
            return function_values[key]

        return RenderedPrompt(template=template, text=_PLACEHOLDER_RE.sub(_substitute, template.text))
