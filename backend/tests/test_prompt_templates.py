from __future__ import annotations

import asyncio

import pytest

from ourabot_agent_core import (
    PromptFunction,
    PromptFunctionRegistry,
    PromptManager,
    PromptTemplateError,
    TurnContext,
)
from ourabot_tools import HealthDataAccessor, HealthDataConfig, register_prompt_functions


def _ctx() -> TurnContext:
    return TurnContext(conversation_id="conv-1", user_id="user-a", request_id="req-1", message_text="hi")


def _write_prompt(root, name: str, text: str, config: str | None = None):
    prompt_dir = root / name
    prompt_dir.mkdir(parents=True)
    (prompt_dir / "skprompt.txt").write_text(text, encoding="utf-8")
    if config is not None:
        (prompt_dir / "config.json").write_text(config, encoding="utf-8")


def test_render_fills_variables_and_functions(tmp_path):
    calls: list[str] = []

    async def sleep_fn(ctx: TurnContext) -> str:
        calls.append(ctx.conversation_id)
        return '{"score":83}'

    registry = PromptFunctionRegistry()
    registry.register(PromptFunction("dailySleep", sleep_fn))
    _write_prompt(
        tmp_path,
        "chat",
        "Sleep: {{dailySleep}} again {{ dailySleep }}\n{{$history}}\nUser: {{$input}}",
        '{"completion": {"max_tokens": 42}}',
    )
    manager = PromptManager(tmp_path, registry)

    rendered = asyncio.run(manager.render("chat", _ctx(), {"input": "how did I sleep?"}))

    assert rendered.text == 'Sleep: {"score":83} again {"score":83}\n\nUser: how did I sleep?'
    assert rendered.template.completion == {"max_tokens": 42}
    assert calls == ["conv-1"]


def test_render_unknown_function_fails(tmp_path):
    _write_prompt(tmp_path, "chat", "Data: {{heartRate}}")
    manager = PromptManager(tmp_path, PromptFunctionRegistry())

    with pytest.raises(PromptTemplateError, match="heartRate"):
        asyncio.run(manager.render("chat", _ctx()))


def test_missing_prompt_fails(tmp_path):
    manager = PromptManager(tmp_path, PromptFunctionRegistry())
    with pytest.raises(PromptTemplateError):
        manager.load("chat")


def test_invalid_config_fails(tmp_path):
    _write_prompt(tmp_path, "chat", "hello", "{not json")
    manager = PromptManager(tmp_path, PromptFunctionRegistry())
    with pytest.raises(PromptTemplateError, match="config.json"):
        manager.load("chat")


def test_registered_health_functions_cover_all_resources():
    registry = PromptFunctionRegistry()
    register_prompt_functions(registry, HealthDataAccessor(HealthDataConfig(api_key="k")))
    assert registry.list_names() == ["dailyActivity", "dailyReadiness", "dailySleep"]
    with pytest.raises(KeyError):
        registry.resolve("dailyHeartRate")


def test_bundled_chat_prompt_uses_every_health_function(backend_module):
    template = backend_module.container.prompts.load("chat")
    assert template.function_names() == ["dailyActivity", "dailyReadiness", "dailySleep"]
    assert "max_tokens" in template.completion


def test_render_runs_each_function_once_and_concurrently(tmp_path):
    calls: dict[str, int] = {}
    in_flight = 0
    peak = 0

    def _tracked(name: str):
        async def _handler(ctx: TurnContext) -> str:
            nonlocal in_flight, peak
            calls[name] = calls.get(name, 0) + 1
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return f"<{name}>"

        return _handler

    registry = PromptFunctionRegistry()
    for name in ("dailyActivity", "dailyReadiness", "dailySleep"):
        registry.register(PromptFunction(name, _tracked(name)))
    _write_prompt(tmp_path, "chat", "{{dailyActivity}} {{dailyReadiness}} {{dailySleep}} {{dailySleep}}")
    manager = PromptManager(tmp_path, registry)

    rendered = asyncio.run(manager.render("chat", _ctx()))

    assert rendered.text == "<dailyActivity> <dailyReadiness> <dailySleep> <dailySleep>"
    assert calls == {"dailyActivity": 1, "dailyReadiness": 1, "dailySleep": 1}
    assert peak == 3
