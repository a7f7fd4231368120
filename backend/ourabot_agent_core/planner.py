from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class PlannerError(Exception):
    pass


@dataclass(frozen=True)
class PlannerConfig:
    api_key: str
    model: str = "gpt-4"
    base_url: str = "https://api.openai.com/v1"
    timeout_seconds: float = 25.0
    log_requests: bool = True


def _provider_error_message(response: httpx.Response) -> str:
    message = response.text.strip()
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict):
            msg = err.get("message")
            if isinstance(msg, str) and msg.strip():
                return msg.strip()
        msg = payload.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    return message or f"HTTP {response.status_code}"


def _coerce_completion_text(response_json: dict[str, Any]) -> str:
    choices = response_json.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else ""


class ChatPlanner:
    """Client for an OpenAI-compatible ``/chat/completions`` endpoint."""

    def __init__(self, config: PlannerConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.config = config
        self._transport = transport

    async def complete(
        self,
        *,
        system_prompt: str,
        user_message: str,
        completion: dict[str, Any] | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
        }
        for key, value in (completion or {}).items():
            if key in {"max_tokens", "temperature", "top_p", "presence_penalty", "frequency_penalty", "stop"}:
                payload[key] = value
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }
        if self.config.log_requests:
            logger.info("chat completion request (%s): %s", self.config.model, system_prompt)

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout_seconds, connect=8.0),
                transport=self._transport,
            ) as client:
                response = await client.post(
                    f"{self.config.base_url.rstrip('/')}/chat/completions",
                    headers=headers,
                    json=payload,
                )
        except httpx.HTTPError as exc:
            raise PlannerError(f"Chat completion request failed: {exc}") from exc
        if response.status_code >= 400:
            raise PlannerError(_provider_error_message(response))
        try:
            completion_payload = response.json()
        except ValueError as exc:
            raise PlannerError("Chat completion response is not JSON.") from exc

        text = _coerce_completion_text(completion_payload).strip() if isinstance(completion_payload, dict) else ""
        if not text:
            raise PlannerError("Chat completion returned no text.")
        if self.config.log_requests:
            logger.info("chat completion response (%s): %s", self.config.model, text)
        return text
