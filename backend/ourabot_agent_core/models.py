from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

ERROR_VALUE_TYPE = "https://www.botframework.com/schemas/error"


@dataclass
class TurnContext:
    conversation_id: str
    user_id: str
    request_id: str
    message_text: str = ""


@dataclass
class OutboundActivity:
    type: str = "message"
    text: str | None = None
    name: str | None = None
    label: str | None = None
    value: Any = None
    value_type: str | None = None

    def as_envelope(self) -> dict[str, Any]:
        envelope: dict[str, Any] = {"type": self.type}
        if self.text is not None:
            envelope["text"] = self.text
        if self.type == "trace":
            envelope.update(
                {
                    "name": self.name,
                    "label": self.label,
                    "value": self.value,
                    "valueType": self.value_type,
                }
            )
        return envelope


@dataclass
class TurnResult:
    activities: list[OutboundActivity] = field(default_factory=list)

    def send(self, text: str) -> None:
        self.activities.append(OutboundActivity(text=text))

    def send_trace(self, name: str, value: Any, value_type: str, label: str) -> None:
        self.activities.append(
            OutboundActivity(type="trace", name=name, label=label, value=value, value_type=value_type)
        )

    def as_envelope(self) -> dict[str, Any]:
        return {"activities": [activity.as_envelope() for activity in self.activities]}
