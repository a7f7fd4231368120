from __future__ import annotations

import logging
import os
import uuid

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict, Field

from memory import ConversationStore, SQLiteMemoryDB
from ourabot_agent_core import (
    ERROR_VALUE_TYPE,
    ChatPlanner,
    PromptFunctionRegistry,
    PromptManager,
    TurnContext,
    TurnResult,
)
from ourabot_tools import HealthDataAccessor, register_prompt_functions
from settings import BotConfig, load_config
from setup_logging import setup_logging

logger = logging.getLogger("ourabot")

HISTORY_COMMAND = "/history"
HISTORY_COMMAND_MAX_TOKENS = 2000
PROMPT_HISTORY_MAX_TOKENS = 1000
DEFAULT_PROMPT = "chat"


class ChannelAccount(BaseModel):
    id: str = ""
    name: str | None = None


class ConversationAccount(BaseModel):
    id: str


class Activity(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: str = "message"
    text: str | None = None
    conversation: ConversationAccount
    from_: ChannelAccount = Field(default_factory=ChannelAccount, alias="from")


class OuraBotApp:
    def __init__(self, config: BotConfig) -> None:
        self.config = config
        self.db = SQLiteMemoryDB(config.db_path)
        self.history = ConversationStore(self.db)
        self.registry = PromptFunctionRegistry()
        self.accessor = HealthDataAccessor(config.health_data_config())
        register_prompt_functions(self.registry, self.accessor)
        self.prompts = PromptManager(config.prompts_dir, self.registry)
        self.planner = ChatPlanner(config.planner_config())

    async def on_message(self, ctx: TurnContext, result: TurnResult) -> None:
        text = ctx.message_text.strip()
        # sqlite3 is blocking; history calls stay off the event loop.
        if text.lower() == HISTORY_COMMAND:
            history = await run_in_threadpool(
                self.history.history_text, ctx.conversation_id, HISTORY_COMMAND_MAX_TOKENS, "\n\n"
            )
            result.send(history or "There is no conversation history yet.")
            return

        history = await run_in_threadpool(
            self.history.history_text, ctx.conversation_id, PROMPT_HISTORY_MAX_TOKENS, "\n"
        )
        rendered = await self.prompts.render(DEFAULT_PROMPT, ctx, {"input": text, "history": history})
        reply = await self.planner.complete(
            system_prompt=rendered.text,
            user_message=text,
            completion=rendered.template.completion,
        )
        await run_in_threadpool(self._record_turn, ctx.conversation_id, text, reply)
        result.send(reply)

    def _record_turn(self, conversation_id: str, text: str, reply: str) -> None:
        self.history.append_line(conversation_id=conversation_id, role="user", text=text)
        self.history.append_line(conversation_id=conversation_id, role="assistant", text=reply)
        self.history.trim(conversation_id=conversation_id, max_turns=self.config.history_max_turns)

    async def run(self, ctx: TurnContext) -> TurnResult:
        result = TurnResult()
        try:
            await self.on_message(ctx, result)
        except Exception as exc:
            self.on_turn_error(ctx, result, exc)
        return result

    @staticmethod
    def on_turn_error(ctx: TurnContext, result: TurnResult, error: Exception) -> None:
        logger.error("[on_turn_error] unhandled error (request %s): %s", ctx.request_id, error, exc_info=error)
        result.activities.clear()
        result.send_trace("OnTurnError Trace", str(error), ERROR_VALUE_TYPE, "TurnError")
        result.send(f"The bot encountered unhandled error:\n {error}")
        result.send("To continue to run this bot, please fix the bot source code.")


config = load_config()
setup_logging(config.log_level)
for secret_name in config.missing_secrets():
    logger.warning("%s is not set; calls that need it will fail.", secret_name)

container = OuraBotApp(config)
app = FastAPI(title="OuraBot")


@app.get("/healthz")
def health():
    return {
        "ok": True,
        "service": "ourabot",
        "prompt_functions": container.registry.list_names(),
    }


@app.post("/api/messages")
async def messages(activity: Activity):
    if activity.type != "message" or not (activity.text or "").strip():
        return TurnResult().as_envelope()
    ctx = TurnContext(
        conversation_id=activity.conversation.id,
        user_id=activity.from_.id,
        request_id=uuid.uuid4().hex,
        message_text=activity.text or "",
    )
    result = await container.run(ctx)
    return result.as_envelope()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "3978")))
