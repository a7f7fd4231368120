from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from ourabot_agent_core import PlannerConfig
from ourabot_tools import HealthDataConfig

BACKEND_DIR = Path(__file__).resolve().parent

_ENV_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TRUE_VALUES = {"1", "true", "yes"}


def _load_local_env_file(path: Path) -> None:
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not _ENV_KEY_RE.fullmatch(key):
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        os.environ.setdefault(key, value)


def bootstrap_local_env() -> None:
    for candidate in (BACKEND_DIR.parent / ".env", BACKEND_DIR / ".env"):
        if candidate.exists():
            _load_local_env_file(candidate)


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _optional_float(raw: str) -> float | None:
    if raw.lower() in {"", "none", "off"}:
        return None
    return float(raw)


@dataclass(frozen=True)
class BotConfig:
    openai_key: str
    oura_key: str
    chat_model: str = "gpt-4"
    openai_base_url: str = "https://api.openai.com/v1"
    oura_base_url: str = "https://api.ouraring.com"
    db_path: str = str(BACKEND_DIR / "ourabot.sqlite")
    prompts_dir: str = str(BACKEND_DIR / "prompts")
    history_max_turns: int = 3
    health_timeout_seconds: float | None = 10.0
    chat_timeout_seconds: float = 25.0
    log_requests: bool = True
    log_level: str = "INFO"

    def health_data_config(self) -> HealthDataConfig:
        return HealthDataConfig(
            api_key=self.oura_key,
            base_url=self.oura_base_url,
            timeout_seconds=self.health_timeout_seconds,
        )

    def planner_config(self) -> PlannerConfig:
        return PlannerConfig(
            api_key=self.openai_key,
            model=self.chat_model,
            base_url=self.openai_base_url,
            timeout_seconds=self.chat_timeout_seconds,
            log_requests=self.log_requests,
        )

    def missing_secrets(self) -> list[str]:
        missing: list[str] = []
        if not self.oura_key:
            missing.append("SECRET_OURA_API_KEY")
        if not self.openai_key:
            missing.append("SECRET_OPENAI_API_KEY")
        return missing


def load_config() -> BotConfig:
    """Build the bot config from the process environment (and a local ``.env``)."""
    bootstrap_local_env()
    defaults = BotConfig(openai_key="", oura_key="")
    return BotConfig(
        openai_key=_env("SECRET_OPENAI_API_KEY"),
        oura_key=_env("SECRET_OURA_API_KEY"),
        chat_model=_env("OURABOT_CHAT_MODEL", defaults.chat_model),
        openai_base_url=_env("OPENAI_API_BASE_URL", defaults.openai_base_url).rstrip("/"),
        oura_base_url=_env("OURA_API_BASE_URL", defaults.oura_base_url).rstrip("/"),
        db_path=_env("OURABOT_DB_PATH", defaults.db_path),
        prompts_dir=_env("OURABOT_PROMPTS_DIR", defaults.prompts_dir),
        history_max_turns=int(_env("OURABOT_HISTORY_MAX_TURNS", str(defaults.history_max_turns))),
        health_timeout_seconds=_optional_float(_env("OURABOT_HEALTH_TIMEOUT_SECONDS", "10")),
        chat_timeout_seconds=float(_env("OURABOT_CHAT_TIMEOUT_SECONDS", "25")),
        log_requests=_env("OURABOT_LOG_REQUESTS", "true").lower() in _TRUE_VALUES,
        log_level=_env("LOG_LEVEL", defaults.log_level).upper(),
    )
