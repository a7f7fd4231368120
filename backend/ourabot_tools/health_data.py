from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .sanitizer import is_sanitized, remove_string_fields_and_arrays

logger = logging.getLogger(__name__)

PROVIDER_RESOURCES = ("daily_activity", "daily_readiness", "daily_sleep")
EMPTY_RECORD_JSON = "{}"


class HealthDataError(Exception):
    pass


class TransportFailure(HealthDataError):
    pass


class NoRecordAvailable(HealthDataError):
    pass


@dataclass(frozen=True)
class HealthDataConfig:
    api_key: str
    base_url: str = "https://api.ouraring.com"
    timeout_seconds: float | None = 10.0


def _first_record(body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise NoRecordAvailable("Response body is not a JSON object.")
    data = body.get("data")
    if not isinstance(data, list):
        raise NoRecordAvailable("Response has no 'data' list.")
    if not data:
        raise NoRecordAvailable("Response 'data' list is empty.")
    record = data[0]
    if not isinstance(record, dict):
        raise NoRecordAvailable("First 'data' entry is not a JSON object.")
    return record


class HealthDataAccessor:
    """Fetches the latest daily record for one provider resource.

    Every call is an independent GET; nothing is cached or shared between
    calls besides the read-only config.
    """

    def __init__(self, config: HealthDataConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.config = config
        self._transport = transport

    def resource_url(self, resource: str) -> str:
        if resource not in PROVIDER_RESOURCES:
            raise ValueError(f"Unknown provider resource: {resource}")
        return f"{self.config.base_url.rstrip('/')}/v2/usercollection/{resource}"

    async def fetch_record(self, resource: str) -> dict[str, Any]:
        url = self.resource_url(resource)
        headers = {"Authorization": f"Bearer {self.config.api_key}"}
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout_seconds),
                transport=self._transport,
            ) as client:
                response = await client.get(url, headers=headers)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            raise TransportFailure(f"HTTP {exc.response.status_code} from {resource}") from exc
        except httpx.HTTPError as exc:
            raise TransportFailure(f"{type(exc).__name__}: {exc}") from exc
        except (ValueError, RecursionError) as exc:
            # ValueError covers JSONDecodeError and UnicodeDecodeError.
            raise TransportFailure(f"Invalid JSON body from {resource}: {exc}") from exc
        return _first_record(body)

    async def fetch_sanitized_json(self, resource: str) -> str:
        """Return the sanitized record as compact JSON, or ``"{}"`` on any provider failure."""
        try:
            record = await self.fetch_record(resource)
        except HealthDataError as exc:
            logger.warning("health data fetch failed (%s): %s", resource, exc)
            return EMPTY_RECORD_JSON
        try:
            remove_string_fields_and_arrays(record)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("sanitized %s record (clean=%s)", resource, is_sanitized(record))
            return json.dumps(record, separators=(",", ":"))
        except RecursionError:
            logger.warning("health data record too deeply nested (%s)", resource)
            return EMPTY_RECORD_JSON
