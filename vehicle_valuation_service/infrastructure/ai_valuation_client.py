# Client for an OpenAI-compatible chat completions endpoint used for price estimation
import asyncio
import logging
import random
import time
from typing import Optional, Dict, Any, List

import httpx
from fastapi import Depends

from vehicle_valuation_service.app.config import settings
from vehicle_valuation_service.app.observability import upstream_request_duration
from vehicle_valuation_service.app.service.exceptions import UpstreamUnavailableError
from vehicle_valuation_service.app.service.interfaces.valuation_estimator import AbstractValuationEstimator
from vehicle_valuation_service.app.dependencies.app_state import get_http_client

logger = logging.getLogger(__name__)

SERVICE_NAME = "ai-valuation"

SYSTEM_PROMPT = (
    "You are a vehicle-valuation assistant for the Indian market. "
    "Given vehicle details, return EXACTLY three INR price ranges: low, mid, and high, "
    "each on its own line formatted like \"Low: ₹7,50,000 - ₹8,00,000\", "
    "plus a 1-2 sentence rationale for each."
)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def build_user_prompt(facts: Dict[str, Any]) -> str:
    lines: List[str] = ["Here are the vehicle details:"]
    for name, value in facts.items():
        if value is None or value == "":
            continue
        lines.append(f"- {name}: {value}")
    lines.append("")
    lines.append("Please deliver the Low, Mid and High ranges.")
    return "\n".join(lines)


class OpenAIValuationClient(AbstractValuationEstimator):
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        api_key: Optional[str],
        model: str,
        max_retries: int = 5,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
    ):
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.max_retries = max(1, max_retries)
        self.base_delay = base_delay
        self.max_delay = max_delay

    async def estimate(self, facts: Dict[str, Any]) -> str:
        if not self.api_key:
            raise UpstreamUnavailableError(SERVICE_NAME, "API key is not configured")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(facts)},
            ],
            "temperature": 0.2,
            "max_tokens": 200,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        url = f"{self.base_url}/v1/chat/completions"

        started = time.perf_counter()
        outcome = "error"
        try:
            content = await self._post_with_retries(url, payload, headers)
            outcome = "ok"
            return content
        finally:
            upstream_request_duration.record(time.perf_counter() - started, {"service": SERVICE_NAME, "outcome": outcome})

    async def _post_with_retries(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> str:
        last_error = "no attempt made"
        for attempt in range(self.max_retries):
            if attempt > 0:
                jitter = random.uniform(0.5, 1.5)
                delay = min(self.base_delay * (1.5 ** attempt) * jitter, self.max_delay)
                logger.info(f"Retrying valuation request, attempt {attempt + 1}/{self.max_retries}, waiting {delay:.2f} seconds")
                await asyncio.sleep(delay)

            try:
                response = await self.http_client.post(url, json=payload, headers=headers)
            except httpx.RequestError as e:
                last_error = str(e)
                logger.warning(f"Request error calling valuation assistant on attempt {attempt + 1}/{self.max_retries}: {e}")
                continue

            if response.status_code in RETRYABLE_STATUS_CODES:
                last_error = f"HTTP {response.status_code}"
                logger.warning(f"Valuation assistant answered {response.status_code} on attempt {attempt + 1}/{self.max_retries}")
                continue

            try:
                response.raise_for_status()
                content = response.json()["choices"][0]["message"]["content"]
            except httpx.HTTPStatusError as e:
                logger.error(f"Non-retryable HTTP error from valuation assistant: {e.response.status_code} - {e.response.text}")
                raise UpstreamUnavailableError(SERVICE_NAME, f"HTTP {e.response.status_code}") from e
            except (ValueError, KeyError, IndexError, TypeError) as e:
                logger.error(f"Unexpected response shape from valuation assistant: {e}", exc_info=True)
                raise UpstreamUnavailableError(SERVICE_NAME, "invalid response body") from e

            if attempt > 0:
                logger.info(f"Valuation assistant succeeded on attempt {attempt + 1}")
            return (content or "").strip()

        logger.error(f"Valuation assistant failed after {self.max_retries} attempts: {last_error}")
        raise UpstreamUnavailableError(SERVICE_NAME, f"gave up after {self.max_retries} attempts ({last_error})")

# DI provider for OpenAIValuationClient
def get_valuation_estimator(
    http_client: httpx.AsyncClient = Depends(get_http_client)
) -> AbstractValuationEstimator:
    return OpenAIValuationClient(
        http_client=http_client,
        base_url=settings.OPENAI_BASE_URL,
        api_key=settings.OPENAI_API_KEY,
        model=settings.OPENAI_MODEL,
        max_retries=settings.AI_VALUATION_MAX_RETRIES,
    )
