# Client for the external RC (registration certificate) lookup service
import logging
import time
from typing import Optional

import httpx
from fastapi import Depends
from pydantic import ValidationError

from vehicle_valuation_service.app.config import settings
from vehicle_valuation_service.app.models import RcRecord
from vehicle_valuation_service.app.observability import upstream_request_duration
from vehicle_valuation_service.app.service.exceptions import UpstreamUnavailableError
from vehicle_valuation_service.app.service.interfaces.rc_lookup_client import AbstractRcLookupClient
from vehicle_valuation_service.app.dependencies.app_state import get_http_client

logger = logging.getLogger(__name__)

SERVICE_NAME = "rc-lookup"


class RcLookupServiceClient(AbstractRcLookupClient):
    def __init__(self, http_client: httpx.AsyncClient, lookup_url: Optional[str], api_key: Optional[str]):
        self.http_client = http_client
        self.lookup_url = lookup_url
        self.api_key = api_key

    async def lookup(self, registration_number: str) -> Optional[RcRecord]:
        if not self.lookup_url:
            logger.warning("RC lookup URL not configured. Cannot enrich vehicle details.")
            raise UpstreamUnavailableError(SERVICE_NAME, "lookup URL is not configured")

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Basic {self.api_key}"
        payload = {"reg": registration_number}
        logger.debug(f"Querying RC lookup service for registration {registration_number}")

        started = time.perf_counter()
        outcome = "error"
        try:
            response = await self.http_client.post(self.lookup_url, json=payload, headers=headers)
            response.raise_for_status()
            record = RcRecord.model_validate(response.json())
            outcome = "ok"
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error calling RC lookup service: {e.response.status_code} - {e.response.text}", exc_info=True)
            raise UpstreamUnavailableError(SERVICE_NAME, f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"Request error calling RC lookup service: {e}", exc_info=True)
            raise UpstreamUnavailableError(SERVICE_NAME, str(e)) from e
        except (ValueError, ValidationError) as e:
            logger.error(f"Unparseable response from RC lookup service: {e}", exc_info=True)
            raise UpstreamUnavailableError(SERVICE_NAME, "invalid response body") from e
        finally:
            upstream_request_duration.record(time.perf_counter() - started, {"service": SERVICE_NAME, "outcome": outcome})

        if not record.valid:
            logger.info(f"RC lookup service reported no valid record for registration {registration_number}.")
            return None
        logger.info(f"RC record found for registration {registration_number} (status: {record.status}).")
        return record

# DI provider for RcLookupServiceClient
def get_rc_lookup_client(
    http_client: httpx.AsyncClient = Depends(get_http_client)
) -> AbstractRcLookupClient:
    return RcLookupServiceClient(
        http_client=http_client,
        lookup_url=settings.RC_LOOKUP_URL,
        api_key=settings.RC_LOOKUP_API_KEY,
    )
