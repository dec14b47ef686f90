# Providers for the shared objects main.py puts on app.state at startup
import logging
from typing import Optional

import httpx
from fastapi import Request

from vehicle_valuation_service.app.service.mirroring import BackgroundMirror

logger = logging.getLogger(__name__)


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """Pooled outbound client used by the RC lookup and valuation assistant clients."""
    return request.app.state.http_client


async def get_workflow_mirror(request: Request) -> Optional[BackgroundMirror]:
    # Absent when startup failed; handlers then skip the best-effort table write
    mirror = getattr(request.app.state, "workflow_mirror", None)
    if mirror is None:
        logger.warning("Workflow table mirror not initialized. Workflow table writes are skipped.")
    return mirror
