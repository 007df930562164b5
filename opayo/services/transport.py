from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol

import httpx

from opayo.schemas.opayo import HttpOptions

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Performs the HTTP exchange and returns the raw response body."""

    async def send(
        self,
        method: str,
        url: str,
        form: Dict[str, str],
        options: HttpOptions,
    ) -> str: ...


class HttpxTransport:
    """
    Default transport backed by httpx.

    Raises httpx errors unchanged; callers decide how to wrap them.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._transport = transport

    async def send(
        self,
        method: str,
        url: str,
        form: Dict[str, str],
        options: HttpOptions,
    ) -> str:
        timeout = httpx.Timeout(options.timeout, connect=options.connect_timeout)

        async with httpx.AsyncClient(
            timeout=timeout,
            verify=options.verify,
            transport=self._transport,
        ) as client:
            resp = await client.request(method, url, data=form)

        logger.debug(f"[opayo] {method} {url} -> HTTP {resp.status_code}")
        resp.raise_for_status()
        return resp.text
