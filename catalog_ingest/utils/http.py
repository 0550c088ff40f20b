from __future__ import annotations

from typing import Any, Dict, Optional
from aiohttp import ClientSession, ClientTimeout
import aiohttp
import logging

logger = logging.getLogger(__name__)


async def post_json(
    session: ClientSession,
    url: str,
    payload: Any,
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 30.0,
) -> int:
    """
    POST a JSON body once and return the status code.
    Non-2xx responses raise ``aiohttp.ClientResponseError`` carrying the response body as message.
    """
    async with session.post(url, json=payload, headers=headers or {},
                            timeout=ClientTimeout(total=timeout)) as resp:
        if resp.status >= 400:
            body = await resp.text()
            logger.debug("POST %s -> %s: %s", url, resp.status, body)
            raise aiohttp.ClientResponseError(
                resp.request_info,
                resp.history,
                status=resp.status,
                message=body[:500] or (resp.reason or ""),
                headers=resp.headers,
            )
        return resp.status


def create_session() -> ClientSession:
    """
    Create an aiohttp ClientSession for store calls.
    """
    # Note: caller is responsible for closing the session (await session.close()).
    return aiohttp.ClientSession(headers={"Accept": "application/json"})
