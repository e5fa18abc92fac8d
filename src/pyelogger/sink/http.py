"""HTTP forwarding sink."""

from __future__ import annotations

import logging

import aiohttp

from pyelogger.exceptions import SinkError
from pyelogger.state.record import LogEntry

_logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=10)


class HttpSink:
    """POST every committed log entry as JSON to a remote endpoint."""

    def __init__(
        self,
        url: str,
        *,
        session: aiohttp.ClientSession | None = None,
        timeout: aiohttp.ClientTimeout = _DEFAULT_TIMEOUT,
    ) -> None:
        self._url = url
        self._external_session = session is not None
        self._http = session
        self._timeout = timeout

    def _require_session(self) -> aiohttp.ClientSession:
        if self._http is None:
            self._http = aiohttp.ClientSession(timeout=self._timeout)
        return self._http

    async def commit(self, entry: LogEntry) -> None:
        http = self._require_session()
        _logger.debug("POST %s", self._url)
        try:
            async with http.post(self._url, json=entry.to_json()) as resp:
                if resp.status >= 300:
                    text = await resp.text()
                    raise SinkError(f"HTTP {resp.status} from {self._url}: {text[:200]}", sink="http")
        except SinkError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise SinkError(f"Request to {self._url} failed: {exc}", sink="http") from exc

    async def close(self) -> None:
        if not self._external_session and self._http is not None:
            await self._http.close()
        self._http = None
