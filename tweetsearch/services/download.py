"""HTTP download collaborator for the remote search pipeline."""

from __future__ import annotations

import httpx

from tweetsearch.config import RemoteSearchSettings
from tweetsearch.logging import logger
from tweetsearch.utils.retry import retry_async


class Downloader:
    """Fetch raw bytes for a URL; ``None`` signals a failed download."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: RemoteSearchSettings | None = None,
    ) -> None:
        self._client = http_client
        self._settings = settings or RemoteSearchSettings()

    async def download(self, url: str) -> bytes | None:
        async def _request() -> httpx.Response:
            response = await self._client.get(
                url,
                timeout=self._settings.request_timeout_seconds,
                follow_redirects=True,
            )
            response.raise_for_status()
            return response

        try:
            response = await retry_async(
                _request,
                max_attempts=self._settings.download_attempts,
                base_delay=self._settings.retry_base_delay,
                retry_on=(httpx.RequestError, httpx.HTTPStatusError),
                logger=logger,
                operation_name="search_download",
            )
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "download_failed",
                url=url,
                status_code=exc.response.status_code,
                detail=exc.response.text[:200],
            )
            return None
        except httpx.RequestError as exc:
            logger.warning("download_failed", url=url, error=str(exc))
            return None

        logger.debug("download_complete", url=url, size=len(response.content))
        return response.content


__all__ = ["Downloader"]
