"""HTTP client for the Seoul open-data APIs."""

import asyncio
import logging
from typing import Any

import requests

from ..utils.korean_text import redact_key
from .constants import DEFAULT_TIMEOUT
from .exceptions import ApiError, ApiTimeoutError, NetworkError, UpstreamError

logger = logging.getLogger(__name__)


class OpenDataClient:
    """Issues single, time-bounded JSON GET requests. Never retries."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, redact: str = ""):
        """Initialize the client.

        Args:
            timeout: Default request timeout in seconds
            redact: Secret to hide when URLs are logged
        """
        self.timeout = timeout
        self._redact = redact
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def get_json(self, url: str, timeout: float | None = None) -> Any:
        """Fetch a URL and return its decoded JSON body.

        Args:
            url: Fully built request URL
            timeout: Timeout in seconds, defaults to the client's timeout

        Returns:
            Parsed JSON payload

        Raises:
            ApiTimeoutError: If no response arrives in time
            ApiError: If the response status is not successful
            NetworkError: If the request fails at the transport level
            UpstreamError: If the body is not JSON
        """
        effective_timeout = timeout if timeout is not None else self.timeout
        logger.debug(
            f"GET {redact_key(url, self._redact)} (timeout={effective_timeout}s)"
        )

        try:
            response = self.session.get(url, timeout=effective_timeout)
        except requests.exceptions.Timeout as e:
            raise ApiTimeoutError(
                f"요청 시간 초과 ({effective_timeout:g}초)", effective_timeout
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"API 요청 실패: {str(e)}") from e

        if not response.ok:
            raise ApiError(
                f"API 요청 실패: {response.status_code} {response.reason}",
                status_code=response.status_code,
                url=url,
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError("API 응답을 JSON으로 해석할 수 없습니다") from e

    async def fetch_json(self, url: str, timeout: float | None = None) -> Any:
        """Async form of get_json; the request runs in a worker thread."""
        return await asyncio.to_thread(self.get_json, url, timeout)

    def close(self) -> None:
        self.session.close()
