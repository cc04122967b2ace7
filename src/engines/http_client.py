"""HTTP fetch gateway shared by every extraction strategy and the enricher.

Every outbound request of the pipeline goes through FetchGateway. Failures
never propagate to the caller: any network error, timeout, non-2xx status or
unreadable body is logged with the offending URL and reported as ``None``.
"""

import json
import logging
import time
from typing import Any

import requests
from tenacity import (
    Retrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from src.config.settings import Settings


logger = logging.getLogger(__name__)


BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

JSON_ACCEPT = "application/json"

_CHUNK_SIZE = 16 * 1024


class FetchGateway:
    """Issues GET requests with a hard timeout and a browser-like identity.

    Attributes:
        settings: Configuration providing the timeout and retry count
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def fetch(self, url: str, timeout: float | None = None) -> str | None:
        """Fetch a page and return its decoded body.

        Args:
            url: URL to fetch
            timeout: Hard timeout in seconds (defaults to the configured one)

        Returns:
            Response text, or None if the request failed for any reason
        """
        return self._fetch_text(url, dict(BROWSER_HEADERS), timeout)

    def fetch_json(self, url: str, timeout: float | None = None) -> Any | None:
        """Fetch a JSON document.

        Returns:
            Decoded JSON value, or None if the request or decoding failed
        """
        headers = dict(BROWSER_HEADERS)
        headers["Accept"] = JSON_ACCEPT

        text = self._fetch_text(url, headers, timeout)
        if text is None:
            return None

        try:
            return json.loads(text)
        except ValueError as e:
            logger.warning(f"Malformed JSON from {url}: {e}")
            return None

    def _fetch_text(
        self,
        url: str,
        headers: dict[str, str],
        timeout: float | None,
    ) -> str | None:
        timeout = timeout or self.settings.request_timeout_seconds
        retryer = Retrying(
            stop=stop_after_attempt(self.settings.max_retries + 1),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
            reraise=True,
        )

        try:
            return retryer(self._request, url, headers, timeout)
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "error"
            logger.warning(f"HTTP {status} from {url}")
        except requests.Timeout:
            logger.warning(f"Fetch timed out after {timeout}s ({url})")
        except requests.RequestException as e:
            logger.warning(f"Fetch failed ({url}): {e}")
        except Exception as e:
            logger.warning(f"Unreadable response from {url}: {type(e).__name__}: {e}")
        return None

    def _request(self, url: str, headers: dict[str, str], timeout: float) -> str:
        """Perform one GET, enforcing the timeout as a wall-clock deadline.

        Raises:
            requests.RequestException: On network errors, non-2xx status
                or when the deadline passes while reading the body
        """
        deadline = time.monotonic() + timeout
        response = requests.get(url, headers=headers, timeout=timeout, stream=True)
        try:
            response.raise_for_status()

            chunks: list[bytes] = []
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if time.monotonic() > deadline:
                    raise requests.Timeout(f"Exceeded {timeout}s reading {url}")
                chunks.append(chunk)
        finally:
            response.close()

        return _decode(b"".join(chunks), response)


def _decode(body: bytes, response: requests.Response) -> str:
    """Decode a body using the declared charset, falling back to UTF-8."""
    content_type = (response.headers.get("Content-Type") or "").lower()
    encoding = response.encoding if "charset" in content_type else None
    try:
        return body.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")
