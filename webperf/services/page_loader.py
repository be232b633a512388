"""
Page Loader - Fetches a page over HTTP and parses it into a DOM tree.

Architecture:
1. HTTP fetch with retries (timeout / 429 backoff)
2. Status and size validation
3. HTML parse with BeautifulSoup

Any failure raises PageLoadError: an audit cannot continue without a page.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from webperf.config import settings
from webperf.exceptions import PageLoadError
from webperf.logger import logger


@dataclass
class Page:
    """Loaded page shared read-only by all rule modules."""
    url: str
    final_url: str
    document: BeautifulSoup
    # Response headers of the page fetch; empty when the page was not fetched
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_https(self) -> bool:
        """Whether the page was served over HTTPS, after redirects."""
        return self.final_url.startswith("https://")


def parse_html(html: str, url: str, **kwargs) -> Page:
    """Build a Page from markup without any network access."""
    return Page(
        url=url,
        final_url=kwargs.pop("final_url", url),
        document=BeautifulSoup(html, "html.parser"),
        **kwargs,
    )


class PageLoader:
    """Fetches and parses pages."""

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_retries: Optional[int] = None,
    ):
        self.http_timeout = settings.HTTP_TIMEOUT
        self.max_redirects = settings.HTTP_MAX_REDIRECTS
        self.max_retries = settings.HTTP_MAX_RETRIES if max_retries is None else max_retries
        self.max_size = settings.MAX_PAGE_SIZE
        self._transport = transport

    async def load(
        self,
        url: str,
        timeout: Optional[float] = None,
        max_size: Optional[int] = None,
        allow_js: bool = False,
    ) -> Page:
        """Fetch and parse a page.

        Args:
            url: Absolute http(s) URL
            timeout: Request timeout in milliseconds (defaults to HTTP_TIMEOUT)
            max_size: Maximum body size in bytes (defaults to MAX_PAGE_SIZE)
            allow_js: Logged only; scripts are never executed by the parser

        Returns:
            Page with parsed document

        Raises:
            PageLoadError: network failure, non-2xx status, timeout or oversize body
        """
        timeout_s = timeout / 1000 if timeout else self.http_timeout
        limit = max_size or self.max_size

        logger.info(f"Loading {url} (timeout={timeout_s}s, max_size={limit}, allow_js={allow_js})")
        if allow_js:
            logger.debug("allow_js requested; static parser does not execute page scripts")

        response = await self._fetch(url, timeout_s)

        if not 200 <= response.status_code < 300:
            raise PageLoadError(
                url,
                f"HTTP {response.status_code} {response.reason_phrase}".strip(),
                status_code=response.status_code,
            )

        declared = response.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > limit:
            raise PageLoadError(url, f"Response size {declared} exceeds limit of {limit} bytes")
        if len(response.content) > limit:
            raise PageLoadError(url, f"Response size {len(response.content)} exceeds limit of {limit} bytes")

        html = response.text
        logger.debug(
            f"Loaded {url}: {len(html)} chars, {len(response.history)} redirect(s), "
            f"content-type={response.headers.get('content-type')}"
        )

        return Page(
            url=url,
            final_url=str(response.url),
            document=BeautifulSoup(html, "html.parser"),
            headers=dict(response.headers),
        )

    async def _fetch(self, url: str, timeout_s: float) -> httpx.Response:
        """GET with retries on timeout and rate limiting."""
        for attempt in range(self.max_retries + 1):
            try:
                async with httpx.AsyncClient(
                    follow_redirects=True,
                    max_redirects=self.max_redirects,
                    timeout=timeout_s,
                    transport=self._transport,
                ) as client:
                    response = await client.get(
                        url,
                        headers={
                            "User-Agent": settings.USER_AGENT,
                            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                        }
                    )

                if response.status_code == 429 and attempt < self.max_retries:
                    retry_after = response.headers.get("Retry-After", "")
                    wait = int(retry_after) if retry_after.isdigit() else 2 ** attempt
                    logger.warning(f"Rate limited by {url}, waiting {wait}s")
                    await asyncio.sleep(wait)
                    continue

                return response

            except httpx.TimeoutException:
                if attempt < self.max_retries:
                    logger.warning(f"HTTP timeout for {url}, retrying (attempt {attempt + 1})")
                    await asyncio.sleep(2 ** attempt)
                    continue
                raise PageLoadError(url, "HTTP timeout")
            except httpx.InvalidURL as e:
                raise PageLoadError(url, f"Invalid URL: {e}") from e
            except httpx.HTTPError as e:
                logger.warning(f"HTTP error for {url}: {e}")
                raise PageLoadError(url, str(e) or e.__class__.__name__) from e

        raise PageLoadError(url, "HTTP fetch failed after retries")
