import asyncio
import logging
from typing import List, Optional, Tuple

import aiohttp

from exceptions import PerformanceReportUnavailable
from models import PerformanceReport

logger = logging.getLogger(__name__)

PAGESPEED_API = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
CATEGORIES = ["performance", "accessibility", "best-practices", "seo"]

BASE_BACKOFF = 1.0  # seconds
MAX_BACKOFF = 8.0


def _retry_after(response: aiohttp.ClientResponse) -> Optional[float]:
    """Seconds from a Retry-After header, if the server sent a usable one"""
    value = response.headers.get("Retry-After")
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


class PageSpeedClient:
    """Performance-report collaborator backed by the PageSpeed Insights v5 API"""

    def __init__(self, session: aiohttp.ClientSession, api_key: str = "", strategy: str = "mobile",
                 timeout: float = 30.0, max_attempts: int = 2, api_url: str = PAGESPEED_API):
        self.session = session
        self.api_key = api_key
        self.strategy = strategy
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.api_url = api_url

    def _params(self, url: str) -> List[Tuple[str, str]]:
        params = [("url", url), ("strategy", self.strategy)]
        params += [("category", category) for category in CATEGORIES]
        if self.api_key:
            params.append(("key", self.api_key))
        return params

    async def _attempt(self, url: str) -> Tuple[Optional[PerformanceReport], Optional[float]]:
        """
        One request to the API.

        Returns (report, None) on success and (None, delay) when the request
        may be retried. Raises PerformanceReportUnavailable for anything that
        will not get better on a retry.
        """
        async with self.session.get(
            self.api_url,
            params=self._params(url),
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        ) as response:
            if response.status == 429:
                delay = _retry_after(response)
                logger.warning(f"[PSI] 429 for {url}, retry-after={delay}")
                return None, delay
            if response.status >= 500:
                logger.warning(f"[PSI] HTTP {response.status} for {url}")
                return None, None
            if response.status != 200:
                body = await response.text()
                raise PerformanceReportUnavailable(
                    url, f"PageSpeed returned HTTP {response.status}: {body[:200]}", status_code=response.status
                )
            try:
                payload = await response.json(content_type=None)
            except ValueError as e:
                raise PerformanceReportUnavailable(url, f"PageSpeed returned an undecodable body: {e}")

        if not isinstance(payload, dict) or "lighthouseResult" not in payload:
            raise PerformanceReportUnavailable(url, "PageSpeed response has no lighthouseResult")
        return PerformanceReport.from_lighthouse(payload), None

    async def fetch_report(self, url: str) -> PerformanceReport:
        """Fetch the Lighthouse report for a URL.

        Rate limiting (429) and server errors are retried with exponential
        backoff, honoring Retry-After.

        Raises:
            PerformanceReportUnavailable: when no report could be obtained.
        """
        last_error = "no attempt made"
        for attempt in range(1, self.max_attempts + 1):
            try:
                report, retry_after = await self._attempt(url)
            except asyncio.TimeoutError:
                last_error = f"timed out after {self.timeout:.0f}s"
                logger.warning(f"[PSI] Attempt {attempt}/{self.max_attempts} timed out for {url}")
                retry_after = None
                report = None
            except aiohttp.ClientError as e:
                last_error = f"client error: {e}"
                logger.warning(f"[PSI] ClientError on attempt {attempt}/{self.max_attempts} for {url}: {e}")
                retry_after = None
                report = None
            else:
                if report is not None:
                    logger.info(f"[PSI] Report received for {url}")
                    return report
                last_error = "rate limited or server error"

            if attempt < self.max_attempts:
                if retry_after is not None and retry_after > MAX_BACKOFF:
                    # Waiting that long would stall the whole audit
                    raise PerformanceReportUnavailable(
                        url, f"PageSpeed asked to retry after {retry_after:.0f}s for {url}", status_code=429
                    )
                delay = retry_after if retry_after is not None else min(MAX_BACKOFF, BASE_BACKOFF * (2 ** (attempt - 1)))
                await asyncio.sleep(delay)

        raise PerformanceReportUnavailable(url, f"PageSpeed report unavailable for {url}: {last_error}")
