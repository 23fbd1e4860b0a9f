import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse, urlunparse

import aiohttp

from audit_config import AuditSettings, get_settings
from content_extractor import extract_page_content
from exceptions import AuditCancelled, InvalidURL, PerformanceReportUnavailable
from factor_analyzer import analyze_factors
from models import AuditResult, PerformanceReport, ScrapeResult
from pagespeed import PageSpeedClient
from scoring import calculate_overall_score
from scraper import PageScraper
from structured_data import inspect_social_media, inspect_structured_data
from technical_metrics import build_technical_metrics

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

# Progress checkpoints, in the order an audit passes them
PROGRESS_STARTED = 10
PROGRESS_CONTENT_SCRAPED = 30
PROGRESS_REPORT_FETCHED = 60
PROGRESS_CONTENT_ANALYZED = 70
PROGRESS_FACTORS_ANALYZED = 80
PROGRESS_STRUCTURED_DATA_ANALYZED = 90
PROGRESS_COMPLETE = 100


def canonicalize_url(url: str) -> str:
    """Validate an http(s) URL and return its canonical form.

    Scheme and host are lowercased and an empty path becomes '/'.

    Raises:
        InvalidURL: if the input is not an absolute http(s) URL with a host.
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidURL(str(url), "URL is empty")
    candidate = url.strip()
    try:
        parsed = urlparse(candidate)
        hostname = parsed.hostname
        parsed.port  # raises ValueError for a malformed port
    except ValueError as e:
        raise InvalidURL(candidate, str(e))

    if parsed.scheme.lower() not in ('http', 'https'):
        raise InvalidURL(candidate, "scheme must be http or https")
    if not hostname or any(char.isspace() for char in parsed.netloc):
        raise InvalidURL(candidate, "missing or malformed host")

    # Credentials are case-sensitive, only the host part is folded
    userinfo, at, hostport = parsed.netloc.rpartition('@')
    return urlunparse((
        parsed.scheme.lower(),
        userinfo + at + hostport.lower(),
        parsed.path or '/',
        parsed.params,
        parsed.query,
        parsed.fragment,
    ))


class SEOAnalyzer:
    """Runs the single-page audit pipeline.

    The scrape and performance-report collaborators can be injected; any
    object with an async scrape(url) or fetch_report(url) method works. When
    they are not given, the analyzer must be used as an async context manager
    so it can own the aiohttp session the default collaborators share.
    """

    def __init__(self, scraper=None, performance_client=None, settings: Optional[AuditSettings] = None):
        self.settings = settings or get_settings()
        self.scraper = scraper
        self.performance_client = performance_client
        self.session: Optional[aiohttp.ClientSession] = None
        self.logger = logging.getLogger(__name__)

    async def __aenter__(self):
        if self.scraper is None or self.performance_client is None:
            self.session = aiohttp.ClientSession()
            if self.scraper is None:
                self.scraper = PageScraper(
                    self.session,
                    timeout=self.settings.scrape_timeout,
                    user_agent=self.settings.user_agent,
                )
            if self.performance_client is None:
                self.performance_client = PageSpeedClient(
                    self.session,
                    api_key=self.settings.pagespeed_api_key,
                    strategy=self.settings.pagespeed_strategy,
                    timeout=self.settings.pagespeed_timeout,
                    max_attempts=self.settings.pagespeed_max_attempts,
                )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()
            self.session = None

    def _report_progress(self, on_progress: Optional[ProgressCallback], percent: int) -> None:
        if on_progress is None:
            return
        try:
            on_progress(percent)
        except Exception as e:
            # Progress is advisory, a broken callback must not stop the audit
            self.logger.warning(f"Progress callback failed at {percent}%: {e}")

    @staticmethod
    def _check_cancelled(cancel_event: Optional[asyncio.Event], step: str) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise AuditCancelled(f"Audit cancelled before {step}")

    async def _fetch_report(self, url: str) -> Optional[PerformanceReport]:
        """The lab report, or None when the collaborator fails in any way"""
        try:
            return await self.performance_client.fetch_report(url)
        except asyncio.CancelledError:
            raise
        except PerformanceReportUnavailable as e:
            self.logger.warning(f"Performance report unavailable for {url}: {e}")
        except Exception as e:
            self.logger.error(f"Performance report collaborator failed for {url}: {e}", exc_info=True)
        return None

    async def analyze(self, url: str, on_progress: Optional[ProgressCallback] = None,
                      cancel_event: Optional[asyncio.Event] = None) -> AuditResult:
        """Audit one page.

        Args:
            url: page to audit (absolute http or https URL)
            on_progress: optional callback receiving checkpoint percentages
            cancel_event: optional event; once set, the audit stops before its next step

        Raises:
            InvalidURL: before any I/O when the URL cannot be parsed
            ScrapeError: when the page content cannot be fetched
            AuditCancelled: when cancel_event is set mid-run
        """
        clean_url = canonicalize_url(url)
        if self.scraper is None or self.performance_client is None:
            raise RuntimeError("SEOAnalyzer needs collaborators; use it as an async context manager")

        start_time = time.time()
        self.logger.info(f"Starting SEO audit for {clean_url}")
        self._check_cancelled(cancel_event, "scraping")
        self._report_progress(on_progress, PROGRESS_STARTED)

        # The two fetches are independent, so the report is requested while the page is scraped
        report_task = asyncio.ensure_future(self._fetch_report(clean_url))
        try:
            scraped: ScrapeResult = await self.scraper.scrape(clean_url)
            self._report_progress(on_progress, PROGRESS_CONTENT_SCRAPED)
            self._check_cancelled(cancel_event, "fetching the performance report")
            report = await report_task
        except BaseException:
            report_task.cancel()
            raise
        self._report_progress(on_progress, PROGRESS_REPORT_FETCHED)

        metadata: Dict[str, Any] = scraped.metadata or {}
        markdown = scraped.markdown or ""

        self._check_cancelled(cancel_event, "content analysis")
        page_content = extract_page_content(markdown, metadata, page_url=clean_url)
        technical_metrics = build_technical_metrics(report, page_content, clean_url, metadata)
        self._report_progress(on_progress, PROGRESS_CONTENT_ANALYZED)

        self._check_cancelled(cancel_event, "factor analysis")
        factors = analyze_factors(page_content, technical_metrics, metadata)
        self._report_progress(on_progress, PROGRESS_FACTORS_ANALYZED)

        self._check_cancelled(cancel_event, "structured data analysis")
        structured_data = inspect_structured_data(markdown, metadata, parse_types=self.settings.parse_schema_types)
        social_media = inspect_social_media(metadata)
        self._report_progress(on_progress, PROGRESS_STRUCTURED_DATA_ANALYZED)

        self._check_cancelled(cancel_event, "scoring")
        score = calculate_overall_score(technical_metrics, len(factors.negative_factors))
        result = AuditResult(
            score=score,
            url=clean_url,
            positive_factors=tuple(factors.positive_factors),
            negative_factors=tuple(factors.negative_factors),
            recommendations=tuple(factors.recommendations),
            technical_metrics=technical_metrics,
            page_content=page_content,
            structured_data=structured_data,
            social_media=social_media,
        )
        self._report_progress(on_progress, PROGRESS_COMPLETE)

        self.logger.info(
            f"Completed SEO audit for {clean_url} in {time.time() - start_time:.2f} seconds "
            f"(score {score}, {len(result.negative_factors)} negative factors"
            f"{', degraded metrics' if result.degraded else ''})"
        )
        return result


async def analyze_url(url: str, on_progress: Optional[ProgressCallback] = None,
                      cancel_event: Optional[asyncio.Event] = None) -> AuditResult:
    """Audit a URL with the default scraper and PageSpeed collaborators"""
    async with SEOAnalyzer() as analyzer:
        return await analyzer.analyze(url, on_progress=on_progress, cancel_event=cancel_event)
