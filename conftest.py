import pytest

from audit_config import AuditSettings
from exceptions import ScrapeError
from models import CoreWebVitals, Heading, Image, PageContent, PerformanceReport, ScrapeResult, TechnicalMetrics


def lighthouse_payload(performance=0.85, accessibility=0.9, best_practices=0.95, seo=0.92,
                       lcp=1800.0, fid=40.0, cls=0.02):
    """A trimmed PageSpeed Insights v5 response body"""
    return {
        "lighthouseResult": {
            "categories": {
                "performance": {"score": performance},
                "accessibility": {"score": accessibility},
                "best-practices": {"score": best_practices},
                "seo": {"score": seo},
            },
            "audits": {
                "largest-contentful-paint": {"numericValue": lcp},
                "first-input-delay": {"numericValue": fid},
                "cumulative-layout-shift": {"numericValue": cls},
            },
        }
    }


class FakeScraper:
    def __init__(self, result=None, error=None):
        self.result = result or ScrapeResult()
        self.error = error
        self.calls = []

    async def scrape(self, url):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.result


class FakePerformanceClient:
    def __init__(self, report=None, error=None):
        self.report = report
        self.error = error
        self.calls = []

    async def fetch_report(self, url):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.report


@pytest.fixture
def settings():
    return AuditSettings()


@pytest.fixture
def make_page_content():
    def _make(title="", meta_description="", h1_count=0, images_with_alt=0, images_without_alt=0,
              word_count=0):
        headings = [Heading(level=1, text=f"Heading {i}") for i in range(h1_count)]
        images = [Image(src=f"/img/{i}.png", alt=f"Image {i}", has_alt=True) for i in range(images_with_alt)]
        images += [Image(src=f"/img/bare-{i}.png", alt="", has_alt=False) for i in range(images_without_alt)]
        return PageContent(
            title=title,
            meta_description=meta_description,
            headings=tuple(headings),
            images=tuple(images),
            word_count=word_count,
        )
    return _make


@pytest.fixture
def make_metrics():
    def _make(https_enabled=True, performance=90, seo_score=90, accessibility=90, best_practices=90):
        return TechnicalMetrics(
            page_speed=performance,
            mobile_score=seo_score,
            https_enabled=https_enabled,
            meta_tags_count=3,
            headings_structure=True,
            image_optimization=100,
            core_web_vitals=CoreWebVitals(lcp=2000.0, fid=50.0, cls=0.05),
            seo_score=seo_score,
            accessibility=accessibility,
            best_practices=best_practices,
            performance=performance,
        )
    return _make


@pytest.fixture
def fake_scraper():
    return FakeScraper


@pytest.fixture
def fake_performance_client():
    return FakePerformanceClient


@pytest.fixture
def lighthouse():
    return lighthouse_payload


@pytest.fixture
def scrape_error():
    return ScrapeError("https://example.com/", "Failed to connect to https://example.com/")


@pytest.fixture
def performance_report():
    return PerformanceReport.from_lighthouse(lighthouse_payload())
