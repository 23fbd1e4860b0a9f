import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

from models import CoreWebVitals, PageContent, PerformanceReport, TechnicalMetrics
from scoring import round_half_up

logger = logging.getLogger(__name__)

# Category fractions used when the lab report lacks a category
DEFAULT_CATEGORY_SCORES = {
    "performance": 0.70,
    "seo": 0.75,
    "accessibility": 0.80,
    "best-practices": 0.85,
}
# The mobile score is read from the SEO category but has its own default
DEFAULT_MOBILE_SCORE = 0.80

# Core Web Vitals used when the lab report lacks the audit
DEFAULT_AUDIT_VALUES = {
    "largest-contentful-paint": 2500.0,  # ms
    "first-input-delay": 100.0,  # ms
    "cumulative-layout-shift": 0.1,
}


def _category(report: Optional[PerformanceReport], name: str, default: float) -> Tuple[int, bool]:
    """Scaled 0-100 category score and whether the default was used"""
    if report is not None and name in report.categories:
        return round_half_up(report.categories[name] * 100), False
    return round_half_up(default * 100), True


def _audit(report: Optional[PerformanceReport], name: str) -> Tuple[float, bool]:
    if report is not None and name in report.audits:
        return report.audits[name], False
    return DEFAULT_AUDIT_VALUES[name], True


def image_optimization_score(page_content: PageContent) -> int:
    total = len(page_content.images)
    return round_half_up(100 * page_content.images_with_alt / max(total, 1))


def is_https(url: str) -> bool:
    return urlparse(url or "").scheme.lower() == "https"


def build_technical_metrics(report: Optional[PerformanceReport], page_content: PageContent,
                            url: str, metadata: Optional[Dict[str, Any]] = None) -> TechnicalMetrics:
    """
    Merge the lab report, content facts and transport facts into one record.

    Args:
        report: the performance report, or None when it could not be obtained
        page_content: facts from the content extractor
        url: canonical URL of the audited page
        metadata: the scraped metadata record

    A missing report, category or audit never fails the build: the value from
    the default table is substituted and fallback_used is set on the result.
    """
    if report is None:
        logger.warning(f"No performance report for {url}, using default metric values")

    performance, perf_defaulted = _category(report, "performance", DEFAULT_CATEGORY_SCORES["performance"])
    seo_score, seo_defaulted = _category(report, "seo", DEFAULT_CATEGORY_SCORES["seo"])
    mobile_score, _ = _category(report, "seo", DEFAULT_MOBILE_SCORE)
    accessibility, a11y_defaulted = _category(report, "accessibility", DEFAULT_CATEGORY_SCORES["accessibility"])
    best_practices, bp_defaulted = _category(report, "best-practices", DEFAULT_CATEGORY_SCORES["best-practices"])

    lcp, lcp_defaulted = _audit(report, "largest-contentful-paint")
    fid, fid_defaulted = _audit(report, "first-input-delay")
    cls, cls_defaulted = _audit(report, "cumulative-layout-shift")

    fallback_used = any((
        perf_defaulted, seo_defaulted, a11y_defaulted, bp_defaulted,
        lcp_defaulted, fid_defaulted, cls_defaulted,
    ))
    if report is not None and fallback_used:
        logger.info(f"Performance report for {url} is partial, defaults filled in")

    return TechnicalMetrics(
        page_speed=performance,
        mobile_score=mobile_score,
        https_enabled=is_https(url),
        meta_tags_count=len(metadata) if metadata else 0,
        headings_structure=page_content.h1_count == 1,
        image_optimization=image_optimization_score(page_content),
        core_web_vitals=CoreWebVitals(lcp=lcp, fid=fid, cls=cls),
        seo_score=seo_score,
        accessibility=accessibility,
        best_practices=best_practices,
        performance=performance,
        fallback_used=fallback_used,
    )
