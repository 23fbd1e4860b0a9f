import pytest

from models import Heading, Image, PageContent, PerformanceReport
from technical_metrics import build_technical_metrics, image_optimization_score


def _content(levels=(), alts=()):
    return PageContent(
        headings=tuple(Heading(level=level, text="h") for level in levels),
        images=tuple(Image(src="/i.png", alt=alt, has_alt=bool(alt)) for alt in alts),
    )


@pytest.mark.parametrize("levels, expected", [
    ((1,), True),
    ((1, 2, 3), True),
    ((), False),
    ((2, 3), False),
    ((1, 1), False),
    ((1, 2, 1), False),
])
def test_headings_structure_requires_exactly_one_h1(levels, expected):
    metrics = build_technical_metrics(None, _content(levels=levels), "https://example.com/")
    assert metrics.headings_structure is expected


@pytest.mark.parametrize("alts, expected", [
    ((), 0),
    (("a",), 100),
    (("a", ""), 50),
    (("a", "b", ""), 67),
    (("a", "", "", ""), 25),
    (("a", "", "", "", "", "", "", ""), 13),  # 12.5 rounds up
])
def test_image_optimization_percentage(alts, expected):
    assert image_optimization_score(_content(alts=alts)) == expected


def test_lab_report_values_are_scaled_and_rounded(performance_report):
    metrics = build_technical_metrics(
        performance_report, _content(levels=(1,)), "https://example.com/", {"title": "t", "url": "u"}
    )
    assert metrics.performance == 85
    assert metrics.page_speed == 85
    assert metrics.accessibility == 90
    assert metrics.best_practices == 95
    assert metrics.seo_score == 92
    assert metrics.mobile_score == 92
    assert metrics.core_web_vitals.lcp == 1800.0
    assert metrics.core_web_vitals.fid == 40.0
    assert metrics.core_web_vitals.cls == 0.02
    assert metrics.meta_tags_count == 2
    assert metrics.fallback_used is False


def test_missing_report_uses_default_table():
    metrics = build_technical_metrics(None, _content(), "http://example.com/")
    assert metrics.performance == 70
    assert metrics.page_speed == 70
    assert metrics.seo_score == 75
    assert metrics.mobile_score == 80
    assert metrics.accessibility == 80
    assert metrics.best_practices == 85
    assert metrics.core_web_vitals.lcp == 2500.0
    assert metrics.core_web_vitals.fid == 100.0
    assert metrics.core_web_vitals.cls == 0.1
    assert metrics.meta_tags_count == 0
    assert metrics.fallback_used is True


def test_partial_report_fills_only_missing_fields():
    report = PerformanceReport(
        categories={"performance": 0.42, "seo": 0.0},
        audits={"cumulative-layout-shift": 0.3},
    )
    metrics = build_technical_metrics(report, _content(), "https://example.com/")
    assert metrics.performance == 42
    # Zero is a real score, not a missing one
    assert metrics.seo_score == 0
    assert metrics.mobile_score == 0
    assert metrics.accessibility == 80
    assert metrics.best_practices == 85
    assert metrics.core_web_vitals.cls == 0.3
    assert metrics.core_web_vitals.lcp == 2500.0
    assert metrics.fallback_used is True


@pytest.mark.parametrize("url, expected", [
    ("https://example.com/", True),
    ("http://example.com/", False),
])
def test_https_detection(url, expected):
    assert build_technical_metrics(None, _content(), url).https_enabled is expected
