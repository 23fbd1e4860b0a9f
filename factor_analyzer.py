"""
Rule-based classification of a page's SEO facts.

Each rule looks at one concern and appends its finding to exactly one of the
lists of a FactorReport. Rules share no state, and RULES keeps them in the
order their findings should appear.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from models import FactorReport, FactorStatus, Impact, PageContent, SEOFactor, TechnicalMetrics

logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 30
TITLE_MAX_LENGTH = 60
META_DESCRIPTION_MIN_LENGTH = 120
META_DESCRIPTION_MAX_LENGTH = 160
MIN_ALT_TEXT_PERCENTAGE = 90.0
MIN_WORD_COUNT = 300
MIN_PERFORMANCE_SCORE = 80

CONTENT = "Content"
ACCESSIBILITY = "Accessibility"
SECURITY = "Security"
PERFORMANCE = "Performance"


def check_title(page_content: PageContent, technical_metrics: TechnicalMetrics,
                metadata: Dict[str, Any], report: FactorReport) -> None:
    title_length = len(page_content.title)
    if not page_content.title:
        report.negative_factors.append(SEOFactor(
            title='Missing Page Title',
            description='Page is missing a title tag, which is crucial for SEO',
            impact=Impact.HIGH,
            category=CONTENT,
            status=FactorStatus.FAIL,
        ))
    elif TITLE_MIN_LENGTH <= title_length <= TITLE_MAX_LENGTH:
        report.positive_factors.append(SEOFactor(
            title='Optimal Title Length',
            description=f'Title is {title_length} characters, within the recommended {TITLE_MIN_LENGTH}-{TITLE_MAX_LENGTH} range',
            impact=Impact.HIGH,
            category=CONTENT,
            value=title_length,
            status=FactorStatus.PASS,
        ))
    else:
        report.negative_factors.append(SEOFactor(
            title='Suboptimal Title Length',
            description=f'Title is {title_length} characters. Recommended: {TITLE_MIN_LENGTH}-{TITLE_MAX_LENGTH} characters',
            impact=Impact.HIGH,
            category=CONTENT,
            value=title_length,
            status=FactorStatus.FAIL,
        ))
        report.recommendations.append(SEOFactor(
            title='Optimize Title Length',
            description=f'Adjust your page title to be between {TITLE_MIN_LENGTH}-{TITLE_MAX_LENGTH} characters for better search visibility',
            impact=Impact.HIGH,
            category=CONTENT,
        ))


def check_meta_description(page_content: PageContent, technical_metrics: TechnicalMetrics,
                           metadata: Dict[str, Any], report: FactorReport) -> None:
    description_length = len(page_content.meta_description)
    if not page_content.meta_description:
        report.negative_factors.append(SEOFactor(
            title='Missing Meta Description',
            description='Page lacks a meta description, missing opportunity for search snippet optimization',
            impact=Impact.MEDIUM,
            category=CONTENT,
            status=FactorStatus.FAIL,
        ))
    elif META_DESCRIPTION_MIN_LENGTH <= description_length <= META_DESCRIPTION_MAX_LENGTH:
        report.positive_factors.append(SEOFactor(
            title='Good Meta Description',
            description=f'Meta description is {description_length} characters, within optimal range',
            impact=Impact.MEDIUM,
            category=CONTENT,
            value=description_length,
            status=FactorStatus.PASS,
        ))
    else:
        report.negative_factors.append(SEOFactor(
            title='Suboptimal Meta Description',
            description=(
                f'Meta description is {description_length} characters. '
                f'Recommended: {META_DESCRIPTION_MIN_LENGTH}-{META_DESCRIPTION_MAX_LENGTH}'
            ),
            impact=Impact.MEDIUM,
            category=CONTENT,
            value=description_length,
            status=FactorStatus.WARNING,
        ))


def check_h1_structure(page_content: PageContent, technical_metrics: TechnicalMetrics,
                       metadata: Dict[str, Any], report: FactorReport) -> None:
    h1_count = page_content.h1_count
    if h1_count == 1:
        report.positive_factors.append(SEOFactor(
            title='Proper H1 Structure',
            description='Page has exactly one H1 tag, following SEO best practices',
            impact=Impact.HIGH,
            category=CONTENT,
            status=FactorStatus.PASS,
        ))
    elif h1_count == 0:
        report.negative_factors.append(SEOFactor(
            title='Missing H1 Tag',
            description='Page is missing an H1 tag, which is important for content hierarchy',
            impact=Impact.HIGH,
            category=CONTENT,
            status=FactorStatus.FAIL,
        ))
    else:
        report.negative_factors.append(SEOFactor(
            title='Multiple H1 Tags',
            description=f'Page has {h1_count} H1 tags. Best practice is to have exactly one H1 per page',
            impact=Impact.MEDIUM,
            category=CONTENT,
            value=h1_count,
            status=FactorStatus.WARNING,
        ))


def check_image_alt_text(page_content: PageContent, technical_metrics: TechnicalMetrics,
                         metadata: Dict[str, Any], report: FactorReport) -> None:
    total_images = len(page_content.images)
    if total_images == 0:
        # Nothing to judge
        return

    images_without_alt = total_images - page_content.images_with_alt
    alt_text_percentage = page_content.images_with_alt / total_images * 100
    if alt_text_percentage >= MIN_ALT_TEXT_PERCENTAGE:
        report.positive_factors.append(SEOFactor(
            title='Good Image Alt Text Coverage',
            description=f'{alt_text_percentage:.1f}% of images have alt text',
            impact=Impact.MEDIUM,
            category=ACCESSIBILITY,
            value=f'{alt_text_percentage:.1f}%',
            status=FactorStatus.PASS,
        ))
    else:
        report.negative_factors.append(SEOFactor(
            title='Missing Image Alt Text',
            description=f'{images_without_alt} out of {total_images} images are missing alt text',
            impact=Impact.MEDIUM,
            category=ACCESSIBILITY,
            value=f'{images_without_alt}/{total_images}',
            status=FactorStatus.FAIL,
        ))


def check_content_length(page_content: PageContent, technical_metrics: TechnicalMetrics,
                         metadata: Dict[str, Any], report: FactorReport) -> None:
    word_count = page_content.word_count
    if word_count >= MIN_WORD_COUNT:
        report.positive_factors.append(SEOFactor(
            title='Adequate Content Length',
            description=f'Page has {word_count} words, providing substantial content for search engines',
            impact=Impact.MEDIUM,
            category=CONTENT,
            value=word_count,
            status=FactorStatus.PASS,
        ))
    else:
        report.negative_factors.append(SEOFactor(
            title='Thin Content',
            description=f'Page has only {word_count} words. Consider adding more valuable content',
            impact=Impact.MEDIUM,
            category=CONTENT,
            value=word_count,
            status=FactorStatus.WARNING,
        ))


def check_https(page_content: PageContent, technical_metrics: TechnicalMetrics,
                metadata: Dict[str, Any], report: FactorReport) -> None:
    if technical_metrics.https_enabled:
        report.positive_factors.append(SEOFactor(
            title='HTTPS Enabled',
            description='Website uses secure HTTPS protocol, which is a ranking factor',
            impact=Impact.HIGH,
            category=SECURITY,
            status=FactorStatus.PASS,
        ))
    else:
        report.negative_factors.append(SEOFactor(
            title='HTTPS Not Enabled',
            description='Website is not using HTTPS, which can negatively impact rankings',
            impact=Impact.HIGH,
            category=SECURITY,
            status=FactorStatus.FAIL,
        ))


def check_performance(page_content: PageContent, technical_metrics: TechnicalMetrics,
                      metadata: Dict[str, Any], report: FactorReport) -> None:
    performance = technical_metrics.performance
    if performance >= MIN_PERFORMANCE_SCORE:
        report.positive_factors.append(SEOFactor(
            title='Good Performance Score',
            description=f'Performance score of {performance}/100 indicates fast loading',
            impact=Impact.HIGH,
            category=PERFORMANCE,
            value=performance,
            status=FactorStatus.PASS,
        ))
    else:
        report.negative_factors.append(SEOFactor(
            title='Poor Performance Score',
            description=f'Performance score of {performance}/100 needs improvement',
            impact=Impact.HIGH,
            category=PERFORMANCE,
            value=performance,
            status=FactorStatus.FAIL,
        ))
        report.recommendations.append(SEOFactor(
            title='Improve Page Speed',
            description='Optimize images, minify CSS/JS, and consider using a CDN to improve loading times',
            impact=Impact.HIGH,
            category=PERFORMANCE,
        ))


Rule = Callable[[PageContent, TechnicalMetrics, Dict[str, Any], FactorReport], None]

RULES: List[Rule] = [
    check_title,
    check_meta_description,
    check_h1_structure,
    check_image_alt_text,
    check_content_length,
    check_https,
    check_performance,
]


def analyze_factors(page_content: PageContent, technical_metrics: TechnicalMetrics,
                    metadata: Optional[Dict[str, Any]] = None) -> FactorReport:
    """Run every rule and collect positive factors, negative factors and recommendations"""
    report = FactorReport()
    for rule in RULES:
        rule(page_content, technical_metrics, metadata or {}, report)

    logger.debug(
        f"Factor analysis: {len(report.positive_factors)} positive, "
        f"{len(report.negative_factors)} negative, {len(report.recommendations)} recommendations"
    )
    return report
