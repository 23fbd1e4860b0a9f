from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, List, Optional, Any, Tuple, Union


class Impact(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FactorStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARNING = "warning"


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class Image:
    src: str
    alt: str
    has_alt: bool


@dataclass(frozen=True)
class Link:
    href: str
    text: str
    is_internal: bool


@dataclass(frozen=True)
class PageContent:
    """Content facts extracted from the scraped markdown of a single page"""
    title: str = ""
    meta_description: str = ""
    headings: Tuple[Heading, ...] = ()
    images: Tuple[Image, ...] = ()
    links: Tuple[Link, ...] = ()
    word_count: int = 0
    readability_score: float = 0.0

    @property
    def h1_count(self) -> int:
        return sum(1 for heading in self.headings if heading.level == 1)

    @property
    def images_with_alt(self) -> int:
        return sum(1 for image in self.images if image.has_alt)


@dataclass(frozen=True)
class CoreWebVitals:
    lcp: float  # ms
    fid: float  # ms
    cls: float


@dataclass(frozen=True)
class TechnicalMetrics:
    """Lab scores and transport facts for the audited page (all scores 0-100)"""
    page_speed: int
    mobile_score: int
    https_enabled: bool
    meta_tags_count: int
    headings_structure: bool
    image_optimization: int
    core_web_vitals: CoreWebVitals
    seo_score: int
    accessibility: int
    best_practices: int
    performance: int
    # True when any value came from the default table rather than lab data
    fallback_used: bool = False


@dataclass(frozen=True)
class SEOFactor:
    title: str
    description: str
    impact: Impact
    category: str
    value: Optional[Union[str, int]] = None
    status: Optional[FactorStatus] = None


@dataclass
class FactorReport:
    positive_factors: List[SEOFactor] = field(default_factory=list)
    negative_factors: List[SEOFactor] = field(default_factory=list)
    recommendations: List[SEOFactor] = field(default_factory=list)


@dataclass(frozen=True)
class StructuredDataReport:
    has_schema: bool
    types: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SocialMediaReport:
    has_open_graph: bool
    has_twitter_cards: bool
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None


@dataclass
class ScrapeResult:
    """What the scrape collaborator hands back for one page"""
    markdown: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    links: List[str] = field(default_factory=list)
    extract: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PerformanceReport:
    """Lighthouse-style report: category fractions (0-1) and numeric audit values"""
    categories: Dict[str, float] = field(default_factory=dict)
    audits: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_lighthouse(cls, payload: Dict[str, Any]) -> "PerformanceReport":
        """Build a report from a PageSpeed Insights v5 response body.

        Categories without a numeric score and audits without a numericValue
        are left out, so the metrics builder substitutes its defaults for them.
        """
        lighthouse = (payload or {}).get("lighthouseResult") or {}
        categories = {}
        for name, category in (lighthouse.get("categories") or {}).items():
            score = (category or {}).get("score")
            if isinstance(score, (int, float)) and not isinstance(score, bool):
                categories[name] = float(score)

        audits = {}
        for name, audit in (lighthouse.get("audits") or {}).items():
            value = (audit or {}).get("numericValue")
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                audits[name] = float(value)

        return cls(categories=categories, audits=audits)


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


@dataclass(frozen=True)
class AuditResult:
    score: int
    url: str
    positive_factors: Tuple[SEOFactor, ...]
    negative_factors: Tuple[SEOFactor, ...]
    recommendations: Tuple[SEOFactor, ...]
    technical_metrics: TechnicalMetrics
    page_content: PageContent
    structured_data: StructuredDataReport
    social_media: SocialMediaReport

    @property
    def degraded(self) -> bool:
        """True when the technical metrics are not fully backed by lab data"""
        return self.technical_metrics.fallback_used

    def to_dict(self) -> Dict[str, Any]:
        data = _jsonable(asdict(self))
        data["degraded"] = self.degraded
        return data
