"""
Content extraction for the markdown-like rendition of a scraped page.

Every function here is pure. No scanning state is shared between calls and
each call returns freshly built lists.
"""
import re
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from models import Heading, Image, Link, PageContent

logger = logging.getLogger(__name__)

HEADING_RE = re.compile(r'^(#{1,6})[ \t]+(\S.*)$', re.MULTILINE)
IMAGE_RE = re.compile(r'!\[([^\]]*)\]\(([^)]+)\)')
# Image references start with "!" and are not links
LINK_RE = re.compile(r'(?<!!)\[([^\]]+)\]\(([^)]+)\)')
SENTENCE_SPLIT_RE = re.compile(r'[.!?]+')

# Flesch Reading Ease constants
FLESCH_BASE = 206.835
FLESCH_SENTENCE_WEIGHT = 1.015
FLESCH_SYLLABLE_WEIGHT = 84.6
# Fixed syllables-per-word heuristic, not a real syllable counter
SYLLABLES_PER_WORD = 1.5


def extract_headings(markdown: str) -> List[Heading]:
    """Every '#'..'######' line becomes a heading, in document order"""
    return [
        Heading(level=len(match.group(1)), text=match.group(2).strip())
        for match in HEADING_RE.finditer(markdown or "")
    ]


def extract_images(markdown: str) -> List[Image]:
    images = []
    for match in IMAGE_RE.finditer(markdown or ""):
        alt, src = match.group(1), match.group(2)
        images.append(Image(src=src, alt=alt, has_alt=len(alt) > 0))
    return images


def _hostname(url: Optional[str]) -> Optional[str]:
    if not url or not isinstance(url, str):
        return None
    try:
        host = urlparse(url.strip()).hostname
    except ValueError:
        return None
    return host or None


def is_internal_link(href: str, page_url: Optional[str]) -> bool:
    """
    A link is internal when it is not an absolute http(s) URL, or when its
    host is the host of the page itself. Without a usable page URL every
    absolute link counts as external.
    """
    if not href.lower().startswith(('http://', 'https://')):
        return True
    page_host = _hostname(page_url)
    if page_host is None:
        return False
    return _hostname(href) == page_host


def extract_links(markdown: str, page_url: Optional[str] = None) -> List[Link]:
    links = []
    for match in LINK_RE.finditer(markdown or ""):
        text, href = match.group(1), match.group(2)
        links.append(Link(href=href, text=text, is_internal=is_internal_link(href, page_url)))
    return links


def count_words(markdown: str) -> int:
    return len([word for word in (markdown or "").split() if word])


def readability_score(markdown: str, word_count: int) -> float:
    """
    Approximate Flesch Reading Ease.

    This is intentionally loose: syllables are estimated as 1.5 per word and
    sentences are the segments between '.', '!' and '?'. The result is NOT
    clamped to 0-100; callers decide whether to clamp.
    """
    if word_count <= 0:
        return 0.0
    sentences = max(1, len(SENTENCE_SPLIT_RE.split(markdown or "")))
    syllables = word_count * SYLLABLES_PER_WORD
    return (
        FLESCH_BASE
        - FLESCH_SENTENCE_WEIGHT * (word_count / sentences)
        - FLESCH_SYLLABLE_WEIGHT * (syllables / word_count)
    )


def _text_field(metadata: Dict[str, Any], key: str) -> str:
    value = metadata.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def extract_page_content(markdown: str, metadata: Optional[Dict[str, Any]] = None,
                         page_url: Optional[str] = None) -> PageContent:
    """
    Turn scraped markdown plus page metadata into a PageContent record.

    Internal links are judged against metadata['url'] when present, otherwise
    against page_url. Malformed input never raises; missing fields default to
    empty values.
    """
    metadata = metadata or {}
    markdown = markdown or ""
    own_url = metadata.get("url") or page_url

    word_count = count_words(markdown)
    page_content = PageContent(
        title=_text_field(metadata, "title"),
        meta_description=_text_field(metadata, "description"),
        headings=tuple(extract_headings(markdown)),
        images=tuple(extract_images(markdown)),
        links=tuple(extract_links(markdown, own_url)),
        word_count=word_count,
        readability_score=readability_score(markdown, word_count),
    )
    logger.debug(
        f"Extracted {len(page_content.headings)} headings, {len(page_content.images)} images, "
        f"{len(page_content.links)} links, {word_count} words"
    )
    return page_content
