import asyncio
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin, urlparse

import aiohttp
from bs4 import BeautifulSoup

from audit_config import DEFAULT_USER_AGENT
from exceptions import ScrapeError
from models import ScrapeResult

logger = logging.getLogger(__name__)

HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']
BLOCK_TAGS = ['p', 'li', 'blockquote', 'pre', 'td', 'th', 'dt', 'dd', 'figcaption']

# (metadata key, attribute name, attribute value) for <meta> tags
META_TAGS = [
    ('description', 'name', 'description'),
    ('keywords', 'name', 'keywords'),
    ('robots', 'name', 'robots'),
    ('viewport', 'name', 'viewport'),
    ('ogTitle', 'property', 'og:title'),
    ('ogDescription', 'property', 'og:description'),
    ('ogImage', 'property', 'og:image'),
    ('ogUrl', 'property', 'og:url'),
    ('ogType', 'property', 'og:type'),
    ('twitterCard', 'name', 'twitter:card'),
    ('twitterTitle', 'name', 'twitter:title'),
    ('twitterDescription', 'name', 'twitter:description'),
    ('twitterImage', 'name', 'twitter:image'),
]


def _clean_inline(text: str) -> str:
    """Collapse whitespace and drop characters that would break markdown syntax"""
    return ' '.join(text.replace('[', '').replace(']', '').split())


def _markdown_url(base_url: str, href: str) -> str:
    """Absolute URL with parentheses percent-encoded so it cannot end a (...) target early"""
    return urljoin(base_url, href).replace('(', '%28').replace(')', '%29')


def _extract_json_ld(soup: BeautifulSoup) -> List[Any]:
    """Parse every JSON-LD script block, skipping the ones that are not valid JSON"""
    blocks = []
    for script in soup.find_all('script', type='application/ld+json'):
        try:
            blocks.append(json.loads(script.string or ''))
        except (json.JSONDecodeError, TypeError):
            logger.debug("Skipping unparsable JSON-LD block")
    return blocks


def _meta_content(soup: BeautifulSoup, attr_name: str, attr_value: str) -> Optional[str]:
    tag = soup.find('meta', attrs={attr_name: attr_value})
    if tag is None and attr_name == 'property':
        # Some sites use name= for Open Graph tags
        tag = soup.find('meta', attrs={'name': attr_value})
    if tag is None:
        return None
    content = (tag.get('content') or '').strip()
    return content or None


def extract_metadata(soup: BeautifulSoup, url: str) -> Dict[str, Any]:
    """Collect page metadata. Only the keys actually present on the page are set."""
    metadata: Dict[str, Any] = {'url': url}

    title_tag = soup.find('title')
    if title_tag:
        title = title_tag.get_text(strip=True)
        if title:
            metadata['title'] = title

    for key, attr_name, attr_value in META_TAGS:
        content = _meta_content(soup, attr_name, attr_value)
        if content:
            metadata[key] = content

    canonical = soup.find('link', attrs={'rel': 'canonical'})
    if canonical and canonical.get('href', '').strip():
        metadata['canonical'] = urljoin(url, canonical['href'].strip())

    html_tag = soup.find('html')
    if html_tag and html_tag.get('lang'):
        metadata['language'] = html_tag['lang'].strip()

    json_ld = _extract_json_ld(soup)
    if json_ld:
        metadata['jsonLd'] = json_ld

    return metadata


def extract_links(soup: BeautifulSoup, base_url: str) -> List[str]:
    """Absolute hrefs of the page's anchors, de-duplicated, in document order"""
    links = []
    for a_tag in soup.find_all('a', href=True):
        href = a_tag['href'].strip()
        if not href or href.startswith('#') or href.startswith(('javascript:', 'mailto:', 'tel:')):
            continue
        absolute = urljoin(base_url, href)
        if absolute not in links:
            links.append(absolute)
    return links


def html_to_markdown(soup: BeautifulSoup, base_url: str) -> str:
    """
    Render the page body as markdown-like text.

    Headings become '#' lines, anchors become [text](href), images become
    ![alt](src). The soup is modified in place.
    """
    for tag in soup(['script', 'style', 'noscript', 'template']):
        tag.decompose()

    root = soup.body or soup

    # Innermost first, so nested markup is already rendered when its parent is
    for a_tag in reversed(root.find_all('a')):
        href = (a_tag.get('href') or '').strip()
        text = _clean_inline(a_tag.get_text(' ', strip=True))
        if not href or href.startswith(('javascript:', '#')) or not text:
            # Keep the children (an image-only link stays an image)
            a_tag.unwrap()
            continue
        a_tag.replace_with(f'[{text}]({_markdown_url(base_url, href)})')

    for img in root.find_all('img'):
        src = (img.get('src') or '').strip()
        if not src:
            img.decompose()
            continue
        alt = _clean_inline(img.get('alt') or '')
        img.replace_with(f' ![{alt}]({_markdown_url(base_url, src)}) ')

    for heading in reversed(root.find_all(HEADING_TAGS)):
        level = int(heading.name[1])
        text = ' '.join(heading.get_text(' ', strip=True).split())
        if text:
            heading.replace_with(f"\n\n{'#' * level} {text}\n\n")
        else:
            heading.decompose()

    for block in root.find_all(BLOCK_TAGS):
        block.insert_before('\n')
        block.insert_after('\n')
    for br in root.find_all('br'):
        br.replace_with('\n')

    lines = []
    for line in root.get_text().splitlines():
        line = ' '.join(line.split())
        if line:
            lines.append(line)
    return '\n\n'.join(lines)


class PageScraper:
    """Scrape collaborator that fetches a page with aiohttp and renders it as markdown"""

    def __init__(self, session: aiohttp.ClientSession, timeout: float = 15.0,
                 user_agent: str = DEFAULT_USER_AGENT):
        self.session = session
        self.timeout = timeout
        self.headers = {'User-Agent': user_agent}
        self.logger = logging.getLogger(__name__)

    async def _fetch(self, url: str):
        try:
            async with self.session.get(
                url,
                headers=self.headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                allow_redirects=True,
            ) as response:
                if not 200 <= response.status < 300:
                    raise ScrapeError(url, f"HTTP status code {response.status} for {url}", status_code=response.status)
                html = await response.text(errors='replace')
                return html, str(response.url), response.status
        except asyncio.TimeoutError:
            raise ScrapeError(url, f"Timed out after {self.timeout:.0f}s fetching {url}")
        except aiohttp.ClientError as e:
            raise ScrapeError(url, f"Failed to connect to {url}: {e}")

    async def scrape(self, url: str) -> ScrapeResult:
        """Fetch a page and return its markdown, metadata and links.

        Raises:
            ScrapeError: when the page cannot be fetched or returns an error status.
        """
        self.logger.info(f"Scraping {url}")
        html, final_url, status = await self._fetch(url)
        if final_url != url:
            self.logger.info(f"URL redirected to: {final_url}")

        soup = BeautifulSoup(html, 'html.parser')
        metadata = extract_metadata(soup, final_url)
        links = extract_links(soup, final_url)
        markdown = html_to_markdown(soup, final_url)

        parsed = urlparse(final_url)
        return ScrapeResult(
            markdown=markdown,
            metadata=metadata,
            links=links,
            extract={
                'text': soup.get_text(' ', strip=True),
                'status_code': status,
                'host': parsed.hostname or '',
            },
        )
