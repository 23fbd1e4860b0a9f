import logging
from typing import Any, Dict, Iterable, List, Optional

from models import SocialMediaReport, StructuredDataReport

logger = logging.getLogger(__name__)

SCHEMA_MARKERS = ('schema.org', 'application/ld+json')
PLACEHOLDER_SCHEMA_TYPES = ('Organization', 'WebPage')
NO_STRUCTURED_DATA_ERROR = 'No structured data found'


def _json_ld_blocks(metadata: Dict[str, Any]) -> List[Any]:
    blocks = metadata.get('jsonLd')
    if not blocks:
        return []
    if isinstance(blocks, dict):
        return [blocks]
    if isinstance(blocks, (list, tuple)):
        return list(blocks)
    return []


def _collect_types(node: Any, found: List[str]) -> None:
    if isinstance(node, list):
        for item in node:
            _collect_types(item, found)
        return
    if not isinstance(node, dict):
        return

    schema_type = node.get('@type')
    candidates: Iterable[Any] = schema_type if isinstance(schema_type, list) else [schema_type]
    for candidate in candidates:
        if isinstance(candidate, str) and candidate and candidate not in found:
            found.append(candidate)

    if '@graph' in node:
        _collect_types(node['@graph'], found)


def parse_schema_types(json_ld_blocks: List[Any]) -> List[str]:
    """@type values of the JSON-LD blocks, in document order, without duplicates"""
    found: List[str] = []
    _collect_types(json_ld_blocks, found)
    return found


def inspect_structured_data(markdown: str, metadata: Optional[Dict[str, Any]] = None,
                            parse_types: bool = False) -> StructuredDataReport:
    """
    Detect schema markup from the metadata JSON-LD blocks or schema markers in
    the page text.

    The reported types are the fixed placeholder set unless parse_types is on,
    in which case the real @type values are used when any can be read.
    """
    metadata = metadata or {}
    markdown = markdown or ""
    blocks = _json_ld_blocks(metadata)
    has_schema = bool(blocks) or any(marker in markdown for marker in SCHEMA_MARKERS)

    if not has_schema:
        return StructuredDataReport(has_schema=False, types=(), errors=(NO_STRUCTURED_DATA_ERROR,))

    types = PLACEHOLDER_SCHEMA_TYPES
    if parse_types:
        parsed = parse_schema_types(blocks)
        if parsed:
            types = tuple(parsed)
        else:
            logger.debug("Schema markup detected but no @type values could be read")
    return StructuredDataReport(has_schema=True, types=tuple(types), errors=())


def _optional_text(metadata: Dict[str, Any], key: str) -> Optional[str]:
    value = metadata.get(key)
    if value is None or value == '':
        return None
    return value if isinstance(value, str) else str(value)


def inspect_social_media(metadata: Optional[Dict[str, Any]] = None) -> SocialMediaReport:
    """Open Graph and Twitter Card presence from the page metadata"""
    metadata = metadata or {}
    og_title = _optional_text(metadata, 'ogTitle')
    og_description = _optional_text(metadata, 'ogDescription')
    og_image = _optional_text(metadata, 'ogImage')
    has_twitter_cards = any(
        key.startswith('twitter') and bool(value)
        for key, value in metadata.items()
        if isinstance(key, str)
    )
    return SocialMediaReport(
        has_open_graph=bool(og_title or og_description or og_image),
        has_twitter_cards=has_twitter_cards,
        og_title=og_title,
        og_description=og_description,
        og_image=og_image,
    )
