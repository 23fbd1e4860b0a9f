import pytest

from content_extractor import (
    count_words,
    extract_headings,
    extract_images,
    extract_links,
    extract_page_content,
    is_internal_link,
    readability_score,
)
from models import Heading


def test_headings_keep_order_level_and_duplicates():
    markdown = "# Title\n\nintro text\n## Section\n### Sub  \n## Section\n####### too deep\n#NoSpace"
    assert extract_headings(markdown) == [
        Heading(level=1, text="Title"),
        Heading(level=2, text="Section"),
        Heading(level=3, text="Sub"),
        Heading(level=2, text="Section"),
    ]


@pytest.mark.parametrize("markdown", ["#\n\nHello world", "###\nHello", "#   \n\nHello", "## \t\n"])
def test_bare_hash_line_does_not_take_the_next_line_as_heading(markdown):
    assert extract_headings(markdown) == []
    assert extract_page_content(markdown).h1_count == 0


def test_headings_are_fresh_lists_per_call():
    first = extract_headings("# One")
    first.append(Heading(level=2, text="mutated"))
    assert extract_headings("# One") == [Heading(level=1, text="One")]


def test_images_with_and_without_alt():
    images = extract_images("![Logo](/logo.png) text ![](https://cdn.example.com/a.jpg)")
    assert [(img.src, img.alt, img.has_alt) for img in images] == [
        ("/logo.png", "Logo", True),
        ("https://cdn.example.com/a.jpg", "", False),
    ]


def test_links_classified_against_page_host():
    markdown = (
        "[About](/about) [Docs](https://example.com/docs) "
        "[Other](https://other.org/page) [Upper](HTTPS://EXAMPLE.COM/x)"
    )
    links = extract_links(markdown, "https://example.com/")
    assert [(link.text, link.is_internal) for link in links] == [
        ("About", True),
        ("Docs", True),
        ("Other", False),
        ("Upper", True),
    ]


def test_image_references_are_not_links():
    links = extract_links("![Alt](/pic.png) [Home](/)", "https://example.com/")
    assert [link.href for link in links] == ["/"]


@pytest.mark.parametrize("page_url", [None, "", "not a url", "http://[broken"])
def test_missing_or_malformed_page_url_treats_absolute_links_as_external(page_url):
    assert is_internal_link("https://example.com/a", page_url) is False
    assert is_internal_link("/relative", page_url) is True


def test_word_count_ignores_extra_whitespace():
    assert count_words("  one two\n\nthree\tfour  ") == 4
    assert count_words("") == 0


def test_readability_uses_fixed_syllable_heuristic():
    markdown = "One two three four. Five six seven eight!"
    words = count_words(markdown)
    # Three segments: two sentences plus the empty tail after '!'
    expected = 206.835 - 1.015 * (8 / 3) - 84.6 * 1.5
    assert readability_score(markdown, words) == pytest.approx(expected)


def test_readability_is_not_clamped():
    markdown = " ".join(["word"] * 400)
    # One sentence of 400 words scores far below zero
    assert readability_score(markdown, 400) < 0


def test_readability_of_empty_page_is_zero():
    assert readability_score("", 0) == 0.0


def test_extract_page_content_defaults_for_missing_fields():
    content = extract_page_content("", {})
    assert content.title == ""
    assert content.meta_description == ""
    assert content.headings == ()
    assert content.images == ()
    assert content.links == ()
    assert content.word_count == 0


def test_extract_page_content_prefers_metadata_url_for_links():
    metadata = {"title": "Home", "description": "Welcome", "url": "https://shop.example.com/"}
    markdown = "# Shop\n[Cart](https://shop.example.com/cart) [Blog](https://example.com/blog)"
    content = extract_page_content(markdown, metadata, page_url="https://example.com/")
    assert content.title == "Home"
    assert content.meta_description == "Welcome"
    assert [link.is_internal for link in content.links] == [True, False]


def test_extract_page_content_falls_back_to_page_url():
    content = extract_page_content("[Docs](https://example.com/docs)", {}, page_url="https://example.com/")
    assert content.links[0].is_internal is True


def test_malformed_markdown_does_not_raise():
    content = extract_page_content("![unclosed](  [also [broken]( # \n#", None)
    assert content.word_count > 0
