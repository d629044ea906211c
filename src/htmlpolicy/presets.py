"""Ready-made policies, from strictest to most permissive.

Each call returns a new `Policy`, so the result can be extended freely:

    policy = basic().add_tags("h1", "h2").add_attributes(":all", "class")

The tables below are a compatibility contract: stored configurations expect
exactly these tags, attributes and protocols.
"""

from __future__ import annotations

from .policy import Policy


def none() -> Policy:
    """Allow only text: all markup is stripped."""
    return Policy()


def simple_text() -> Policy:
    """Allow simple text formatting: ``b, em, i, strong, u``."""
    return Policy().add_tags("b", "em", "i", "strong", "u")


def basic() -> Policy:
    """Allow a fuller range of text tags and links, but no images.

    Links (``a``) may point to ``ftp, http, https, mailto`` and always get
    ``rel="nofollow"``.
    """
    return (
        Policy()
        .add_tags(
            "a", "b", "blockquote", "br", "cite", "code", "dd", "dl", "dt", "em",
            "i", "li", "ol", "p", "pre", "q", "small", "span", "strike", "strong", "sub",
            "sup", "u", "ul",
        )  # fmt: skip
        .add_attributes("a", "href")
        .add_attributes("blockquote", "cite")
        .add_attributes("q", "cite")
        .add_protocols("a", "href", "ftp", "http", "https", "mailto")
        .add_protocols("blockquote", "cite", "http", "https")
        .add_protocols("cite", "cite", "http", "https")
        .add_enforced_attribute("a", "rel", "nofollow")
    )


def basic_with_images() -> Policy:
    """`basic` plus ``img`` with ``src`` pointing to ``http`` or ``https``."""
    return (
        basic()
        .add_tags("img")
        .add_attributes("img", "align", "alt", "height", "src", "title", "width")
        .add_protocols("img", "src", "http", "https")
    )


def relaxed() -> Policy:
    """Allow text and structural body HTML, including tables and images.

    Links do not get an enforced ``rel="nofollow"``; add it if you want it.
    """
    return (
        Policy()
        .add_tags(
            "a", "b", "blockquote", "br", "caption", "cite", "code", "col",
            "colgroup", "dd", "div", "dl", "dt", "em", "h1", "h2", "h3", "h4", "h5", "h6",
            "i", "img", "li", "ol", "p", "pre", "q", "small", "span", "strike", "strong",
            "sub", "sup", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "u",
            "ul",
        )  # fmt: skip
        .add_attributes("a", "href", "title")
        .add_attributes("blockquote", "cite")
        .add_attributes("col", "span", "width")
        .add_attributes("colgroup", "span", "width")
        .add_attributes("img", "align", "alt", "height", "src", "title", "width")
        .add_attributes("ol", "start", "type")
        .add_attributes("q", "cite")
        .add_attributes("table", "summary", "width")
        .add_attributes("td", "abbr", "axis", "colspan", "rowspan", "width")
        .add_attributes("th", "abbr", "axis", "colspan", "rowspan", "scope", "width")
        .add_attributes("ul", "type")
        .add_protocols("a", "href", "ftp", "http", "https", "mailto")
        .add_protocols("blockquote", "cite", "http", "https")
        .add_protocols("cite", "cite", "http", "https")
        .add_protocols("img", "src", "http", "https")
        .add_protocols("q", "cite", "http", "https")
    )
