"""URL predicates used by the decision engine.

All helpers are pure functions over strings. Parse failures are reported as
"no match" rather than raised, since an unparsable URL must fail closed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from .constants import ANCHOR_PROTOCOL, HOST_SCHEMES, WHITESPACE_CHARACTERS

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


def is_valid_anchor(value: str) -> bool:
    """True for in-page fragment references such as ``#top``."""
    if not value.startswith("#"):
        return False
    return not any(ch in WHITESPACE_CHARACTERS for ch in value)


def matches_protocol(value: str, protocol: str) -> bool:
    if protocol == ANCHOR_PROTOCOL:
        return is_valid_anchor(value)
    # The separator is part of the match: "http" must not accept "https:".
    return value.lower().startswith(protocol.lower() + ":")


def matches_any_protocol(value: str, protocols: Iterable[str]) -> bool:
    return any(matches_protocol(value, protocol) for protocol in protocols)


def coerce_absolute(value: str) -> str:
    """Best-effort absolute form of a URL that could not be resolved.

    ``//cdn.example.com/x`` becomes ``http://cdn.example.com/x`` and a bare
    ``example.com/x`` becomes ``http://example.com/x``.
    """
    if value.startswith("//"):
        return "http:" + value
    return "http://" + value


def extract_host(url: str) -> str:
    """Return the lower-cased host of `url`, or "" when it has none.

    Only URLs with a scheme in `HOST_SCHEMES` have a host. A network location
    containing a backslash is rejected: browsers read ``\\`` as ``/``, so
    ``http://evil.com\\@knowings.fr/`` would load from evil.com.
    """
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        logger.debug("Could not parse URL %r", url)
        return ""
    if parts.scheme not in HOST_SCHEMES:
        logger.debug("Ignoring host of %r: scheme %r", url, parts.scheme)
        return ""
    if "\\" in parts.netloc:
        logger.debug("Ignoring host of %r: backslash in authority", url)
        return ""
    if not host or not host.strip():
        return ""
    return host.lower()


def host_matches(host: str, domain: str) -> bool:
    """Exact match or subdomain match on a label boundary."""
    host = host.lower()
    domain = domain.lower()
    return host == domain or host.endswith("." + domain)


def host_matches_any(host: str, domains: Iterable[str]) -> bool:
    return any(host_matches(host, domain) for domain in domains)
