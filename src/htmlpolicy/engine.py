"""Read-only policy predicates.

`PolicyEngine` is mixed into both the mutable `Policy` builder and its
`FrozenPolicy` snapshot. It only reads the registries below; the one place
an element is written to is `normalize_attribute`, which a traversal calls
after `is_attribute_allowed` accepted the attribute.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from .constants import HREF_ATTR, SRC_ATTR, WILDCARD_TAG
from .errors import InvalidTokenError
from .tokens import AttributeKey, AttributeValue, Domain, Protocol, TagName, _Token
from .urls import coerce_absolute, extract_host, host_matches_any, is_valid_anchor, matches_any_protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Set

    from .element import Element

logger = logging.getLogger(__name__)

_T = TypeVar("_T", bound=_Token)

_WILDCARD = TagName(WILDCARD_TAG)
_HREF = AttributeKey(HREF_ATTR)
_SRC = AttributeKey(SRC_ATTR)


def _token_or_none(cls: type[_T], value: object) -> _T | None:
    # Decision-time lookups treat blank/None input as "not configured".
    if value is None:
        return None
    try:
        return cls.of(value)  # type: ignore[arg-type]
    except InvalidTokenError:
        return None


class PolicyEngine:
    __slots__ = ()

    allowed_tags: Set[TagName]
    allowed_attributes: Mapping[TagName, Set[AttributeKey]]
    enforced_attributes: Mapping[TagName, Mapping[AttributeKey, AttributeValue]]
    allowed_protocols: Mapping[TagName, Mapping[AttributeKey, Set[Protocol]]]
    allowed_domains: Mapping[TagName, Mapping[AttributeKey, Set[Domain]]]
    preserves_relative_links: bool

    # -----------
    # Tag checks
    # -----------

    def is_tag_name_allowed(self, tag: str | TagName) -> bool:
        """Membership test against the allowed tags."""
        tag_name = _token_or_none(TagName, tag)
        return tag_name is not None and tag_name in self.allowed_tags

    def is_element_allowed(self, element: Element | None) -> bool:
        """Tag check plus the tag's host rule, if it has one.

        When domains are registered for the tag, `href` is judged if present
        and restricted, otherwise `src`. Only one of the two is inspected, and
        other URL attributes are never looked at. An element carrying neither
        has no URL to judge and passes.
        """
        if element is None:
            return False

        tag_name = _token_or_none(TagName, element.tag_name)
        if tag_name is None or tag_name not in self.allowed_tags:
            logger.debug("Rejecting element <%s>: tag not allowed", element.tag_name)
            return False

        attr_domains = self.allowed_domains.get(tag_name)
        if not attr_domains:
            return True

        for key in (_HREF, _SRC):
            domains = attr_domains.get(key)
            if domains is None or not element.has_attribute(key.value):
                continue
            if self.is_domain_allowed(element, key, domains):
                return True
            logger.debug("Rejecting element <%s>: %s host not allowed", tag_name, key)
            return False
        return True

    # -----------------
    # Attribute checks
    # -----------------

    def _rule_tag(self, tag: TagName, key: AttributeKey) -> TagName | None:
        # The tag whose rules govern `key`: the tag itself, else the wildcard.
        attrs = self.allowed_attributes.get(tag)
        if attrs is not None and key in attrs:
            return tag
        if tag != _WILDCARD:
            return self._rule_tag(_WILDCARD, key)
        return None

    def _protocols_for(self, tag: TagName, key: AttributeKey) -> Set[Protocol] | None:
        attr_protocols = self.allowed_protocols.get(tag)
        if attr_protocols is None:
            return None
        return attr_protocols.get(key)

    def is_attribute_allowed(self, tag: str | TagName, element: Element, key: str | AttributeKey) -> bool:
        """Is attribute `key` of `element` safe to keep on a `tag` element?

        The key must be allowed for `tag` or, failing that, for the wildcard
        tag. If a protocol restriction is registered under the tag that
        allowed the key, the attribute's URL must use one of those protocols.
        This never modifies `element`.
        """
        tag_name = _token_or_none(TagName, tag)
        attr_key = _token_or_none(AttributeKey, key)
        if tag_name is None or attr_key is None:
            return False

        rule_tag = self._rule_tag(tag_name, attr_key)
        if rule_tag is None:
            logger.debug("Rejecting attribute %s on <%s>: not allowed", attr_key, tag_name)
            return False

        protocols = self._protocols_for(rule_tag, attr_key)
        if protocols is None:
            return True
        if self.is_protocol_allowed(element, attr_key, protocols):
            return True
        logger.debug("Rejecting attribute %s on <%s>: protocol not allowed", attr_key, tag_name)
        return False

    def is_protocol_allowed(
        self, element: Element, key: str | AttributeKey, protocols: Iterable[str | Protocol]
    ) -> bool:
        """Does the attribute's (resolved) URL use one of `protocols`?

        Relative URLs are resolved against the element's base URI first. A
        value that cannot be resolved is judged as written, which lets custom
        schemes such as ``tel:`` through when they are allowed.
        """
        attr_key = str(AttributeKey.of(key))
        value = element.resolve_absolute_url(attr_key)
        if not value:
            value = element.get_attribute_value(attr_key)
        return matches_any_protocol(value, (str(p) for p in protocols))

    def is_domain_allowed(
        self, element: Element, key: str | AttributeKey, domains: Iterable[str | Domain] | None
    ) -> bool:
        """Does the attribute's URL point at one of `domains` or a subdomain?

        An empty or missing domain set means unrestricted. Blank values,
        invalid anchors, hostless URLs and URLs that fail to parse are
        rejected.
        """
        allowed = [str(d) for d in domains] if domains else []
        if not allowed:
            return True

        attr_key = str(AttributeKey.of(key))
        raw = element.get_attribute_value(attr_key)
        if not raw.strip():
            return False
        if raw.startswith("#"):
            return is_valid_anchor(raw)

        url = element.resolve_absolute_url(attr_key)
        if not url:
            url = coerce_absolute(raw)

        host = extract_host(url)
        if not host:
            logger.debug("Rejecting URL %r: no host", url)
            return False
        return host_matches_any(host, allowed)

    # -------------
    # Normalization
    # -------------

    def resolve_to_allowed_form(self, tag: str | TagName, element: Element, key: str | AttributeKey) -> str | None:
        """The value an accepted attribute should carry on output.

        Protocol-restricted URL attributes are made absolute unless relative
        links are preserved. Everything else is returned as is; None when the
        element does not carry the attribute.
        """
        attr_key = AttributeKey.of(key)
        if not element.has_attribute(attr_key.value):
            return None

        raw = element.get_attribute_value(attr_key.value)
        if self.preserves_relative_links:
            return raw

        tag_name = _token_or_none(TagName, tag)
        rule_tag = self._rule_tag(tag_name, attr_key) if tag_name is not None else None
        if rule_tag is None or self._protocols_for(rule_tag, attr_key) is None:
            return raw
        return element.resolve_absolute_url(attr_key.value) or raw

    def normalize_attribute(self, tag: str | TagName, element: Element, key: str | AttributeKey) -> bool:
        """Write the output form of the attribute back to `element`.

        Returns True if the stored value changed.
        """
        value = self.resolve_to_allowed_form(tag, element, key)
        attr_key = str(AttributeKey.of(key))
        if value is None or value == element.get_attribute_value(attr_key):
            return False
        element.set_attribute_value(attr_key, value)
        return True

    def get_enforced_attributes(self, tag: str | TagName) -> dict[str, str]:
        """A fresh key -> value dict of the attributes always set on `tag`."""
        tag_name = _token_or_none(TagName, tag)
        if tag_name is None:
            return {}
        enforced = self.enforced_attributes.get(tag_name, {})
        return {key.value: value.value for key, value in enforced.items()}

    # ---------------
    # Introspection
    # ---------------

    def is_tag_configured(self, tag: str | None) -> bool:
        return self.is_tag_name_allowed(tag)  # type: ignore[arg-type]

    def is_attribute_configured(self, tag: str | None, key: str | None) -> bool:
        tag_name = _token_or_none(TagName, tag)
        attr_key = _token_or_none(AttributeKey, key)
        if tag_name is None or attr_key is None or tag_name not in self.allowed_tags:
            return False
        return attr_key in self.allowed_attributes.get(tag_name, ())

    def is_protocol_configured(self, tag: str | None, key: str | None, protocol: str | None) -> bool:
        tag_name = _token_or_none(TagName, tag)
        attr_key = _token_or_none(AttributeKey, key)
        prot = _token_or_none(Protocol, protocol)
        if tag_name is None or attr_key is None or prot is None:
            return False
        return prot in self.allowed_protocols.get(tag_name, {}).get(attr_key, ())

    def is_domain_configured(self, tag: str | None, key: str | None, domain: str | None) -> bool:
        tag_name = _token_or_none(TagName, tag)
        attr_key = _token_or_none(AttributeKey, key)
        dom = _token_or_none(Domain, domain)
        if tag_name is None or attr_key is None or dom is None:
            return False
        return dom in self.allowed_domains.get(tag_name, {}).get(attr_key, ())
