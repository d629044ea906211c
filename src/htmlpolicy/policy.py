"""Allow-list policy registries and the fluent API that builds them.

A `Policy` is built once (directly or from a preset), tweaked through the
`add_*`/`remove_*` methods, and then only read. `Policy.freeze()` returns a
`FrozenPolicy` snapshot with the same decision API for the read phase.

Start with one of the presets in `htmlpolicy.presets` and extend it
carefully: URL attributes are the usual XSS vector, so every URL attribute
you allow should also get an `add_protocols` rule.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, TypeVar

from .constants import WILDCARD_TAG
from .engine import PolicyEngine
from .errors import InvalidArgumentError
from .tokens import AttributeKey, AttributeValue, Domain, Protocol, TagName, _Token

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Self

_T = TypeVar("_T", bound=_Token)
_V = TypeVar("_V", bound=_Token)

_WILDCARD = TagName(WILDCARD_TAG)

NestedRegistry = dict[TagName, dict[AttributeKey, set[_V]]]


def _tokens(cls: type[_T], values: tuple[str, ...], what: str, *, required: bool = True) -> list[_T]:
    # Build every token up front so a bad value leaves the policy untouched.
    if required and not values:
        raise InvalidArgumentError(f"No {what} supplied.")
    return [cls.of(value) for value in values]


def _add_nested(registry: NestedRegistry[_V], tag: TagName, key: AttributeKey, values: list[_V]) -> None:
    registry.setdefault(tag, {}).setdefault(key, set()).update(values)


def _remove_nested(registry: NestedRegistry[_V], tag: TagName, key: AttributeKey, values: list[_V]) -> None:
    attr_map = registry.get(tag)
    if attr_map is None:
        return
    value_set = attr_map.get(key)
    if value_set is None:
        return
    value_set.difference_update(values)

    # Collapse bottom-up; empty sets and maps are never kept.
    if not value_set:
        del attr_map[key]
        if not attr_map:
            del registry[tag]


class Policy(PolicyEngine):
    """Mutable allow-list of tags, attributes, protocols and domains.

    - Tags not in `allowed_tags` are never safe.
    - Attributes not in `allowed_attributes[tag]` (or under the `:all` pseudo
      tag) are dropped.
    - A (tag, attribute) with registered protocols or domains must match
      them; with none registered the attribute is unrestricted.
    - `enforced_attributes` are set on every accepted element of that tag.

    Every mutation returns the policy, so calls chain.
    """

    __slots__ = (
        "allowed_attributes",
        "allowed_domains",
        "allowed_protocols",
        "allowed_tags",
        "enforced_attributes",
        "preserves_relative_links",
    )

    allowed_tags: set[TagName]
    allowed_attributes: dict[TagName, set[AttributeKey]]
    enforced_attributes: dict[TagName, dict[AttributeKey, AttributeValue]]
    allowed_protocols: NestedRegistry[Protocol]
    allowed_domains: NestedRegistry[Domain]
    preserves_relative_links: bool

    def __init__(self) -> None:
        self.allowed_tags = set()
        self.allowed_attributes = {}
        self.enforced_attributes = {}
        self.allowed_protocols = {}
        self.allowed_domains = {}
        self.preserves_relative_links = False

    def __repr__(self) -> str:
        return (
            f"Policy(tags={sorted(str(t) for t in self.allowed_tags)!r}, "
            f"preserves_relative_links={self.preserves_relative_links!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Policy):
            return NotImplemented
        return (
            self.allowed_tags == other.allowed_tags
            and self.allowed_attributes == other.allowed_attributes
            and self.enforced_attributes == other.enforced_attributes
            and self.allowed_protocols == other.allowed_protocols
            and self.allowed_domains == other.allowed_domains
            and self.preserves_relative_links == other.preserves_relative_links
        )

    __hash__ = None  # type: ignore[assignment]  # Unhashable since it is mutable

    # ----
    # Tags
    # ----

    def add_tags(self, *tags: str) -> Self:
        """Allow each of `tags`. Adding an allowed tag again is a no-op."""
        self.allowed_tags.update(_tokens(TagName, tags, "tags", required=False))
        return self

    def remove_tags(self, *tags: str) -> Self:
        """Disallow `tags` and drop every rule registered for them."""
        for tag_name in _tokens(TagName, tags, "tags", required=False):
            if tag_name not in self.allowed_tags:
                continue
            self.allowed_tags.discard(tag_name)
            self.allowed_attributes.pop(tag_name, None)
            self.enforced_attributes.pop(tag_name, None)
            self.allowed_protocols.pop(tag_name, None)
            self.allowed_domains.pop(tag_name, None)
        return self

    # ----------
    # Attributes
    # ----------

    def add_attributes(self, tag: str, *keys: str) -> Self:
        """Allow attributes `keys` on `tag`, allowing the tag too.

        Use the pseudo tag ``:all`` to allow an attribute on every tag, e.g.
        ``add_attributes(":all", "class")``.
        """
        tag_name = TagName.of(tag)
        attr_keys = _tokens(AttributeKey, keys, "attributes")

        self.allowed_tags.add(tag_name)
        self.allowed_attributes.setdefault(tag_name, set()).update(attr_keys)
        return self

    def remove_attributes(self, tag: str, *keys: str) -> Self:
        """Disallow attributes `keys` on `tag`.

        With the ``:all`` pseudo tag the keys are removed from every tag's
        own attribute list as well.
        """
        tag_name = TagName.of(tag)
        attr_keys = _tokens(AttributeKey, keys, "attributes")

        if tag_name in self.allowed_tags:
            self._discard_attributes(tag_name, attr_keys)
        if tag_name == _WILDCARD:
            for other in list(self.allowed_attributes):
                self._discard_attributes(other, attr_keys)
        return self

    def _discard_attributes(self, tag_name: TagName, attr_keys: list[AttributeKey]) -> None:
        current = self.allowed_attributes.get(tag_name)
        if current is None:
            return
        current.difference_update(attr_keys)
        if not current:
            del self.allowed_attributes[tag_name]

    # -------------------
    # Enforced attributes
    # -------------------

    def add_enforced_attribute(self, tag: str, key: str, value: str) -> Self:
        """Always set `key="value"` on `tag`, overriding any input value.

        ``add_enforced_attribute("a", "rel", "nofollow")`` makes every link
        come out as ``<a href="..." rel="nofollow">``.
        """
        tag_name = TagName.of(tag)
        attr_key = AttributeKey.of(key)
        attr_value = AttributeValue.of(value)

        self.allowed_tags.add(tag_name)
        self.enforced_attributes.setdefault(tag_name, {})[attr_key] = attr_value
        return self

    def remove_enforced_attribute(self, tag: str, key: str) -> Self:
        tag_name = TagName.of(tag)
        attr_key = AttributeKey.of(key)

        enforced = self.enforced_attributes.get(tag_name)
        if tag_name in self.allowed_tags and enforced is not None:
            enforced.pop(attr_key, None)
            if not enforced:
                del self.enforced_attributes[tag_name]
        return self

    # ---------------------
    # URL protocols/domains
    # ---------------------

    def preserve_relative_links(self, preserve: bool) -> Self:
        """Keep relative links as written instead of making them absolute.

        Either way a relative link must resolve against the element's base
        URI to an allowed protocol, or the attribute is rejected.
        """
        self.preserves_relative_links = bool(preserve)
        return self

    def add_protocols(self, tag: str, key: str, *protocols: str) -> Self:
        """Restrict the URL attribute `key` of `tag` to `protocols`.

        Add ``"#"`` to allow in-page anchors such as ``<a href="#top">``.
        """
        tag_name = TagName.of(tag)
        attr_key = AttributeKey.of(key)
        _add_nested(self.allowed_protocols, tag_name, attr_key, _tokens(Protocol, protocols, "protocols"))
        return self

    def remove_protocols(self, tag: str, key: str, *protocols: str) -> Self:
        tag_name = TagName.of(tag)
        attr_key = AttributeKey.of(key)
        _remove_nested(self.allowed_protocols, tag_name, attr_key, _tokens(Protocol, protocols, "protocols"))
        return self

    def add_domains(self, tag: str, key: str, *domains: str) -> Self:
        """Restrict the URL attribute `key` of `tag` to hosts under `domains`.

        ``add_domains("a", "href", "example.com")`` accepts ``example.com``
        and ``www.example.com`` but not ``notexample.com``.
        """
        tag_name = TagName.of(tag)
        attr_key = AttributeKey.of(key)
        _add_nested(self.allowed_domains, tag_name, attr_key, _tokens(Domain, domains, "domains"))
        return self

    def remove_domains(self, tag: str, key: str, *domains: str) -> Self:
        tag_name = TagName.of(tag)
        attr_key = AttributeKey.of(key)
        _remove_nested(self.allowed_domains, tag_name, attr_key, _tokens(Domain, domains, "domains"))
        return self

    # ---------
    # Snapshots
    # ---------

    def copy(self) -> Policy:
        """An independent copy that can be modified without affecting this one."""
        clone = Policy()
        clone.allowed_tags = set(self.allowed_tags)
        clone.allowed_attributes = {tag: set(keys) for tag, keys in self.allowed_attributes.items()}
        clone.enforced_attributes = {tag: dict(kv) for tag, kv in self.enforced_attributes.items()}
        clone.allowed_protocols = _copy_nested(self.allowed_protocols)
        clone.allowed_domains = _copy_nested(self.allowed_domains)
        clone.preserves_relative_links = self.preserves_relative_links
        return clone

    def freeze(self) -> FrozenPolicy:
        """An immutable snapshot of the current rules for the read phase."""
        return FrozenPolicy(
            allowed_tags=frozenset(self.allowed_tags),
            allowed_attributes=MappingProxyType({tag: frozenset(keys) for tag, keys in self.allowed_attributes.items()}),
            enforced_attributes=MappingProxyType(
                {tag: MappingProxyType(dict(kv)) for tag, kv in self.enforced_attributes.items()}
            ),
            allowed_protocols=_freeze_nested(self.allowed_protocols),
            allowed_domains=_freeze_nested(self.allowed_domains),
            preserves_relative_links=self.preserves_relative_links,
        )


def _copy_nested(registry: NestedRegistry[_V]) -> NestedRegistry[_V]:
    return {tag: {key: set(values) for key, values in attr_map.items()} for tag, attr_map in registry.items()}


def _freeze_nested(
    registry: NestedRegistry[_V],
) -> Mapping[TagName, Mapping[AttributeKey, frozenset[_V]]]:
    return MappingProxyType(
        {
            tag: MappingProxyType({key: frozenset(values) for key, values in attr_map.items()})
            for tag, attr_map in registry.items()
        }
    )


def _empty_mapping() -> Mapping:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class FrozenPolicy(PolicyEngine):
    """Read-only snapshot of a `Policy`, safe to share between threads.

    Produced by `Policy.freeze()`; use `thaw()` to get an editable copy.
    """

    allowed_tags: frozenset[TagName] = frozenset()
    allowed_attributes: Mapping[TagName, frozenset[AttributeKey]] = field(default_factory=_empty_mapping)
    enforced_attributes: Mapping[TagName, Mapping[AttributeKey, AttributeValue]] = field(
        default_factory=_empty_mapping
    )
    allowed_protocols: Mapping[TagName, Mapping[AttributeKey, frozenset[Protocol]]] = field(
        default_factory=_empty_mapping
    )
    allowed_domains: Mapping[TagName, Mapping[AttributeKey, frozenset[Domain]]] = field(
        default_factory=_empty_mapping
    )
    preserves_relative_links: bool = False

    # The registries are mapping proxies, which are unhashable.
    __hash__ = None  # type: ignore[assignment]

    def thaw(self) -> Policy:
        """A mutable `Policy` holding the same rules."""
        policy = Policy()
        policy.allowed_tags = set(self.allowed_tags)
        policy.allowed_attributes = {tag: set(keys) for tag, keys in self.allowed_attributes.items()}
        policy.enforced_attributes = {tag: dict(kv) for tag, kv in self.enforced_attributes.items()}
        policy.allowed_protocols = {
            tag: {key: set(values) for key, values in attr_map.items()}
            for tag, attr_map in self.allowed_protocols.items()
        }
        policy.allowed_domains = {
            tag: {key: set(values) for key, values in attr_map.items()}
            for tag, attr_map in self.allowed_domains.items()
        }
        policy.preserves_relative_links = self.preserves_relative_links
        return policy
