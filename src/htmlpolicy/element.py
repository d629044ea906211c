"""The element contract the decision engine reads from.

The engine never walks or parses a document. A traversal hands it one element
at a time through this small interface; `SimpleElement` is a self-contained
implementation for callers that do not have a DOM of their own.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from urllib.parse import urljoin, urlsplit


@runtime_checkable
class Element(Protocol):
    @property
    def tag_name(self) -> str: ...

    def has_attribute(self, key: str) -> bool: ...

    def get_attribute_value(self, key: str) -> str: ...

    def set_attribute_value(self, key: str, value: str) -> None: ...

    def resolve_absolute_url(self, key: str) -> str: ...


class SimpleElement:
    """A detached element: a tag name, its attributes and a base URI.

    - tag_name: e.g. 'a', 'img'
    - attributes: dict of attribute values; keys are lower-cased and the first
      occurrence of a key wins
    - base_uri: absolute URL relative attribute values resolve against
    """

    __slots__ = ("attributes", "base_uri", "tag_name")

    def __init__(self, tag_name: str, attributes: dict[str, str] | None = None, base_uri: str = "") -> None:
        if not tag_name:
            msg = "Empty tag_name passed to SimpleElement"
            raise ValueError(msg)

        self.tag_name = tag_name
        lowered: dict[str, str] = {}
        if attributes:
            for k, v in attributes.items():
                lk = k.lower()
                if lk not in lowered:
                    lowered[lk] = "" if v is None else str(v)
        self.attributes = lowered
        self.base_uri = base_uri or ""

    def __repr__(self) -> str:
        return f"SimpleElement({self.tag_name!r}, {self.attributes!r})"

    def has_attribute(self, key: str) -> bool:
        return key.lower() in self.attributes

    def get_attribute_value(self, key: str) -> str:
        return self.attributes.get(key.lower(), "")

    def set_attribute_value(self, key: str, value: str) -> None:
        self.attributes[key.lower()] = value

    def resolve_absolute_url(self, key: str) -> str:
        """Resolve the attribute against `base_uri`; "" when that is not possible."""
        if not self.has_attribute(key):
            return ""
        value = self.get_attribute_value(key).strip()
        try:
            if not self.base_uri:
                # Without a base only already-absolute URLs resolve.
                return value if urlsplit(value).scheme else ""
            if not urlsplit(self.base_uri).scheme:
                return ""
            return urljoin(self.base_uri, value)
        except ValueError:
            return ""
