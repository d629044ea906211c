from .constants import ANCHOR_PROTOCOL, WILDCARD_TAG
from .element import Element, SimpleElement
from .errors import InvalidArgumentError, InvalidTokenError
from .policy import FrozenPolicy, Policy
from .presets import basic, basic_with_images, none, relaxed, simple_text
from .tokens import AttributeKey, AttributeValue, Domain, Protocol, TagName

__all__ = [
    "ANCHOR_PROTOCOL",
    "WILDCARD_TAG",
    "AttributeKey",
    "AttributeValue",
    "Domain",
    "Element",
    "FrozenPolicy",
    "InvalidArgumentError",
    "InvalidTokenError",
    "Policy",
    "Protocol",
    "SimpleElement",
    "TagName",
    "basic",
    "basic_with_images",
    "none",
    "relaxed",
    "simple_text",
]
