"""Typed string tokens, one class per policy namespace.

A `TagName("a")` never equals an `AttributeKey("a")`: the dataclass-generated
`__eq__` compares the concrete class before the value, so values from
different namespaces cannot be mixed up in the registries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, TypeVar

from .errors import InvalidTokenError

_T = TypeVar("_T", bound="_Token")


@dataclass(frozen=True, slots=True)
class _Token:
    value: str

    kind: ClassVar[str] = "token"
    # Lower-case on construction. Only attribute values keep their case.
    fold_case: ClassVar[bool] = True

    def __post_init__(self) -> None:
        value = self.value
        if not isinstance(value, str):
            raise InvalidTokenError(self.kind, value)
        value = value.strip()
        if not value:
            raise InvalidTokenError(self.kind, self.value)
        if self.fold_case:
            value = value.lower()
        object.__setattr__(self, "value", value)

    @classmethod
    def of(cls: type[_T], value: str | _T) -> _T:
        """Return `value` as a token of this class, reusing it if it already is one."""
        if isinstance(value, cls):
            return value
        return cls(value)  # type: ignore[arg-type]

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class TagName(_Token):
    kind: ClassVar[str] = "tag name"


@dataclass(frozen=True, slots=True)
class AttributeKey(_Token):
    kind: ClassVar[str] = "attribute key"


@dataclass(frozen=True, slots=True)
class AttributeValue(_Token):
    kind: ClassVar[str] = "attribute value"
    fold_case: ClassVar[bool] = False

    def __post_init__(self) -> None:
        # Enforced values are emitted verbatim, so only reject empties.
        if not isinstance(self.value, str) or not self.value:
            raise InvalidTokenError(self.kind, self.value)


@dataclass(frozen=True, slots=True)
class Protocol(_Token):
    kind: ClassVar[str] = "protocol"


@dataclass(frozen=True, slots=True)
class Domain(_Token):
    kind: ClassVar[str] = "domain"
