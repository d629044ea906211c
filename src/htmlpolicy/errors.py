"""Exceptions raised while building a policy."""

from __future__ import annotations


class InvalidArgumentError(ValueError):
    """A policy mutation was called with a missing or empty argument.

    Raised synchronously at the call site; decision-time anomalies (bad URLs,
    blank hosts) never raise and resolve to "not allowed" instead.
    """


class InvalidTokenError(InvalidArgumentError):
    """A tag, attribute key/value, protocol or domain token could not be built."""

    def __init__(self, kind: str, value: object) -> None:
        self.kind = kind
        self.value = value
        super().__init__(f"Invalid {kind}: {value!r}")
