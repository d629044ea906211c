from __future__ import annotations

import unittest
from dataclasses import FrozenInstanceError

from htmlpolicy.errors import InvalidArgumentError, InvalidTokenError
from htmlpolicy.tokens import AttributeKey, AttributeValue, Domain, Protocol, TagName


class TestTokens(unittest.TestCase):
    def test_names_are_lowercased_and_stripped(self) -> None:
        assert TagName(" A ").value == "a"
        assert AttributeKey("HREF").value == "href"
        assert Protocol("HTTP").value == "http"
        assert Domain("Knowings.FR").value == "knowings.fr"

    def test_attribute_values_keep_their_case(self) -> None:
        assert AttributeValue("NoFollow").value == "NoFollow"
        assert AttributeValue(" spaced ").value == " spaced "

    def test_equality_is_value_based_within_a_namespace(self) -> None:
        assert TagName("a") == TagName("A")
        assert len({TagName("a"), TagName("A"), TagName("b")}) == 2

    def test_namespaces_never_compare_equal(self) -> None:
        assert TagName("a") != AttributeKey("a")
        assert Protocol("http") != Domain("http")
        assert TagName("a") != "a"
        assert AttributeKey("href") not in {TagName("href")}

    def test_empty_input_is_rejected(self) -> None:
        for cls in (TagName, AttributeKey, AttributeValue, Protocol, Domain):
            with self.assertRaises(InvalidTokenError):
                cls("")
            with self.assertRaises(InvalidTokenError):
                cls(None)  # type: ignore[arg-type]

    def test_blank_names_are_rejected(self) -> None:
        with self.assertRaises(InvalidTokenError):
            TagName("   ")

    def test_non_string_input_is_rejected(self) -> None:
        with self.assertRaises(InvalidTokenError):
            TagName(1)  # type: ignore[arg-type]

    def test_token_error_is_an_argument_error(self) -> None:
        with self.assertRaises(InvalidArgumentError) as ctx:
            Domain("")
        assert ctx.exception.kind == "domain"
        assert "domain" in str(ctx.exception)

    def test_of_reuses_existing_tokens(self) -> None:
        tag = TagName("a")
        assert TagName.of(tag) is tag
        assert TagName.of("A") == tag

    def test_str_is_normalized_value(self) -> None:
        assert str(Protocol("MailTo")) == "mailto"

    def test_tokens_are_immutable(self) -> None:
        tag = TagName("a")
        with self.assertRaises(FrozenInstanceError):
            tag.value = "b"  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
