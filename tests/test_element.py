from __future__ import annotations

import unittest

from htmlpolicy.element import Element, SimpleElement


class TestSimpleElement(unittest.TestCase):
    def test_satisfies_element_contract(self) -> None:
        assert isinstance(SimpleElement("a"), Element)

    def test_empty_tag_name_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            SimpleElement("")

    def test_attribute_keys_are_lowercased_first_wins(self) -> None:
        el = SimpleElement("a", {"HREF": "first", "href": "second", "title": None})  # type: ignore[dict-item]
        assert el.get_attribute_value("href") == "first"
        assert el.has_attribute("HREF")
        assert el.get_attribute_value("title") == ""

    def test_missing_attribute(self) -> None:
        el = SimpleElement("a")
        assert not el.has_attribute("href")
        assert el.get_attribute_value("href") == ""
        assert el.resolve_absolute_url("href") == ""

    def test_set_attribute_value(self) -> None:
        el = SimpleElement("a", {"href": "x"})
        el.set_attribute_value("HREF", "y")
        assert el.attributes == {"href": "y"}

    def test_resolve_without_base_uri(self) -> None:
        assert SimpleElement("a", {"href": "http://x.com/a"}).resolve_absolute_url("href") == "http://x.com/a"
        assert SimpleElement("a", {"href": "/rel"}).resolve_absolute_url("href") == ""
        assert SimpleElement("a", {"href": "#top"}).resolve_absolute_url("href") == ""

    def test_resolve_against_base_uri(self) -> None:
        base = "http://example.com/dir/page.html"
        assert SimpleElement("a", {"href": "../a"}, base_uri=base).resolve_absolute_url("href") == "http://example.com/a"
        assert SimpleElement("a", {"href": "#top"}, base_uri=base).resolve_absolute_url("href") == (
            "http://example.com/dir/page.html#top"
        )

    def test_resolve_keeps_other_schemes(self) -> None:
        el = SimpleElement("a", {"href": "javascript:alert(1)"}, base_uri="http://example.com/")
        assert el.resolve_absolute_url("href") == "javascript:alert(1)"

    def test_resolve_with_relative_base_uri(self) -> None:
        el = SimpleElement("a", {"href": "page"}, base_uri="/not/absolute")
        assert el.resolve_absolute_url("href") == ""

    def test_resolve_malformed_url(self) -> None:
        el = SimpleElement("a", {"href": "http://[::1"})
        assert el.resolve_absolute_url("href") == ""


if __name__ == "__main__":
    unittest.main()
