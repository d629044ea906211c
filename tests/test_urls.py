from __future__ import annotations

import unittest

from htmlpolicy.urls import (
    coerce_absolute,
    extract_host,
    host_matches,
    host_matches_any,
    is_valid_anchor,
    matches_any_protocol,
    matches_protocol,
)


class TestAnchors(unittest.TestCase):
    def test_valid_anchors(self) -> None:
        assert is_valid_anchor("#section")
        assert is_valid_anchor("#")

    def test_whitespace_invalidates_anchor(self) -> None:
        assert not is_valid_anchor("# bad")
        assert not is_valid_anchor("#a\tb")
        assert not is_valid_anchor("#a\n")

    def test_anchor_must_start_with_hash(self) -> None:
        assert not is_valid_anchor("section")
        assert not is_valid_anchor("/page#section")


class TestProtocols(unittest.TestCase):
    def test_scheme_match_is_case_insensitive(self) -> None:
        assert matches_protocol("HTTP://x.com", "http")
        assert matches_protocol("http://x.com", "HTTP")

    def test_separator_is_part_of_the_match(self) -> None:
        assert not matches_protocol("https://x.com", "http")
        assert not matches_protocol("http://x.com", "https")
        assert not matches_protocol("httpfoo", "http")

    def test_anchor_protocol(self) -> None:
        assert matches_protocol("#top", "#")
        assert not matches_protocol("# top", "#")
        assert not matches_protocol("http://x.com/#top", "#")

    def test_custom_schemes(self) -> None:
        assert matches_protocol("tel:+33123456", "tel")

    def test_any(self) -> None:
        assert matches_any_protocol("mailto:a@b.c", ["http", "mailto"])
        assert not matches_any_protocol("javascript:alert(1)", ["http", "https"])
        assert not matches_any_protocol("http://x.com", [])


class TestHosts(unittest.TestCase):
    def test_coerce_absolute(self) -> None:
        assert coerce_absolute("//cdn.example.com/a.png") == "http://cdn.example.com/a.png"
        assert coerce_absolute("example.com/page") == "http://example.com/page"

    def test_extract_host_lowercases(self) -> None:
        assert extract_host("http://A.B.Knowings.FR/x?y=1") == "a.b.knowings.fr"
        assert extract_host("https://user:pw@example.com:8080/") == "example.com"

    def test_extract_host_without_host(self) -> None:
        assert extract_host("mailto:a@example.com") == ""
        assert extract_host("http:///path") == ""
        assert extract_host("/relative") == ""

    def test_extract_host_of_malformed_url(self) -> None:
        assert extract_host("http://[::1") == ""

    def test_extract_host_only_for_host_schemes(self) -> None:
        assert extract_host("ftp://files.knowings.fr/a") == "files.knowings.fr"
        assert extract_host("file://knowings.fr/etc") == "knowings.fr"
        assert extract_host("javascript://knowings.fr/%0aalert(1)") == ""
        assert extract_host("JavaScript://knowings.fr/") == ""
        assert extract_host("data://knowings.fr/") == ""
        assert extract_host("vbscript://knowings.fr/") == ""
        assert extract_host("java\nscript://knowings.fr/") == ""

    def test_extract_host_rejects_backslash_authority(self) -> None:
        assert extract_host("http://evil.com\\@knowings.fr/") == ""
        assert extract_host("http://knowings.fr\\evil.com") == ""

    def test_subdomain_match(self) -> None:
        assert host_matches("a.b.knowings.fr", "knowings.fr")
        assert host_matches("knowings.fr", "knowings.fr")
        assert host_matches("WWW.Knowings.fr", "knowings.FR")

    def test_no_partial_label_match(self) -> None:
        assert not host_matches("notknowings.fr", "knowings.fr")
        assert not host_matches("knowings.fr.evil.com", "knowings.fr")

    def test_any(self) -> None:
        assert host_matches_any("cdn.example.com", ["knowings.fr", "example.com"])
        assert not host_matches_any("example.org", ["knowings.fr", "example.com"])


if __name__ == "__main__":
    unittest.main()
