"""Reserved literals shared by the policy store and the decision engine."""

# Pseudo tag whose attribute rules apply to every tag.
WILDCARD_TAG = ":all"

# Pseudo protocol that allows in-page anchors (<a href="#top">).
ANCHOR_PROTOCOL = "#"

# URL attributes inspected by the element-level domain check, in order.
HREF_ATTR = "href"
SRC_ATTR = "src"

# https://infra.spec.whatwg.org/#ascii-whitespace plus \v.
WHITESPACE_CHARACTERS = frozenset(" \t\n\r\f\v")

# Schemes whose URLs carry a host the domain check can judge. Anything else
# (javascript:, data:, vbscript:, ...) has no trustworthy host.
HOST_SCHEMES = frozenset({"http", "https", "ftp", "file", "jar"})
