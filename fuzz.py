#!/usr/bin/env python3
"""
Random fuzzer for htmlpolicy decisions.
Generates hostile and malformed URL attributes and checks that every decision
completes without raising and never accepts what the policy forbids.
"""

import argparse
import random
import string
import sys
import time
import traceback

from htmlpolicy import Policy, SimpleElement, basic, basic_with_images, relaxed
from htmlpolicy.urls import extract_host, host_matches_any, is_valid_anchor

ALLOWED_DOMAINS = ["knowings.fr", "example.com"]

SCRIPT_SCHEMES = ("javascript:", "vbscript:", "data:")

DOMAIN_POLICIES = {"domains", "domains-only"}

SCHEMES = [
    "http", "https", "ftp", "mailto", "javascript", "JaVaScRiPt", "data", "vbscript",
    "tel", "file", "about", "blob", "", "ht\ttp", "java\nscript", " javascript",
]  # fmt: skip

HOSTS = [
    "knowings.fr", "www.knowings.fr", "a.b.knowings.fr", "KNOWINGS.FR", "notknowings.fr",
    "knowings.fr.evil.com", "example.com", "evil.com", "127.0.0.1", "[::1]", "[::1",
    "user@knowings.fr", "knowings.fr@evil.com", "evil.com#@knowings.fr", "", ".",
    "xn--mnchen-3ya.de", "münchen.de",
]  # fmt: skip

SPECIAL_CHARS = [
    "\x00", "\x01", "\x0b", "\x0c", "\x7f",  # Control chars
    "\u00a0",  # Non-breaking space
    "\u2028", "\u2029",  # Line/paragraph separators
    "\u200b", "\ufeff",  # Zero-width, BOM
    "%00", "%0a", "%2f", "\\", "//", "#", "?", ":",
]  # fmt: skip

BASE_URIS = ["", "http://knowings.fr/dir/page", "https://evil.com/", "/relative/base", "mailto:x@y.z"]


def random_string(min_len=0, max_len=20):
    """Generate random ASCII string."""
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def _scheme_prefix(url):
    """Lower-cased URL as a browser reads its scheme: tabs and newlines dropped, leading controls stripped."""
    cleaned = "".join(ch for ch in url if ch not in "\t\n\r")
    return cleaned.lstrip("".join(chr(i) for i in range(0x21))).lower()


def fuzz_url():
    """Generate malformed URL attribute values."""
    strategies = [
        lambda: f"{random.choice(SCHEMES)}://{random.choice(HOSTS)}/{random_string()}",
        lambda: f"{random.choice(SCHEMES)}:{random_string()}",
        lambda: f"//{random.choice(HOSTS)}/{random_string()}",
        lambda: f"{random.choice(HOSTS)}/{random_string()}",
        lambda: "#" + random_string(0, 10),
        lambda: "#" + random_string(0, 5) + " " + random_string(0, 5),
        lambda: "/" + random_string(),
        lambda: "../" * random.randint(1, 5) + random_string(),
        lambda: random.choice(SPECIAL_CHARS) + random.choice(SCHEMES) + ":alert(1)",
        lambda: random.choice(SCHEMES) + random.choice(SPECIAL_CHARS) + ":alert(1)",
        lambda: "",
        lambda: " " * random.randint(1, 5),
        lambda: "x" * random.randint(100, 1000),  # Long value
    ]
    return random.choice(strategies)()


def fuzz_element():
    # q[cite] has no protocol rule in basic, so it is left out.
    tag = random.choice(["a", "img", "A", "IMG", "blockquote", "script", "div"])
    key = random.choice(["href", "src", "cite", "HREF"])
    attrs = {key: fuzz_url()}
    if random.random() < 0.3:
        attrs[random.choice(["href", "src"])] = fuzz_url()
    return SimpleElement(tag, attrs, base_uri=random.choice(BASE_URIS))


def build_policies():
    return {
        "basic": basic().freeze(),
        "basic_with_images": basic_with_images().freeze(),
        "relaxed": relaxed().freeze(),
        "basic+anchors": basic().add_protocols("a", "href", "#").freeze(),
        "domains": basic_with_images()
        .add_domains("a", "href", *ALLOWED_DOMAINS)
        .add_domains("img", "src", *ALLOWED_DOMAINS)
        .freeze(),
        # No protocol rules: the host check alone has to keep scripts out.
        "domains-only": Policy()
        .add_attributes("a", "href")
        .add_attributes("img", "src")
        .add_domains("a", "href", *ALLOWED_DOMAINS)
        .add_domains("img", "src", *ALLOWED_DOMAINS)
        .freeze(),
    }


def check_element(name, policy, element):
    """Run every decision on `element`; return a list of invariant violations."""
    violations = []
    tag = element.tag_name

    if policy.is_element_allowed(element) and name in DOMAIN_POLICIES:
        for key in ("href", "src"):
            if not element.has_attribute(key):
                continue
            value = element.get_attribute_value(key)
            if value.startswith("#"):
                if not is_valid_anchor(value):
                    violations.append(f"invalid anchor accepted: {value!r}")
            else:
                url = element.resolve_absolute_url(key) or value
                if _scheme_prefix(url).startswith(SCRIPT_SCHEMES):
                    violations.append(f"script URL passed the host check: {value!r}")
                    break
                host = extract_host(url if "//" in url else "http://" + url)
                if host and not host_matches_any(host, ALLOWED_DOMAINS):
                    violations.append(f"foreign host accepted: {host!r}")
            break

    for key in list(element.attributes):
        if not policy.is_attribute_allowed(tag, element, key):
            continue
        value = policy.resolve_to_allowed_form(tag, element, key)
        # Without protocol rules only the element-level host check guards URLs.
        if name != "domains-only" and value is not None and _scheme_prefix(value).startswith(SCRIPT_SCHEMES):
            violations.append(f"script URL accepted: {key}={value!r}")
        policy.normalize_attribute(tag, element, key)
        if not policy.is_attribute_allowed(tag, element, key):
            violations.append(f"normalized value rejected: {key}={element.get_attribute_value(key)!r}")

    _ = policy.get_enforced_attributes(tag)
    return violations


def run_fuzzer(num_tests, seed=None, verbose=False, save_failures=False):
    """Run the fuzzer against the preset policies."""
    if seed is not None:
        random.seed(seed)

    policies = build_policies()
    crashes = []
    violations = []
    successes = 0

    print(f"Fuzzing {len(policies)} policies with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")

        for name, policy in policies.items():
            element = fuzz_element()
            before = dict(element.attributes)
            try:
                found = check_element(name, policy, element)
            except Exception as e:
                crashes.append({
                    "test_num": i,
                    "policy": name,
                    "element": before,
                    "error": str(e),
                    "traceback": traceback.format_exc(),
                })
                if verbose:
                    print(f"  CRASH: Test {i} ({name}): {e}")
                continue

            if found:
                violations.append({"test_num": i, "policy": name, "element": before, "violations": found})
                if verbose:
                    print(f"  VIOLATION: Test {i} ({name}): {found[0]}")
            else:
                successes += 1

    elapsed_total = time.time() - start_time
    total = num_tests * len(policies)

    print(f"\n{'='*60}")
    print("FUZZING RESULTS")
    print(f"{'='*60}")
    print(f"Total checks:   {total}")
    print(f"Successes:      {successes}")
    print(f"Crashes:        {len(crashes)}")
    print(f"Violations:     {len(violations)}")
    print(f"Total time:     {elapsed_total:.2f}s")
    print(f"Checks/second:  {total/elapsed_total:.1f}")

    if crashes:
        print(f"\n{'='*60}")
        print("CRASH DETAILS:")
        print(f"{'='*60}")
        for crash in crashes[:10]:
            print(f"\nTest #{crash['test_num']} ({crash['policy']}):")
            print(f"  Element: {crash['element']!r}")
            print(f"  Error: {crash['error']}")
        if len(crashes) > 10:
            print(f"\n... and {len(crashes) - 10} more crashes")

    if violations:
        print(f"\n{'='*60}")
        print("VIOLATION DETAILS:")
        print(f"{'='*60}")
        for violation in violations[:10]:
            print(f"\nTest #{violation['test_num']} ({violation['policy']}):")
            print(f"  Element: {violation['element']!r}")
            for line in violation["violations"]:
                print(f"  {line}")

    if save_failures and (crashes or violations):
        filename = f"fuzz_failures_{int(time.time())}.txt"
        with open(filename, "w") as f:
            f.write(f"Seed: {seed}\n\n")
            for crash in crashes:
                f.write(f"=== CRASH #{crash['test_num']} ({crash['policy']}) ===\n")
                f.write(f"Element: {crash['element']!r}\n")
                f.write(f"Error: {crash['error']}\n")
                f.write(f"Traceback:\n{crash['traceback']}\n\n")
            for violation in violations:
                f.write(f"=== VIOLATION #{violation['test_num']} ({violation['policy']}) ===\n")
                f.write(f"Element: {violation['element']!r}\n")
                f.write("\n".join(violation["violations"]) + "\n\n")
        print(f"\nFailures saved to {filename}")

    return not crashes and not violations


def main():
    parser = argparse.ArgumentParser(description="Fuzz htmlpolicy decisions with hostile URLs")
    parser.add_argument(
        "--num-tests", "-n",
        type=int,
        default=1000,
        help="Number of test cases to generate (default: 1000)",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--save-failures",
        action="store_true",
        help="Save failures to a file",
    )
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Just print N sample fuzzed URLs (no checks)",
    )

    args = parser.parse_args()

    if args.sample:
        if args.seed:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i+1} ===")
            print(repr(fuzz_url()))
        return

    success = run_fuzzer(
        args.num_tests,
        seed=args.seed,
        verbose=args.verbose,
        save_failures=args.save_failures,
    )

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
