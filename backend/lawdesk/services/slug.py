"""
LawDesk Backend — Slug Derivation
===================================

What:  Turns a post title into a URL-safe, unique lookup key.
How:   slugify() normalizes the title; build_slug() appends the creation time
       in epoch milliseconds so identical titles yield distinct slugs.
Why:   The millisecond suffix avoids a read-before-write uniqueness check; the
       unique index on posts.slug rejects the rare same-millisecond collision.

Examples:
    slugify("Contract Law Basics")                    → "contract-law-basics"
    build_slug("Contract Law Basics", 1700000000000)  → "contract-law-basics-1700000000000"
"""

import re
import time

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^\w\-]+", re.ASCII)
_REPEATED_HYPHENS = re.compile(r"-{2,}")


def slugify(text: str) -> str:
    """
    Lower-case, hyphenate whitespace runs, drop anything outside
    [A-Za-z0-9_-], collapse repeated hyphens, trim edge hyphens.
    """
    slug = str(text).lower()
    slug = _WHITESPACE.sub("-", slug)
    slug = _DISALLOWED.sub("", slug)
    slug = _REPEATED_HYPHENS.sub("-", slug)
    return slug.strip("-")


def now_millis() -> int:
    """Current wall-clock time in integer milliseconds since the epoch."""
    return int(time.time() * 1000)


def build_slug(title: str, timestamp_ms: int) -> str:
    """Derived slug plus the uniqueness suffix."""
    return f"{slugify(title)}-{timestamp_ms}"
