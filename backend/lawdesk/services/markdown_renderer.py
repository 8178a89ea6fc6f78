"""
LawDesk Backend — Markdown Rendering
======================================

What:  Renders stored post content (Markdown source) to HTML.
Who:   PostStore.get_by_slug(), for single-post responses only.

Rendering is pure: the same source always produces the same HTML.
"""

import markdown


class MarkdownRenderer:
    """
    Thin wrapper around Python-Markdown with the extensions the site uses.

    A fresh `markdown.Markdown` instance is built per call; instances keep
    per-document state (footnotes, toc) between conversions.
    """

    DEFAULT_EXTENSIONS = ("extra", "sane_lists")

    def __init__(self, extensions=DEFAULT_EXTENSIONS):
        self.extensions = list(extensions)

    def render(self, source: str) -> str:
        return markdown.markdown(source or "", extensions=self.extensions)
