"""Markdown to HTML conversion via Python-Markdown."""

from __future__ import annotations

from dataclasses import dataclass

import markdown


@dataclass(frozen=True)
class RenderedMarkdown:
    html: str
    toc: str = ""


class MarkdownRenderer:
    """Thin wrapper that reuses one ``markdown.Markdown`` instance.

    The instance is reset after every conversion so footnotes, ids and the
    table of contents never leak between pages.
    """

    def __init__(self, extensions: list[str] | None = None) -> None:
        self.extensions = list(extensions or [])
        try:
            self._md = markdown.Markdown(extensions=self.extensions)
        except (ImportError, AttributeError) as exc:
            raise ValueError(f"Invalid markdown extension: {exc}") from exc

    def render(self, body: str) -> RenderedMarkdown:
        try:
            html = self._md.convert(body)
            toc = getattr(self._md, "toc", "")
        finally:
            self._md.reset()
        return RenderedMarkdown(html=html, toc=toc)
