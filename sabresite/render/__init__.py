"""Source transforms, Markdown conversion and layouts."""

from .link_rewriter import LinkRewriter
from .markdown import MarkdownRenderer, RenderedMarkdown
from .pipeline import Transform, TransformPipeline
from .templates import LayoutResolver

__all__ = [
    "LayoutResolver",
    "LinkRewriter",
    "MarkdownRenderer",
    "RenderedMarkdown",
    "Transform",
    "TransformPipeline",
]
