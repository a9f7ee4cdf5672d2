"""Front matter, pages and the content store."""

from sabresite.content.frontmatter import parse_frontmatter, split_frontmatter
from sabresite.content.models import Page, pretty_url
from sabresite.content.store import ContentStore

__all__ = [
    "ContentStore",
    "Page",
    "parse_frontmatter",
    "pretty_url",
    "split_frontmatter",
]
