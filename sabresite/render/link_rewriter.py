"""Rewrites in-line links to Markdown sources into their published URLs."""

import logging
import re
from urllib.parse import urlsplit

from sabresite.content.models import Page
from sabresite.content.store import ContentStore

from .links import INLINE_LINK_RE, is_external, is_markdown_target, map_prose, resolve_source
from .pipeline import Transform

logger = logging.getLogger(__name__)


class LinkRewriter(Transform):
    """``[Intro](../intro.md#setup)`` becomes ``[Intro](/dav/intro/#setup)``.

    Links whose source page does not exist are left untouched so the link
    checker can report them against the original text.
    """

    def __init__(self, store: ContentStore):
        self.store = store

    def apply(self, content: str, page: Page) -> str:
        def rewrite(m: re.Match) -> str:
            raw = m.group(2)
            target = raw.strip("<>")
            if is_external(target) or not is_markdown_target(urlsplit(target).path):
                return m.group(0)
            linked = self.store.page_by_source(resolve_source(target, page.source_path))
            if linked is None:
                logger.debug("%s: no page for link %s", page.source_path, target)
                return m.group(0)
            fragment = urlsplit(target).fragment
            url = linked.url + (f"#{fragment}" if fragment else "")
            return f"{m.group(1)}{url}{m.group(3)}"

        return map_prose(content, lambda text: INLINE_LINK_RE.sub(rewrite, text))
