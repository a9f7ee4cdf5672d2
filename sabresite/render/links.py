"""In-line Markdown link discovery and URL resolution."""

from __future__ import annotations

import posixpath
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from urllib.parse import urlsplit

from sabresite.content.models import MARKDOWN_SUFFIXES

# [text](target "title") and ![alt](src). Group 2 is the target.
INLINE_LINK_RE = re.compile(r"(!?\[[^\]\n]*\]\()\s*(<[^>\n]*>|[^)\s]+)([^)\n]*\))")

_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_CODE_SPAN_RE = re.compile(r"(`+)(.+?)\1")


@dataclass(frozen=True)
class LinkRef:
    """A link target found in page source, with its 1-based line number."""

    line: int
    target: str


def iter_lines(text: str) -> Iterator[tuple[int, str, bool]]:
    """Yield (index, line, in_code) for each line, tracking fenced code blocks."""
    fence: str | None = None
    for idx, line in enumerate(text.split("\n")):
        m = _FENCE_RE.match(line)
        if fence is None:
            if m:
                fence = m.group(1)
                yield idx, line, True
            else:
                yield idx, line, False
        else:
            yield idx, line, True
            if m and m.group(1)[0] == fence[0] and len(m.group(1)) >= len(fence):
                fence = None


def _map_outside_code_spans(line: str, fn: Callable[[str], str]) -> str:
    out: list[str] = []
    pos = 0
    for m in _CODE_SPAN_RE.finditer(line):
        out.append(fn(line[pos:m.start()]))
        out.append(m.group(0))
        pos = m.end()
    out.append(fn(line[pos:]))
    return "".join(out)


def map_prose(text: str, fn: Callable[[str], str]) -> str:
    """Apply *fn* to the parts of *text* outside code blocks and code spans."""
    lines = []
    for _idx, line, in_code in iter_lines(text):
        lines.append(line if in_code else _map_outside_code_spans(line, fn))
    return "\n".join(lines)


def iter_inline_links(text: str, start_line: int = 1) -> Iterator[LinkRef]:
    """Yield every in-line link/image target outside of code."""
    for idx, line, in_code in iter_lines(text):
        if in_code:
            continue
        prose = _CODE_SPAN_RE.sub("", line)
        for m in INLINE_LINK_RE.finditer(prose):
            yield LinkRef(line=start_line + idx, target=m.group(2).strip("<>"))


def is_external(target: str) -> bool:
    """Links with a scheme (http:, mailto:) or protocol-relative links."""
    return bool(urlsplit(target).scheme) or target.startswith("//")


def is_markdown_target(path: str) -> bool:
    return path.lower().endswith(MARKDOWN_SUFFIXES)


def _join(base_dir: str, path: str) -> str:
    joined = posixpath.normpath(posixpath.join(base_dir, path))
    if path.endswith("/") and not joined.endswith("/"):
        joined += "/"
    return joined


def resolve_url(target: str, base_url: str) -> str | None:
    """Resolve a link target to a rooted URL path, relative to *base_url*.

    Returns None for fragment-only links. Query strings and fragments are
    dropped.
    """
    path = urlsplit(target).path
    if not path:
        return None
    if path.startswith("/"):
        return _join("/", path.lstrip("/")) if path != "/" else "/"
    base_dir = base_url if base_url.endswith("/") else posixpath.dirname(base_url)
    if not base_dir.endswith("/"):
        base_dir += "/"
    resolved = _join(base_dir, path)
    return resolved if resolved.startswith("/") else "/" + resolved


def resolve_source(target: str, source_path: str) -> str:
    """Resolve a ``.md`` link to a content-root relative source path."""
    path = urlsplit(target).path
    if path.startswith("/"):
        return posixpath.normpath(path.lstrip("/"))
    return posixpath.normpath(posixpath.join(posixpath.dirname(source_path), path))
